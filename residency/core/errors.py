"""
Domain errors raised by the evaluation engine.

The services raise these; the HTTP layer maps each one to a status code.
"""


class EngineError(ValueError):
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(EngineError):
    status_code = 404


class InvalidTransitionError(EngineError):
    status_code = 409


class PermissionDeniedError(EngineError):
    status_code = 403
