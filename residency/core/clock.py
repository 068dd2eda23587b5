from datetime import datetime, timezone


def utcnow() -> datetime:
    """Naive UTC timestamp, the form SQLite hands back on reads."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
