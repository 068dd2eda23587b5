import uuid

from pydantic import BaseModel, ConfigDict

from residency.core.permissions import UserRole, View


class UserSummary(BaseModel):
    id: uuid.UUID
    email: str
    full_name: str | None = None
    role: UserRole
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class PermissionSetResponse(BaseModel):
    role: UserRole | None = None
    can_create: bool
    can_edit: bool
    can_delete: bool
    visible_views: list[View]
