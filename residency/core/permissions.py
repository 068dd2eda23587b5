"""
Role-based capability matrix.

Permissions are derived from the user's role, never stored per user.
"""

import enum
from dataclasses import dataclass, field

from residency.core.errors import PermissionDeniedError


class UserRole(str, enum.Enum):
    ADMINISTRATOR = "administrator"
    TEACHER = "teacher"
    STUDENT = "student"


class View(str, enum.Enum):
    DASHBOARD = "DASHBOARD"
    STUDENTS = "STUDENTS"
    TEACHERS = "TEACHERS"
    SUBJECTS = "SUBJECTS"
    GRADES = "GRADES"
    STUDENT_FILES = "STUDENT_FILES"
    TEACHER_FILES = "TEACHER_FILES"
    CALENDAR = "CALENDAR"
    NEWS = "NEWS"
    DOCUMENTS = "DOCUMENTS"
    MEETINGS = "MEETINGS"
    SITE_MANAGEMENT = "SITE_MANAGEMENT"
    SURVEYS = "SURVEYS"


class Capability(str, enum.Enum):
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"


@dataclass(frozen=True)
class PermissionSet:
    can_create: bool = False
    can_edit: bool = False
    can_delete: bool = False
    visible_views: frozenset[View] = field(default_factory=frozenset)

    def allows(self, capability: Capability) -> bool:
        if capability is Capability.CREATE:
            return self.can_create
        if capability is Capability.EDIT:
            return self.can_edit
        if capability is Capability.DELETE:
            return self.can_delete
        return False

    def can_view(self, view: View) -> bool:
        return view in self.visible_views


NO_PERMISSIONS = PermissionSet()

_ALL_VIEWS = frozenset(View)

_PERMISSION_MATRIX: dict[UserRole, PermissionSet] = {
    UserRole.ADMINISTRATOR: PermissionSet(
        can_create=True,
        can_edit=True,
        can_delete=True,
        visible_views=_ALL_VIEWS,
    ),
    UserRole.TEACHER: PermissionSet(
        can_create=True,
        can_edit=True,
        can_delete=False,
        visible_views=_ALL_VIEWS - {View.SITE_MANAGEMENT},
    ),
    # can_edit only covers the student's own records (report acceptance,
    # survey answers); ownership is checked by the services.
    UserRole.STUDENT: PermissionSet(
        can_create=False,
        can_edit=True,
        can_delete=False,
        visible_views=frozenset(
            {
                View.DASHBOARD,
                View.GRADES,
                View.STUDENT_FILES,
                View.CALENDAR,
                View.NEWS,
                View.DOCUMENTS,
            }
        ),
    ),
}


def _coerce_role(role: UserRole | str | None) -> UserRole | None:
    if isinstance(role, UserRole):
        return role
    if not isinstance(role, str):
        return None
    try:
        return UserRole(role.strip().casefold())
    except ValueError:
        return None


def derive_permissions(role: UserRole | str | None) -> PermissionSet:
    """Map a role to its capability set; unknown roles get nothing."""
    resolved = _coerce_role(role)
    if resolved is None:
        return NO_PERMISSIONS
    return _PERMISSION_MATRIX[resolved]


def require_permission(role: UserRole | str | None, capability: Capability) -> PermissionSet:
    permissions = derive_permissions(role)
    if not permissions.allows(capability):
        raise PermissionDeniedError(f"Role not allowed to {capability.value}")
    return permissions
