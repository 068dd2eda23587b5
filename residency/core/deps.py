import uuid

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from residency.core.db import get_db
from residency.core.permissions import PermissionSet, derive_permissions
from residency.models.user import User


def get_current_user(
    db: Session = Depends(get_db),
    x_user_id: str | None = Header(default=None),
) -> User:
    """The acting user is picked from the user list and sent as X-User-Id."""
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="X-User-Id header required")
    try:
        user_id = uuid.UUID(x_user_id)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid user id")
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if not user.is_active:
        raise HTTPException(status_code=400, detail="Inactive user")
    return user


def get_current_permissions(current_user: User = Depends(get_current_user)) -> PermissionSet:
    return derive_permissions(current_user.role)
