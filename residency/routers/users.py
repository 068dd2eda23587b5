from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from residency.core.db import get_db
from residency.core.deps import get_current_user
from residency.core.permissions import derive_permissions
from residency.models.user import User
from residency.schemas.user import PermissionSetResponse, UserSummary

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[UserSummary])
def list_users(db: Session = Depends(get_db)):
    """User picker; there is no login, the client sends the chosen id back."""
    return db.query(User).filter(User.is_active.is_(True)).order_by(User.full_name).all()


@router.get("/me", response_model=UserSummary)
def read_me(current_user: User = Depends(get_current_user)):
    return current_user


@router.get("/me/permissions", response_model=PermissionSetResponse)
def read_my_permissions(current_user: User = Depends(get_current_user)):
    permissions = derive_permissions(current_user.role)
    return PermissionSetResponse(
        role=current_user.role,
        can_create=permissions.can_create,
        can_edit=permissions.can_edit,
        can_delete=permissions.can_delete,
        visible_views=sorted(permissions.visible_views, key=lambda view: view.value),
    )
