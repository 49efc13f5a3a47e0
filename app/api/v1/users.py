"""Admin-only user administration and admin-request review."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.v1.auth import require_admin
from app.core.database import get_db
from app.schemas.auth import CurrentUser, UserOut
from app.schemas.users import UserStatusUpdate
from app.services import users as user_service

router = APIRouter()


@router.get("", response_model=list[UserOut])
def list_users(
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> list[UserOut]:
    """List all users, newest first."""
    return [UserOut.model_validate(u) for u in user_service.list_users(db)]


@router.put("/{user_id}/status", response_model=UserOut)
def update_user_status(
    user_id: int,
    body: UserStatusUpdate,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> UserOut:
    """Block or unblock a regular user (status ACTIVE or BLOCKED)."""
    user = user_service.set_user_status(db, user_id, body.status, acting_admin_id=admin.id)
    return UserOut.model_validate(user)


@router.get("/admin-requests", response_model=list[UserOut])
def list_admin_requests(
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> list[UserOut]:
    """Users waiting for their admin request to be reviewed, oldest first."""
    return [UserOut.model_validate(u) for u in user_service.list_pending_admin_requests(db)]


@router.put("/admin-requests/{user_id}/approve", response_model=UserOut)
def approve_admin_request(
    user_id: int,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> UserOut:
    """Grant ADMIN to a pending user."""
    user = user_service.approve_admin_request(db, user_id, acting_admin_id=admin.id)
    return UserOut.model_validate(user)


@router.put("/admin-requests/{user_id}/reject", response_model=UserOut)
def reject_admin_request(
    user_id: int,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> UserOut:
    """Refuse a pending admin request; the user keeps role USER with status REJECTED."""
    user = user_service.reject_admin_request(db, user_id, acting_admin_id=admin.id)
    return UserOut.model_validate(user)
