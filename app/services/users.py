"""User administration: listing, block/unblock, and the admin-request lifecycle."""

import logging

from sqlalchemy import update
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from app.models.user import Role, User, UserStatus

logger = logging.getLogger(__name__)

# Targets accepted by set_user_status; PENDING/REJECTED are reached only via the request lifecycle
_TOGGLE_STATUSES = (UserStatus.ACTIVE, UserStatus.BLOCKED)


def list_users(db: Session) -> list[User]:
    """All users, newest first."""
    return db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()


def list_pending_admin_requests(db: Session) -> list[User]:
    """Users waiting for admin approval, oldest first."""
    return (
        db.query(User)
        .filter(User.status == UserStatus.PENDING_ADMIN_APPROVAL)
        .order_by(User.created_at.asc(), User.id.asc())
        .all()
    )


def _conditional_update(db: Session, user_id: int, where: list, values: dict) -> User | None:
    """Apply values to the user only if every condition still holds; one UPDATE statement."""
    result = db.execute(
        update(User)
        .where(User.id == user_id, *where)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    if result.rowcount == 0:
        return None
    user = db.get(User, user_id)
    if user is not None:
        db.refresh(user)
    return user


def set_user_status(db: Session, user_id: int, status: UserStatus, acting_admin_id: int) -> User:
    """
    Block or unblock a regular user.

    Only USER-role accounts that are ACTIVE or BLOCKED can be toggled; pending and
    rejected accounts move only through approve/reject.
    """
    if status not in _TOGGLE_STATUSES:
        raise ValidationError.for_field(
            "status",
            "Status can only be set to ACTIVE or BLOCKED; use approve/reject for admin requests.",
        )

    user = _conditional_update(
        db,
        user_id,
        [User.role == Role.USER, User.status.in_(_TOGGLE_STATUSES)],
        {"status": status},
    )
    if user is not None:
        logger.info(
            "User status changed",
            extra={"user_id": user_id, "status": status.value, "admin_id": acting_admin_id},
        )
        return user

    current = db.get(User, user_id)
    if current is None:
        raise NotFoundError("User not found.")
    if current.role is Role.ADMIN:
        raise ForbiddenError("Administrator accounts cannot be blocked or unblocked.")
    raise ConflictError(
        f"User status {current.status.value} cannot be changed with this action."
    )


def approve_admin_request(db: Session, user_id: int, acting_admin_id: int) -> User:
    """PENDING_ADMIN_APPROVAL -> (ADMIN, ACTIVE)."""
    user = _conditional_update(
        db,
        user_id,
        [User.status == UserStatus.PENDING_ADMIN_APPROVAL],
        {"role": Role.ADMIN, "status": UserStatus.ACTIVE},
    )
    if user is None:
        raise NotFoundError("User not found or not a pending admin request.")
    logger.info("Admin request approved", extra={"user_id": user_id, "admin_id": acting_admin_id})
    return user


def reject_admin_request(db: Session, user_id: int, acting_admin_id: int) -> User:
    """PENDING_ADMIN_APPROVAL -> (USER, REJECTED)."""
    user = _conditional_update(
        db,
        user_id,
        [User.status == UserStatus.PENDING_ADMIN_APPROVAL],
        {"role": Role.USER, "status": UserStatus.REJECTED},
    )
    if user is None:
        raise NotFoundError("User not found or not a pending admin request.")
    logger.info("Admin request rejected", extra={"user_id": user_id, "admin_id": acting_admin_id})
    return user
