"""
Authentication and authorization core: registration, login, session verification, role gate.

All functions take the DB session and Settings explicitly and raise errors from
app.core.errors; the API layer maps those to HTTP responses.
"""

import logging
from collections.abc import Collection
from datetime import timedelta
from typing import TYPE_CHECKING, Any, assert_never

import jwt
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import (
    AuthenticationError,
    ConflictError,
    ForbiddenError,
    InternalError,
    NotFoundError,
)
from app.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from app.models.user import AdminBootstrap, Role, User, UserStatus
from app.schemas.auth import CurrentUser, LoginRequest, RegisterRequest

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials."
BLOCKED_MESSAGE = "Your account has been blocked. Please contact support."
PENDING_MESSAGE = (
    "Your admin request is pending approval. "
    "Please wait for an administrator to review it."
)
REJECTED_MESSAGE = "Your admin request was rejected. Please contact support."


def _resolve_role_and_status(requested: Role, bootstrap: bool) -> tuple[Role, UserStatus]:
    """Registration policy: first user is the admin; later ADMIN requests wait for approval."""
    if bootstrap:
        return Role.ADMIN, UserStatus.ACTIVE
    match requested:
        case Role.ADMIN:
            return Role.USER, UserStatus.PENDING_ADMIN_APPROVAL
        case Role.USER:
            return Role.USER, UserStatus.ACTIVE
        case _:
            assert_never(requested)


def _bootstrap_available(db: Session) -> bool:
    """True while nobody has claimed the bootstrap admin slot and the store holds no users."""
    if db.get(AdminBootstrap, 1) is not None:
        return False
    return (db.query(func.count(User.id)).scalar() or 0) == 0


def _email_taken(db: Session, email: str) -> bool:
    return db.query(User.id).filter(User.email == email).first() is not None


def _insert_user(
    db: Session,
    body: RegisterRequest,
    password_hash: str,
    bootstrap: bool,
) -> User:
    role, status = _resolve_role_and_status(body.role, bootstrap)
    user = User(
        name=body.name,
        email=body.email,
        password_hash=password_hash,
        role=role,
        status=status,
    )
    db.add(user)
    db.flush()
    if bootstrap:
        db.add(AdminBootstrap(id=1, user_id=user.id))
        db.flush()
    db.commit()
    db.refresh(user)
    return user


def register_user(db: Session, body: RegisterRequest, settings: "Settings") -> tuple[User, str]:
    """
    Create a user per the bootstrap/approval policy and issue a long-lived token.

    The user row (and the bootstrap claim for the very first user) is written in
    one transaction. A concurrent registration that wins the same email yields
    ConflictError; one that wins the bootstrap claim demotes this registration to
    the regular policy.
    """
    if _email_taken(db, body.email):
        raise ConflictError("User with this email already exists.")

    password_hash = hash_password(body.password, rounds=settings.BCRYPT_ROUNDS)
    bootstrap = _bootstrap_available(db)
    try:
        user = _insert_user(db, body, password_hash, bootstrap)
    except IntegrityError as e:
        db.rollback()
        if _email_taken(db, body.email):
            raise ConflictError("User with this email already exists.") from e
        if not bootstrap:
            raise InternalError("Internal server error during registration.") from e
        logger.info("Bootstrap admin already claimed concurrently; registering %s normally", body.email)
        try:
            user = _insert_user(db, body, password_hash, bootstrap=False)
        except IntegrityError as e2:
            db.rollback()
            raise ConflictError("User with this email already exists.") from e2

    if bootstrap and user.role is Role.ADMIN:
        logger.info("Bootstrap admin created", extra={"user_id": user.id})
    elif user.status is UserStatus.PENDING_ADMIN_APPROVAL:
        logger.info("User %s registered as PENDING_ADMIN_APPROVAL", user.email)

    token = create_access_token(
        user,
        timedelta(days=settings.REGISTRATION_TOKEN_EXPIRE_DAYS),
        settings,
    )
    return user, token


def _ensure_can_log_in(user: User) -> None:
    """Status gate for login; runs before the password check."""
    status = user.status
    match status:
        case UserStatus.ACTIVE:
            return
        case UserStatus.BLOCKED:
            raise ForbiddenError(BLOCKED_MESSAGE)
        case UserStatus.PENDING_ADMIN_APPROVAL:
            raise ForbiddenError(PENDING_MESSAGE)
        case UserStatus.REJECTED:
            raise ForbiddenError(REJECTED_MESSAGE)
        case _:
            assert_never(status)


def login_user(db: Session, body: LoginRequest, settings: "Settings") -> tuple[User, str]:
    """
    Authenticate with email and password; returns the user and a short-lived token.

    Unknown email and wrong password produce the same AuthenticationError.
    Blocked, pending and rejected accounts are refused before the password is
    checked.
    """
    user = db.query(User).filter(User.email == body.email).first()
    if user is None:
        logger.info("Login failed: unknown email")
        raise AuthenticationError(INVALID_CREDENTIALS)

    _ensure_can_log_in(user)

    if not verify_password(body.password, user.password_hash):
        logger.info("Login failed: bad password", extra={"user_id": user.id})
        raise AuthenticationError(INVALID_CREDENTIALS)

    token = create_access_token(
        user,
        timedelta(minutes=settings.LOGIN_TOKEN_EXPIRE_MINUTES),
        settings,
    )
    return user, token


def _parse_user_id(raw: Any) -> int | None:
    """Return raw as a positive int, or None. Accepts ints and digit strings, never bools."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, str) and raw.strip().isascii() and raw.strip().isdigit():
        # isdigit alone admits superscripts and other digits int() refuses
        value = int(raw.strip())
    else:
        return None
    return value if value > 0 else None


def _ensure_session_allowed(user: User) -> None:
    """Status gate re-applied on every authenticated request."""
    status = user.status
    match status:
        case UserStatus.ACTIVE | UserStatus.PENDING_ADMIN_APPROVAL:
            # Pending users hold a registration token with role USER
            return
        case UserStatus.BLOCKED:
            raise ForbiddenError("Your account has been blocked.")
        case UserStatus.REJECTED:
            raise ForbiddenError(REJECTED_MESSAGE)
        case _:
            assert_never(status)


def resolve_session(db: Session, token: str | None, settings: "Settings") -> CurrentUser:
    """
    Verify a bearer token and return the user as currently stored.

    Token claims only identify the row; role and status come from the re-fetch,
    so a block takes effect before the token expires.
    """
    if not token:
        raise AuthenticationError("Authentication token required.")
    try:
        payload = decode_access_token(token, settings)
    except jwt.PyJWTError as e:
        logger.info("JWT verification failed: %s", e)
        raise AuthenticationError("Invalid or expired token.") from e

    user_id = _parse_user_id(payload.get("userId"))
    if user_id is None:
        raise AuthenticationError("Invalid user ID format in token. Please log in again.")

    user = db.get(User, user_id)
    if user is None:
        logger.info("User not found for ID from token", extra={"user_id": user_id})
        raise NotFoundError("User not found.")

    _ensure_session_allowed(user)
    return CurrentUser.model_validate(user)


def authorize(user: CurrentUser | None, roles: Collection[Role]) -> CurrentUser:
    """Role gate. Fails closed when no authenticated user is present."""
    if user is None:
        raise AuthenticationError("Authentication required.")
    if user.role not in roles:
        raise ForbiddenError("You do not have permission to perform this action.")
    return user
