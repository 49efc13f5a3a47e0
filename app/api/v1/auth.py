"""Register/login routes and auth dependencies (get_current_user, require_roles, require_admin)."""

from collections.abc import Callable
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.database import get_db
from app.models.user import Role
from app.schemas.auth import AuthResponse, CurrentUser, LoginRequest, RegisterRequest, UserOut
from app.schemas.common import ErrorResponse
from app.services.auth import authorize, login_user, register_user, resolve_session

router = APIRouter()
security = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    """Dependency: the Settings the application was built with."""
    return request.app.state.settings


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def register(
    body: RegisterRequest,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> AuthResponse:
    """
    Create an account and return a token for it.

    The first account on a fresh deployment becomes an active ADMIN. Asking for
    ADMIN afterwards creates a USER whose admin request waits for approval.
    """
    user, token = register_user(db, body, settings)
    return AuthResponse(
        message="User registered successfully",
        token=token,
        user=UserOut.model_validate(user),
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
    },
)
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> AuthResponse:
    """
    Authenticate with email and password; returns a JWT access token.
    Include the token in the Authorization header as: Bearer <token>
    """
    user, token = login_user(db, body, settings)
    return AuthResponse(
        message="Logged in successfully",
        token=token,
        user=UserOut.model_validate(user),
    )


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> CurrentUser:
    """Dependency: require a valid Bearer JWT and return the user as currently stored."""
    token = credentials.credentials if credentials is not None else None
    return resolve_session(db, token, settings)


def require_roles(*roles: Role) -> Callable[[CurrentUser], CurrentUser]:
    """Dependency factory: the authenticated user must hold one of roles."""
    allowed = frozenset(roles)

    def dependency(
        current_user: Annotated[CurrentUser, Depends(get_current_user)],
    ) -> CurrentUser:
        return authorize(current_user, allowed)

    return dependency


require_admin = require_roles(Role.ADMIN)


@router.get("/me", response_model=CurrentUser)
def read_current_user(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CurrentUser:
    """Return the authenticated user."""
    return current_user
