"""Request/response schemas for auth endpoints."""

from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.networks import validate_email

from app.core.security import (
    NAME_MAX_LEN,
    NAME_MIN_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
)
from app.models.user import Role, UserStatus


def _check_email(value: str) -> str:
    """Reject malformed addresses but keep the address exactly as submitted."""
    validate_email(value)
    return value


# Validated with email-validator, then stored and matched exactly as submitted
Email = Annotated[str, AfterValidator(_check_email)]


class RegisterRequest(BaseModel):
    """Self-registration. Asking for ADMIN files a request an administrator must approve."""

    name: str | None = Field(
        default=None,
        min_length=NAME_MIN_LEN,
        max_length=NAME_MAX_LEN,
        description="Display name",
    )
    email: Email = Field(..., description="Login email")
    password: str = Field(
        ...,
        min_length=PASSWORD_MIN_LEN,
        max_length=PASSWORD_MAX_LEN,
        description="Password",
    )
    role: Role = Field(default=Role.USER, description="Requested role")


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: Email = Field(..., description="Login email")
    password: str = Field(
        ...,
        min_length=PASSWORD_MIN_LEN,
        max_length=PASSWORD_MAX_LEN,
        description="Password",
    )


class CurrentUser(BaseModel):
    """Authenticated user as re-read from the store on every request."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str | None = None
    email: str
    role: Role
    status: UserStatus


class UserOut(CurrentUser):
    """User projection returned by the API (never includes the password hash)."""

    created_at: datetime | None = None


class AuthResponse(BaseModel):
    """Token plus sanitized user, returned by register and login."""

    message: str
    token: str = Field(..., description="JWT bearer token")
    user: UserOut
