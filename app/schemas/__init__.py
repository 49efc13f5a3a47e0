"""Pydantic request/response schemas."""

from app.schemas.auth import (
    AuthResponse,
    CurrentUser,
    LoginRequest,
    RegisterRequest,
    UserOut,
)
from app.schemas.books import BookIn, BookOut
from app.schemas.common import ErrorResponse, FieldError, MessageResponse
from app.schemas.health import HealthResponse
from app.schemas.users import UserStatusUpdate

__all__ = [
    "AuthResponse",
    "BookIn",
    "BookOut",
    "CurrentUser",
    "ErrorResponse",
    "FieldError",
    "HealthResponse",
    "LoginRequest",
    "MessageResponse",
    "RegisterRequest",
    "UserOut",
    "UserStatusUpdate",
]
