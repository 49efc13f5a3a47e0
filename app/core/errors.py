"""Domain error taxonomy raised by services and mapped to HTTP responses at the API boundary."""

from typing import Any

from pydantic import ValidationError as PydanticValidationError


class AppError(Exception):
    """Base class for errors that carry a stable status code and a user-facing message."""

    status_code: int = 500
    default_message: str = "Internal server error."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed or missing input, reported field by field."""

    status_code = 400
    default_message = "Validation failed"

    def __init__(
        self,
        message: str | None = None,
        errors: list[dict[str, str]] | None = None,
    ) -> None:
        super().__init__(message)
        self.errors = errors or []

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        """Single-field failure; the message doubles as the top-level message."""
        return cls(message, errors=[{"field": field, "message": message}])

    @classmethod
    def from_pydantic(cls, exc: PydanticValidationError) -> "ValidationError":
        return cls(errors=field_errors(exc.errors()))


class ConflictError(AppError):
    """Duplicate unique key or a state transition the record cannot take."""

    status_code = 409
    default_message = "Conflict."


class AuthenticationError(AppError):
    """Missing, invalid or expired credentials. Deliberately uninformative."""

    status_code = 401
    default_message = "Invalid credentials."


class ForbiddenError(AppError):
    """Authenticated but not permitted (blocked, pending, rejected or wrong role)."""

    status_code = 403
    default_message = "You do not have permission to perform this action."


class NotFoundError(AppError):
    """Referenced user or resource does not exist."""

    status_code = 404
    default_message = "Not found."


class InternalError(AppError):
    """Store or infrastructure failure."""

    status_code = 500


_LOCATION_PREFIXES = frozenset({"body", "query", "path", "header", "cookie", "form"})


def field_errors(errors: list[Any]) -> list[dict[str, str]]:
    """Flatten pydantic/FastAPI error dicts into [{field, message}] entries."""
    out: list[dict[str, str]] = []
    for err in errors:
        loc = [str(p) for p in err.get("loc", ())]
        if loc and loc[0] in _LOCATION_PREFIXES:
            loc = loc[1:]
        out.append({"field": ".".join(loc) or "__root__", "message": str(err.get("msg", ""))})
    return out
