"""Shared response bodies."""

from pydantic import BaseModel


class MessageResponse(BaseModel):
    message: str


class FieldError(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    """Body of every error response; errors is filled for validation failures only."""

    message: str
    errors: list[FieldError] | None = None
