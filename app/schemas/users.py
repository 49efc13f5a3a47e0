"""Schemas for admin user administration."""

from pydantic import BaseModel, Field

from app.models.user import UserStatus


class UserStatusUpdate(BaseModel):
    """Body for PUT /users/{id}/status. Only ACTIVE and BLOCKED are accepted targets."""

    status: UserStatus = Field(..., description="New status (ACTIVE or BLOCKED)")
