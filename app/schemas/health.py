"""Pydantic schemas for health check responses."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response body for the health check endpoint."""

    status: Literal["ok"] = Field(default="ok", description="Service status")
    environment: Literal["dev", "prod"] = Field(description="Current app environment")
    database: Literal["connected", "disconnected"] = Field(
        description="Whether a trivial query against the user/catalog store succeeded",
    )
