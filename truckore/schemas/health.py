"""Pydantic schemas for health check responses."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response body for the health check endpoint."""

    status: Literal["ok"] = Field(default="ok", description="Service status")
    environment: str = Field(description="Current app environment (e.g. dev, prod)")
    storage_mode: Literal["native", "fallback"] | None = Field(
        default=None,
        description="Backend that served the most recent storage call",
    )
    native_available: bool = Field(description="Whether the native SQLite store is attached")
    setup_completed: bool
