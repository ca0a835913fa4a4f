"""Pydantic request/response schemas for the BackpackBuddy API.

Most endpoints return the service models from :mod:`backpackbuddy.models`
unchanged; this module only holds the shapes that exist purely at the HTTP
boundary.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    providers: dict[str, bool] = Field(
        default_factory=dict, description="Integration name -> enabled"
    )


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
