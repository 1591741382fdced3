"""
Pydantic schemas for the HTTP API.

The prompt endpoint itself speaks plain text in both directions; only the
health endpoint returns JSON.
"""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response body for /health endpoint."""

    status: Literal["healthy", "unhealthy"]
    version: str
    api_base_url: str = Field(..., description="Base URL of the configured target API")
    operations: list[str] = Field(
        default_factory=list, description="Operations the planner may invoke"
    )
