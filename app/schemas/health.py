"""Health check API schemas."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for GET /health (liveness)."""

    status: str = Field(default="ok", description="Service status")


class ReadinessResponse(BaseModel):
    """Response for GET /health/ready: which pipeline components are wired."""

    status: Literal["ok", "degraded"] = Field(..., description="ok when search index and record store are configured")
    components: dict[str, bool] = Field(default_factory=dict)
