"""
Module 09D - API Response Models

Pydantic models for API response serialization.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class HealthResponse(BaseModel):
    """Response for GET /health endpoint."""

    ok: bool = True
    service: str = "spark-station"
    version: str = "v1"


class OnDemandResponse(BaseModel):
    """Response for POST /on-demand endpoint."""

    ok: bool = True
    queued: dict[str, str] = Field(..., description="The queued assignment")
    pending: int = Field(default=0, description="On-demand checks waiting to run")


class MetricsResponse(BaseModel):
    """Response for GET /metrics endpoint."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    round: int = Field(..., description="Rounds seen since the station started")
    total: int = Field(..., description="Retrievals attempted this round")
    failed: int = Field(..., description="Retrievals that did not verify this round")
    unique_pair_count: int = Field(..., description="Distinct (CID, provider) pairs this round")


class ErrorDetail(BaseModel):
    """Detailed error information."""

    code: str = Field(..., description="Error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Standard error response."""

    ok: bool = False
    error: ErrorDetail = Field(..., description="Error details")
