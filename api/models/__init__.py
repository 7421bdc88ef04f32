"""API request and response models."""

from api.models.requests import OnDemandRequest
from api.models.responses import (
    ErrorDetail,
    ErrorResponse,
    HealthResponse,
    MetricsResponse,
    OnDemandResponse,
)

__all__ = [
    "OnDemandRequest",
    "ErrorDetail",
    "ErrorResponse",
    "HealthResponse",
    "MetricsResponse",
    "OnDemandResponse",
]
