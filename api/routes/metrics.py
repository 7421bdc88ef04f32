"""
Module 09D - Metrics Route

Current round's retrieval counters.
"""

from fastapi import APIRouter, Depends

from api.deps import get_metrics
from api.models.responses import MetricsResponse
from core.metrics import RetrievalMetrics

router = APIRouter(tags=["metrics"])


@router.get("/metrics", response_model=MetricsResponse, response_model_by_alias=True)
def get_round_metrics(metrics: RetrievalMetrics = Depends(get_metrics)) -> MetricsResponse:
    snap = metrics.snapshot()
    return MetricsResponse(
        round=snap.round,
        total=snap.total,
        failed=snap.failed,
        unique_pair_count=snap.unique_pair_count,
    )
