"""
Module 09D - API Dependencies

Accessors for the station objects attached to the application.
"""

from __future__ import annotations

from fastapi import Request

from api.errors import StationNotRunningError
from core.metrics import RetrievalMetrics
from station.tasker import Tasker


def get_tasker(request: Request) -> Tasker:
    tasker = getattr(request.app.state, "tasker", None)
    if tasker is None:
        raise StationNotRunningError()
    return tasker


def get_metrics(request: Request) -> RetrievalMetrics:
    metrics = getattr(request.app.state, "metrics", None)
    if metrics is None:
        raise StationNotRunningError()
    return metrics
