"""
Module 09D - On-Demand Route

Queues an operator-requested check ahead of the round's tasks.
"""

import logging

from fastapi import APIRouter, Depends

from api.deps import get_tasker
from api.models.requests import OnDemandRequest
from api.models.responses import OnDemandResponse
from station.tasker import Tasker

logger = logging.getLogger(__name__)

router = APIRouter(tags=["on-demand"])


@router.post("/on-demand", response_model=OnDemandResponse, status_code=202)
def queue_on_demand(
    body: OnDemandRequest,
    tasker: Tasker = Depends(get_tasker),
) -> OnDemandResponse:
    assignment = body.to_assignment()
    tasker.queue_on_demand(assignment)
    return OnDemandResponse(
        ok=True,
        queued=assignment.to_wire(),
        pending=tasker.pending_on_demand,
    )
