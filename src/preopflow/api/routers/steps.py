"""Step rows across all patients."""

from typing import List, Optional

from fastapi import APIRouter, Query, Request

from ...domain.enums.circuit import CircuitStep, StepStatus
from ..deps import ListStepsDep, QueueStatsDep
from ..schemas import ApiResponse, QueueStatsSchema, StepSchema
from ..utils.responses import ok

router = APIRouter(prefix="/steps", tags=["Steps"])


@router.get("", response_model=ApiResponse[List[StepSchema]], summary="List step rows")
async def list_steps(
    request: Request,
    use_case: ListStepsDep,
    step: Optional[CircuitStep] = Query(None),
    status: Optional[List[StepStatus]] = Query(None),
    station_number: Optional[int] = Query(None, ge=1),
):
    rows = await use_case.execute(step=step, statuses=status, station_number=station_number)
    return ok(request, data=[StepSchema.from_domain(r) for r in rows])


@router.get(
    "/queue-stats",
    response_model=ApiResponse[List[QueueStatsSchema]],
    summary="Waiting, in-service and completed counts per step",
)
async def queue_stats(request: Request, use_case: QueueStatsDep):
    stats = await use_case.execute()
    return ok(request, data=[QueueStatsSchema.from_dto(s) for s in stats])
