"""Operational reports."""

from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Query, Request

from ...core.utils.datetime_utils import day_window, ensure_utc, get_current_timestamp
from ...domain.errors import ValidationError
from ..deps import DayReportDep
from ..schemas import ApiResponse, DayReportSchema, ErrorResponse
from ..utils.responses import ok

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get(
    "/day",
    response_model=ApiResponse[DayReportSchema],
    summary="Step times, bottlenecks and conversion for a day or a window",
    responses={422: {"model": ErrorResponse, "description": "Invalid window"}},
)
async def day_report(
    request: Request,
    use_case: DayReportDep,
    day: Optional[date] = Query(None, alias="date", description="Report day (UTC)"),
    start: Optional[datetime] = Query(None, description="Window start, inclusive"),
    end: Optional[datetime] = Query(None, description="Window end, exclusive"),
):
    """
    Defaults to today. ``start``/``end`` take precedence over ``date`` and
    must be given together.
    """
    if start is not None or end is not None:
        if start is None or end is None:
            raise ValidationError("start and end must be given together", "INVALID_WINDOW")
        start, end = ensure_utc(start), ensure_utc(end)
        if end <= start:
            raise ValidationError("end must be after start", "INVALID_WINDOW")
    else:
        start, end = day_window(day or get_current_timestamp().date())
    report = await use_case.execute(start, end)
    return ok(request, data=DayReportSchema.from_dto(report))
