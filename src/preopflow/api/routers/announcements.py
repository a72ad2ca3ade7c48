"""Call announcements for the waiting-room display."""

from typing import List, Optional

from fastapi import APIRouter, Query, Request

from ..deps import ActiveAnnouncementsDep
from ..schemas import AnnouncementSchema, ApiResponse
from ..utils.responses import ok

router = APIRouter(prefix="/announcements", tags=["Announcements"])


@router.get(
    "/active",
    response_model=ApiResponse[List[AnnouncementSchema]],
    summary="Latest active calls, newest first",
)
async def active_announcements(
    request: Request,
    use_case: ActiveAnnouncementsDep,
    limit: Optional[int] = Query(None, ge=1, le=50),
):
    announcements = await use_case.execute(limit)
    return ok(request, data=[AnnouncementSchema.from_domain(a) for a in announcements])
