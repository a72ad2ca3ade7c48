"""
Health check endpoints.
"""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from datetime import datetime

from ...core.container import ServiceNames
from ...core.utils.datetime_utils import get_current_timestamp
from ..schemas.common import ApiResponse
from ..utils.responses import ok

router = APIRouter(prefix="/health", tags=["health"])
logger = logging.getLogger("preopflow")


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    timestamp: datetime
    version: str
    service: str


@router.get("", response_model=ApiResponse[HealthResponse])
async def health_check(request: Request):
    """
    Health check endpoint.

    Returns the current status of the service.
    """
    settings = request.app.state.container.settings
    return ok(request, data=HealthResponse(
        status="healthy",
        timestamp=get_current_timestamp(),
        version=settings.app_version,
        service=settings.app_name,
    ), message="OK")


@router.get("/ready", response_model=ApiResponse[dict])
async def readiness_check(request: Request):
    """
    Readiness check endpoint.

    Pings MongoDB when it is the configured backend.
    """
    container = request.app.state.container
    checks = {"storage": container.settings.database.backend}

    client = container.get_or_none(ServiceNames.MONGO_CLIENT)
    if client is None:
        checks["database"] = "ok"
        return ok(request, data=checks, message="Ready")

    try:
        await client.admin.command("ping")
        checks["database"] = "ok"
    except Exception as e:
        logger.warning(f"Readiness check failed: {e}")
        checks["database"] = f"error: {str(e)[:50]}"
        response = ok(request, data=checks, message="Not ready")
        response.success = False
        return JSONResponse(status_code=503, content=response.model_dump(mode="json"))
    return ok(request, data=checks, message="Ready")
