from typing import Any, Optional

from fastapi import Request

from ..schemas.common import ApiResponse, ErrorResponse


def ok(request: Request, data: Any = None, message: str = "") -> ApiResponse[Any]:
    req_id = getattr(request.state, "request_id", None)
    return ApiResponse(success=True, message=message, request_id=req_id or "", data=data)


def fail(
    request: Request,
    error: str,
    message: str,
    details: Optional[dict] = None,
    category: Optional[str] = None,
) -> ErrorResponse:
    req_id = getattr(request.state, "request_id", None)
    return ErrorResponse(
        error=error,
        message=message,
        category=category,
        request_id=req_id or "",
        details=details or {},
    )
