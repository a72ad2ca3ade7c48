"""
Performance tracking middleware for monitoring request/response metrics
"""
import time
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
import logging

logger = logging.getLogger("preopflow")

SLOW_REQUEST_SECONDS = 1.0


class PerformanceMiddleware(BaseHTTPMiddleware):
    """
    Middleware to track latency for all requests
    """

    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()

        response = await call_next(request)

        process_time = time.perf_counter() - start_time
        process_time_ms = round(process_time * 1000, 2)

        logger.info(
            f"PERFORMANCE: method={request.method} path={request.url.path} "
            f"status={response.status_code} latency={process_time_ms}ms",
            extra={"request_id": getattr(request.state, "request_id", None)},
        )

        response.headers["X-Process-Time"] = str(process_time_ms)

        if process_time > SLOW_REQUEST_SECONDS:
            logger.warning(
                f"SLOW_REQUEST: method={request.method} path={request.url.path} "
                f"latency={process_time_ms}ms"
            )

        return response
