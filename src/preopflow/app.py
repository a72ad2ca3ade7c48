"""
FastAPI application factory and main app configuration.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.errors import error_code_for, http_status_for
from .api.routers import announcements, health, patients, reports, stations, steps
from .api.utils.responses import fail
from .core.config import Settings, get_settings
from .core.container import Container, ServiceNames, build_container
from .core.exceptions import PreopFlowException
from .core.structured_logger import configure_logging, get_logger
from .domain.catalog import station_layout
from .domain.enums.circuit import ErrorCategory
from .domain.errors import DomainError
from .middleware.performance_middleware import PerformanceMiddleware
from .middleware.request_id_middleware import RequestIDMiddleware
from .workers.call_expiry_sweeper import run_call_expiry_sweeper_forever


async def _init_database(container: Container) -> None:
    """Register the Beanie document models on the configured database."""
    from beanie import init_beanie

    from .adapters.db.mongo.models.circuit_m import DOCUMENT_MODELS

    client = container.get(ServiceNames.MONGO_CLIENT)
    db = client[container.settings.database.db_name]
    await init_beanie(database=db, document_models=DOCUMENT_MODELS)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    container: Container = app.state.container
    settings = container.settings
    configure_logging(settings.logging.level, settings.logging.format)
    logger = get_logger()
    logger.info(
        f"Starting {settings.app_name} v{settings.app_version}",
        environment=settings.app_env,
        storage=settings.database.backend,
    )

    if container.has(ServiceNames.MONGO_CLIENT):
        try:
            await _init_database(container)
        except Exception as e:
            logger.error(f"Database connection failed: {type(e).__name__}: {e}")
            raise
        logger.info("Database connection established", db_name=settings.database.db_name)

    if settings.circuit.seed_default_stations:
        await container.get(ServiceNames.SEED_DEFAULT_STATIONS).execute(
            station_layout(settings.circuit.default_station_counts)
        )

    sweeper_task = None
    if settings.circuit.expiry_sweeper_enabled:
        sweeper_task = asyncio.create_task(
            run_call_expiry_sweeper_forever(
                container.get(ServiceNames.EXPIRE_STALE_CALLS), settings.circuit
            )
        )

    yield

    if sweeper_task:
        sweeper_task.cancel()
        try:
            await sweeper_task
        except asyncio.CancelledError:
            pass
        logger.info("Call expiry sweeper stopped")

    client = container.get_or_none(ServiceNames.MONGO_CLIENT)
    if client is not None:
        client.close()
    logger.info(f"Shutting down {settings.app_name}")


def _error_response(status_code: int, payload) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=payload.model_dump(mode="json"))


def create_app(
    settings: Optional[Settings] = None, container: Optional[Container] = None
) -> FastAPI:
    """Create and configure FastAPI application."""
    settings = settings or (container.settings if container else get_settings())
    container = container or build_container(settings)

    app = FastAPI(
        title=settings.app_name,
        description="Pre-operative circuit queue management",
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.container = container

    app.add_middleware(PerformanceMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.allowed_origins,
        allow_credentials=settings.cors.allow_credentials,
        allow_methods=settings.cors.allowed_methods,
        allow_headers=settings.cors.allowed_headers,
        expose_headers=["X-Request-ID", "X-Process-Time"],
    )
    # Outermost, so every other middleware and handler sees the request id
    app.add_middleware(RequestIDMiddleware)

    app.include_router(health.router)
    app.include_router(patients.router)
    app.include_router(stations.router)
    app.include_router(steps.router)
    app.include_router(announcements.router)
    app.include_router(reports.router)

    logger = logging.getLogger("preopflow")

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        status_code = http_status_for(exc)
        if exc.category == ErrorCategory.FATAL:
            logger.error(f"DomainError: {exc.error_code} {exc.message}", exc_info=exc)
        return _error_response(
            status_code,
            fail(
                request,
                error=error_code_for(exc),
                message=exc.message,
                details=exc.details,
                category=exc.category.value,
            ),
        )

    @app.exception_handler(RequestValidationError)
    async def pydantic_error_handler(request: Request, exc: RequestValidationError):
        errors = [
            {
                "field": ".".join(str(part) for part in err.get("loc", [])),
                "message": err.get("msg", ""),
                "type": err.get("type", ""),
            }
            for err in exc.errors()
        ]
        return _error_response(
            422,
            fail(
                request,
                error="INVALID_INPUT",
                message="Request validation failed",
                details={"errors": errors},
                category=ErrorCategory.VALIDATION.value,
            ),
        )

    @app.exception_handler(PreopFlowException)
    async def infrastructure_error_handler(request: Request, exc: PreopFlowException):
        logger.error(f"{type(exc).__name__}: {exc.message}", exc_info=exc)
        return _error_response(
            503,
            fail(request, error=exc.error_code or "SERVICE_UNAVAILABLE", message=exc.message),
        )

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error: {type(exc).__name__}", exc_info=exc)
        message = f"{type(exc).__name__}: {exc}" if settings.debug else "Internal error occurred."
        return _error_response(
            500,
            fail(
                request,
                error="INTERNAL_ERROR",
                message=message,
                category=ErrorCategory.FATAL.value,
            ),
        )

    @app.get("/", tags=["health"])
    async def root():
        """Root endpoint with API information."""
        return {
            "service": settings.app_name,
            "version": settings.app_version,
            "environment": settings.app_env,
            "docs": "/docs",
            "endpoints": {
                "health": "/health",
                "patients": "/patients",
                "stations": "/stations",
                "steps": "/steps",
                "announcements": "/announcements/active",
                "reports": "/reports/day",
            },
        }

    return app


app = create_app()
