"""FastAPI application initialization."""

import asyncio
from contextlib import asynccontextmanager
from typing import Optional
from uuid import uuid4

from dotenv import load_dotenv

# Load environment variables before anything else
load_dotenv()

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from todo_api.api.auth import router as auth_router
from todo_api.api.lists import router as lists_router
from todo_api.api.middleware import CorrelationIdMiddleware
from todo_api.api.routes import router
from todo_api.config import Settings, get_settings
from todo_api.container import build_container
from todo_api.errors import ServiceError
from todo_api.services.auth_service import AuthService
from todo_api.services.logging_service import configure_logging, get_logger


async def run_session_sweeper(auth_service: AuthService, interval_seconds: int) -> None:
    """Periodically delete expired sessions until cancelled."""
    logger = get_logger("session_sweeper")
    while True:
        try:
            await asyncio.sleep(interval_seconds)
            await auth_service.sweep_expired_sessions()
        except asyncio.CancelledError:
            break
        except Exception as e:
            logger.warning("session_sweep_error", error=str(e))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup
    settings: Settings = app.state.settings
    configure_logging(settings.log_level)
    logger = get_logger("main")

    container = await build_container(settings)
    app.state.container = container

    sweeper_task = None
    if settings.session_sweep_interval_seconds > 0:
        sweeper_task = asyncio.create_task(
            run_session_sweeper(
                container.auth_service, settings.session_sweep_interval_seconds
            )
        )
        logger.info(
            "session_sweeper_started",
            interval_seconds=settings.session_sweep_interval_seconds,
        )

    logger.info(
        "application_started",
        environment=settings.environment,
        storage=settings.db_connection,
        log_level=settings.log_level,
    )

    yield

    # Shutdown
    if sweeper_task is not None:
        sweeper_task.cancel()
        try:
            await sweeper_task
        except asyncio.CancelledError:
            pass
        logger.info("session_sweeper_stopped")

    await container.close()
    logger.info("application_shutdown")


def _correlation_id(request: Request) -> str:
    return getattr(request.state, "correlation_id", None) or str(uuid4())


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Map typed service errors to their HTTP status and error code."""
    correlation_id = _correlation_id(request)
    content = {
        "error": exc.error_code,
        "detail": exc.message,
        "correlation_id": correlation_id,
    }
    if exc.reasons:
        content["reasons"] = exc.reasons

    headers = {"X-Correlation-Id": correlation_id}
    if exc.status_code == 401:
        headers["WWW-Authenticate"] = "Bearer"

    structlog.get_logger().info(
        "service_error",
        status_code=exc.status_code,
        error_code=exc.error_code,
    )
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic request validation errors as 400 Bad Request."""
    correlation_id = _correlation_id(request)

    errors = exc.errors()
    if errors:
        first_error = errors[0]
        field = ".".join(str(loc) for loc in first_error.get("loc", ["unknown"]))
        message = first_error.get("msg", "Validation failed")
        detail = f"Field '{field}': {message}"
    else:
        detail = "Request validation failed"

    structlog.get_logger().warning(
        "validation_error",
        correlation_id=correlation_id,
        detail=detail,
    )

    return JSONResponse(
        status_code=400,
        content={
            "error": "VALIDATION_ERROR",
            "detail": detail,
            "correlation_id": correlation_id,
        },
        headers={"X-Correlation-Id": correlation_id},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Surface unexpected failures as a generic 500 without internals in production."""
    correlation_id = _correlation_id(request)
    structlog.get_logger().error(
        "unhandled_exception",
        correlation_id=correlation_id,
        error_type=type(exc).__name__,
        exc_info=exc,
    )

    settings: Settings = request.app.state.settings
    detail = "An unexpected error occurred" if settings.is_production else str(exc)
    return JSONResponse(
        status_code=500,
        content={
            "error": "INTERNAL_SERVER_ERROR",
            "detail": detail,
            "correlation_id": correlation_id,
        },
        headers={"X-Correlation-Id": correlation_id},
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Optional settings override. If None, loads from config.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="To-Do List API",
        description="User accounts, token sessions and ownership-scoped to-do lists",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # CORS middleware for the browser frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Correlation ID middleware for request tracking and observability
    app.add_middleware(CorrelationIdMiddleware)

    app.include_router(auth_router)
    app.include_router(lists_router)
    app.include_router(router)

    return app


app = create_app()
