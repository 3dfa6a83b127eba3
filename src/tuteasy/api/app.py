"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from tuteasy import __version__
from tuteasy.api.middleware import (
    ErrorHandlingMiddleware,
    ObservabilityMiddleware,
    RequestContextMiddleware,
    RequestLoggingMiddleware,
    request_validation_exception_handler,
)
from tuteasy.api.routers import health_router, metrics_router, v1_router
from tuteasy.config.settings import Settings, get_settings
from tuteasy.config.validation import get_configuration_summary, validate_or_raise
from tuteasy.core.logging import setup_logging
from tuteasy.db.config import close_db, configure_engine, init_db
from tuteasy.observability import TracingManager, get_metrics_manager, get_tracing_manager

logger = structlog.get_logger("tuteasy.api")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Assembles middleware, routers, exception handlers and lifespan
    management.

    Args:
        settings: Optional settings override (useful for testing)

    Returns:
        Configured FastAPI application

    Example:
        # Testing
        app = create_app(settings=Settings(ENVIRONMENT="test", DEBUG=True))

        # Run with uvicorn
        uvicorn tuteasy.api.app:create_app --factory
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="TutEasy Search API",
        description="Tutor search and relevance ranking",
        version=__version__,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        lifespan=_lifespan,
    )

    # Store settings on app state for access in dependencies
    app.state.settings = settings

    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)

    _configure_middleware(app, settings)
    _configure_routers(app)
    get_tracing_manager().instrument_fastapi(app)

    return app


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Validates configuration, then starts logging, observability and the
    database pool. Invalid configuration aborts startup.
    """
    settings: Settings = app.state.settings

    setup_logging(settings=settings)
    validate_or_raise(settings)
    logger.info("Starting TutEasy API", **get_configuration_summary(settings))

    engine = configure_engine(settings)

    tracing_manager: TracingManager | None = None
    try:
        tracing_manager = get_tracing_manager()
        tracing_manager.initialize()
        tracing_manager.instrument_sqlalchemy(engine)
        logger.info("OpenTelemetry tracing initialized")

        get_metrics_manager().initialize(
            service_name="tuteasy",
            service_version=__version__,
            environment=settings.ENVIRONMENT,
        )
        logger.info("Prometheus metrics initialized")
    except Exception as e:
        logger.warning("Observability initialization error", error=str(e))

    try:
        await init_db()
        logger.info("Database connection pool initialized")
    except Exception as e:
        logger.warning("Database initialization skipped", error=str(e))

    yield

    logger.info("Shutting down TutEasy API")

    try:
        await close_db()
        logger.info("Database connections closed")
    except Exception as e:
        logger.warning("Database shutdown error", error=str(e))

    if tracing_manager:
        tracing_manager.shutdown()
        logger.info("OpenTelemetry tracing shutdown")


def _configure_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure middleware stack.

    Middleware order (outermost to innermost execution):
    1. ObservabilityMiddleware - Records metrics and traces
    2. RequestLoggingMiddleware - Logs all requests
    3. ErrorHandlingMiddleware - Converts exceptions to HTTP responses
    4. CORSMiddleware - Handles CORS (if configured)
    5. RequestContextMiddleware - Sets ContextVar for request context

    Starlette runs the last-added middleware first, so they are added in
    reverse order.

    Args:
        app: FastAPI application
        settings: Application settings
    """
    app.add_middleware(RequestContextMiddleware)

    if settings.CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["GET"],
            allow_headers=["*"],
        )

    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(ObservabilityMiddleware)


def _configure_routers(app: FastAPI) -> None:
    """Configure API routers.

    Args:
        app: FastAPI application
    """
    # Health check and metrics endpoints (no prefix - at root level)
    app.include_router(health_router)
    app.include_router(metrics_router)

    # API v1 routers
    app.include_router(v1_router)


# Convenience for running directly
# Usage: uvicorn tuteasy.api.app:app
app = create_app()
