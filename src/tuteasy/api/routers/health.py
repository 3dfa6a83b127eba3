"""Health check endpoints."""

import time
from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from tuteasy import __version__
from tuteasy.api.dependencies import get_app_settings
from tuteasy.api.schemas.health import (
    ComponentHealth,
    HealthDetailResponse,
    HealthResponse,
    HealthStatus,
)
from tuteasy.config.settings import Settings
from tuteasy.config.validation import ValidationSeverity, validate_configuration
from tuteasy.db.config import get_db

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Basic health check",
    description="Returns basic liveness status.",
)
async def health_check() -> HealthResponse:
    """Basic liveness check endpoint.

    Returns 200 if the application is running, regardless of
    dependency health. Use /health/ready for full readiness check.
    """
    return HealthResponse(
        status=HealthStatus.HEALTHY,
        version=__version__,
        timestamp=datetime.now(UTC),
    )


@router.get(
    "/health/db",
    response_model=HealthDetailResponse,
    summary="Database health check",
    description="Checks database connectivity.",
)
async def health_db(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> HealthDetailResponse:
    """Database connectivity check, including query latency."""
    db_health = await _check_database(db)

    return HealthDetailResponse(
        status=db_health.status,
        version=__version__,
        timestamp=datetime.now(UTC),
        database=db_health,
        details=None,
    )


@router.get(
    "/health/ready",
    response_model=HealthDetailResponse,
    summary="Full readiness check",
    description="Checks the database and configuration for readiness.",
)
async def health_ready(
    db: Annotated[AsyncSession, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> HealthDetailResponse:
    """Full readiness check endpoint.

    Use this for Kubernetes readiness checks.
    """
    db_health = await _check_database(db)
    config_health = _check_configuration(settings)

    return HealthDetailResponse(
        status=_aggregate_health([db_health, config_health]),
        version=__version__,
        timestamp=datetime.now(UTC),
        database=db_health,
        details={
            "checks_performed": ["database", "configuration"],
            "configuration": config_health.model_dump(mode="json"),
        },
    )


async def _check_database(db: AsyncSession) -> ComponentHealth:
    """Check database connectivity.

    Args:
        db: Database session

    Returns:
        ComponentHealth with database status
    """
    start = time.perf_counter()
    try:
        await db.execute(text("SELECT 1"))
        latency_ms = (time.perf_counter() - start) * 1000

        return ComponentHealth(
            status=HealthStatus.HEALTHY,
            message="Database connection successful",
            latency_ms=round(latency_ms, 2),
        )
    except Exception as e:
        latency_ms = (time.perf_counter() - start) * 1000
        return ComponentHealth(
            status=HealthStatus.UNHEALTHY,
            message=f"Database connection failed: {str(e)[:100]}",
            latency_ms=round(latency_ms, 2),
        )


def _check_configuration(settings: Settings) -> ComponentHealth:
    """Report configuration problems as a health component."""
    results = validate_configuration(settings)
    errors = [r for r in results if r.severity == ValidationSeverity.ERROR]
    warnings = [r for r in results if r.severity == ValidationSeverity.WARNING]

    if errors:
        return ComponentHealth(
            status=HealthStatus.UNHEALTHY,
            message="; ".join(f"{r.field}: {r.message}" for r in errors),
        )
    if warnings:
        return ComponentHealth(
            status=HealthStatus.DEGRADED,
            message="; ".join(f"{r.field}: {r.message}" for r in warnings),
        )
    return ComponentHealth(status=HealthStatus.HEALTHY, message="Configuration valid")


def _aggregate_health(components: list[ComponentHealth]) -> HealthStatus:
    """Aggregate component health into overall status.

    Returns:
        UNHEALTHY if any component is unhealthy, DEGRADED if any is
        degraded, HEALTHY otherwise
    """
    statuses = [c.status for c in components]

    if any(s == HealthStatus.UNHEALTHY for s in statuses):
        return HealthStatus.UNHEALTHY

    if any(s == HealthStatus.DEGRADED for s in statuses):
        return HealthStatus.DEGRADED

    return HealthStatus.HEALTHY
