"""Pytest fixtures for TutEasy tests."""

from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import datetime
from decimal import Decimal
from typing import Any

import pytest
import pytest_asyncio
import structlog
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from uuid_utils.compat import uuid7

from tuteasy.config.settings import Settings
from tuteasy.db.models import (
    Base,
    Tutor,
    TutorAvailability,
    TutorQualification,
    TutorSubject,
    User,
    VerificationStatus,
)

TutorFactory = Callable[..., Awaitable[Tutor]]


# =============================================================================
# Structlog Configuration Fixture
# =============================================================================


@pytest.fixture(scope="function", autouse=True)
def reset_structlog_after_test():
    """Reset structlog configuration after each test.

    This ensures tests that modify structlog global state
    don't affect other tests.
    """
    yield
    structlog.reset_defaults()
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create an in-memory SQLite engine shared by every session in a test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def tutor_factory(db_session: AsyncSession) -> TutorFactory:
    """Factory that persists a tutor with its user and child rows.

    Subjects are given as dicts of TutorSubject fields, qualifications as
    dicts of TutorQualification fields (verified unless stated), and
    availability as slot names. The tutor is eligible unless told otherwise.
    """

    async def create(
        *,
        bio: str | None = None,
        subjects: list[dict[str, Any]] | None = None,
        qualifications: list[dict[str, Any]] | None = None,
        availability: list[str] | None = None,
        hourly_rate_min: Decimal | str | None = None,
        hourly_rate_max: Decimal | str | None = None,
        rating: Decimal | str = "0",
        total_students: int = 0,
        is_active: bool = True,
        verification_status: str = VerificationStatus.VERIFIED.value,
        email_verified: bool = True,
        created_at: datetime | None = None,
    ) -> Tutor:
        user = User(
            id=uuid7(),
            email=f"tutor-{uuid7()}@example.com",
            role="TUTOR",
            is_email_verified=email_verified,
        )
        tutor = Tutor(
            id=uuid7(),
            user=user,
            bio=bio,
            hourly_rate_min=Decimal(hourly_rate_min) if hourly_rate_min is not None else None,
            hourly_rate_max=Decimal(hourly_rate_max) if hourly_rate_max is not None else None,
            rating=Decimal(rating),
            total_students=total_students,
            is_active=is_active,
            verification_status=verification_status,
            language_proficiencies=["English"],
        )
        if created_at is not None:
            tutor.created_at = created_at
        tutor.subjects = [
            TutorSubject(
                id=uuid7(),
                **{
                    "qualification_level": "GCSE",
                    "proficiency_level": "INTERMEDIATE",
                    "years_experience": 0,
                    **subject,
                },
            )
            for subject in subjects or []
        ]
        tutor.qualifications = [
            TutorQualification(
                id=uuid7(),
                **{
                    "qualification_type": "DEGREE",
                    "verification_status": VerificationStatus.VERIFIED.value,
                    **qualification,
                },
            )
            for qualification in qualifications or []
        ]
        tutor.availability = [TutorAvailability(id=uuid7(), slot=slot) for slot in availability or []]

        db_session.add(tutor)
        await db_session.commit()
        return tutor

    return create


# =============================================================================
# API Fixtures
# =============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Create settings for API testing."""
    return Settings(
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        ENVIRONMENT="test",
        DEBUG=True,
        log_level="DEBUG",
    )


@pytest.fixture
def test_app(
    test_settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
) -> FastAPI:
    """Create a FastAPI test application backed by the test database."""
    from tuteasy.api.app import create_app
    from tuteasy.db.config import get_db

    app = create_app(settings=test_settings)

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest_asyncio.fixture
async def test_client(test_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for API testing.

    Provides an httpx.AsyncClient configured to call the test application
    directly without network overhead.
    """
    async with AsyncClient(
        transport=ASGITransport(app=test_app),
        base_url="http://test",
    ) as client:
        yield client
