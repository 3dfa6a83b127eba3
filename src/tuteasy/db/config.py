"""Database configuration and session management."""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from tuteasy.config.settings import Settings, get_settings


def engine_options(settings: Settings) -> dict[str, Any]:
    """Build keyword arguments for ``create_async_engine``.

    SQLite has no connection pool to size, so pool settings are only passed
    for server databases.
    """
    options: dict[str, Any] = {"echo": settings.DEBUG}
    if settings.DATABASE_URL.startswith("sqlite"):
        return options
    if settings.ENVIRONMENT == "test":
        options["poolclass"] = NullPool
    else:
        options["pool_size"] = settings.DATABASE_POOL_SIZE
        options["max_overflow"] = settings.DATABASE_MAX_OVERFLOW
        options["pool_pre_ping"] = True
    return options


engine: AsyncEngine
AsyncSessionLocal: async_sessionmaker[AsyncSession]


def configure_engine(settings: Settings) -> AsyncEngine:
    """Bind the module engine and session factory to the given settings.

    Runs once at import with the environment settings and again at
    application startup, so an app built with explicit settings talks to
    the database those settings name.
    """
    global engine, AsyncSessionLocal
    engine = create_async_engine(settings.DATABASE_URL, **engine_options(settings))
    AsyncSessionLocal = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    return engine


configure_engine(get_settings())


async def init_db() -> None:
    """Initialize the database connection pool.

    Called during application startup to ensure the connection pool
    is ready before accepting requests.
    """
    async with engine.begin() as conn:
        await conn.execute(text("SELECT 1"))


async def close_db() -> None:
    """Close database connections gracefully.

    Called during application shutdown to release all connections
    in the pool.
    """
    await engine.dispose()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for FastAPI to inject database sessions.

    Usage:
        @router.get("/tutors")
        async def list_tutors(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with AsyncSessionLocal() as session:
        yield session
