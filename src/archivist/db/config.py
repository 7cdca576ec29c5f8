"""Database engine and session management."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from archivist.config.settings import Settings, get_settings
from archivist.db.models.base import Base


def create_engine_from_settings(settings: Settings | None = None) -> AsyncEngine:
    """Create an async engine for the configured database."""
    settings = settings or get_settings()
    kwargs = {}
    if settings.ENVIRONMENT == "test":
        kwargs["poolclass"] = NullPool
    return create_async_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO, **kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a session factory bound to an engine."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(engine: AsyncEngine, create_tables: bool = False) -> None:
    """Verify connectivity and optionally create the schema.

    Production schemas are managed by Alembic; ``create_tables`` is meant
    for development databases and tests.
    """
    async with engine.begin() as conn:
        await conn.execute(text("SELECT 1"))
        if create_tables:
            await conn.run_sync(Base.metadata.create_all)


async def close_db(engine: AsyncEngine) -> None:
    """Close database connections gracefully."""
    await engine.dispose()


@asynccontextmanager
async def get_async_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Context manager for obtaining a database session.

    Usage:
        async with get_async_session(factory) as session:
            result = await session.execute(query)
    """
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.close()
