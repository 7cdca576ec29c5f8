"""Pytest fixtures for Archivist tests."""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime

import pytest
import pytest_asyncio
import structlog
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from archivist.config.settings import Settings
from archivist.db.models.base import Base
from archivist.lifecycle import (
    Attachment,
    FixedClock,
    InMemoryAuditSink,
    InMemoryDocumentStore,
    MediaKind,
    TransitionEngine,
)

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
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


# =============================================================================
# Settings and Clock
# =============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Create settings for testing."""
    return Settings(
        ENVIRONMENT="test",
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        log_level="DEBUG",
        sweep_batch_size=2,
    )


@pytest.fixture
def now() -> datetime:
    """Fixed reference time for lifecycle tests."""
    return datetime(2026, 1, 15, 9, 0, tzinfo=UTC)


@pytest.fixture
def clock(now: datetime) -> FixedClock:
    return FixedClock(now)


# =============================================================================
# Lifecycle Fixtures
# =============================================================================


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def audit_sink() -> InMemoryAuditSink:
    return InMemoryAuditSink()


@pytest.fixture
def engine(
    store: InMemoryDocumentStore,
    audit_sink: InMemoryAuditSink,
    clock: FixedClock,
    test_settings: Settings,
) -> TransitionEngine:
    """Transition engine wired to in-memory collaborators and a fixed clock."""
    return TransitionEngine(
        store=store,
        audit_sink=audit_sink,
        clock=clock,
        settings=test_settings,
    )


@pytest.fixture
def word_attachment() -> Attachment:
    return Attachment(
        name="contrat-signe.docx",
        size_bytes=48_213,
        media_kind=MediaKind.WORD_PROCESSOR,
        created_at=datetime(2026, 1, 10, tzinfo=UTC),
    )


@pytest.fixture
def pdf_attachment() -> Attachment:
    return Attachment(
        name="annexe.pdf",
        size_bytes=120_400,
        media_kind=MediaKind.PDF,
        created_at=datetime(2026, 1, 10, tzinfo=UTC),
    )


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create an in-memory SQLite engine with the schema created.

    StaticPool keeps a single connection so every session sees the same
    in-memory database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
