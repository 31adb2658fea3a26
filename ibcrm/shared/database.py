"""Database connection and session management."""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from ibcrm.shared.config import get_settings

logger = logging.getLogger(__name__)


# ===================
# SQLAlchemy Base
# ===================


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


# ===================
# Engine / Sessions
# ===================

# Store engine per event loop ID to avoid cross-loop connection issues
_engines: dict[int, AsyncEngine] = {}
_session_factories: dict[int, async_sessionmaker[AsyncSession]] = {}


def _get_loop_id() -> int:
    """Get current event loop ID for tracking connections."""
    try:
        loop = asyncio.get_running_loop()
        return id(loop)
    except RuntimeError:
        # No running loop - use 0 as fallback
        return 0


def create_engine_from_url(url: str) -> AsyncEngine:
    """Create an async engine, applying pool settings where the driver supports them."""
    settings = get_settings()
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=False)
    return create_async_engine(
        url,
        echo=False,
        pool_pre_ping=True,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
        pool_recycle=settings.db_pool_recycle,
    )


def get_engine() -> AsyncEngine:
    """Get SQLAlchemy async engine for current event loop."""
    loop_id = _get_loop_id()

    if _engines.get(loop_id) is None:
        _engines[loop_id] = create_engine_from_url(get_settings().database_url)
    return _engines[loop_id]


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get SQLAlchemy session factory for current event loop."""
    loop_id = _get_loop_id()

    if _session_factories.get(loop_id) is None:
        _session_factories[loop_id] = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _session_factories[loop_id]


@asynccontextmanager
async def get_db_session(
    factory: async_sessionmaker[AsyncSession] | None = None,
) -> AsyncGenerator[AsyncSession, None]:
    """Get database session context manager.

    Commits when the block exits cleanly and rolls back otherwise.

    Usage:
        async with get_db_session() as session:
            result = await session.execute(query)

    Args:
        factory: Session factory to use; defaults to the application's factory
    """
    factory = factory or get_session_factory()
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db(engine: AsyncEngine | None = None) -> None:
    """Create all tables.

    Used by the CLI and by local/test setups. Deployed databases are
    expected to be migrated ahead of time.
    """
    # Register models on Base.metadata
    from ibcrm.modules.auth import models  # noqa: F401

    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose of all engines.

    Call this on application shutdown.
    """
    for engine in list(_engines.values()):
        await engine.dispose()
    _engines.clear()
    _session_factories.clear()


# ===================
# Lifecycle Helpers
# ===================


async def check_db_health(max_retries: int = 3, retry_delay: float = 1.0) -> bool:
    """Check database health with retries.

    Args:
        max_retries: Maximum number of retry attempts
        retry_delay: Delay between retries in seconds

    Returns:
        True if database is healthy, False otherwise
    """
    for attempt in range(max_retries):
        try:
            async with get_engine().connect() as conn:
                await conn.execute(text("SELECT 1"))
            logger.debug("Database health check passed")
            return True
        except Exception as e:
            logger.warning(f"Database health check failed (attempt {attempt + 1}/{max_retries}): {e}")
            if attempt < max_retries - 1:
                await asyncio.sleep(retry_delay)
    return False


async def startup() -> None:
    """Initialize connections on application startup."""
    if not await check_db_health(max_retries=5, retry_delay=2.0):
        raise RuntimeError("Failed to connect to database after retries")

    if get_settings().db_auto_create:
        await init_db()
        logger.info("Database tables ensured")

    logger.info("Database connection initialized successfully")


async def shutdown() -> None:
    """Close all connections on application shutdown."""
    await close_db()
    logger.info("Database connections closed")
