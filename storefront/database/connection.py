"""
Database Connection Management

Async SQLAlchemy 2.0 engine for the catalog store.
Sessions are read-only: they are never committed.
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import structlog
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from storefront.config import get_settings

logger = structlog.get_logger(__name__)

# Global engine and session factory
_engine: Optional[AsyncEngine] = None
_async_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


async def init_database() -> AsyncEngine:
    """
    Initialize the database engine and session factory.

    Returns:
        AsyncEngine: The initialized database engine
    """
    global _engine, _async_session_factory

    if _engine is not None:
        logger.warning("Database already initialized")
        return _engine

    settings = get_settings()

    # asyncpg keeps its own connections; no SQLAlchemy pool on top.
    # SQL echo is the sqlalchemy.engine logger level set by configure_logging.
    _engine = create_async_engine(
        settings.database.async_url,
        pool_pre_ping=True,
        poolclass=NullPool,
    )

    _async_session_factory = async_sessionmaker(
        bind=_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    try:
        async with _engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info(
            "Database connection established",
            host=settings.database.host,
            database=settings.database.db,
        )
    except Exception as e:
        logger.error("Failed to connect to database", error=str(e))
        raise

    return _engine


async def close_database() -> None:
    """Dispose of the engine."""
    global _engine, _async_session_factory

    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _async_session_factory = None
        logger.info("Database connection pool closed")


@asynccontextmanager
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Get a read-only database session.

    Example:
        async with get_db() as db:
            result = await db.execute(query)
    """
    if _async_session_factory is None:
        logger.error("Database not initialized when get_db() called")
        raise RuntimeError("Database not initialized. Call init_database() first.")

    session = _async_session_factory()
    try:
        yield session
    finally:
        await session.close()


async def get_db_dependency() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency for database sessions.

    Example:
        @router.get("/items")
        async def get_items(db: AsyncSession = Depends(get_db_dependency)):
            ...
    """
    async with get_db() as session:
        yield session


async def check_database_health() -> dict:
    """
    Check database health status.

    Returns:
        dict: Health status with latency information
    """
    try:
        start = time.perf_counter()
        async with get_db() as db:
            await db.execute(text("SELECT 1"))
        latency_ms = (time.perf_counter() - start) * 1000

        return {
            "status": "healthy",
            "latency_ms": round(latency_ms, 2),
        }
    except Exception as e:
        return {
            "status": "unhealthy",
            "error": str(e),
        }
