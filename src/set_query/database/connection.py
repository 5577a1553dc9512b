"""
Database connection management
"""

import os
import threading
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from ..config import settings
from ..logging import get_logger

logger = get_logger(__name__)

# Shared connection pool
_async_engine: AsyncEngine | None = None
_async_session_local: async_sessionmaker[AsyncSession] | None = None
_init_lock = threading.Lock()


def get_database_url() -> str:
    """Get database URL, checking the environment first for test compatibility."""
    return os.getenv("SET_QUERY_DATABASE_URL") or settings.database_url


def to_async_url(db_url: str) -> str:
    """Select the asyncpg driver for plain PostgreSQL URLs."""
    if db_url.startswith("postgresql://"):
        return db_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return db_url


def reset_database() -> None:
    """Reset database connections (for tests)."""
    global _async_engine, _async_session_local
    _async_engine = None
    _async_session_local = None


def init_database(database_url: str | None = None, force_reinit: bool = False) -> None:
    """Initialize the shared async connection pool.

    Engine creation is lazy about connecting; the first session opens the
    first connection.
    """
    global _async_engine, _async_session_local

    if _async_engine is not None and not force_reinit and database_url is None:
        return

    with _init_lock:
        if _async_engine is not None and not force_reinit and database_url is None:
            return

        db_url = to_async_url(database_url or get_database_url())
        engine_kwargs = {"echo": settings.sql_echo}
        if not db_url.startswith("sqlite"):
            engine_kwargs["pool_size"] = settings.database_pool_size
            engine_kwargs["max_overflow"] = settings.database_max_overflow

        _async_engine = create_async_engine(db_url, **engine_kwargs)
        _async_session_local = async_sessionmaker(
            _async_engine,
            class_=AsyncSession,
            autoflush=False,
            expire_on_commit=False,
        )
        logger.info("Database initialized", database_url=_async_engine.url.render_as_string())


def get_async_engine() -> AsyncEngine:
    """Get the shared async SQLAlchemy engine."""
    if _async_engine is None:
        init_database()
    if _async_engine is None:
        raise RuntimeError("Database not initialized")
    return _async_engine


@asynccontextmanager
async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Get a database session from the shared pool."""
    if _async_session_local is None:
        init_database()

    if _async_session_local is None:
        raise RuntimeError("Database not initialized")

    async with _async_session_local() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
