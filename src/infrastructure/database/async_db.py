"""
Asynchronous Database Utilities Module

This module owns the process-wide asynchronous SQLAlchemy engine for
PostgreSQL (asyncpg driver). The engine is created lazily on first use and
disposed from the application lifespan, so importing the module never opens
a connection and tests can run without a database.

**Security Note**: Configure SSL in DATABASE_URL when connecting over
untrusted networks. asyncpg does not accept ``sslmode`` in connect_args, so
it is stripped from the URL. Connection details are never logged.

Key Components:
    - get_engine: Returns the engine, creating it on first call.
    - get_session_factory: Returns the `AsyncSession` factory bound to the engine.
    - get_async_db: FastAPI dependency yielding a request-scoped session.
    - check_database_health: Lightweight connectivity probe.
    - dispose_engine: Closes pooled connections on shutdown.
"""

from __future__ import annotations

import urllib.parse as urlparse
from typing import AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from structlog import get_logger

from src.core.config.settings import settings

logger = get_logger(__name__)

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def _build_async_url() -> str:
    """
    Build the asynchronous database URL.

    Replaces a synchronous driver with asyncpg and drops ``sslmode``, which
    asyncpg handles differently.

    Returns:
        str: The cleaned asynchronous database URL.
    """
    async_url = settings.DATABASE_URL.replace("postgresql+psycopg2", "postgresql+asyncpg")
    if async_url.startswith("postgresql://"):
        async_url = async_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    parsed = urlparse.urlparse(async_url)
    query = dict(urlparse.parse_qsl(parsed.query))
    query.pop("sslmode", None)
    parsed = parsed._replace(query=urlparse.urlencode(query))
    return urlparse.urlunparse(parsed)


def get_engine() -> AsyncEngine:
    """Return the process-wide engine, creating it on first use."""
    global _engine
    if _engine is None:
        _engine = create_async_engine(
            _build_async_url(),
            echo=False,
            pool_size=settings.POSTGRES_POOL_SIZE,
            max_overflow=settings.POSTGRES_MAX_OVERFLOW,
            pool_timeout=settings.POSTGRES_POOL_TIMEOUT,
            pool_pre_ping=True,
        )
        logger.info("Async database engine created")
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(bind=get_engine(), class_=AsyncSession, expire_on_commit=False)
    return _session_factory


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that yields an AsyncSession.

    Rolls back the transaction if an exception escapes the request and always
    closes the session.

    Yields:
        AsyncSession: An asynchronous database session.
    """
    async with get_session_factory()() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            logger.error("Async database session rollback due to error")
            raise


async def check_database_health() -> bool:
    """Return True when a trivial query succeeds."""
    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error("Database health check failed", error=type(e).__name__)
        return False


async def dispose_engine() -> None:
    """Dispose of the engine, if one was created."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        logger.info("Async database engine disposed")
    _engine = None
    _session_factory = None
