"""Application lifecycle management.

This module handles application startup and shutdown events: it verifies
the database is reachable, purges expired sessions and disposes of the
engine on shutdown.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.core.config.settings import settings
from src.core.logging import logger
from src.core.ratelimiter import limiter
from src.domain.services.auth.session import SessionService
from src.domain.services.auth.token import AccessTokenService
from src.infrastructure.database.async_db import check_database_health, dispose_engine, get_session_factory
from src.infrastructure.repositories import SessionRepository, UserRepository


async def purge_expired_sessions() -> int:
    """Deletes expired session rows using a short-lived database session."""
    async with get_session_factory()() as db_session:
        service = SessionService(
            SessionRepository(db_session),
            UserRepository(db_session),
            AccessTokenService(),
        )
        return await service.cleanup_expired_sessions()


def create_lifespan_manager():
    """Create the application lifespan manager.

    Returns:
        AsyncContextManager: The lifespan manager for the FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup checks, then engine disposal on shutdown.

        Raises:
            RuntimeError: If the database is unavailable during startup
        """
        if not await check_database_health():
            logger.error("database_unavailable_on_startup")
            raise RuntimeError("Database unavailable")

        await purge_expired_sessions()
        app.state.limiter = limiter
        logger.info("application_startup", env=settings.APP_ENV, version=settings.VERSION)

        yield

        await dispose_engine()
        logger.info("application_shutdown", env=settings.APP_ENV)

    return lifespan
