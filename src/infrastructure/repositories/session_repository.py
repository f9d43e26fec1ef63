"""Session Repository implementation using SQLAlchemy.

Device-scoped sessions are written with PostgreSQL
``INSERT ... ON CONFLICT (user_id, device_id) DO UPDATE``, which makes two
concurrent sign-ins from the same device race-safe: the last writer wins and
only its refresh token remains valid.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from src.domain.entities.session import Session
from src.domain.interfaces.repositories import ISessionRepository

logger = get_logger(__name__)


class SessionRepository(ISessionRepository):
    """SQLAlchemy implementation of `ISessionRepository`."""

    def __init__(self, db_session: AsyncSession):
        self.db_session = db_session

    async def _commit(self, operation: str) -> None:
        try:
            await self.db_session.commit()
        except Exception as e:
            await self.db_session.rollback()
            logger.error("Session write failed", operation=operation, error_type=type(e).__name__)
            raise

    async def _write(self, session: Session) -> None:
        if session.device_id is None:
            self.db_session.add(session)
            return

        statement = pg_insert(Session).values(
            id=session.id,
            user_id=session.user_id,
            device_id=session.device_id,
            refresh_token=session.refresh_token,
            user_agent=session.user_agent,
            ip_address=session.ip_address,
            expires_at=session.expires_at,
            created_at=session.created_at,
            updated_at=session.updated_at,
        )
        statement = statement.on_conflict_do_update(
            index_elements=["user_id", "device_id"],
            set_={
                "refresh_token": statement.excluded.refresh_token,
                "user_agent": statement.excluded.user_agent,
                "ip_address": statement.excluded.ip_address,
                "expires_at": statement.excluded.expires_at,
                "updated_at": statement.excluded.updated_at,
            },
        )
        await self.db_session.execute(statement)

    async def upsert(self, session: Session) -> Session:
        await self._write(session)
        await self._commit("upsert")
        return session

    async def replace(self, old_session_id: str, session: Session) -> Session:
        await self.db_session.execute(delete(Session).where(Session.id == old_session_id))
        await self._write(session)
        await self._commit("replace")
        return session

    async def get_active_by_token(self, token_hash: str, now: datetime) -> Optional[Session]:
        result = await self.db_session.execute(
            select(Session).where(Session.refresh_token == token_hash, Session.expires_at > now)
        )
        return result.scalars().first()

    async def list_active(self, user_id: str, now: datetime) -> List[Session]:
        result = await self.db_session.execute(
            select(Session)
            .where(Session.user_id == user_id, Session.expires_at > now)
            .order_by(Session.updated_at.desc())
        )
        return list(result.scalars().all())

    async def delete_for_device(self, user_id: str, device_id: str) -> int:
        result = await self.db_session.execute(
            delete(Session).where(Session.user_id == user_id, Session.device_id == device_id)
        )
        await self._commit("delete_for_device")
        return result.rowcount or 0

    async def delete_all_for_user(self, user_id: str) -> int:
        result = await self.db_session.execute(delete(Session).where(Session.user_id == user_id))
        await self._commit("delete_all_for_user")
        return result.rowcount or 0

    async def delete_expired(self, now: datetime) -> int:
        result = await self.db_session.execute(delete(Session).where(Session.expires_at <= now))
        await self._commit("delete_expired")
        return result.rowcount or 0
