"""User Repository implementation using SQLAlchemy.

Implements `IUserRepository` on top of an `AsyncSession`. Reads load the
whole `UserAccount` aggregate (the user row joined with its email, password
and lockout records) in a single query. Each mutating method is one unit of
work: it commits once, and rolls back and re-raises on failure.

Upserts of the one-to-one satellite records use PostgreSQL
``INSERT ... ON CONFLICT (user_id) DO UPDATE``.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from src.core.exceptions import EmailAlreadyInUseError, UserAlreadyExistsError
from src.domain.entities.account import UserAccount
from src.domain.entities.session import Session
from src.domain.entities.user import EmailInfo, InactiveUser, LockoutInfo, PasswordInfo, User
from src.domain.interfaces.repositories import IUserRepository
from src.utils.clock import utc_now
from src.utils.i18n import get_translated_message

logger = get_logger(__name__)


class UserRepository(IUserRepository):
    """SQLAlchemy implementation of `IUserRepository`.

    Attributes:
        db_session (AsyncSession): Request-scoped session. The repository owns
            transaction boundaries: callers never commit.
    """

    def __init__(self, db_session: AsyncSession):
        self.db_session = db_session

    def _account_query(self):
        return (
            select(User, EmailInfo, PasswordInfo, LockoutInfo)
            .join(EmailInfo, EmailInfo.user_id == User.id)
            .outerjoin(PasswordInfo, PasswordInfo.user_id == User.id)
            .outerjoin(LockoutInfo, LockoutInfo.user_id == User.id)
            .execution_options(populate_existing=True)
        )

    async def _fetch_account(self, statement) -> Optional[UserAccount]:
        result = await self.db_session.execute(statement)
        row = result.first()
        if row is None:
            return None
        user, email_info, password_info, lockout_info = row
        return UserAccount(
            user=user,
            email_info=email_info,
            password_info=password_info or PasswordInfo(user_id=user.id, password_hash=None),
            lockout_info=lockout_info,
        )

    async def _commit(self, operation: str, **context: Any) -> None:
        try:
            await self.db_session.commit()
        except Exception as e:
            await self.db_session.rollback()
            logger.error(
                "Database write failed",
                operation=operation,
                error_type=type(e).__name__,
                **context,
            )
            raise

    async def get_by_id(self, user_id: str) -> Optional[UserAccount]:
        account = await self._fetch_account(self._account_query().where(User.id == user_id))
        logger.debug("User lookup by ID completed", user_id=user_id, found=account is not None)
        return account

    async def get_by_email(self, email: str, service_id: str) -> Optional[UserAccount]:
        return await self._fetch_account(
            self._account_query().where(User.email == email, User.service_id == service_id)
        )

    async def get_by_verification_token(self, token_hash: str, now: datetime) -> Optional[UserAccount]:
        return await self._fetch_account(
            self._account_query().where(
                EmailInfo.verification_token == token_hash,
                EmailInfo.verification_token_expires_at > now,
            )
        )

    async def get_by_reset_token(self, token_hash: str, now: datetime) -> Optional[UserAccount]:
        return await self._fetch_account(
            self._account_query().where(
                PasswordInfo.reset_token == token_hash,
                PasswordInfo.reset_token_expires_at > now,
            )
        )

    async def create(self, account: UserAccount) -> UserAccount:
        """Inserts the user row, then its satellite records, and commits once.

        Raises:
            UserAlreadyExistsError: If ``(email, service_id)`` is taken.
        """
        try:
            self.db_session.add(account.user)
            await self.db_session.flush()
            self.db_session.add(account.email_info)
            self.db_session.add(account.password_info)
            if account.lockout_info is not None:
                self.db_session.add(account.lockout_info)
            await self.db_session.commit()
        except IntegrityError:
            await self.db_session.rollback()
            logger.warning("Duplicate account insert", service_id=account.service_id, email=account.email)
            raise UserAlreadyExistsError(get_translated_message("email_already_registered"))
        except Exception as e:
            await self.db_session.rollback()
            logger.error("Error creating account", error_type=type(e).__name__)
            raise
        return account

    async def update_user(self, user: User) -> User:
        user.updated_at = utc_now()
        merged = await self.db_session.merge(user)
        await self._commit("update_user", user_id=user.id)
        return merged

    async def delete(self, user_id: str) -> None:
        await self.db_session.execute(delete(User).where(User.id == user_id))
        await self._commit("delete_user", user_id=user_id)

    def _upsert_password_info(self, user_id: str, values: Dict[str, Any]):
        statement = pg_insert(PasswordInfo).values(user_id=user_id, **values)
        return statement.on_conflict_do_update(index_elements=["user_id"], set_=values)

    async def set_password_hash(self, user_id: str, password_hash: str) -> None:
        await self.db_session.execute(self._upsert_password_info(user_id, {"password_hash": password_hash}))
        await self._commit("set_password_hash", user_id=user_id)

    async def set_reset_token(self, user_id: str, token_hash: str, expires_at: datetime) -> None:
        await self.db_session.execute(
            self._upsert_password_info(
                user_id, {"reset_token": token_hash, "reset_token_expires_at": expires_at}
            )
        )
        await self._commit("set_reset_token", user_id=user_id)

    async def set_verification_state(
        self,
        user_id: str,
        token_hash: Optional[str],
        expires_at: Optional[datetime],
        pending_email: Optional[str],
    ) -> None:
        await self.db_session.execute(
            update(EmailInfo)
            .where(EmailInfo.user_id == user_id)
            .values(
                verification_token=token_hash,
                verification_token_expires_at=expires_at,
                pending_email=pending_email,
            )
        )
        await self._commit("set_verification_state", user_id=user_id)

    def _upsert_lockout_statement(self, lockout: LockoutInfo):
        values = {
            "is_locked": lockout.is_locked,
            "locked_until": lockout.locked_until,
            "failed_attempts": lockout.failed_attempts,
        }
        statement = pg_insert(LockoutInfo).values(user_id=lockout.user_id, **values)
        return statement.on_conflict_do_update(index_elements=["user_id"], set_=values)

    async def upsert_lockout(self, lockout: LockoutInfo) -> LockoutInfo:
        await self.db_session.execute(self._upsert_lockout_statement(lockout))
        await self._commit("upsert_lockout", user_id=lockout.user_id)
        return lockout

    async def confirm_email(self, user_id: str, new_email: Optional[str]) -> UserAccount:
        try:
            if new_email:
                await self.db_session.execute(
                    update(User).where(User.id == user_id).values(email=new_email, updated_at=utc_now())
                )
            await self.db_session.execute(
                update(EmailInfo)
                .where(EmailInfo.user_id == user_id)
                .values(
                    verified=True,
                    verification_token=None,
                    verification_token_expires_at=None,
                    pending_email=None,
                )
            )
            await self.db_session.commit()
        except IntegrityError:
            await self.db_session.rollback()
            logger.warning("Pending email claimed concurrently", user_id=user_id)
            raise EmailAlreadyInUseError(get_translated_message("email_already_in_use"))
        except Exception as e:
            await self.db_session.rollback()
            logger.error("Error confirming email", user_id=user_id, error_type=type(e).__name__)
            raise

        account = await self.get_by_id(user_id)
        if account is None:
            raise LookupError(f"account {user_id} vanished after email confirmation")
        return account

    async def complete_password_reset(self, user_id: str, password_hash: str) -> None:
        await self.db_session.execute(
            self._upsert_password_info(
                user_id,
                {"password_hash": password_hash, "reset_token": None, "reset_token_expires_at": None},
            )
        )
        await self.db_session.execute(
            self._upsert_lockout_statement(
                LockoutInfo(user_id=user_id, is_locked=False, locked_until=None, failed_attempts=0)
            )
        )
        await self.db_session.execute(
            update(EmailInfo).where(EmailInfo.user_id == user_id).values(verified=True)
        )
        await self._commit("complete_password_reset", user_id=user_id)

    async def archive_and_delete(self, account: UserAccount) -> None:
        user = account.user
        self.db_session.add(
            InactiveUser(
                user_id=user.id,
                name=user.name,
                email=user.email,
                phone=user.phone,
                service_id=user.service_id,
                account_created_at=user.created_at,
            )
        )
        await self.db_session.execute(delete(Session).where(Session.user_id == user.id))
        await self.db_session.execute(delete(User).where(User.id == user.id))
        await self._commit("archive_and_delete", user_id=user.id)
