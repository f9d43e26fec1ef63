from datetime import datetime, timedelta
from typing import Callable, List, Optional

from structlog import get_logger

from src.core.config.settings import settings
from src.core.exceptions import ForbiddenError, InvalidRefreshTokenError, UserNotFoundError
from src.domain.entities.account import UserAccount
from src.domain.entities.session import Session
from src.domain.interfaces.repositories import ISessionRepository, IUserRepository
from src.domain.interfaces.services import IAccessTokenService
from src.domain.value_objects.token_pair import TokenPair
from src.utils.clock import utc_now
from src.utils.i18n import get_translated_message
from src.utils.tokens import hash_for_storage, random_token

logger = get_logger(__name__)


class SessionService:
    """Issues, rotates and revokes refresh-token sessions.

    A session is created for every sign-in, email verification, OAuth login
    and refresh. The client receives the plaintext refresh token once; the
    store keeps only its digest. Sessions are scoped per device: a new session
    for a device the account already has a session on overwrites that session,
    so the earlier refresh token stops working.

    Refresh tokens are single-use. Refreshing either overwrites the session
    row of the same device or, when the device changes or is unknown, deletes
    the old row and creates a new one in the same unit of work.

    Attributes:
        session_repository (ISessionRepository): Session persistence.
        user_repository (IUserRepository): Used to load the account behind a refresh token.
        token_service (IAccessTokenService): Access-token signer.
    """

    def __init__(
        self,
        session_repository: ISessionRepository,
        user_repository: IUserRepository,
        token_service: IAccessTokenService,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.session_repository = session_repository
        self.user_repository = user_repository
        self.token_service = token_service
        self.clock = clock
        self.refresh_lifetime = timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)

    def _new_session(
        self,
        user_id: str,
        device_id: Optional[str],
        user_agent: Optional[str],
        ip_address: Optional[str],
    ) -> tuple[Session, str]:
        plaintext = random_token(settings.REFRESH_TOKEN_BYTES)
        now = self.clock()
        session = Session(
            user_id=user_id,
            device_id=device_id,
            refresh_token=hash_for_storage(plaintext),
            user_agent=user_agent,
            ip_address=ip_address,
            expires_at=now + self.refresh_lifetime,
            created_at=now,
            updated_at=now,
        )
        return session, plaintext

    async def create_session(
        self,
        user_id: str,
        device_id: Optional[str] = None,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> str:
        """Creates a session and returns its plaintext refresh token.

        Args:
            user_id (str): The owning account.
            device_id (Optional[str]): Device the session is bound to, if any.
            user_agent (Optional[str]): User-Agent of the client.
            ip_address (Optional[str]): IP address of the client.

        Returns:
            str: The refresh token. It is not retrievable afterwards.
        """
        session, plaintext = self._new_session(user_id, device_id, user_agent, ip_address)
        await self.session_repository.upsert(session)
        await logger.ainfo("Session created", user_id=user_id, device_id=device_id)
        return plaintext

    async def generate_token_pair(
        self,
        account: UserAccount,
        device_id: Optional[str] = None,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> TokenPair:
        """Signs an access token and creates a session for the refresh token."""
        access_token = self.token_service.sign(account.id, account.email, account.service_id)
        refresh_token = await self.create_session(account.id, device_id, user_agent, ip_address)
        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=self.token_service.expires_in,
        )

    async def refresh_access_token(
        self,
        refresh_token: str,
        device_id: Optional[str] = None,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
        service_id: Optional[str] = None,
        language: str = "en",
    ) -> TokenPair:
        """Exchanges a refresh token for a new token pair.

        Args:
            refresh_token (str): The plaintext refresh token presented by the client.
            device_id (Optional[str]): Device of the caller. Defaults to the session's device.
            user_agent (Optional[str]): User-Agent of the client.
            ip_address (Optional[str]): IP address of the client.
            service_id (Optional[str]): When given, the session's account must belong to it.
            language (str): Language for error messages.

        Returns:
            TokenPair: New access and refresh tokens.

        Raises:
            InvalidRefreshTokenError: If the token is unknown, expired, already
                used, or belongs to another service.
            UserNotFoundError: If the session outlived its account.
            ForbiddenError: If the account has been deactivated.
        """
        now = self.clock()
        current = await self.session_repository.get_active_by_token(hash_for_storage(refresh_token), now)
        if current is None:
            logger.warning("Refresh attempted with unknown or expired token", device_id=device_id)
            raise InvalidRefreshTokenError(get_translated_message("invalid_or_expired_refresh_token", language))

        account = await self.user_repository.get_by_id(current.user_id)
        if account is None:
            logger.error("Session references a missing account", session_id=current.id, user_id=current.user_id)
            raise UserNotFoundError(get_translated_message("user_not_found", language))

        if service_id is not None and account.service_id != service_id:
            logger.warning(
                "Refresh token presented to another service",
                user_id=account.id,
                service_id=service_id,
            )
            raise InvalidRefreshTokenError(get_translated_message("invalid_or_expired_refresh_token", language))

        if not account.user.is_active:
            logger.warning("Refresh attempted for inactive account", user_id=account.id)
            raise ForbiddenError(get_translated_message("user_account_inactive", language))

        target_device = device_id or current.device_id
        session, plaintext = self._new_session(account.id, target_device, user_agent, ip_address)
        if current.device_id is not None and current.device_id == target_device:
            await self.session_repository.upsert(session)
        else:
            await self.session_repository.replace(current.id, session)

        await logger.ainfo("Refresh token rotated", user_id=account.id, device_id=target_device)
        return TokenPair(
            access_token=self.token_service.sign(account.id, account.email, account.service_id),
            refresh_token=plaintext,
            expires_in=self.token_service.expires_in,
        )

    async def revoke_session(self, user_id: str, device_id: str) -> None:
        """Deletes the session of one device. Absent sessions are ignored."""
        removed = await self.session_repository.delete_for_device(user_id, device_id)
        await logger.ainfo("Session revoked", user_id=user_id, device_id=device_id, removed=removed)

    async def revoke_all_sessions(self, user_id: str) -> int:
        """Deletes every session of the account and returns how many were removed."""
        removed = await self.session_repository.delete_all_for_user(user_id)
        await logger.ainfo("All sessions revoked", user_id=user_id, removed=removed)
        return removed

    async def list_active_sessions(self, user_id: str) -> List[Session]:
        return await self.session_repository.list_active(user_id, self.clock())

    async def cleanup_expired_sessions(self) -> int:
        """Purges session rows whose refresh token has expired."""
        removed = await self.session_repository.delete_expired(self.clock())
        logger.info("Expired sessions purged", removed=removed)
        return removed
