import math
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from structlog import get_logger

from src.core.exceptions import AuthenticationError, ForbiddenError, UserAlreadyExistsError, ValidationError
from src.domain.entities.account import UserAccount
from src.domain.entities.user import EmailInfo, PasswordInfo, User
from src.domain.interfaces.repositories import IUserRepository
from src.domain.interfaces.services import IOAuthProfileClient
from src.domain.value_objects.oauth_profile import OAuthUserInfo, Provider, normalize_profile
from src.utils.clock import utc_now
from src.utils.i18n import get_translated_message

logger = get_logger(__name__)


class OAuthService:
    """
    Service for signing in with an external OAuth provider (Google, GitHub).

    The provider token is exchanged for a profile by an `IOAuthProfileClient`,
    the profile is normalized to an `OAuthUserInfo`, and the account for that
    email within the service is returned, being created on first use.

    Accounts created here are verified, carry the provider name and have no
    password. Existing accounts are returned unchanged: the name and avatar are
    not refreshed from the provider on later sign-ins.

    Attributes:
        user_repository (IUserRepository): Account persistence.
        profile_client (IOAuthProfileClient): Provider API client.
    """

    def __init__(
        self,
        user_repository: IUserRepository,
        profile_client: IOAuthProfileClient,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.user_repository = user_repository
        self.profile_client = profile_client
        self.clock = clock

    async def authenticate_with_oauth(
        self, provider: Provider, token: Dict[str, Any], service_id: str, language: str = "en"
    ) -> UserAccount:
        """
        Authenticate via an OAuth access token and resolve the account.

        Args:
            provider (Provider): OAuth provider name.
            token (Dict[str, Any]): OAuth token as returned by the provider.
            service_id (str): Tenant to resolve the account in.
            language (str): Language for error messages.

        Returns:
            UserAccount: Existing or newly created account.

        Raises:
            ValidationError: If the token carries no access token or a
                non-numeric ``expires_at``.
            AuthenticationError: If the token has expired.
            ForbiddenError: If the matching account is inactive.
            OAuthProfileError: If the profile lacks an email or display name.
            OAuthEmailNotFoundError: If GitHub exposes no email address.
        """
        if not token.get("access_token"):
            raise ValidationError(get_translated_message("oauth_access_token_required", language))

        expires_at = self._expiry_timestamp(token.get("expires_at"), language)
        if expires_at is not None and expires_at < datetime.now(timezone.utc).timestamp():
            await logger.awarning("Expired OAuth token", provider=provider.value)
            raise AuthenticationError(get_translated_message("oauth_token_expired", language))

        profile = await self.profile_client.fetch_profile(provider, token)
        info = normalize_profile(profile, language)
        return await self.resolve_or_create(info, service_id, language)

    @staticmethod
    def _expiry_timestamp(value: Any, language: str) -> Optional[float]:
        if value is None:
            return None
        # bool is an int subclass but never a timestamp
        if isinstance(value, bool):
            raise ValidationError(get_translated_message("oauth_invalid_expires_at", language))
        try:
            timestamp = float(value)
        except (TypeError, ValueError):
            raise ValidationError(get_translated_message("oauth_invalid_expires_at", language)) from None
        if not math.isfinite(timestamp):
            raise ValidationError(get_translated_message("oauth_invalid_expires_at", language))
        return timestamp

    async def resolve_or_create(self, info: OAuthUserInfo, service_id: str, language: str = "en") -> UserAccount:
        """Return the account owning ``info.email`` in ``service_id``, creating it if absent.

        Raises:
            ForbiddenError: If the existing account has been deactivated.
        """
        existing = await self.user_repository.get_by_email(info.email, service_id)
        if existing is not None:
            if not existing.user.is_active:
                await logger.awarning("OAuth sign-in for inactive account", user_id=existing.id)
                raise ForbiddenError(get_translated_message("user_account_inactive", language))
            await logger.ainfo("OAuth sign-in for existing account", user_id=existing.id, provider=info.provider.value)
            return existing

        user = User(
            name=info.display_name,
            email=info.email,
            avatar=info.avatar_url,
            service_id=service_id,
            last_login_at=self.clock(),
        )
        account = UserAccount(
            user=user,
            email_info=EmailInfo(user_id=user.id, verified=True, provider=info.provider.value),
            password_info=PasswordInfo(user_id=user.id, password_hash=None),
        )
        try:
            created = await self.user_repository.create(account)
        except UserAlreadyExistsError:
            # Lost a race with a concurrent first sign-in for the same email.
            concurrent = await self.user_repository.get_by_email(info.email, service_id)
            if concurrent is None:
                raise
            return concurrent

        await logger.ainfo(
            "Created account from OAuth profile",
            user_id=created.id,
            provider=info.provider.value,
            service_id=service_id,
            email=info.email,
        )
        return created
