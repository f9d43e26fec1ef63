from datetime import datetime, timedelta
from typing import Callable, Optional, Tuple, Type

from structlog import get_logger

from src.core.config.settings import settings
from src.core.exceptions import (
    AccountLockedError,
    ConflictError,
    EmailAlreadyInUseError,
    EmailNotVerifiedError,
    ForbiddenError,
    InvalidCredentialsError,
    InvalidResetTokenError,
    InvalidVerificationTokenError,
    LinkedAccountError,
    UserAlreadyExistsError,
    UserNotFoundError,
    ValidationError,
)
from src.domain.entities.account import UserAccount
from src.domain.entities.user import EmailInfo, PasswordInfo, User
from src.domain.interfaces.repositories import IUserRepository
from src.domain.interfaces.services import IEmailComposer, IEmailSender
from src.domain.services.auth.lockout import LockoutPolicy, is_locked
from src.domain.services.auth.password_policy import PasswordPolicyValidator
from src.domain.services.auth.session import SessionService
from src.domain.value_objects.profile_update import ProfileUpdate
from src.utils.clock import utc_now
from src.utils.i18n import get_translated_message
from src.utils.security import hash_password, verify_password
from src.utils.tokens import hash_for_storage, random_token

logger = get_logger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class CredentialService:
    """
    Service for the credential and verification lifecycle of an account.

    Handles registration, email verification, password sign-in with lockout,
    password reset, profile and email changes, and account deletion. Every
    lookup is scoped to a service (tenant): the same email address may own
    independent accounts in different services.

    Opaque tokens (verification, reset) are generated here, emailed in
    plaintext, and stored only as digests.

    Attributes:
        user_repository (IUserRepository): Account persistence.
        session_service (SessionService): Used to revoke sessions after password changes.
        email_sender (IEmailSender): Outbound email delivery.
        email_composer (IEmailComposer): Builds verification and reset emails.
        lockout_policy (LockoutPolicy): Failed sign-in policy.
        password_policy (PasswordPolicyValidator): Password strength rules.
    """

    def __init__(
        self,
        user_repository: IUserRepository,
        session_service: SessionService,
        email_sender: IEmailSender,
        email_composer: IEmailComposer,
        lockout_policy: Optional[LockoutPolicy] = None,
        password_policy: Optional[PasswordPolicyValidator] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.user_repository = user_repository
        self.session_service = session_service
        self.email_sender = email_sender
        self.email_composer = email_composer
        self.lockout_policy = lockout_policy or LockoutPolicy.from_settings()
        self.password_policy = password_policy or PasswordPolicyValidator()
        self.clock = clock

    def _verification_expiry(self) -> datetime:
        return self.clock() + timedelta(minutes=settings.EMAIL_TOKEN_EXPIRE_MINUTES)

    async def get_user_by_id(self, user_id: str, language: str = "en") -> UserAccount:
        """Loads an account or raises `UserNotFoundError`."""
        account = await self.user_repository.get_by_id(user_id)
        if account is None:
            raise UserNotFoundError(get_translated_message("user_not_found", language))
        return account

    async def _ensure_email_available(
        self,
        email: str,
        service_id: str,
        error_cls: Type[ConflictError],
        language: str,
        exclude_user_id: Optional[str] = None,
    ) -> None:
        """Makes ``email`` available within ``service_id``.

        An unverified account holding the address is treated as abandoned and
        deleted. A verified one raises ``error_cls``.
        """
        existing = await self.user_repository.get_by_email(email, service_id)
        if existing is None or existing.id == exclude_user_id:
            return
        if existing.is_verified:
            raise error_cls(get_translated_message("email_already_registered", language))
        await self.user_repository.delete(existing.id)
        logger.info("Deleted abandoned unverified account", user_id=existing.id, service_id=service_id)

    async def register(
        self,
        name: str,
        email: str,
        password: str,
        service_id: str,
        redirect_url: str,
        phone: Optional[str] = None,
        language: str = "en",
    ) -> str:
        """
        Register a new, unverified account and email its verification link.

        Args:
            name (str): Display name.
            email (str): Email address; compared case-insensitively.
            password (str): Plaintext password, checked against the password policy.
            service_id (str): Tenant the account is created in.
            redirect_url (str): Base URL of the verification page.
            phone (Optional[str]): Optional phone number.
            language (str): Language for messages and the email.

        Returns:
            str: Confirmation message for the client.

        Raises:
            UserAlreadyExistsError: If a verified account already owns the email.
            PasswordPolicyError: If the password is too weak.
            EmailServiceError: If the verification email cannot be sent.
        """
        email = normalize_email(email)
        self.password_policy.validate(password, language)
        await self._ensure_email_available(email, service_id, UserAlreadyExistsError, language)

        token = random_token(settings.VERIFICATION_TOKEN_BYTES)
        user = User(name=name, email=email, phone=phone, service_id=service_id)
        account = UserAccount(
            user=user,
            email_info=EmailInfo(
                user_id=user.id,
                verified=False,
                verification_token=hash_for_storage(token),
                verification_token_expires_at=self._verification_expiry(),
            ),
            password_info=PasswordInfo(user_id=user.id, password_hash=hash_password(password)),
            lockout_info=LockoutPolicy.cleared(user.id),
        )
        await self.user_repository.create(account)
        await logger.ainfo("User registered", user_id=user.id, service_id=service_id, email=email)

        message = self.email_composer.verification_email(name, token, redirect_url, False, language)
        await self.email_sender.send(email, message)
        return get_translated_message("user_registered_check_email", language)

    async def verify_email(self, token: str, language: str = "en") -> UserAccount:
        """
        Confirm an email address with a verification token.

        When an email change is pending, the pending address replaces the
        primary one and the account is marked verified in the same unit of
        work.

        Raises:
            InvalidVerificationTokenError: If the token is unknown or expired.
            EmailAlreadyInUseError: If another account took the pending address meanwhile.
        """
        account = await self.user_repository.get_by_verification_token(hash_for_storage(token), self.clock())
        if account is None:
            logger.warning("Email verification with unknown or expired token")
            raise InvalidVerificationTokenError(
                get_translated_message("invalid_or_expired_verification_token", language)
            )

        pending_email = account.email_info.pending_email
        if pending_email:
            other = await self.user_repository.get_by_email(pending_email, account.service_id)
            if other is not None and other.id != account.id:
                logger.warning("Pending email taken by another account", user_id=account.id)
                raise EmailAlreadyInUseError(get_translated_message("email_already_in_use", language))

        confirmed = await self.user_repository.confirm_email(account.id, pending_email)
        await logger.ainfo(
            "Email verified",
            user_id=account.id,
            service_id=account.service_id,
            email_changed=bool(pending_email),
        )
        return confirmed

    async def authenticate(self, email: str, password: str, service_id: str, language: str = "en") -> UserAccount:
        """
        Authenticate an account by email and password.

        Checks run in a fixed order: unknown account, OAuth-only account,
        unverified email, inactive account, active lock, then the password
        itself. A wrong password counts towards the lockout threshold.

        Returns:
            UserAccount: The authenticated account with ``last_login_at`` updated.

        Raises:
            InvalidCredentialsError: Unknown account or wrong password (same message).
            LinkedAccountError: The account has no password and was created via OAuth.
            EmailNotVerifiedError: The email has not been verified.
            ForbiddenError: The account is inactive.
            AccountLockedError: The account is currently locked.
        """
        email = normalize_email(email)
        account = await self.user_repository.get_by_email(email, service_id)
        if account is None:
            logger.warning("Sign-in for unknown account", email=email, service_id=service_id)
            raise InvalidCredentialsError(get_translated_message("invalid_email_or_password", language))

        if account.provider and not account.has_password:
            raise LinkedAccountError(
                get_translated_message("account_linked_to_provider", language).format(provider=account.provider)
            )

        if not account.is_verified:
            raise EmailNotVerifiedError(get_translated_message("email_not_verified", language))

        if not account.user.is_active:
            raise ForbiddenError(get_translated_message("user_account_inactive", language))

        now = self.clock()
        if is_locked(account.locked_until, now):
            logger.warning("Sign-in for locked account", user_id=account.id)
            raise AccountLockedError(get_translated_message("account_locked", language))

        if not verify_password(password, account.password_info.password_hash):
            lockout = self.lockout_policy.register_failure(account.id, account.lockout_info, now)
            account.lockout_info = await self.user_repository.upsert_lockout(lockout)
            logger.warning(
                "Invalid password",
                user_id=account.id,
                failed_attempts=lockout.failed_attempts,
                locked=lockout.is_locked,
            )
            raise InvalidCredentialsError(get_translated_message("invalid_email_or_password", language))

        if LockoutPolicy.needs_reset(account.lockout_info):
            account.lockout_info = await self.user_repository.upsert_lockout(LockoutPolicy.cleared(account.id))

        account.user.last_login_at = now
        account.user = await self.user_repository.update_user(account.user)
        await logger.ainfo("User authenticated", user_id=account.id, service_id=service_id)
        return account

    async def send_password_reset(
        self, email: str, service_id: str, redirect_url: str, language: str = "en"
    ) -> None:
        """Emails a password reset link.

        Does nothing when no account owns the address, so the endpoint cannot
        be used to discover which addresses are registered.
        """
        email = normalize_email(email)
        account = await self.user_repository.get_by_email(email, service_id)
        if account is None:
            logger.info("Password reset requested for unknown email", email=email, service_id=service_id)
            return

        token = random_token(settings.RESET_TOKEN_BYTES)
        expires_at = self.clock() + timedelta(minutes=settings.PASSWORD_RESET_TOKEN_EXPIRE_MINUTES)
        await self.user_repository.set_reset_token(account.id, hash_for_storage(token), expires_at)

        message = self.email_composer.password_reset_email(account.user.name, token, redirect_url, language)
        await self.email_sender.send(account.email, message)
        await logger.ainfo("Password reset email sent", user_id=account.id)

    async def reset_password(self, token: str, new_password: str, language: str = "en") -> str:
        """
        Set a new password using a reset token.

        A successful reset proves control of the mailbox, so it also marks the
        email verified and clears any lockout. All sessions are revoked.

        Raises:
            PasswordPolicyError: If the new password is too weak.
            InvalidResetTokenError: If the token is unknown or expired.
        """
        self.password_policy.validate(new_password, language)
        account = await self.user_repository.get_by_reset_token(hash_for_storage(token), self.clock())
        if account is None:
            logger.warning("Password reset with unknown or expired token")
            raise InvalidResetTokenError(get_translated_message("invalid_or_expired_reset_token", language))

        await self.user_repository.complete_password_reset(account.id, hash_password(new_password))
        await self.session_service.revoke_all_sessions(account.id)
        await logger.ainfo("Password reset completed", user_id=account.id)
        return get_translated_message("password_reset_successful", language)

    async def update_profile(
        self, account: UserAccount, updates: ProfileUpdate, language: str = "en"
    ) -> Tuple[UserAccount, str]:
        """
        Apply a sparse profile update.

        Name and phone change immediately. A new email is staged as pending and
        only becomes the primary address once confirmed through the emailed
        link. A new password is stored immediately and signs the account out
        everywhere.

        Returns:
            Tuple[UserAccount, str]: The refreshed account and a message.

        Raises:
            ValidationError: If the email changes without a redirect URL.
            EmailAlreadyInUseError: If a verified account owns the new email.
            PasswordPolicyError: If the new password is too weak.
        """
        message_key = "profile_updated"
        if updates.is_empty():
            return account, get_translated_message(message_key, language)

        new_email = normalize_email(updates.email) if updates.email else None
        if new_email == account.email:
            new_email = None
        if new_email and not updates.redirect_url:
            raise ValidationError(get_translated_message("redirect_url_required", language))
        if updates.password is not None:
            self.password_policy.validate(updates.password, language)

        if new_email:
            await self._request_email_change(account, new_email, updates.redirect_url, language)
            message_key = "verification_email_sent_to_new_address"

        if updates.name is not None or updates.phone is not None:
            if updates.name is not None:
                account.user.name = updates.name
            if updates.phone is not None:
                account.user.phone = updates.phone
            account.user = await self.user_repository.update_user(account.user)

        if updates.password is not None:
            await self.user_repository.set_password_hash(account.id, hash_password(updates.password))
            await self.session_service.revoke_all_sessions(account.id)
            message_key = "profile_updated_login_again"

        await logger.ainfo(
            "Profile updated",
            user_id=account.id,
            email_change=bool(new_email),
            password_change=updates.password is not None,
        )
        refreshed = await self.get_user_by_id(account.id, language)
        return refreshed, get_translated_message(message_key, language)

    async def _request_email_change(
        self, account: UserAccount, new_email: str, redirect_url: str, language: str
    ) -> None:
        await self._ensure_email_available(
            new_email, account.service_id, EmailAlreadyInUseError, language, exclude_user_id=account.id
        )

        info = account.email_info
        previous = (info.verification_token, info.verification_token_expires_at, info.pending_email)
        token = random_token(settings.VERIFICATION_TOKEN_BYTES)
        await self.user_repository.set_verification_state(
            account.id, hash_for_storage(token), self._verification_expiry(), new_email
        )

        try:
            message = self.email_composer.verification_email(account.user.name, token, redirect_url, True, language)
            await self.email_sender.send(new_email, message)
        except Exception:
            logger.warning("Email change confirmation not delivered, restoring previous state", user_id=account.id)
            await self.user_repository.set_verification_state(account.id, *previous)
            raise

    async def archive_and_delete_account(self, user_id: str, language: str = "en") -> str:
        """
        Archive an account into ``inactive_users`` and delete it with its sessions.

        Raises:
            UserNotFoundError: If the account does not exist.
        """
        account = await self.get_user_by_id(user_id, language)
        await self.user_repository.archive_and_delete(account)
        await logger.ainfo("Account archived and deleted", user_id=user_id, service_id=account.service_id)
        return get_translated_message("account_deleted", language)
