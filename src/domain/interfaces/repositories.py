"""Repository interfaces for abstracting data persistence in the domain layer.

These abstract base classes act as "ports": the domain services depend on
them, while the SQLAlchemy adapters in `src.infrastructure.repositories`
implement them. Test doubles implement the same contracts in memory.

Operations that must never be observed half-applied (email confirmation,
password reset completion, archival, refresh-token replacement) are exposed
as single methods so each implementation can run them as one unit of work.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from src.domain.entities.account import UserAccount
from src.domain.entities.session import Session
from src.domain.entities.user import LockoutInfo, User


class IUserRepository(ABC):
    """An interface defining the contract for account persistence operations.

    Every read returns the full `UserAccount` aggregate, or ``None``.
    """

    @abstractmethod
    async def get_by_id(self, user_id: str) -> Optional[UserAccount]:
        """Retrieves an account by its unique identifier."""
        raise NotImplementedError

    @abstractmethod
    async def get_by_email(self, email: str, service_id: str) -> Optional[UserAccount]:
        """Retrieves the account owning ``email`` within ``service_id``.

        Args:
            email: Lower-cased email address.
            service_id: The tenant to search in.
        """
        raise NotImplementedError

    @abstractmethod
    async def get_by_verification_token(self, token_hash: str, now: datetime) -> Optional[UserAccount]:
        """Retrieves the account whose verification token digest matches and expires after ``now``."""
        raise NotImplementedError

    @abstractmethod
    async def get_by_reset_token(self, token_hash: str, now: datetime) -> Optional[UserAccount]:
        """Retrieves the account whose reset token digest matches and expires after ``now``."""
        raise NotImplementedError

    @abstractmethod
    async def create(self, account: UserAccount) -> UserAccount:
        """Persists a new account and its satellite records together.

        Raises:
            UserAlreadyExistsError: If ``(email, service_id)`` is already taken.
        """
        raise NotImplementedError

    @abstractmethod
    async def update_user(self, user: User) -> User:
        """Persists changes to the identity row (name, phone, last login...)."""
        raise NotImplementedError

    @abstractmethod
    async def delete(self, user_id: str) -> None:
        """Hard-deletes an account. Satellite records and sessions cascade."""
        raise NotImplementedError

    @abstractmethod
    async def set_password_hash(self, user_id: str, password_hash: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def set_reset_token(self, user_id: str, token_hash: str, expires_at: datetime) -> None:
        """Creates or replaces the pending password reset token."""
        raise NotImplementedError

    @abstractmethod
    async def set_verification_state(
        self,
        user_id: str,
        token_hash: Optional[str],
        expires_at: Optional[datetime],
        pending_email: Optional[str],
    ) -> None:
        """Overwrites the verification token, its expiry and the pending email.

        Used both to stage an email change and to restore the previous values
        when the confirmation email cannot be delivered.
        """
        raise NotImplementedError

    @abstractmethod
    async def upsert_lockout(self, lockout: LockoutInfo) -> LockoutInfo:
        """Creates or replaces the lockout record keyed by ``lockout.user_id``."""
        raise NotImplementedError

    @abstractmethod
    async def confirm_email(self, user_id: str, new_email: Optional[str]) -> UserAccount:
        """Marks the email verified, promoting ``new_email`` if given.

        Clears the token, its expiry and the pending email. All changes commit
        together or not at all.

        Raises:
            EmailAlreadyInUseError: If ``new_email`` was taken concurrently.
        """
        raise NotImplementedError

    @abstractmethod
    async def complete_password_reset(self, user_id: str, password_hash: str) -> None:
        """Stores the new hash, clears the reset token, clears the lockout and
        marks the email verified, all in one unit of work."""
        raise NotImplementedError

    @abstractmethod
    async def archive_and_delete(self, account: UserAccount) -> None:
        """Copies the account into ``inactive_users``, deletes its sessions and
        deletes the account, all in one unit of work."""
        raise NotImplementedError


class ISessionRepository(ABC):
    """An interface defining the contract for refresh-token session persistence.

    Sessions are always stored with the digest of their refresh token.
    """

    @abstractmethod
    async def upsert(self, session: Session) -> Session:
        """Stores a session.

        When ``session.device_id`` is set and a row for ``(user_id, device_id)``
        exists, that row is overwritten: its previous refresh token stops
        working. Without a device id a new row is always inserted.
        """
        raise NotImplementedError

    @abstractmethod
    async def replace(self, old_session_id: str, session: Session) -> Session:
        """Deletes ``old_session_id`` and stores ``session`` in one unit of work."""
        raise NotImplementedError

    @abstractmethod
    async def get_active_by_token(self, token_hash: str, now: datetime) -> Optional[Session]:
        """Retrieves the session with this refresh token digest if it expires after ``now``."""
        raise NotImplementedError

    @abstractmethod
    async def list_active(self, user_id: str, now: datetime) -> List[Session]:
        raise NotImplementedError

    @abstractmethod
    async def delete_for_device(self, user_id: str, device_id: str) -> int:
        """Deletes the session of one device. Returns the number of rows removed."""
        raise NotImplementedError

    @abstractmethod
    async def delete_all_for_user(self, user_id: str) -> int:
        raise NotImplementedError

    @abstractmethod
    async def delete_expired(self, now: datetime) -> int:
        raise NotImplementedError
