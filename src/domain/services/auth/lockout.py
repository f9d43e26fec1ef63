"""Account lockout policy.

Pure decision logic: given the current lockout record and the current time,
compute the next record. Persistence is the caller's job.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from src.core.config.settings import settings
from src.domain.entities.user import LockoutInfo


def is_locked(locked_until: Optional[datetime], now: datetime) -> bool:
    """An account is locked strictly before ``locked_until``.

    At exactly ``locked_until`` the lock has lapsed. The stored ``is_locked``
    flag is not consulted.
    """
    return locked_until is not None and locked_until > now


@dataclass(frozen=True)
class LockoutPolicy:
    """Locks an account for ``lock_duration`` once ``max_attempts`` consecutive
    password checks have failed."""

    max_attempts: int
    lock_duration: timedelta

    @classmethod
    def from_settings(cls) -> "LockoutPolicy":
        return cls(
            max_attempts=settings.MAX_LOGIN_ATTEMPTS,
            lock_duration=timedelta(minutes=settings.LOGIN_LOCK_MINUTES),
        )

    def register_failure(self, user_id: str, current: Optional[LockoutInfo], now: datetime) -> LockoutInfo:
        """Returns the lockout record after one more failed password check.

        A missing record counts as zero failures. Below the threshold an
        existing ``locked_until`` is carried over untouched; only reaching the
        threshold sets a fresh lock.
        """
        failed_attempts = (current.failed_attempts if current else 0) + 1
        if failed_attempts >= self.max_attempts:
            return LockoutInfo(
                user_id=user_id,
                failed_attempts=failed_attempts,
                is_locked=True,
                locked_until=now + self.lock_duration,
            )
        return LockoutInfo(
            user_id=user_id,
            failed_attempts=failed_attempts,
            is_locked=current.is_locked if current else False,
            locked_until=current.locked_until if current else None,
        )

    @staticmethod
    def cleared(user_id: str) -> LockoutInfo:
        """The unlocked, zero-counter record."""
        return LockoutInfo(user_id=user_id, failed_attempts=0, is_locked=False, locked_until=None)

    @staticmethod
    def needs_reset(current: Optional[LockoutInfo]) -> bool:
        return current is not None and (current.failed_attempts > 0 or current.locked_until is not None)
