"""The account aggregate: a user row together with its credential state."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from src.domain.entities.user import EmailInfo, LockoutInfo, PasswordInfo, User


@dataclass
class UserAccount:
    """A `User` and its one-to-one satellite records, loaded together.

    Repositories always return the full aggregate so services can make
    decisions (linked account, verification, lockout) from a single read.
    ``lockout_info`` is ``None`` for accounts that have never had a lockout
    record, such as those created through OAuth.
    """

    user: User
    email_info: EmailInfo
    password_info: PasswordInfo
    lockout_info: Optional[LockoutInfo] = None

    @property
    def id(self) -> str:
        return self.user.id

    @property
    def email(self) -> str:
        return self.user.email

    @property
    def service_id(self) -> str:
        return self.user.service_id

    @property
    def is_verified(self) -> bool:
        return self.email_info.verified

    @property
    def provider(self) -> Optional[str]:
        return self.email_info.provider

    @property
    def locked_until(self) -> Optional[datetime]:
        return self.lockout_info.locked_until if self.lockout_info else None

    @property
    def has_password(self) -> bool:
        return self.password_info.password_hash is not None
