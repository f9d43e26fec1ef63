from __future__ import annotations

"""Response Pydantic model for user data."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from src.domain.entities.account import UserAccount


class UserOut(BaseModel):
    """Serialised representation of a :class:`~src.domain.entities.account.UserAccount`.

    Password hashes, lockout state and every token are left out.
    """

    id: str
    name: str
    email: str
    phone: Optional[str] = None
    avatar: Optional[str] = None
    provider: Optional[str] = None
    service_id: str
    is_verified: bool
    last_login_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_account(cls, account: UserAccount) -> "UserOut":
        user = account.user
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            phone=user.phone,
            avatar=user.avatar,
            provider=account.provider,
            service_id=user.service_id,
            is_verified=account.is_verified,
            last_login_at=user.last_login_at,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
