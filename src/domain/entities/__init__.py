"""Export identity domain entities for use across the application."""

from .account import UserAccount
from .session import Session
from .user import EmailInfo, InactiveUser, LockoutInfo, PasswordInfo, User

__all__ = [
    "User",
    "EmailInfo",
    "PasswordInfo",
    "LockoutInfo",
    "InactiveUser",
    "Session",
    "UserAccount",
]
