"""Security utilities for password hashing and verification.

Passwords are hashed with bcrypt through passlib, using the cost factor from
``BCRYPT_ROUNDS``.
"""

from typing import Optional

from passlib.context import CryptContext

from src.core.config.settings import settings

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def hash_password(password: str) -> str:
    """Hash a password using bcrypt.

    An empty string is hashed like any other value.

    Args:
        password: Plain text password to hash

    Returns:
        str: Bcrypt-hashed password
    """
    return pwd_context.hash(password)


def verify_password(password: str, hashed_password: Optional[str]) -> bool:
    """Verify a password against its hash.

    Returns ``False`` without hashing anything when no hash is stored, which
    is the case for accounts created through an OAuth provider.

    Args:
        password: Plain text password to verify
        hashed_password: Bcrypt hash to verify against, or None

    Returns:
        bool: True if password matches hash
    """
    if hashed_password is None:
        return False
    return pwd_context.verify(password, hashed_password)
