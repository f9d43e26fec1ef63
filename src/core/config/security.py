"""Credential, lockout and token-lifetime settings.
"""

from pydantic import Field
from pydantic_settings import BaseSettings


class SecuritySettings(BaseSettings):
    """Tunables for the credential lifecycle.

    Attributes:
        BCRYPT_ROUNDS: bcrypt cost factor used for password hashes.
        MAX_LOGIN_ATTEMPTS: Consecutive failed sign-ins that lock an account.
        LOGIN_LOCK_MINUTES: How long a freshly locked account stays locked.
        EMAIL_TOKEN_EXPIRE_MINUTES: Lifetime of an email verification token.
        PASSWORD_RESET_TOKEN_EXPIRE_MINUTES: Lifetime of a password reset token.
        VERIFICATION_TOKEN_BYTES / RESET_TOKEN_BYTES / REFRESH_TOKEN_BYTES:
            Entropy of the opaque tokens handed to clients.
        DISPOSABLE_EMAIL_CHECK_ENABLED: Whether sign-up consults the external
            disposable-address API.
        RATE_LIMIT_ENABLED: Toggles slowapi limits on the sensitive routes.
    """

    BCRYPT_ROUNDS: int = Field(default=12, ge=4, le=31)
    MAX_LOGIN_ATTEMPTS: int = Field(default=5, ge=1)
    LOGIN_LOCK_MINUTES: int = Field(default=15, ge=1)

    EMAIL_TOKEN_EXPIRE_MINUTES: int = Field(default=1440, ge=1)
    PASSWORD_RESET_TOKEN_EXPIRE_MINUTES: int = Field(default=30, ge=1)
    VERIFICATION_TOKEN_BYTES: int = Field(default=32, ge=16)
    RESET_TOKEN_BYTES: int = Field(default=32, ge=16)
    REFRESH_TOKEN_BYTES: int = Field(default=40, ge=16)

    DISPOSABLE_EMAIL_CHECK_ENABLED: bool = True
    DISPOSABLE_EMAIL_API_URL: str = "https://disposable.debounce.io"
    DISPOSABLE_EMAIL_TIMEOUT_SECONDS: float = Field(default=5.0, gt=0)

    PASSWORD_MIN_LENGTH: int = Field(default=8, ge=1)
    PASSWORD_REQUIRE_UPPERCASE: bool = True
    PASSWORD_REQUIRE_LOWERCASE: bool = True
    PASSWORD_REQUIRE_DIGIT: bool = True
    PASSWORD_REQUIRE_SPECIAL_CHAR: bool = True

    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_STORAGE_URI: str = "memory://"
