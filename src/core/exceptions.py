"""Centralized, structured exception hierarchy for Portcullis.

Every error raised by the domain services derives from `PortcullisError` and
carries a machine-readable `code` alongside a human-readable, already
translated `message`. The services only classify failures by kind; the
handlers in `src.core.handlers` map each family to an HTTP status code.
"""

from __future__ import annotations

from typing import Final

__all__: Final = [
    "PortcullisError",
    "AuthenticationError",
    "InvalidCredentialsError",
    "AccessTokenError",
    "AccessTokenExpiredError",
    "MalformedAccessTokenError",
    "AccessTokenAudienceError",
    "ConflictError",
    "UserAlreadyExistsError",
    "EmailAlreadyInUseError",
    "ForbiddenError",
    "EmailNotVerifiedError",
    "LinkedAccountError",
    "AccountLockedError",
    "InvalidOrExpiredTokenError",
    "InvalidVerificationTokenError",
    "InvalidResetTokenError",
    "InvalidRefreshTokenError",
    "NotFoundError",
    "UserNotFoundError",
    "OAuthEmailNotFoundError",
    "ValidationError",
    "OAuthProfileError",
    "DisposableEmailError",
    "MissingHeaderError",
    "UnknownServiceError",
    "PasswordPolicyError",
    "EmailServiceError",
]


class PortcullisError(Exception):
    """Base exception class for all custom errors in the Portcullis service.

    Attributes:
        message (str): A human-readable error message, suitable for clients.
        code (str): A unique, machine-readable error code.
    """

    message: str
    code: str = "generic_error"

    def __init__(self, message: str, code: str = "generic_error"):
        self.message = message
        self.code = code
        Exception.__init__(self, self.message)

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Authentication errors (401)
# ---------------------------------------------------------------------------


class AuthenticationError(PortcullisError):
    """Raised for general authentication failures. Maps to `401 Unauthorized`."""

    def __init__(self, message: str, code: str = "authentication_error"):
        super().__init__(message, code)


class InvalidCredentialsError(AuthenticationError):
    """Raised when an email/password pair does not identify an account.

    The message is uniform whether the account is absent or the password is
    wrong, so sign-in cannot be used to enumerate accounts.
    """

    def __init__(self, message: str, code: str = "invalid_credentials"):
        super().__init__(message, code)


class AccessTokenError(AuthenticationError):
    """Raised when a bearer access token cannot be accepted."""

    def __init__(self, message: str, code: str = "invalid_access_token"):
        super().__init__(message, code)


class AccessTokenExpiredError(AccessTokenError):
    def __init__(self, message: str, code: str = "access_token_expired"):
        super().__init__(message, code)


class MalformedAccessTokenError(AccessTokenError):
    def __init__(self, message: str, code: str = "access_token_malformed"):
        super().__init__(message, code)


class AccessTokenAudienceError(AccessTokenError):
    """Raised when a token issued for one service is presented to another."""

    def __init__(self, message: str, code: str = "access_token_wrong_audience"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Conflict errors (409)
# ---------------------------------------------------------------------------


class ConflictError(PortcullisError):
    """Raised when a write collides with existing verified state."""

    def __init__(self, message: str, code: str = "conflict"):
        super().__init__(message, code)


class UserAlreadyExistsError(ConflictError):
    """Raised when registering an email that a verified account already owns."""

    def __init__(self, message: str, code: str = "user_already_exists"):
        super().__init__(message, code)


class EmailAlreadyInUseError(ConflictError):
    """Raised when an email change targets an address another account owns."""

    def __init__(self, message: str, code: str = "email_already_in_use"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Forbidden / locked (403, 423)
# ---------------------------------------------------------------------------


class ForbiddenError(PortcullisError):
    """Raised when an identified account is blocked from the requested action."""

    def __init__(self, message: str, code: str = "forbidden"):
        super().__init__(message, code)


class EmailNotVerifiedError(ForbiddenError):
    def __init__(self, message: str, code: str = "email_not_verified"):
        super().__init__(message, code)


class LinkedAccountError(ForbiddenError):
    """Raised when a password sign-in targets an OAuth-only account."""

    def __init__(self, message: str, code: str = "linked_account"):
        super().__init__(message, code)


class AccountLockedError(PortcullisError):
    """Raised while the lockout policy reports the account as locked. Maps to `423 Locked`."""

    def __init__(self, message: str, code: str = "account_locked"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Opaque token errors
# ---------------------------------------------------------------------------


class InvalidOrExpiredTokenError(PortcullisError):
    """Raised when an opaque token is unknown or past its expiry."""

    def __init__(self, message: str, code: str = "invalid_or_expired_token"):
        super().__init__(message, code)


class InvalidVerificationTokenError(InvalidOrExpiredTokenError):
    def __init__(self, message: str, code: str = "invalid_verification_token"):
        super().__init__(message, code)


class InvalidResetTokenError(InvalidOrExpiredTokenError):
    def __init__(self, message: str, code: str = "invalid_reset_token"):
        super().__init__(message, code)


class InvalidRefreshTokenError(InvalidOrExpiredTokenError):
    def __init__(self, message: str, code: str = "invalid_refresh_token"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Not found (404)
# ---------------------------------------------------------------------------


class NotFoundError(PortcullisError):
    def __init__(self, message: str, code: str = "not_found"):
        super().__init__(message, code)


class UserNotFoundError(NotFoundError):
    """Raised when an account lookup by id fails."""

    def __init__(self, message: str, code: str = "user_not_found"):
        super().__init__(message, code)


class OAuthEmailNotFoundError(NotFoundError):
    """Raised when a provider exposes no usable email address."""

    def __init__(self, message: str, code: str = "oauth_email_not_found"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Validation errors (400)
# ---------------------------------------------------------------------------


class ValidationError(PortcullisError):
    """Raised for malformed input that passed schema validation."""

    def __init__(self, message: str, code: str = "validation_error"):
        super().__init__(message, code)


class OAuthProfileError(ValidationError):
    """Raised when a provider profile lacks the email or display name."""

    def __init__(self, message: str, code: str = "oauth_profile_incomplete"):
        super().__init__(message, code)


class DisposableEmailError(ValidationError):
    def __init__(self, message: str, code: str = "disposable_email"):
        super().__init__(message, code)


class MissingHeaderError(ValidationError):
    def __init__(self, message: str, code: str = "missing_header"):
        super().__init__(message, code)


class UnknownServiceError(ValidationError):
    """Raised when `x-service-id` names a tenant this deployment does not serve."""

    def __init__(self, message: str, code: str = "unknown_service"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Other
# ---------------------------------------------------------------------------


class PasswordPolicyError(PortcullisError):
    """Raised when a new password does not satisfy the password policy.

    Maps to `422 Unprocessable Entity`.
    """

    def __init__(self, message: str, code: str = "password_policy_violation"):
        super().__init__(message, code)


class EmailServiceError(PortcullisError):
    """Raised when outbound email delivery fails. Maps to `503`."""

    def __init__(self, message: str, code: str = "email_service_error"):
        super().__init__(message, code)
