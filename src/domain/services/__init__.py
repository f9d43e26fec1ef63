"""Domain services for the identity bounded context.

Credential Services:
- Registration, email verification, password sign-in with lockout
- Password reset, profile updates and account deletion

Session Services:
- Refresh-token sessions per device and access-token issuance

Federation:
- OAuth sign-in resolving provider profiles to tenant accounts
"""

from .auth import (
    AccessTokenService,
    CredentialService,
    LockoutPolicy,
    OAuthService,
    PasswordPolicyValidator,
    SessionService,
)

__all__ = [
    "CredentialService",
    "SessionService",
    "OAuthService",
    "AccessTokenService",
    "LockoutPolicy",
    "PasswordPolicyValidator",
]
