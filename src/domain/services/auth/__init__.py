from .credentials import CredentialService
from .lockout import LockoutPolicy, is_locked
from .oauth import OAuthService
from .password_policy import PasswordPolicyValidator
from .session import SessionService
from .token import AccessTokenService

__all__ = [
    "CredentialService",
    "SessionService",
    "OAuthService",
    "AccessTokenService",
    "LockoutPolicy",
    "PasswordPolicyValidator",
    "is_locked",
]
