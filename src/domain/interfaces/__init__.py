"""Domain interfaces for dependency inversion.

The domain services depend on these contracts; the infrastructure layer and
the test doubles implement them.
"""

from .repositories import ISessionRepository, IUserRepository
from .services import (
    AccessTokenClaims,
    EmailMessage,
    IAccessTokenService,
    IDisposableEmailChecker,
    IEmailComposer,
    IEmailSender,
    IOAuthProfileClient,
)

__all__ = [
    "IUserRepository",
    "ISessionRepository",
    "EmailMessage",
    "AccessTokenClaims",
    "IEmailSender",
    "IEmailComposer",
    "IAccessTokenService",
    "IDisposableEmailChecker",
    "IOAuthProfileClient",
]
