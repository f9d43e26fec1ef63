from __future__ import annotations

"""Authentication API schemas package.

Request models live in ``requests``, response models in ``responses``. All
public symbols are re-exported so routes and tests import from
``src.adapters.api.v1.auth.schemas``.
"""

# flake8: noqa: F401 – re-export

from .misc import MessageResponse
from .requests import (
    ForgotPasswordRequest,
    OAuthAuthenticateRequest,
    ResetPasswordRequest,
    SigninRequest,
    SignupRequest,
    UpdateProfileRequest,
    VerifyEmailRequest,
)
from .responses import (
    AuthResponse,
    ProfileResponse,
    SessionListResponse,
    SessionOut,
    TokenPair,
    TokenRefreshResponse,
    UserOut,
)

__all__ = [
    "SignupRequest",
    "SigninRequest",
    "VerifyEmailRequest",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "OAuthAuthenticateRequest",
    "UpdateProfileRequest",
    "UserOut",
    "TokenPair",
    "SessionOut",
    "AuthResponse",
    "ProfileResponse",
    "SessionListResponse",
    "TokenRefreshResponse",
    "MessageResponse",
]
