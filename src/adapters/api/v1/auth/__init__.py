from __future__ import annotations

"""Authentication router package – bundles the account, session and OAuth endpoints."""

from fastapi import APIRouter

from .routes import account as account_route
from .routes import forgot_password as forgot_password_route
from .routes import logout as logout_route
from .routes import oauth as oauth_route
from .routes import profile as profile_route
from .routes import refresh_token as refresh_token_route
from .routes import reset_password as reset_password_route
from .routes import sessions as sessions_route
from .routes import signin as signin_route
from .routes import signup as signup_route
from .routes import verify_email as verify_email_route

router = APIRouter(prefix="/auth", tags=["auth"])

# Delegate to sub-routers ----------------------------------------------------

router.include_router(signup_route.router, prefix="/signup")
router.include_router(verify_email_route.router, prefix="/verify-email")
router.include_router(signin_route.router, prefix="/signin")
router.include_router(refresh_token_route.router, prefix="/refresh-token")
router.include_router(forgot_password_route.router, prefix="/forgot-password")
router.include_router(reset_password_route.router, prefix="/reset-password")
router.include_router(oauth_route.router, prefix="/oauth")
router.include_router(profile_route.router, prefix="/profile")
router.include_router(sessions_route.router, prefix="/sessions")
router.include_router(logout_route.router)
router.include_router(account_route.router, prefix="/account")

__all__ = ["router"]
