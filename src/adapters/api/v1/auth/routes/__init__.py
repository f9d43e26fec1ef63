from __future__ import annotations

"""Subpackage aggregating individual auth route modules."""

__all__ = [
    "signup",
    "verify_email",
    "signin",
    "refresh_token",
    "forgot_password",
    "reset_password",
    "oauth",
    "profile",
    "sessions",
    "logout",
    "account",
]
