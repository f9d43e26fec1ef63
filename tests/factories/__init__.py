"""Re-export factory functions for generating fake test data."""

# flake8: noqa: F401 – re-export

from .user import DEFAULT_PASSWORD, DEFAULT_SERVICE, create_fake_account

__all__ = [
    "DEFAULT_PASSWORD",
    "DEFAULT_SERVICE",
    "create_fake_account",
]
