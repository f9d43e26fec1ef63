"""Domain value objects: immutable descriptions of OAuth profiles, issued tokens and profile updates."""

from .oauth_profile import (
    GitHubEmail,
    GitHubProfile,
    GoogleProfile,
    OAuthUserInfo,
    Provider,
    ProviderProfile,
    normalize_profile,
)
from .profile_update import ProfileUpdate
from .token_pair import TokenPair

__all__ = [
    "Provider",
    "GoogleProfile",
    "GitHubEmail",
    "GitHubProfile",
    "ProviderProfile",
    "OAuthUserInfo",
    "normalize_profile",
    "ProfileUpdate",
    "TokenPair",
]
