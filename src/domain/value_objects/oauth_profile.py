"""OAuth provider profiles and their normalization.

Each provider returns its own profile shape. They are modelled as a tagged
variant, ``ProviderProfile = GoogleProfile | GitHubProfile``, and reduced by
`normalize_profile` to the single canonical `OAuthUserInfo` consumed by the
account resolution logic.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Optional, Tuple, Union

from src.core.exceptions import OAuthEmailNotFoundError, OAuthProfileError
from src.utils.i18n import get_translated_message


class Provider(str, Enum):
    """The supported OAuth providers."""

    GOOGLE = "google"
    GITHUB = "github"


@dataclass(frozen=True)
class GoogleProfile:
    """Subset of the Google OpenID Connect userinfo document."""

    provider: ClassVar[Provider] = Provider.GOOGLE

    email: Optional[str] = None
    name: Optional[str] = None
    given_name: Optional[str] = None
    picture: Optional[str] = None


@dataclass(frozen=True)
class GitHubEmail:
    """One entry of GitHub's ``/user/emails`` listing."""

    email: str
    primary: bool = False
    verified: bool = False


@dataclass(frozen=True)
class GitHubProfile:
    """Subset of GitHub's ``/user`` document.

    ``email`` is absent when the user keeps their address private, in which
    case ``emails`` carries the separately fetched ``/user/emails`` listing.
    """

    provider: ClassVar[Provider] = Provider.GITHUB

    login: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    avatar_url: Optional[str] = None
    emails: Tuple[GitHubEmail, ...] = field(default_factory=tuple)

    def resolve_email(self) -> Optional[str]:
        """Public profile email, else the primary listed email, else the first one."""
        if self.email:
            return self.email
        primary = next((entry.email for entry in self.emails if entry.primary), None)
        if primary:
            return primary
        return self.emails[0].email if self.emails else None


ProviderProfile = Union[GoogleProfile, GitHubProfile]


@dataclass(frozen=True)
class OAuthUserInfo:
    """Canonical, provider-independent profile."""

    email: str
    display_name: str
    provider: Provider
    avatar_url: Optional[str] = None


def _normalize_google(profile: GoogleProfile, language: str) -> OAuthUserInfo:
    display_name = profile.name or profile.given_name
    if not profile.email:
        raise OAuthProfileError(get_translated_message("oauth_profile_missing_email", language))
    if not display_name:
        raise OAuthProfileError(get_translated_message("oauth_profile_missing_name", language))
    return OAuthUserInfo(
        email=profile.email.strip().lower(),
        display_name=display_name,
        provider=Provider.GOOGLE,
        avatar_url=profile.picture,
    )


def _normalize_github(profile: GitHubProfile, language: str) -> OAuthUserInfo:
    email = profile.resolve_email()
    if not email:
        raise OAuthEmailNotFoundError(get_translated_message("oauth_github_email_not_found", language))
    display_name = profile.name or profile.login
    if not display_name:
        raise OAuthProfileError(get_translated_message("oauth_profile_missing_name", language))
    return OAuthUserInfo(
        email=email.strip().lower(),
        display_name=display_name,
        provider=Provider.GITHUB,
        avatar_url=profile.avatar_url,
    )


def normalize_profile(profile: ProviderProfile, language: str = "en") -> OAuthUserInfo:
    """Reduce a provider-specific profile to an `OAuthUserInfo`.

    Raises:
        OAuthProfileError: If the email or display name is missing.
        OAuthEmailNotFoundError: If a GitHub account exposes no email at all.
    """
    if isinstance(profile, GoogleProfile):
        return _normalize_google(profile, language)
    if isinstance(profile, GitHubProfile):
        return _normalize_github(profile, language)
    raise OAuthProfileError(get_translated_message("oauth_provider_not_supported", language))
