"""Interfaces for collaborators the domain services depend on.

Email delivery, access-token signing, OAuth profile lookup and disposable
address detection are implemented in the infrastructure layer.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict

from src.domain.value_objects.oauth_profile import Provider, ProviderProfile


@dataclass(frozen=True)
class EmailMessage:
    subject: str
    html: str
    text: str


@dataclass(frozen=True)
class AccessTokenClaims:
    """Verified contents of an access token."""

    user_id: str
    email: str
    service_id: str


class IEmailSender(ABC):
    """Delivers a composed message. Implementations raise `EmailServiceError` on failure."""

    @abstractmethod
    async def send(self, to_address: str, message: EmailMessage) -> None:
        raise NotImplementedError


class IEmailComposer(ABC):
    """Builds the transactional emails. Links carry the plaintext token as ``?token=``."""

    @abstractmethod
    def verification_email(
        self, name: str, token: str, redirect_url: str, is_email_change: bool = False, language: str = "en"
    ) -> EmailMessage:
        raise NotImplementedError

    @abstractmethod
    def password_reset_email(self, name: str, token: str, redirect_url: str, language: str = "en") -> EmailMessage:
        raise NotImplementedError


class IAccessTokenService(ABC):
    """Signs and verifies short-lived access tokens.

    The audience of a token is the service it was issued for, so a token
    minted for one tenant is rejected by every other tenant.
    """

    @property
    @abstractmethod
    def expires_in(self) -> int:
        """Access-token lifetime in seconds."""
        raise NotImplementedError

    @abstractmethod
    def sign(self, user_id: str, email: str, service_id: str) -> str:
        raise NotImplementedError

    @abstractmethod
    def verify(self, token: str, service_id: str, language: str = "en") -> AccessTokenClaims:
        """Verifies ``token`` for ``service_id``.

        Raises:
            AccessTokenExpiredError: If the token has expired.
            AccessTokenAudienceError: If the token was issued for another service.
            MalformedAccessTokenError: For any other signature or format problem.
        """
        raise NotImplementedError


class IDisposableEmailChecker(ABC):
    """Answers whether an address belongs to a throwaway email provider.

    Implementations fail open: any error is reported as ``False``.
    """

    @abstractmethod
    async def is_disposable(self, email: str) -> bool:
        raise NotImplementedError


class IOAuthProfileClient(ABC):
    """Fetches the provider profile that belongs to an OAuth access token."""

    @abstractmethod
    async def fetch_profile(self, provider: Provider, token: Dict[str, Any]) -> ProviderProfile:
        """
        Raises:
            OAuthProfileError: If the provider cannot be reached or rejects the token.
        """
        raise NotImplementedError
