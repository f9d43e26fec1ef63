from typing import Any, Dict, Optional

import httpx
from authlib.integrations.base_client import OAuthError
from authlib.integrations.starlette_client import OAuth
from structlog import get_logger
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_fixed

from src.core.config.settings import settings
from src.core.exceptions import OAuthProfileError
from src.domain.interfaces.services import IOAuthProfileClient
from src.domain.value_objects.oauth_profile import (
    GitHubEmail,
    GitHubProfile,
    GoogleProfile,
    Provider,
    ProviderProfile,
)
from src.utils.i18n import get_translated_message

logger = get_logger(__name__)

_transient_retry = retry(
    retry=retry_if_exception_type(httpx.TransportError),
    stop=stop_after_attempt(3),
    wait=wait_fixed(1),
    reraise=True,
)


class AuthlibOAuthProfileClient(IOAuthProfileClient):
    """Fetches Google and GitHub profiles with Authlib's Starlette integration.

    The client never performs the authorization-code exchange itself: the
    caller already holds a provider access token and this class only reads
    the profile behind it. Network failures are retried up to three times.

    Attributes:
        oauth (OAuth): Authlib registry holding the provider clients.
    """

    def __init__(self, oauth: Optional[OAuth] = None):
        self.oauth = oauth or OAuth()
        if oauth is None:
            self._configure_oauth()

    def _configure_oauth(self) -> None:
        self.oauth.register(
            name=Provider.GOOGLE.value,
            client_id=settings.GOOGLE_CLIENT_ID,
            client_secret=settings.GOOGLE_CLIENT_SECRET.get_secret_value(),
            server_metadata_url="https://accounts.google.com/.well-known/openid-configuration",
            client_kwargs={"scope": "openid email profile"},
        )
        self.oauth.register(
            name=Provider.GITHUB.value,
            client_id=settings.GITHUB_CLIENT_ID,
            client_secret=settings.GITHUB_CLIENT_SECRET.get_secret_value(),
            authorize_url="https://github.com/login/oauth/authorize",
            access_token_url="https://github.com/login/oauth/access_token",
            api_base_url="https://api.github.com/",
            client_kwargs={"scope": "read:user user:email"},
        )

    async def fetch_profile(self, provider: Provider, token: Dict[str, Any]) -> ProviderProfile:
        try:
            if provider == Provider.GOOGLE:
                return await self._fetch_google(token)
            if provider == Provider.GITHUB:
                return await self._fetch_github(token)
        except (httpx.HTTPError, OAuthError) as e:
            await logger.aerror("OAuth profile fetch failed", provider=provider.value, error=str(e))
            raise OAuthProfileError(get_translated_message("oauth_profile_fetch_failed")) from e
        raise OAuthProfileError(get_translated_message("oauth_provider_not_supported"))

    @_transient_retry
    async def _fetch_google(self, token: Dict[str, Any]) -> GoogleProfile:
        client = self.oauth.create_client(Provider.GOOGLE.value)
        userinfo = await client.userinfo(token=token)
        return GoogleProfile(
            email=userinfo.get("email"),
            name=userinfo.get("name"),
            given_name=userinfo.get("given_name"),
            picture=userinfo.get("picture"),
        )

    @_transient_retry
    async def _get_json(self, path: str, token: Dict[str, Any]) -> Any:
        client = self.oauth.create_client(Provider.GITHUB.value)
        response = await client.get(path, token=token)
        response.raise_for_status()
        return response.json()

    async def _fetch_github(self, token: Dict[str, Any]) -> GitHubProfile:
        user = await self._get_json("user", token)
        emails: tuple = ()
        if not user.get("email"):
            try:
                listing = await self._get_json("user/emails", token)
            except httpx.HTTPError as e:
                await logger.aerror("Failed to fetch GitHub user emails", login=user.get("login"), error=str(e))
                raise OAuthProfileError(get_translated_message("oauth_github_email_fetch_failed")) from e
            emails = tuple(
                GitHubEmail(
                    email=entry["email"],
                    primary=bool(entry.get("primary")),
                    verified=bool(entry.get("verified")),
                )
                for entry in listing
                if entry.get("email")
            )
        return GitHubProfile(
            login=user.get("login"),
            name=user.get("name"),
            email=user.get("email"),
            avatar_url=user.get("avatar_url"),
            emails=emails,
        )
