import time
from unittest.mock import AsyncMock

import pytest

from src.core.exceptions import (
    AuthenticationError,
    ForbiddenError,
    OAuthEmailNotFoundError,
    OAuthProfileError,
    UserAlreadyExistsError,
    ValidationError,
)
from src.domain.interfaces.services import IOAuthProfileClient
from src.domain.services.auth.oauth import OAuthService
from src.domain.value_objects.oauth_profile import (
    GitHubEmail,
    GitHubProfile,
    GoogleProfile,
    OAuthUserInfo,
    Provider,
    normalize_profile,
)
from tests.factories import create_fake_account


@pytest.fixture
def profile_client():
    client = AsyncMock(spec=IOAuthProfileClient)
    client.fetch_profile.return_value = GoogleProfile(
        email="Alice@Gmail.com", name="Alice", picture="https://img.example.com/a.png"
    )
    return client


@pytest.fixture
def oauth_service(user_repository, profile_client, clock):
    return OAuthService(user_repository, profile_client, clock=clock)


def test_normalize_google_profile_falls_back_to_given_name():
    info = normalize_profile(GoogleProfile(email="A@B.com", given_name="Al"))

    assert info == OAuthUserInfo(email="a@b.com", display_name="Al", provider=Provider.GOOGLE)


def test_normalize_google_profile_requires_email_and_name():
    with pytest.raises(OAuthProfileError):
        normalize_profile(GoogleProfile(name="Alice"))
    with pytest.raises(OAuthProfileError):
        normalize_profile(GoogleProfile(email="a@b.com"))


def test_normalize_github_prefers_public_email_then_primary():
    public = GitHubProfile(login="octo", email="Public@x.com", emails=(GitHubEmail("other@x.com", primary=True),))
    listed = GitHubProfile(
        login="octo",
        emails=(GitHubEmail("first@x.com"), GitHubEmail("primary@x.com", primary=True)),
    )
    first_only = GitHubProfile(login="octo", emails=(GitHubEmail("first@x.com"),))

    assert normalize_profile(public).email == "public@x.com"
    assert normalize_profile(listed).email == "primary@x.com"
    assert normalize_profile(first_only).email == "first@x.com"


def test_normalize_github_uses_login_when_name_missing():
    info = normalize_profile(GitHubProfile(login="octocat", email="o@x.com", avatar_url="https://a/1"))

    assert info.display_name == "octocat"
    assert info.provider == Provider.GITHUB
    assert info.avatar_url == "https://a/1"


def test_normalize_github_without_any_email():
    with pytest.raises(OAuthEmailNotFoundError):
        normalize_profile(GitHubProfile(login="octocat"))


@pytest.mark.asyncio
async def test_first_oauth_sign_in_creates_verified_passwordless_account(oauth_service, user_repository, clock):
    # Act
    account = await oauth_service.authenticate_with_oauth(
        Provider.GOOGLE, {"access_token": "ya29.token"}, "examaxis"
    )

    # Assert
    assert account.email == "alice@gmail.com"
    assert account.user.name == "Alice"
    assert account.user.avatar == "https://img.example.com/a.png"
    assert account.user.last_login_at == clock.now
    assert account.is_verified
    assert account.provider == "google"
    assert not account.has_password
    assert account.lockout_info is None
    assert await user_repository.get_by_email("alice@gmail.com", "examaxis") is not None


@pytest.mark.asyncio
async def test_existing_account_is_returned_unchanged(oauth_service, user_repository):
    existing = create_fake_account(name="Local Alice", email="alice@gmail.com")
    await user_repository.create(existing)

    account = await oauth_service.authenticate_with_oauth(Provider.GOOGLE, {"access_token": "t"}, "examaxis")

    assert account.id == existing.id
    assert account.user.name == "Local Alice"
    assert account.provider is None


@pytest.mark.asyncio
async def test_inactive_account_cannot_sign_in_with_oauth(oauth_service, user_repository):
    await user_repository.create(create_fake_account(email="alice@gmail.com", is_active=False))

    with pytest.raises(ForbiddenError) as exc_info:
        await oauth_service.authenticate_with_oauth(Provider.GOOGLE, {"access_token": "t"}, "examaxis")

    assert exc_info.value.code == "forbidden"


@pytest.mark.asyncio
async def test_oauth_accounts_are_scoped_per_service(oauth_service, user_repository):
    first = await oauth_service.authenticate_with_oauth(Provider.GOOGLE, {"access_token": "t"}, "examaxis")
    second = await oauth_service.authenticate_with_oauth(Provider.GOOGLE, {"access_token": "t"}, "quizhub")

    assert first.id != second.id


@pytest.mark.asyncio
async def test_missing_access_token_is_rejected(oauth_service, profile_client):
    with pytest.raises(ValidationError):
        await oauth_service.authenticate_with_oauth(Provider.GOOGLE, {}, "examaxis")

    profile_client.fetch_profile.assert_not_awaited()


@pytest.mark.asyncio
async def test_expired_provider_token_is_rejected(oauth_service, profile_client):
    token = {"access_token": "t", "expires_at": int(time.time()) - 60}

    with pytest.raises(AuthenticationError):
        await oauth_service.authenticate_with_oauth(Provider.GOOGLE, token, "examaxis")

    profile_client.fetch_profile.assert_not_awaited()


@pytest.mark.asyncio
@pytest.mark.parametrize("expires_at", ["tomorrow", [1], True, "nan"])
async def test_non_numeric_expiry_is_rejected(oauth_service, profile_client, expires_at):
    token = {"access_token": "t", "expires_at": expires_at}

    with pytest.raises(ValidationError) as exc_info:
        await oauth_service.authenticate_with_oauth(Provider.GOOGLE, token, "examaxis")

    assert "expires_at" in exc_info.value.message
    profile_client.fetch_profile.assert_not_awaited()


@pytest.mark.asyncio
async def test_numeric_string_expiry_is_accepted(oauth_service):
    token = {"access_token": "t", "expires_at": str(int(time.time()) + 3600)}

    account = await oauth_service.authenticate_with_oauth(Provider.GOOGLE, token, "examaxis")

    assert account.email == "alice@gmail.com"


@pytest.mark.asyncio
async def test_unexpired_provider_token_is_accepted(oauth_service):
    token = {"access_token": "t", "expires_at": int(time.time()) + 3600}

    account = await oauth_service.authenticate_with_oauth(Provider.GOOGLE, token, "examaxis")

    assert account.email == "alice@gmail.com"


@pytest.mark.asyncio
async def test_concurrent_first_sign_in_returns_the_winner(oauth_service, user_repository, mocker):
    # Arrange
    winner = create_fake_account(email="alice@gmail.com", password=None, provider="google")

    async def lose_race(account):
        user_repository.users[winner.id] = winner.user
        user_repository.email_info[winner.id] = winner.email_info
        user_repository.password_info[winner.id] = winner.password_info
        raise UserAlreadyExistsError("email_already_registered")

    mocker.patch.object(user_repository, "create", side_effect=lose_race)

    # Act
    account = await oauth_service.authenticate_with_oauth(Provider.GOOGLE, {"access_token": "t"}, "examaxis")

    # Assert
    assert account.id == winner.id
