from datetime import timedelta

import pytest
import pytest_asyncio

from src.core.exceptions import InvalidRefreshTokenError, InvalidResetTokenError, PasswordPolicyError
from src.utils.clock import utc_now
from src.utils.security import verify_password
from src.utils.tokens import hash_for_storage
from tests.factories import create_fake_account
from tests.utils.doubles import REDIRECT_URL

NEW_PASSWORD = "NewPassw0rd!"


@pytest_asyncio.fixture
async def locked_account(user_repository):
    account = create_fake_account(
        email="alice@x.com",
        verified=False,
        failed_attempts=5,
        locked_until=utc_now() + timedelta(days=365),
    )
    await user_repository.create(account)
    return account


@pytest.mark.asyncio
async def test_send_password_reset_stores_digest_and_emails_link(
    credential_service, user_repository, email_sender, locked_account
):
    # Act
    await credential_service.send_password_reset("Alice@x.com", "examaxis", REDIRECT_URL)

    # Assert
    to_address, message = email_sender.outbox[-1]
    assert to_address == "alice@x.com"
    assert REDIRECT_URL in message.text
    plaintext = email_sender.last_token()
    stored = user_repository.password_info[locked_account.id]
    assert stored.reset_token == hash_for_storage(plaintext)
    assert stored.reset_token != plaintext


@pytest.mark.asyncio
async def test_send_password_reset_is_silent_for_unknown_email(credential_service, email_sender):
    await credential_service.send_password_reset("nobody@x.com", "examaxis", REDIRECT_URL)

    assert email_sender.outbox == []


@pytest.mark.asyncio
async def test_reset_unlocks_verifies_and_signs_out_everywhere(
    credential_service, session_service, user_repository, email_sender, locked_account
):
    # Arrange
    old_token = await session_service.create_session(locked_account.id, "device-x")
    await session_service.create_session(locked_account.id, "device-y")
    await credential_service.send_password_reset("alice@x.com", "examaxis", REDIRECT_URL)

    # Act
    message = await credential_service.reset_password(email_sender.last_token(), NEW_PASSWORD)

    # Assert
    assert message == "Password reset successful. Please login with your new password."
    account = await user_repository.get_by_id(locked_account.id)
    assert account.is_verified
    assert account.locked_until is None
    assert account.lockout_info.failed_attempts == 0
    assert account.password_info.reset_token is None
    assert verify_password(NEW_PASSWORD, account.password_info.password_hash)
    assert await session_service.list_active_sessions(locked_account.id) == []

    authenticated = await credential_service.authenticate("alice@x.com", NEW_PASSWORD, "examaxis")
    assert authenticated.id == locked_account.id
    with pytest.raises(InvalidRefreshTokenError):
        await session_service.refresh_access_token(old_token)


@pytest.mark.asyncio
async def test_reset_token_is_single_use(credential_service, email_sender, locked_account):
    await credential_service.send_password_reset("alice@x.com", "examaxis", REDIRECT_URL)
    token = email_sender.last_token()
    await credential_service.reset_password(token, NEW_PASSWORD)

    with pytest.raises(InvalidResetTokenError):
        await credential_service.reset_password(token, "An0ther!Passw0rd")


@pytest.mark.asyncio
async def test_reset_rejects_expired_token(credential_service, email_sender, locked_account, clock):
    await credential_service.send_password_reset("alice@x.com", "examaxis", REDIRECT_URL)
    clock.advance(minutes=31)

    with pytest.raises(InvalidResetTokenError):
        await credential_service.reset_password(email_sender.last_token(), NEW_PASSWORD)


@pytest.mark.asyncio
async def test_reset_rejects_weak_password(credential_service, user_repository, email_sender, locked_account):
    await credential_service.send_password_reset("alice@x.com", "examaxis", REDIRECT_URL)

    with pytest.raises(PasswordPolicyError):
        await credential_service.reset_password(email_sender.last_token(), "weak")

    assert user_repository.password_info[locked_account.id].reset_token is not None


@pytest.mark.asyncio
async def test_reset_sets_password_on_oauth_account(credential_service, user_repository, email_sender):
    # Arrange
    account = create_fake_account(email="gh@x.com", password=None, provider="github", with_lockout=False)
    await user_repository.create(account)
    await credential_service.send_password_reset("gh@x.com", "examaxis", REDIRECT_URL)

    # Act
    await credential_service.reset_password(email_sender.last_token(), NEW_PASSWORD)

    # Assert
    authenticated = await credential_service.authenticate("gh@x.com", NEW_PASSWORD, "examaxis")
    assert authenticated.provider == "github"
