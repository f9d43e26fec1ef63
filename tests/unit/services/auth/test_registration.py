import pytest

from src.core.exceptions import (
    EmailAlreadyInUseError,
    InvalidVerificationTokenError,
    PasswordPolicyError,
    UserAlreadyExistsError,
)
from src.domain.value_objects.profile_update import ProfileUpdate
from src.utils.tokens import hash_for_storage
from tests.factories import create_fake_account
from tests.utils.doubles import REDIRECT_URL


async def _register(service, email="alice@x.com", service_id="examaxis", password="Passw0rd!"):
    return await service.register(
        name="Alice",
        email=email,
        password=password,
        service_id=service_id,
        redirect_url=REDIRECT_URL,
    )


@pytest.mark.asyncio
async def test_register_creates_unverified_account_and_emails_token(credential_service, user_repository, email_sender):
    # Act
    message = await _register(credential_service)

    # Assert
    assert message == "User registered successfully. Please check your email for verification."
    account = await user_repository.get_by_email("alice@x.com", "examaxis")
    assert account is not None
    assert account.is_verified is False
    assert account.lockout_info.failed_attempts == 0
    assert account.has_password

    to_address, _ = email_sender.outbox[-1]
    assert to_address == "alice@x.com"
    plaintext = email_sender.last_token()
    assert account.email_info.verification_token == hash_for_storage(plaintext)
    assert account.email_info.verification_token != plaintext


@pytest.mark.asyncio
async def test_register_lowercases_email(credential_service, user_repository):
    await _register(credential_service, email="  Alice@X.COM ")

    assert await user_repository.get_by_email("alice@x.com", "examaxis") is not None


@pytest.mark.asyncio
async def test_register_rejects_verified_duplicate(credential_service, email_sender):
    # Arrange
    await _register(credential_service)
    await credential_service.verify_email(email_sender.last_token())

    # Act / Assert
    with pytest.raises(UserAlreadyExistsError):
        await _register(credential_service)


@pytest.mark.asyncio
async def test_register_replaces_abandoned_unverified_account(credential_service, user_repository):
    # Arrange
    await _register(credential_service)
    first = await user_repository.get_by_email("alice@x.com", "examaxis")

    # Act
    await _register(credential_service)

    # Assert
    second = await user_repository.get_by_email("alice@x.com", "examaxis")
    assert second.id != first.id
    assert await user_repository.get_by_id(first.id) is None


@pytest.mark.asyncio
async def test_same_email_registers_independently_per_service(credential_service, user_repository, email_sender):
    await _register(credential_service, service_id="examaxis")
    await credential_service.verify_email(email_sender.last_token())

    await _register(credential_service, service_id="quizhub")

    first = await user_repository.get_by_email("alice@x.com", "examaxis")
    second = await user_repository.get_by_email("alice@x.com", "quizhub")
    assert first.id != second.id
    assert first.is_verified and not second.is_verified


@pytest.mark.asyncio
async def test_register_enforces_password_policy(credential_service, user_repository):
    with pytest.raises(PasswordPolicyError):
        await _register(credential_service, password="short")

    assert user_repository.users == {}


@pytest.mark.asyncio
async def test_verify_email_marks_account_verified(credential_service, email_sender):
    await _register(credential_service)

    account = await credential_service.verify_email(email_sender.last_token())

    assert account.is_verified
    assert account.email_info.verification_token is None
    assert account.email_info.verification_token_expires_at is None


@pytest.mark.asyncio
async def test_verify_email_rejects_unknown_token(credential_service):
    with pytest.raises(InvalidVerificationTokenError):
        await credential_service.verify_email("not-a-real-token")


@pytest.mark.asyncio
async def test_verify_email_rejects_expired_token(credential_service, email_sender, clock):
    await _register(credential_service)
    token = email_sender.last_token()

    clock.advance(days=2)

    with pytest.raises(InvalidVerificationTokenError):
        await credential_service.verify_email(token)


@pytest.mark.asyncio
async def test_verify_email_token_is_single_use(credential_service, email_sender):
    await _register(credential_service)
    token = email_sender.last_token()
    await credential_service.verify_email(token)

    with pytest.raises(InvalidVerificationTokenError):
        await credential_service.verify_email(token)


@pytest.mark.asyncio
async def test_verify_email_promotes_pending_email(credential_service, user_repository, email_sender):
    # Arrange
    account = create_fake_account(email="alice@x.com")
    await user_repository.create(account)
    await credential_service.update_profile(
        account, ProfileUpdate(email="new@x.com", redirect_url=REDIRECT_URL)
    )
    staged = await user_repository.get_by_id(account.id)
    assert staged.email == "alice@x.com"
    assert staged.email_info.pending_email == "new@x.com"

    # Act
    confirmed = await credential_service.verify_email(email_sender.last_token())

    # Assert
    assert confirmed.email == "new@x.com"
    assert confirmed.is_verified
    assert confirmed.email_info.pending_email is None
    assert confirmed.email_info.verification_token is None


@pytest.mark.asyncio
async def test_verify_email_rejects_pending_email_taken_meanwhile(credential_service, user_repository, email_sender):
    # Arrange
    account = create_fake_account(email="alice@x.com")
    await user_repository.create(account)
    await credential_service.update_profile(
        account, ProfileUpdate(email="new@x.com", redirect_url=REDIRECT_URL)
    )
    token = email_sender.last_token()
    await user_repository.create(create_fake_account(email="new@x.com"))

    # Act / Assert
    with pytest.raises(EmailAlreadyInUseError):
        await credential_service.verify_email(token)

    unchanged = await user_repository.get_by_id(account.id)
    assert unchanged.email == "alice@x.com"
    assert unchanged.email_info.pending_email == "new@x.com"


@pytest.mark.asyncio
async def test_interrupted_email_confirmation_leaves_no_partial_state(
    credential_service, user_repository, email_sender, mocker
):
    # Arrange
    account = create_fake_account(email="alice@x.com", verified=False)
    await user_repository.create(account)
    await credential_service.update_profile(
        account, ProfileUpdate(email="new@x.com", redirect_url=REDIRECT_URL)
    )
    mocker.patch.object(user_repository, "confirm_email", side_effect=ConnectionError("connection lost"))

    # Act
    with pytest.raises(ConnectionError):
        await credential_service.verify_email(email_sender.last_token())

    # Assert
    reloaded = await user_repository.get_by_id(account.id)
    assert reloaded.email == "alice@x.com"
    assert reloaded.is_verified is False
