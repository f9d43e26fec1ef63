import pytest
import pytest_asyncio

from src.core.exceptions import (
    EmailAlreadyInUseError,
    EmailServiceError,
    PasswordPolicyError,
    UserNotFoundError,
    ValidationError,
)
from src.domain.value_objects.profile_update import ProfileUpdate
from src.utils.security import verify_password
from tests.factories import create_fake_account
from tests.utils.doubles import REDIRECT_URL


@pytest_asyncio.fixture
async def account(user_repository):
    account = create_fake_account(name="Alice", email="alice@x.com")
    await user_repository.create(account)
    return await user_repository.get_by_id(account.id)


@pytest.mark.asyncio
async def test_empty_update_is_a_no_op(credential_service, account):
    updated, message = await credential_service.update_profile(account, ProfileUpdate())

    assert updated is account
    assert message == "Profile updated successfully"


@pytest.mark.asyncio
async def test_name_and_phone_apply_immediately(credential_service, user_repository, account):
    updated, message = await credential_service.update_profile(
        account, ProfileUpdate(name="Alice Liddell", phone="+14155550100")
    )

    assert updated.user.name == "Alice Liddell"
    assert updated.user.phone == "+14155550100"
    assert message == "Profile updated successfully"
    stored = await user_repository.get_by_id(account.id)
    assert stored.user.name == "Alice Liddell"


@pytest.mark.asyncio
async def test_email_change_is_staged_until_confirmed(credential_service, email_sender, account):
    # Act
    updated, message = await credential_service.update_profile(
        account, ProfileUpdate(email="New@X.com", redirect_url=REDIRECT_URL)
    )

    # Assert
    assert updated.email == "alice@x.com"
    assert updated.email_info.pending_email == "new@x.com"
    assert message == "Verification email sent to new email address"
    to_address, _ = email_sender.outbox[-1]
    assert to_address == "new@x.com"


@pytest.mark.asyncio
async def test_unchanged_email_is_ignored(credential_service, email_sender, account):
    updated, _ = await credential_service.update_profile(account, ProfileUpdate(email="ALICE@x.com"))

    assert updated.email_info.pending_email is None
    assert email_sender.outbox == []


@pytest.mark.asyncio
async def test_email_change_requires_redirect_url(credential_service, account):
    with pytest.raises(ValidationError):
        await credential_service.update_profile(account, ProfileUpdate(email="new@x.com"))


@pytest.mark.asyncio
async def test_email_change_rejects_verified_owner(credential_service, user_repository, account):
    await user_repository.create(create_fake_account(email="taken@x.com"))

    with pytest.raises(EmailAlreadyInUseError):
        await credential_service.update_profile(
            account, ProfileUpdate(email="taken@x.com", redirect_url=REDIRECT_URL)
        )


@pytest.mark.asyncio
async def test_email_change_removes_abandoned_unverified_owner(credential_service, user_repository, account):
    abandoned = create_fake_account(email="taken@x.com", verified=False)
    await user_repository.create(abandoned)

    updated, _ = await credential_service.update_profile(
        account, ProfileUpdate(email="taken@x.com", redirect_url=REDIRECT_URL)
    )

    assert updated.email_info.pending_email == "taken@x.com"
    assert await user_repository.get_by_id(abandoned.id) is None


@pytest.mark.asyncio
async def test_failed_confirmation_email_restores_previous_state(
    credential_service, user_repository, email_sender, account
):
    # Arrange
    email_sender.fail = EmailServiceError("smtp down")

    # Act
    with pytest.raises(EmailServiceError):
        await credential_service.update_profile(
            account, ProfileUpdate(email="new@x.com", redirect_url=REDIRECT_URL)
        )

    # Assert
    stored = await user_repository.get_by_id(account.id)
    assert stored.email == "alice@x.com"
    assert stored.email_info.pending_email is None
    assert stored.email_info.verification_token is None
    assert stored.email_info.verification_token_expires_at is None


@pytest.mark.asyncio
async def test_password_change_signs_out_everywhere(credential_service, session_service, user_repository, account):
    # Arrange
    await session_service.create_session(account.id, "device-x")

    # Act
    _, message = await credential_service.update_profile(account, ProfileUpdate(password="Br4nd!NewPass"))

    # Assert
    assert message == "Profile updated successfully. Please login again with your new password."
    stored = await user_repository.get_by_id(account.id)
    assert verify_password("Br4nd!NewPass", stored.password_info.password_hash)
    assert await session_service.list_active_sessions(account.id) == []


@pytest.mark.asyncio
async def test_weak_password_change_changes_nothing(credential_service, user_repository, account):
    with pytest.raises(PasswordPolicyError):
        await credential_service.update_profile(account, ProfileUpdate(name="Mallory", password="weak"))

    stored = await user_repository.get_by_id(account.id)
    assert stored.user.name == "Alice"


@pytest.mark.asyncio
async def test_archive_and_delete_account(credential_service, session_service, user_repository, account):
    # Arrange
    await session_service.create_session(account.id, "device-x")

    # Act
    message = await credential_service.archive_and_delete_account(account.id)

    # Assert
    assert message == "Account deleted successfully"
    assert await user_repository.get_by_id(account.id) is None
    assert await session_service.list_active_sessions(account.id) == []
    [archived] = user_repository.archived
    assert archived.user_id == account.id
    assert archived.email == "alice@x.com"
    assert archived.service_id == "examaxis"


@pytest.mark.asyncio
async def test_archive_unknown_account(credential_service):
    with pytest.raises(UserNotFoundError):
        await credential_service.archive_and_delete_account("missing")
