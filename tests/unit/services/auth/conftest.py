from datetime import timedelta

import pytest

from src.domain.services.auth.credentials import CredentialService
from src.domain.services.auth.lockout import LockoutPolicy
from src.domain.services.auth.session import SessionService
from src.domain.services.auth.token import AccessTokenService
from src.infrastructure.services.email.email_service import EmailTemplateRenderer
from tests.utils.doubles import FrozenClock, RecordingEmailSender


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def email_sender():
    return RecordingEmailSender()


@pytest.fixture
def token_service():
    key = "unit-test-signing-key-0123456789abcdef"
    return AccessTokenService(signing_key=key, verification_key=key)


@pytest.fixture
def lockout_policy():
    return LockoutPolicy(max_attempts=5, lock_duration=timedelta(minutes=15))


@pytest.fixture
def session_service(session_repository, user_repository, token_service, clock):
    return SessionService(session_repository, user_repository, token_service, clock=clock)


@pytest.fixture
def credential_service(user_repository, session_service, email_sender, lockout_policy, clock):
    return CredentialService(
        user_repository,
        session_service,
        email_sender,
        EmailTemplateRenderer(),
        lockout_policy=lockout_policy,
        clock=clock,
    )
