from unittest.mock import AsyncMock

import pytest

from src.domain.interfaces.services import IDisposableEmailChecker, IOAuthProfileClient
from src.infrastructure.dependency_injection.auth_dependencies import (
    get_disposable_email_checker,
    get_email_sender,
    get_oauth_profile_client,
    get_session_repository,
    get_user_repository,
)
from tests.utils.doubles import RecordingEmailSender


@pytest.fixture
def email_sender():
    return RecordingEmailSender()


@pytest.fixture
def disposable_checker():
    checker = AsyncMock(spec=IDisposableEmailChecker)
    checker.is_disposable.return_value = False
    return checker


@pytest.fixture
def profile_client():
    return AsyncMock(spec=IOAuthProfileClient)


@pytest.fixture(autouse=True)
def wired_app(app, user_repository, session_repository, email_sender, disposable_checker, profile_client):
    """Runs the real services against in-memory storage and recording adapters."""
    app.dependency_overrides[get_user_repository] = lambda: user_repository
    app.dependency_overrides[get_session_repository] = lambda: session_repository
    app.dependency_overrides[get_email_sender] = lambda: email_sender
    app.dependency_overrides[get_disposable_email_checker] = lambda: disposable_checker
    app.dependency_overrides[get_oauth_profile_client] = lambda: profile_client
    return app
