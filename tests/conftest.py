import os

# Settings are read once at import time, so the test environment must be in
# place before anything under ``src`` is imported.
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("SECRET_KEY", "test-secret-key-with-at-least-32-characters")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-key-with-at-least-32-characters")
os.environ.setdefault("POSTGRES_HOST", "localhost")
os.environ.setdefault("POSTGRES_DB", "portcullis_test")
os.environ.setdefault("POSTGRES_USER", "postgres")
os.environ.setdefault("SUPPORTED_SERVICES", "examaxis,quizhub")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("DISPOSABLE_EMAIL_CHECK_ENABLED", "false")
os.environ.setdefault("EMAIL_TEST_MODE", "true")
os.environ.setdefault("LOG_JSON", "false")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.core.application import create_application
from src.utils.i18n import setup_i18n

from tests.utils.in_memory_repositories import InMemorySessionRepository, InMemoryUserRepository


@pytest.fixture(scope="session", autouse=True)
def setup_translations():
    """Load the message catalogues once for the whole run."""
    setup_i18n()


@pytest.fixture
def app():
    application = create_application()
    yield application
    application.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def async_client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def session_repository():
    return InMemorySessionRepository()


@pytest.fixture
def user_repository(session_repository):
    return InMemoryUserRepository(sessions=session_repository)
