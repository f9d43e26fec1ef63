"""Dependency injection for the authentication services.

Each factory builds one collaborator for FastAPI's ``Depends``. Repositories
share the request-scoped ``AsyncSession``; stateless adapters (token signer,
email sender, template renderer, OAuth client, disposable-email checker) are
created once per process. Tests replace any of them through
``app.dependency_overrides``.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config.settings import settings
from src.domain.interfaces.repositories import ISessionRepository, IUserRepository
from src.domain.interfaces.services import (
    IAccessTokenService,
    IDisposableEmailChecker,
    IEmailComposer,
    IEmailSender,
    IOAuthProfileClient,
)
from src.domain.services.auth.credentials import CredentialService
from src.domain.services.auth.oauth import OAuthService
from src.domain.services.auth.session import SessionService
from src.domain.services.auth.token import AccessTokenService
from src.infrastructure.database.async_db import get_async_db
from src.infrastructure.repositories import SessionRepository, UserRepository
from src.infrastructure.services.disposable_email import (
    DebounceDisposableEmailChecker,
    NullDisposableEmailChecker,
)
from src.infrastructure.services.email.email_service import EmailTemplateRenderer, SmtpEmailSender
from src.infrastructure.services.oauth_client import AuthlibOAuthProfileClient

# ---------------------------------------------------------------------------
# Infrastructure Layer Dependencies
# ---------------------------------------------------------------------------

AsyncDB = Annotated[AsyncSession, Depends(get_async_db)]


def get_user_repository(db: AsyncDB) -> IUserRepository:
    return UserRepository(db)


def get_session_repository(db: AsyncDB) -> ISessionRepository:
    return SessionRepository(db)


@lru_cache
def get_access_token_service() -> IAccessTokenService:
    return AccessTokenService()


@lru_cache
def get_email_sender() -> IEmailSender:
    return SmtpEmailSender()


@lru_cache
def get_email_composer() -> IEmailComposer:
    return EmailTemplateRenderer()


@lru_cache
def get_oauth_profile_client() -> IOAuthProfileClient:
    return AuthlibOAuthProfileClient()


@lru_cache
def get_disposable_email_checker() -> IDisposableEmailChecker:
    """Returns the debounce.io checker, or a checker that accepts every address when disabled."""
    if settings.DISPOSABLE_EMAIL_CHECK_ENABLED:
        return DebounceDisposableEmailChecker()
    return NullDisposableEmailChecker()


UserRepositoryDep = Annotated[IUserRepository, Depends(get_user_repository)]
SessionRepositoryDep = Annotated[ISessionRepository, Depends(get_session_repository)]
AccessTokenServiceDep = Annotated[IAccessTokenService, Depends(get_access_token_service)]
EmailSenderDep = Annotated[IEmailSender, Depends(get_email_sender)]
EmailComposerDep = Annotated[IEmailComposer, Depends(get_email_composer)]
OAuthProfileClientDep = Annotated[IOAuthProfileClient, Depends(get_oauth_profile_client)]
DisposableEmailCheckerDep = Annotated[IDisposableEmailChecker, Depends(get_disposable_email_checker)]

# ---------------------------------------------------------------------------
# Domain Service Dependencies
# ---------------------------------------------------------------------------


def get_session_service(
    session_repository: SessionRepositoryDep,
    user_repository: UserRepositoryDep,
    token_service: AccessTokenServiceDep,
) -> SessionService:
    return SessionService(session_repository, user_repository, token_service)


SessionServiceDep = Annotated[SessionService, Depends(get_session_service)]


def get_credential_service(
    user_repository: UserRepositoryDep,
    session_service: SessionServiceDep,
    email_sender: EmailSenderDep,
    email_composer: EmailComposerDep,
) -> CredentialService:
    """Factory for the credential service.

    The session service it receives is the same instance the route gets, so
    both share one database session within a request.
    """
    return CredentialService(user_repository, session_service, email_sender, email_composer)


def get_oauth_service(
    user_repository: UserRepositoryDep,
    profile_client: OAuthProfileClientDep,
) -> OAuthService:
    return OAuthService(user_repository, profile_client)


CredentialServiceDep = Annotated[CredentialService, Depends(get_credential_service)]
OAuthServiceDep = Annotated[OAuthService, Depends(get_oauth_service)]
