from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Optional

from fastapi import Depends, Header, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from structlog import get_logger

from src.core.config.settings import settings
from src.core.exceptions import (
    AuthenticationError,
    ForbiddenError,
    MissingHeaderError,
    UnknownServiceError,
    ValidationError,
)
from src.domain.entities.account import UserAccount
from src.domain.entities.session import (
    DEVICE_ID_MAX_LENGTH,
    IP_ADDRESS_MAX_LENGTH,
    USER_AGENT_MAX_LENGTH,
)
from src.infrastructure.dependency_injection.auth_dependencies import (
    AccessTokenServiceDep,
    UserRepositoryDep,
)
from src.utils.i18n import get_request_language, get_translated_message

__all__ = [
    "TenantContext",
    "Tenant",
    "CurrentUser",
    "get_tenant_context",
    "get_current_user",
]

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


# ---------------------------------------------------------------------------
# Request context
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TenantContext:
    """Per-request values every auth route needs.

    ``service_id`` has already been checked against ``SUPPORTED_SERVICES``.
    """

    service_id: str
    device_id: Optional[str]
    refresh_token: Optional[str]
    user_agent: Optional[str]
    ip_address: Optional[str]
    language: str

    def require_device_id(self) -> str:
        if not self.device_id:
            raise MissingHeaderError(
                get_translated_message("missing_header", self.language).format(header="x-device-id")
            )
        return self.device_id

    def require_refresh_token(self) -> str:
        if not self.refresh_token:
            raise MissingHeaderError(
                get_translated_message("missing_header", self.language).format(header="x-refresh-token")
            )
        return self.refresh_token


def _client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()[:IP_ADDRESS_MAX_LENGTH]
    return request.client.host if request.client else None


async def get_tenant_context(
    request: Request,
    x_service_id: Annotated[Optional[str], Header()] = None,
    x_device_id: Annotated[Optional[str], Header()] = None,
    x_refresh_token: Annotated[Optional[str], Header()] = None,
) -> TenantContext:
    """Resolve the tenant and client details from the request headers.

    The user agent and forwarded IP are cut to their column widths; an
    oversized device id is rejected since it identifies the session.

    Raises:
        MissingHeaderError: If ``x-service-id`` is absent.
        UnknownServiceError: If the service is not in ``SUPPORTED_SERVICES``.
        ValidationError: If ``x-device-id`` is longer than a session can store.
    """
    language = get_request_language(request)
    if not x_service_id:
        raise MissingHeaderError(get_translated_message("missing_header", language).format(header="x-service-id"))
    if x_service_id not in settings.SUPPORTED_SERVICES:
        await logger.awarning("Request for unknown service", service_id=x_service_id)
        raise UnknownServiceError(get_translated_message("unknown_service", language))
    if x_device_id and len(x_device_id) > DEVICE_ID_MAX_LENGTH:
        raise ValidationError(
            get_translated_message("header_too_long", language).format(
                header="x-device-id", limit=DEVICE_ID_MAX_LENGTH
            ),
            code="header_too_long",
        )

    user_agent = request.headers.get("user-agent")
    return TenantContext(
        service_id=x_service_id,
        device_id=x_device_id or None,
        refresh_token=x_refresh_token or None,
        user_agent=user_agent[:USER_AGENT_MAX_LENGTH] if user_agent else None,
        ip_address=_client_ip(request),
        language=language,
    )


Tenant = Annotated[TenantContext, Depends(get_tenant_context)]


# ---------------------------------------------------------------------------
# Authenticated account
# ---------------------------------------------------------------------------


async def get_current_user(
    context: Tenant,
    token_service: AccessTokenServiceDep,
    user_repository: UserRepositoryDep,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)] = None,
) -> UserAccount:
    """Return the account behind the bearer token.

    The token must have been issued for the requesting service. An account
    deleted after the token was issued is reported as an authentication
    failure rather than a 404.
    """
    if credentials is None:
        raise AuthenticationError(
            get_translated_message("access_token_missing", context.language), code="access_token_missing"
        )

    claims = token_service.verify(credentials.credentials, context.service_id, context.language)
    account = await user_repository.get_by_id(claims.user_id)
    if account is None:
        await logger.awarning("Access token for a missing account", user_id=claims.user_id)
        raise AuthenticationError(get_translated_message("user_not_found", context.language), code="user_not_found")
    if not account.user.is_active:
        raise ForbiddenError(get_translated_message("user_account_inactive", context.language))
    return account


CurrentUser = Annotated[UserAccount, Depends(get_current_user)]
