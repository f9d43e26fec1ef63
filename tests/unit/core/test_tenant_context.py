from unittest.mock import MagicMock

import pytest
from fastapi.security import HTTPAuthorizationCredentials
from starlette.requests import Request

from src.core.dependencies.auth import TenantContext, get_current_user, get_tenant_context
from src.core.exceptions import (
    AuthenticationError,
    ForbiddenError,
    MissingHeaderError,
    UnknownServiceError,
    ValidationError,
)
from src.domain.entities.session import DEVICE_ID_MAX_LENGTH, IP_ADDRESS_MAX_LENGTH, USER_AGENT_MAX_LENGTH
from src.domain.interfaces.services import AccessTokenClaims
from tests.factories import create_fake_account


def _request(headers=None, client=("10.0.0.1", 1234)) -> Request:
    raw = [(name.lower().encode(), value.encode()) for name, value in (headers or {}).items()]
    return Request({"type": "http", "method": "GET", "path": "/", "query_string": b"", "headers": raw, "client": client})


def _context(**overrides) -> TenantContext:
    values = dict(
        service_id="examaxis",
        device_id=None,
        refresh_token=None,
        user_agent=None,
        ip_address=None,
        language="en",
    )
    values.update(overrides)
    return TenantContext(**values)


@pytest.mark.asyncio
async def test_context_from_headers():
    request = _request({"user-agent": "pytest", "x-forwarded-for": "203.0.113.7, 10.0.0.1"})

    context = await get_tenant_context(request, x_service_id="quizhub", x_device_id="device-1")

    assert context.service_id == "quizhub"
    assert context.device_id == "device-1"
    assert context.refresh_token is None
    assert context.user_agent == "pytest"
    assert context.ip_address == "203.0.113.7"


@pytest.mark.asyncio
async def test_context_falls_back_to_peer_address():
    context = await get_tenant_context(_request(), x_service_id="examaxis")

    assert context.ip_address == "10.0.0.1"


@pytest.mark.asyncio
async def test_empty_device_header_counts_as_absent():
    context = await get_tenant_context(_request(), x_service_id="examaxis", x_device_id="")

    assert context.device_id is None
    with pytest.raises(MissingHeaderError):
        context.require_device_id()


@pytest.mark.asyncio
async def test_long_client_headers_are_cut_to_column_width():
    request = _request({"user-agent": "A" * 600, "x-forwarded-for": "f" * 100})

    context = await get_tenant_context(request, x_service_id="examaxis", x_device_id="d" * DEVICE_ID_MAX_LENGTH)

    assert context.user_agent == "A" * USER_AGENT_MAX_LENGTH
    assert context.ip_address == "f" * IP_ADDRESS_MAX_LENGTH
    assert len(context.device_id) == DEVICE_ID_MAX_LENGTH


@pytest.mark.asyncio
async def test_oversized_device_id_is_rejected():
    with pytest.raises(ValidationError) as exc_info:
        await get_tenant_context(_request(), x_service_id="examaxis", x_device_id="d" * (DEVICE_ID_MAX_LENGTH + 1))

    assert exc_info.value.code == "header_too_long"


@pytest.mark.asyncio
async def test_missing_service_id():
    with pytest.raises(MissingHeaderError) as exc_info:
        await get_tenant_context(_request())

    assert "x-service-id" in exc_info.value.message


@pytest.mark.asyncio
async def test_unknown_service_id():
    with pytest.raises(UnknownServiceError):
        await get_tenant_context(_request(), x_service_id="elsewhere")


def test_require_refresh_token():
    assert _context(refresh_token="abc").require_refresh_token() == "abc"
    with pytest.raises(MissingHeaderError):
        _context().require_refresh_token()


@pytest.mark.asyncio
async def test_current_user_requires_credentials(user_repository):
    with pytest.raises(AuthenticationError) as exc_info:
        await get_current_user(_context(), MagicMock(), user_repository, credentials=None)

    assert exc_info.value.code == "access_token_missing"


@pytest.mark.asyncio
async def test_current_user_resolves_account(user_repository):
    account = create_fake_account()
    await user_repository.create(account)
    token_service = MagicMock()
    token_service.verify.return_value = AccessTokenClaims(user_id=account.id, email=account.email, service_id="examaxis")

    current = await get_current_user(
        _context(), token_service, user_repository, HTTPAuthorizationCredentials(scheme="Bearer", credentials="t")
    )

    assert current.id == account.id
    token_service.verify.assert_called_once_with("t", "examaxis", "en")


@pytest.mark.asyncio
async def test_current_user_inactive_account_is_forbidden(user_repository):
    account = create_fake_account(is_active=False)
    await user_repository.create(account)
    token_service = MagicMock()
    token_service.verify.return_value = AccessTokenClaims(user_id=account.id, email=account.email, service_id="examaxis")

    with pytest.raises(ForbiddenError):
        await get_current_user(
            _context(), token_service, user_repository, HTTPAuthorizationCredentials(scheme="Bearer", credentials="t")
        )
