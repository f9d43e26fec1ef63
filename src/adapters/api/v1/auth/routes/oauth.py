"""OAuth sign-in endpoint.

The client completes the provider's authorization flow itself and posts the
resulting token here. The profile behind the token resolves to an account in
the requesting service, which is created on first use.
"""

import structlog
from fastapi import APIRouter

from src.adapters.api.v1.auth.schemas import AuthResponse, OAuthAuthenticateRequest, TokenPair, UserOut
from src.core.dependencies.auth import Tenant
from src.domain.value_objects.oauth_profile import Provider
from src.infrastructure.dependency_injection.auth_dependencies import (
    OAuthServiceDep,
    SessionServiceDep,
)
from src.utils.i18n import get_translated_message

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("/{provider}", response_model=AuthResponse, summary="Sign in with Google or GitHub")
async def oauth_signin(
    provider: Provider,
    payload: OAuthAuthenticateRequest,
    context: Tenant,
    oauth_service: OAuthServiceDep,
    session_service: SessionServiceDep,
):
    device_id = context.require_device_id()
    account = await oauth_service.authenticate_with_oauth(
        provider, payload.token, context.service_id, context.language
    )
    tokens = await session_service.generate_token_pair(
        account, device_id, context.user_agent, context.ip_address
    )
    await logger.ainfo("OAuth signin succeeded", user_id=account.id, provider=provider.value)
    return AuthResponse(
        message=get_translated_message("login_successful", context.language),
        user=UserOut.from_account(account),
        tokens=TokenPair.from_issued(tokens),
    )
