"""Sign-in endpoint.

Authenticates an email and password within the requesting service and opens
a session bound to the calling device. Failures deliberately do not reveal
whether the email exists.
"""

import structlog
from fastapi import APIRouter, Request

from src.adapters.api.v1.auth.schemas import AuthResponse, SigninRequest, TokenPair, UserOut
from src.core.dependencies.auth import Tenant
from src.core.ratelimiter import SIGNIN_LIMIT, limiter
from src.infrastructure.dependency_injection.auth_dependencies import (
    CredentialServiceDep,
    SessionServiceDep,
)
from src.utils.i18n import get_translated_message

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post(
    "",
    response_model=AuthResponse,
    summary="Sign in with email and password",
    description=(
        "Requires `x-service-id` and `x-device-id`. Returns the account and a token pair. "
        "Repeated failures lock the account for a while."
    ),
)
@limiter.limit(SIGNIN_LIMIT)
async def signin(
    request: Request,
    payload: SigninRequest,
    context: Tenant,
    credential_service: CredentialServiceDep,
    session_service: SessionServiceDep,
):
    device_id = context.require_device_id()
    request_logger = logger.bind(service_id=context.service_id, device_id=device_id)

    account = await credential_service.authenticate(
        payload.email, payload.password, context.service_id, context.language
    )
    tokens = await session_service.generate_token_pair(
        account, device_id, context.user_agent, context.ip_address
    )
    await request_logger.ainfo("Signin succeeded", user_id=account.id)
    return AuthResponse(
        message=get_translated_message("login_successful", context.language),
        user=UserOut.from_account(account),
        tokens=TokenPair.from_issued(tokens),
    )
