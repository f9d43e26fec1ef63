"""Email verification endpoint.

Consumes the token from a verification link. A successful verification
signs the user in on the calling device.
"""

import structlog
from fastapi import APIRouter

from src.adapters.api.v1.auth.schemas import AuthResponse, TokenPair, UserOut, VerifyEmailRequest
from src.core.dependencies.auth import Tenant
from src.infrastructure.dependency_injection.auth_dependencies import (
    CredentialServiceDep,
    SessionServiceDep,
)
from src.utils.i18n import get_translated_message

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("", response_model=AuthResponse, summary="Verify an email address")
async def verify_email(
    payload: VerifyEmailRequest,
    context: Tenant,
    credential_service: CredentialServiceDep,
    session_service: SessionServiceDep,
):
    device_id = context.require_device_id()
    account = await credential_service.verify_email(payload.token, context.language)
    tokens = await session_service.generate_token_pair(
        account, device_id, context.user_agent, context.ip_address
    )
    return AuthResponse(
        message=get_translated_message("email_verified", context.language),
        user=UserOut.from_account(account),
        tokens=TokenPair.from_issued(tokens),
    )
