"""Forgot-password endpoint.

The response is identical whether or not the email belongs to an account,
so the endpoint cannot be used to enumerate registered addresses.
"""

from fastapi import APIRouter, Request

from src.adapters.api.v1.auth.schemas import ForgotPasswordRequest, MessageResponse
from src.core.dependencies.auth import Tenant
from src.core.ratelimiter import FORGOT_PASSWORD_LIMIT, limiter
from src.infrastructure.dependency_injection.auth_dependencies import CredentialServiceDep
from src.utils.i18n import get_translated_message

router = APIRouter()


@router.post("", response_model=MessageResponse, summary="Request a password reset email")
@limiter.limit(FORGOT_PASSWORD_LIMIT)
async def forgot_password(
    request: Request,
    payload: ForgotPasswordRequest,
    context: Tenant,
    credential_service: CredentialServiceDep,
):
    await credential_service.send_password_reset(
        payload.email, context.service_id, str(payload.redirect_url), context.language
    )
    return MessageResponse(message=get_translated_message("password_reset_email_sent", context.language))
