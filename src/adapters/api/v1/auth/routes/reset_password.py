"""Password reset endpoint.

Sets a new password from an emailed reset token. A successful reset also
verifies the email, clears any lockout and signs the account out everywhere.
"""

from fastapi import APIRouter, Request

from src.adapters.api.v1.auth.schemas import MessageResponse, ResetPasswordRequest
from src.core.dependencies.auth import Tenant
from src.core.ratelimiter import RESET_PASSWORD_LIMIT, limiter
from src.infrastructure.dependency_injection.auth_dependencies import CredentialServiceDep

router = APIRouter()


@router.post("", response_model=MessageResponse, summary="Reset a password with a reset token")
@limiter.limit(RESET_PASSWORD_LIMIT)
async def reset_password(
    request: Request,
    payload: ResetPasswordRequest,
    context: Tenant,
    credential_service: CredentialServiceDep,
):
    message = await credential_service.reset_password(payload.token, payload.password, context.language)
    return MessageResponse(message=message)
