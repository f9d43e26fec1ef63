"""Signup endpoint.

Creates an unverified account in the requesting service and emails a
verification link. Throwaway addresses are rejected before any account
state is touched.
"""

import structlog
from fastapi import APIRouter, status

from src.adapters.api.v1.auth.schemas import MessageResponse, SignupRequest
from src.core.dependencies.auth import Tenant
from src.core.exceptions import DisposableEmailError
from src.infrastructure.dependency_injection.auth_dependencies import (
    CredentialServiceDep,
    DisposableEmailCheckerDep,
)
from src.utils.i18n import get_translated_message

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post(
    "",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new account",
    description=(
        "Registers an account for the service named by `x-service-id` and sends a "
        "verification email. The account cannot sign in until the email is verified."
    ),
)
async def signup(
    payload: SignupRequest,
    context: Tenant,
    credential_service: CredentialServiceDep,
    disposable_checker: DisposableEmailCheckerDep,
):
    if await disposable_checker.is_disposable(payload.email):
        await logger.awarning("Signup rejected for disposable email", email=payload.email)
        raise DisposableEmailError(get_translated_message("disposable_email", context.language))

    message = await credential_service.register(
        name=payload.name,
        email=payload.email,
        password=payload.password,
        service_id=context.service_id,
        redirect_url=str(payload.redirect_url),
        phone=payload.phone,
        language=context.language,
    )
    return MessageResponse(message=message)
