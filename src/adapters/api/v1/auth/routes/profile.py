"""Profile endpoints for the authenticated account."""

import structlog
from fastapi import APIRouter

from src.adapters.api.v1.auth.schemas import ProfileResponse, UpdateProfileRequest, UserOut
from src.core.dependencies.auth import CurrentUser, Tenant
from src.core.exceptions import DisposableEmailError
from src.domain.value_objects.profile_update import ProfileUpdate
from src.infrastructure.dependency_injection.auth_dependencies import (
    CredentialServiceDep,
    DisposableEmailCheckerDep,
)
from src.utils.i18n import get_translated_message

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("", response_model=ProfileResponse, summary="Get the current profile")
async def get_profile(context: Tenant, current_user: CurrentUser, credential_service: CredentialServiceDep):
    account = await credential_service.get_user_by_id(current_user.id, context.language)
    return ProfileResponse(
        message=get_translated_message("profile_retrieved", context.language),
        user=UserOut.from_account(account),
    )


@router.put(
    "",
    response_model=ProfileResponse,
    summary="Update the current profile",
    description=(
        "Updates any subset of name, phone, email and password. A new email only "
        "takes effect once confirmed through the link sent to it; a new password "
        "signs the account out on every device."
    ),
)
async def update_profile(
    payload: UpdateProfileRequest,
    context: Tenant,
    current_user: CurrentUser,
    credential_service: CredentialServiceDep,
    disposable_checker: DisposableEmailCheckerDep,
):
    if payload.email is not None and payload.email != current_user.email:
        if await disposable_checker.is_disposable(payload.email):
            await logger.awarning("Email change rejected for disposable email", user_id=current_user.id)
            raise DisposableEmailError(get_translated_message("disposable_email", context.language))

    updates = ProfileUpdate(
        name=payload.name,
        phone=payload.phone,
        email=payload.email,
        password=payload.password,
        redirect_url=str(payload.redirect_url) if payload.redirect_url else None,
    )
    account, message = await credential_service.update_profile(current_user, updates, context.language)
    return ProfileResponse(message=message, user=UserOut.from_account(account))
