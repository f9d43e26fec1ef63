"""Logout endpoints.

``/logout`` ends the session of the calling device, or every session when
the request carries no ``x-device-id``. ``/logout-all`` always ends every
session of the account.
"""

from fastapi import APIRouter

from src.adapters.api.v1.auth.schemas import MessageResponse
from src.core.dependencies.auth import CurrentUser, Tenant
from src.infrastructure.dependency_injection.auth_dependencies import SessionServiceDep
from src.utils.i18n import get_translated_message

router = APIRouter()


@router.post("/logout", response_model=MessageResponse, summary="Log out of this device")
async def logout(context: Tenant, current_user: CurrentUser, session_service: SessionServiceDep):
    if context.device_id:
        await session_service.revoke_session(current_user.id, context.device_id)
    else:
        await session_service.revoke_all_sessions(current_user.id)
    return MessageResponse(message=get_translated_message("logged_out", context.language))


@router.post("/logout-all", response_model=MessageResponse, summary="Log out of every device")
async def logout_all(context: Tenant, current_user: CurrentUser, session_service: SessionServiceDep):
    await session_service.revoke_all_sessions(current_user.id)
    return MessageResponse(message=get_translated_message("logged_out_all", context.language))
