from fastapi import APIRouter

from src.adapters.api.v1.auth.schemas import MessageResponse
from src.core.dependencies.auth import CurrentUser, Tenant
from src.infrastructure.dependency_injection.auth_dependencies import CredentialServiceDep

router = APIRouter()


@router.delete(
    "",
    response_model=MessageResponse,
    summary="Delete the current account",
    description="Archives the account's identity into `inactive_users`, then deletes it with all its sessions.",
)
async def delete_account(context: Tenant, current_user: CurrentUser, credential_service: CredentialServiceDep):
    message = await credential_service.archive_and_delete_account(current_user.id, context.language)
    return MessageResponse(message=message)
