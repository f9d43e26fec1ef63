import structlog
from fastapi import APIRouter

from src.adapters.api.v1.auth.schemas import TokenPair, TokenRefreshResponse
from src.core.dependencies.auth import Tenant
from src.infrastructure.dependency_injection.auth_dependencies import SessionServiceDep
from src.utils.i18n import get_translated_message

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post(
    "",
    response_model=TokenRefreshResponse,
    summary="Rotate a refresh token",
    description=(
        "Exchanges the refresh token in `x-refresh-token` for a new token pair. "
        "The presented token stops working immediately."
    ),
)
async def refresh_token(context: Tenant, session_service: SessionServiceDep):
    tokens = await session_service.refresh_access_token(
        context.require_refresh_token(),
        device_id=context.device_id,
        user_agent=context.user_agent,
        ip_address=context.ip_address,
        service_id=context.service_id,
        language=context.language,
    )
    return TokenRefreshResponse(
        message=get_translated_message("token_refreshed", context.language),
        tokens=TokenPair.from_issued(tokens),
    )
