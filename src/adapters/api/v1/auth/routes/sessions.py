from fastapi import APIRouter

from src.adapters.api.v1.auth.schemas import SessionListResponse, SessionOut
from src.core.dependencies.auth import CurrentUser
from src.infrastructure.dependency_injection.auth_dependencies import SessionServiceDep

router = APIRouter()


@router.get("", response_model=SessionListResponse, summary="List active sessions")
async def list_sessions(current_user: CurrentUser, session_service: SessionServiceDep):
    sessions = await session_service.list_active_sessions(current_user.id)
    return SessionListResponse(sessions=[SessionOut.model_validate(session) for session in sessions])
