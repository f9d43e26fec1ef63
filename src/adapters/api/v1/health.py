from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Request
from pydantic import BaseModel
from structlog import get_logger

from src.core.config.settings import settings
from src.infrastructure.database.async_db import check_database_health
from src.utils.i18n import get_request_language, get_translated_message

logger = get_logger(__name__)
router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    env: str
    message: str
    services: Dict[str, Any]
    timestamp: datetime


@router.get("", response_model=HealthResponse)
async def health_check(request: Request):
    """Liveness probe that also pings the database.

    The response is always ``200``; a failed database ping reports
    ``status="degraded"``.
    """
    language = get_request_language(request)
    db_healthy = await check_database_health()
    if not db_healthy:
        await logger.awarning("Health check degraded", database="unhealthy")

    return HealthResponse(
        status="ok" if db_healthy else "degraded",
        env=settings.APP_ENV,
        message=get_translated_message("health_status_ok", language),
        services={"database": {"status": "healthy" if db_healthy else "unhealthy"}},
        timestamp=datetime.now(timezone.utc),
    )
