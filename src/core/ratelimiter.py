"""slowapi limiter for the credential endpoints.

Limits are keyed by tenant and client address, so one noisy tenant cannot
exhaust the budget of another behind the same proxy.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from src.core.config.settings import settings

SIGNIN_LIMIT = "10/minute"
FORGOT_PASSWORD_LIMIT = "5/minute"
RESET_PASSWORD_LIMIT = "10/minute"


def key_func(request: Request) -> str:
    service_id = request.headers.get("x-service-id", "unknown")
    return f"{service_id}:{get_remote_address(request)}"


def get_limiter() -> Limiter:
    """Builds the process-wide limiter. ``RATE_LIMIT_ENABLED=false`` turns every limit into a no-op."""
    return Limiter(
        key_func=key_func,
        enabled=settings.RATE_LIMIT_ENABLED,
        storage_uri=settings.RATE_LIMIT_STORAGE_URI,
        headers_enabled=False,
    )


limiter = get_limiter()
