"""Disposable email detection backed by the debounce.io public API."""

from typing import Optional

import httpx
import structlog

from src.core.config.settings import settings
from src.domain.interfaces.services import IDisposableEmailChecker

logger = structlog.get_logger(__name__)


class DebounceDisposableEmailChecker(IDisposableEmailChecker):
    """Queries ``GET <api_url>?email=<address>``.

    The API answers ``{"disposable": "true"}`` or ``{"disposable": "false"}``.
    Any other status, payload or transport error counts as not disposable so
    that an outage of the API never blocks registration.
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url or settings.DISPOSABLE_EMAIL_API_URL
        self.timeout = timeout or settings.DISPOSABLE_EMAIL_TIMEOUT_SECONDS
        self._transport = transport

    async def is_disposable(self, email: str) -> bool:
        address = email.strip()
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(
                    self.api_url,
                    params={"email": address},
                    headers={"Accept": "application/json"},
                )
            if response.status_code != 200:
                await logger.awarning(
                    "Disposable email API returned unexpected status",
                    status=response.status_code,
                    email=address,
                )
                return False
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            await logger.awarning("Error calling disposable email API", error=str(e), email=address)
            return False

        flag = payload.get("disposable") if isinstance(payload, dict) else None
        if not isinstance(flag, str):
            await logger.awarning("Disposable email API returned unexpected data format", email=address)
            return False

        disposable = flag == "true"
        if disposable:
            await logger.ainfo("Disposable email detected", email=address)
        return disposable


class NullDisposableEmailChecker(IDisposableEmailChecker):
    """Used when the check is disabled: no address is disposable."""

    async def is_disposable(self, email: str) -> bool:
        return False
