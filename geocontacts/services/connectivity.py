"""
Internet reachability probe consulted before each cache-trust decision.
"""

import httpx

from geocontacts.config import settings
from geocontacts.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class ConnectivityProbe:
    """
    HEAD request against a well-known URL. Any transport error or 5xx
    counts as offline.
    """

    def __init__(
        self,
        probe_url: str | None = None,
        timeout: float | None = None,
        force_offline: bool | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.probe_url = probe_url or settings.CONNECTIVITY_PROBE_URL
        self.force_offline = (
            settings.CONNECTIVITY_FORCE_OFFLINE if force_offline is None else force_offline
        )
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout or settings.CONNECTIVITY_PROBE_TIMEOUT),
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def is_online(self) -> bool:
        if self.force_offline:
            return False

        try:
            response = await self._client.head(self.probe_url)
        except httpx.HTTPError as e:
            logger.info("Connectivity probe failed, treating as offline", error=str(e))
            return False

        online = response.status_code < 500
        if not online:
            logger.info("Connectivity probe returned server error", status_code=response.status_code)
        return online
