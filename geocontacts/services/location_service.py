"""
Location submission: posts a check-in to the location function endpoint.
"""

from collections.abc import Callable
from datetime import UTC, datetime

import httpx

from geocontacts.config import settings
from geocontacts.infrastructure.observability.logging import get_logger
from geocontacts.models.domain.geo_domain import GeoPoint
from geocontacts.models.domain.location_domain import Address, LocationUpdate
from geocontacts.services.errors import LocationSubmitError

logger = get_logger(__name__)


def build_location_update(
    position: GeoPoint, address: Address | None, mood: str | None, now: datetime
) -> LocationUpdate:
    return LocationUpdate(
        insert_time=now,
        position=position,
        country=(address.country_code if address else None) or "",
        state=(address.admin_area if address else None) or "",
        town=(address.locality if address else None) or "",
        mood=mood or "",
    )


class LocationSubmitter:
    """
    Write path for check-ins. Single attempt: failures are logged and
    re-raised to the caller, nothing is retried or buffered.
    """

    def __init__(
        self,
        endpoint_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ):
        self.endpoint_url = endpoint_url or settings.LOCATION_FUNCTION_URL
        self.clock = clock
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout or settings.LOCATION_SUBMIT_TIMEOUT),
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    def _get_auth_headers(self, access_token: str) -> dict:
        return {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
        }

    async def submit_location(
        self,
        position: GeoPoint,
        address: Address | None,
        mood: str | None,
        access_token: str,
    ) -> str:
        """
        POST the check-in and return the response body.

        Raises:
            LocationSubmitError: endpoint missing or non-2xx response
            httpx.HTTPError: transport failure
        """
        try:
            if not self.endpoint_url:
                raise LocationSubmitError("LOCATION_FUNCTION_URL is not configured")

            location = build_location_update(position, address, mood, self.clock())
            payload = location.model_dump_json(by_alias=True, exclude_none=True)

            response = await self._client.post(
                self.endpoint_url,
                content=payload,
                headers=self._get_auth_headers(access_token),
            )
            body = response.text

            if not response.is_success:
                raise LocationSubmitError(
                    f"Location submission failed (HTTP {response.status_code})",
                    status_code=response.status_code,
                    response_body=body[:200],
                )

            logger.info("Location submitted", town=location.town, status_code=response.status_code)
            return body

        except Exception as e:
            logger.error(
                "Location submission failed", error=str(e), error_type=type(e).__name__
            )
            raise
