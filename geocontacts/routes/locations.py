"""
Location check-in route. The bearer token is forwarded to the location
function as-is; it is not verified here.
"""

import httpx
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from geocontacts.dependencies import get_location_submitter
from geocontacts.infrastructure.observability.logging import get_logger
from geocontacts.models.api.contact_response import LocationSubmitResponse
from geocontacts.models.api.location_request import LocationSubmitRequest
from geocontacts.models.domain.geo_domain import GeoPoint
from geocontacts.services.errors import LocationSubmitError
from geocontacts.services.location_service import LocationSubmitter

logger = get_logger(__name__)

router = APIRouter(prefix="/locations", tags=["locations"])

_security = HTTPBearer()


@router.post("", response_model=LocationSubmitResponse, status_code=status.HTTP_202_ACCEPTED)
async def submit_location(
    payload: LocationSubmitRequest,
    credentials: HTTPAuthorizationCredentials = Depends(_security),
    submitter: LocationSubmitter = Depends(get_location_submitter),
):
    try:
        await submitter.submit_location(
            position=GeoPoint.from_lon_lat(payload.longitude, payload.latitude),
            address=payload.address,
            mood=payload.mood,
            access_token=credentials.credentials,
        )
    except (LocationSubmitError, httpx.HTTPError) as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Location submission failed: {e}"
        ) from e

    return LocationSubmitResponse(success=True, message="Location submitted")
