"""
Contact directory API routes.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from geocontacts.db.helpers import DatabaseError
from geocontacts.dependencies import get_directory_service, get_proximity_resolver
from geocontacts.infrastructure.observability.logging import get_logger
from geocontacts.models.api.contact_response import (
    ContactGroupResponse,
    ContactListResponse,
    NearbyContactsResponse,
)
from geocontacts.models.domain.contact_domain import Contact
from geocontacts.models.domain.geo_domain import GeoPoint
from geocontacts.services.contact_service import ContactDirectoryService
from geocontacts.services.errors import ContactNotFoundError
from geocontacts.services.proximity_service import ProximityResolver

logger = get_logger(__name__)

router = APIRouter(prefix="/contacts", tags=["contacts"])


@router.get("", response_model=ContactListResponse)
async def list_contacts(
    force_refresh: bool = Query(False, description="Bypass the cached snapshot"),
    directory: ContactDirectoryService = Depends(get_directory_service),
):
    """All contacts, sorted by name."""
    try:
        contacts = await directory.get_all_contacts(force_refresh=force_refresh)
    except DatabaseError as e:
        logger.error("Contact store unavailable", operation=e.operation, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Contact store unavailable"
        ) from e

    return ContactListResponse(count=len(contacts), contacts=contacts)


@router.get("/nearby", response_model=NearbyContactsResponse)
async def nearby_contacts(
    longitude: float = Query(..., ge=-180.0, le=180.0),
    latitude: float = Query(..., ge=-90.0, le=90.0),
    resolver: ProximityResolver = Depends(get_proximity_resolver),
):
    """Contacts near the given position, grouped by why they are near."""
    try:
        groups = await resolver.get_nearby(GeoPoint.from_lon_lat(longitude, latitude))
    except DatabaseError as e:
        logger.error("Contact store unavailable", operation=e.operation, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Contact store unavailable"
        ) from e
    except ContactNotFoundError as e:
        logger.error(
            "Nearby resolution found inconsistent data",
            user_principal_name=e.user_principal_name,
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to resolve nearby contacts",
        ) from e

    return NearbyContactsResponse(
        longitude=longitude,
        latitude=latitude,
        groups=[ContactGroupResponse(label=g.label, contacts=g.contacts) for g in groups],
    )


@router.get("/{user_principal_name}", response_model=Contact)
async def get_contact(
    user_principal_name: str,
    directory: ContactDirectoryService = Depends(get_directory_service),
):
    try:
        contact = await directory.get_contact(user_principal_name)
    except DatabaseError as e:
        logger.error("Contact store unavailable", operation=e.operation, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Contact store unavailable"
        ) from e

    if contact is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Contact not found")
    return contact
