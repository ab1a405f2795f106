from pydantic import BaseModel, Field

from geocontacts.models.domain.location_domain import Address


class LocationSubmitRequest(BaseModel):
    """Request body for POST /locations"""

    longitude: float = Field(..., ge=-180.0, le=180.0)
    latitude: float = Field(..., ge=-90.0, le=90.0)
    address: Address | None = None
    mood: str | None = Field(None, max_length=280)
