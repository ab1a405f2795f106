from pydantic import BaseModel, Field

from geocontacts.models.domain.contact_domain import Contact, NearbyGroup


class ContactListResponse(BaseModel):
    """Response for GET /contacts"""

    count: int
    contacts: list[Contact]


class ContactGroupResponse(BaseModel):
    label: NearbyGroup = Field(..., description="Why the contacts in this group are nearby")
    contacts: list[Contact]


class NearbyContactsResponse(BaseModel):
    """Response for GET /contacts/nearby; groups in emission order, empty groups omitted"""

    longitude: float
    latitude: float
    groups: list[ContactGroupResponse]


class LocationSubmitResponse(BaseModel):
    """Response for POST /locations"""

    success: bool
    message: str
