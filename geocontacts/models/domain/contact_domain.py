from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_pascal

from geocontacts.models.domain.geo_domain import GeoPoint

# Runtime-only fields, never written into the cached snapshot
RUNTIME_FIELDS = frozenset({"current_location", "mood"})


class DirectoryModel(BaseModel):
    """Base for directory documents; JSON keys are PascalCase (UserPrincipalName, ...)."""

    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True)


class Hometown(DirectoryModel):
    """Declared home of a contact."""

    name: str | None = None
    position: GeoPoint
    country: str | None = None
    state: str | None = None
    town: str | None = None


class Contact(DirectoryModel):
    """Directory entry (CDA) with raw profile fields and derived display fields."""

    user_principal_name: str
    name: str
    hometown: Hometown
    image: dict[str, str] = Field(default_factory=dict)
    twitter: str | None = None

    # Derived by the image normalizer
    photo_url: str | None = None
    twitter_handle: str | None = None

    # Set during proximity resolution
    current_location: GeoPoint | None = None
    mood: str | None = None


class NearbyGroup(str, Enum):
    """Why a contact is nearby. Declaration order is the emission order."""

    RECENT_CHECKIN = "Recent Check-in"
    HOMETOWN = "Hometown"


class ContactGroup(BaseModel):
    label: NearbyGroup
    contacts: list[Contact]
