from datetime import datetime

from geocontacts.models.domain.contact_domain import DirectoryModel
from geocontacts.models.domain.geo_domain import GeoPoint


class LocationUpdate(DirectoryModel):
    """
    Timestamped check-in. Many may exist per identity.

    user_principal_name is absent on outbound submissions; the receiving
    endpoint derives it from the bearer token.
    """

    user_principal_name: str | None = None
    insert_time: datetime
    position: GeoPoint
    mood: str | None = None
    country: str | None = None
    state: str | None = None
    town: str | None = None


class Address(DirectoryModel):
    """Reverse-geocoded placemark supplied alongside a submitted position."""

    country_code: str | None = None
    admin_area: str | None = None
    locality: str | None = None
