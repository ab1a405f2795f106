"""
Read-only queries over the contact directory document tables.

Tables (Postgres + PostGIS):

    contacts(
        user_principal_name text primary key,
        name text not null,
        hometown_name text, hometown_country text, hometown_state text, hometown_town text,
        hometown_position geography(Point, 4326) not null,
        image jsonb not null default '{}',
        twitter text
    )

    location_updates(
        id bigserial primary key,
        user_principal_name text not null,
        insert_time timestamptz not null,
        position geography(Point, 4326) not null,
        mood text, country text, state text, town text
    )

Every query drains its pages before returning, keyset-paged so that rows
changing between pages cannot shift a live row out of the result.
"""

from datetime import datetime
from typing import Any, Protocol

from geocontacts.db.helpers import KEYSET_MARKER, PagedQuery, drain, fetch_one
from geocontacts.infrastructure.observability.logging import get_logger
from geocontacts.models.domain.contact_domain import Contact, Hometown
from geocontacts.models.domain.geo_domain import GeoPoint
from geocontacts.models.domain.location_domain import LocationUpdate

logger = get_logger(__name__)

_CONTACT_COLUMNS = """
    user_principal_name,
    name,
    hometown_name,
    hometown_country,
    hometown_state,
    hometown_town,
    ST_X(hometown_position::geometry) AS hometown_longitude,
    ST_Y(hometown_position::geometry) AS hometown_latitude,
    COALESCE(image, '{}'::jsonb) AS image,
    twitter
"""

_USER_POINT = "ST_SetSRID(ST_MakePoint(%s, %s), 4326)::geography"


class ContactStore(Protocol):
    async def fetch_all_contacts(self) -> list[Contact]: ...

    async def fetch_contacts_near_home(
        self, point: GeoPoint, radius_meters: float
    ) -> list[Contact]: ...

    async def fetch_recent_locations(
        self, point: GeoPoint, radius_meters: float, since: datetime
    ) -> list[LocationUpdate]: ...

    async def fetch_contact(self, user_principal_name: str) -> Contact | None: ...


def _row_to_contact(row: dict[str, Any]) -> Contact:
    return Contact(
        user_principal_name=row["user_principal_name"],
        name=row["name"],
        hometown=Hometown(
            name=row.get("hometown_name"),
            position=GeoPoint.from_lon_lat(row["hometown_longitude"], row["hometown_latitude"]),
            country=row.get("hometown_country"),
            state=row.get("hometown_state"),
            town=row.get("hometown_town"),
        ),
        image=row.get("image") or {},
        twitter=row.get("twitter"),
    )


def _row_to_location_update(row: dict[str, Any]) -> LocationUpdate:
    return LocationUpdate(
        user_principal_name=row["user_principal_name"],
        insert_time=row["insert_time"],
        position=GeoPoint.from_lon_lat(row["longitude"], row["latitude"]),
        mood=row.get("mood"),
        country=row.get("country"),
        state=row.get("state"),
        town=row.get("town"),
    )


class PostgresContactStore:
    """ContactStore backed by the pooled Postgres connection."""

    def __init__(self, page_size: int = 100):
        self.page_size = page_size

    async def fetch_all_contacts(self) -> list[Contact]:
        query = f"""
            SELECT {_CONTACT_COLUMNS}
            FROM contacts
            WHERE {KEYSET_MARKER}
        """

        paged = PagedQuery(
            query, (), key_columns=("name", "user_principal_name"), page_size=self.page_size
        )
        rows = await drain(paged)
        contacts = [_row_to_contact(row) for row in rows]

        logger.info("Fetched all contacts", contact_count=len(contacts))
        return contacts

    async def fetch_contacts_near_home(
        self, point: GeoPoint, radius_meters: float
    ) -> list[Contact]:
        query = f"""
            SELECT {_CONTACT_COLUMNS}
            FROM contacts
            WHERE ST_Distance(hometown_position, {_USER_POINT}) < %s
              AND {KEYSET_MARKER}
        """

        params = (point.longitude, point.latitude, radius_meters)
        paged = PagedQuery(
            query, params, key_columns=("user_principal_name",), page_size=self.page_size
        )
        rows = await drain(paged)
        contacts = [_row_to_contact(row) for row in rows]

        logger.debug(
            "Fetched contacts near home", radius_meters=radius_meters, contact_count=len(contacts)
        )
        return contacts

    async def fetch_recent_locations(
        self, point: GeoPoint, radius_meters: float, since: datetime
    ) -> list[LocationUpdate]:
        query = f"""
            SELECT
                id,
                user_principal_name,
                insert_time,
                ST_X(position::geometry) AS longitude,
                ST_Y(position::geometry) AS latitude,
                mood,
                country,
                state,
                town
            FROM location_updates
            WHERE insert_time > %s
              AND ST_Distance(position, {_USER_POINT}) < %s
              AND {KEYSET_MARKER}
        """

        # insert_time, id order also fixes which of two equal-time check-ins wins
        params = (since, point.longitude, point.latitude, radius_meters)
        paged = PagedQuery(
            query, params, key_columns=("insert_time", "id"), page_size=self.page_size
        )
        rows = await drain(paged)
        updates = [_row_to_location_update(row) for row in rows]

        logger.debug(
            "Fetched recent locations",
            radius_meters=radius_meters,
            since=since.isoformat(),
            update_count=len(updates),
        )
        return updates

    async def fetch_contact(self, user_principal_name: str) -> Contact | None:
        query = f"""
            SELECT {_CONTACT_COLUMNS}
            FROM contacts
            WHERE user_principal_name = %s
        """

        row = await fetch_one(query, (user_principal_name,))
        return _row_to_contact(row) if row else None
