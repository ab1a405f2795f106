"""
Nearby contact resolution.

Two sources say a contact is nearby: a recent check-in close to the user,
or a declared hometown close to the user. A recent check-in wins; each
contact lands in exactly one group.
"""

import asyncio
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta

from geocontacts.config import settings
from geocontacts.infrastructure.observability.logging import get_logger
from geocontacts.models.domain.contact_domain import Contact, ContactGroup, NearbyGroup
from geocontacts.models.domain.geo_domain import GeoPoint
from geocontacts.models.domain.location_domain import LocationUpdate
from geocontacts.repositories.contact_repository import ContactStore
from geocontacts.services.cache.cache_store import Clock, utc_now
from geocontacts.services.contact_service import ContactDirectoryService
from geocontacts.services.errors import ContactNotFoundError
from geocontacts.services.image_normalizer import normalize_contact

logger = get_logger(__name__)


def checkin_window_start(now: datetime, days: int) -> datetime:
    """`days` ago, truncated to the start of that UTC day."""
    start = now.astimezone(UTC) - timedelta(days=days)
    return start.replace(hour=0, minute=0, second=0, microsecond=0)


def latest_per_identity(updates: Iterable[LocationUpdate]) -> list[LocationUpdate]:
    """
    Keep the newest update for each user_principal_name.

    On an exact InsertTime tie the first update in input order is kept.
    Output follows the order in which identities were first seen.
    """
    latest: dict[str, LocationUpdate] = {}
    for update in updates:
        current = latest.get(update.user_principal_name)
        if current is None or update.insert_time > current.insert_time:
            latest[update.user_principal_name] = update
    return list(latest.values())


def group_nearby(
    all_contacts: list[Contact],
    hometown_contacts: list[Contact],
    recent_updates: Iterable[LocationUpdate],
) -> list[ContactGroup]:
    """Merge both sources into ordered, non-empty groups. Mutates runtime fields only."""
    checkins = latest_per_identity(recent_updates)
    checked_in = {update.user_principal_name for update in checkins}
    by_identity = {contact.user_principal_name: contact for contact in all_contacts}

    groups: dict[NearbyGroup, list[Contact]] = {label: [] for label in NearbyGroup}

    for update in checkins:
        contact = by_identity.get(update.user_principal_name)
        if contact is None:
            logger.error(
                "Check-in for unknown contact",
                user_principal_name=update.user_principal_name,
            )
            raise ContactNotFoundError(update.user_principal_name)

        contact.current_location = update.position
        contact.mood = update.mood or ""
        groups[NearbyGroup.RECENT_CHECKIN].append(contact)

    seen_hometown: set[str] = set()
    for contact in hometown_contacts:
        identity = contact.user_principal_name
        if identity in checked_in or identity in seen_hometown:
            continue
        seen_hometown.add(identity)
        contact.current_location = contact.hometown.position
        groups[NearbyGroup.HOMETOWN].append(contact)

    result = []
    for label in NearbyGroup:
        if not groups[label]:
            continue
        for contact in groups[label]:
            normalize_contact(contact)
        result.append(ContactGroup(label=label, contacts=groups[label]))
    return result


class ProximityResolver:
    def __init__(
        self,
        directory: ContactDirectoryService,
        store: ContactStore,
        radius_meters: float | None = None,
        checkin_days: int | None = None,
        clock: Clock = utc_now,
    ):
        self.directory = directory
        self.store = store
        self.radius_meters = (
            settings.NEARBY_RADIUS_METERS if radius_meters is None else radius_meters
        )
        self.checkin_days = settings.RECENT_CHECKIN_DAYS if checkin_days is None else checkin_days
        self.clock = clock

    async def get_nearby(self, user_point: GeoPoint) -> list[ContactGroup]:
        since = checkin_window_start(self.clock(), self.checkin_days)

        # A failing read cancels the other two
        try:
            async with asyncio.TaskGroup() as tg:
                all_task = tg.create_task(self.directory.get_all_contacts(force_refresh=False))
                hometown_task = tg.create_task(
                    self.store.fetch_contacts_near_home(user_point, self.radius_meters)
                )
                recent_task = tg.create_task(
                    self.store.fetch_recent_locations(user_point, self.radius_meters, since)
                )
        except ExceptionGroup as eg:
            raise eg.exceptions[0] from None

        all_contacts = all_task.result()
        hometown_contacts = hometown_task.result()
        recent_updates = recent_task.result()

        groups = group_nearby(all_contacts, hometown_contacts, recent_updates)

        logger.info(
            "Resolved nearby contacts",
            longitude=user_point.longitude,
            latitude=user_point.latitude,
            groups={group.label.name: len(group.contacts) for group in groups},
        )
        return groups
