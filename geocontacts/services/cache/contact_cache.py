"""
Cache-aside snapshot of the full contact list, plus the connectivity-aware
policy deciding whether the snapshot may be used for a given read.
"""

import json

from pydantic import TypeAdapter, ValidationError

from geocontacts.infrastructure.observability.logging import get_logger
from geocontacts.models.domain.contact_domain import RUNTIME_FIELDS, Contact
from geocontacts.services.cache.cache_store import CacheStore
from geocontacts.services.connectivity import ConnectivityProbe

logger = get_logger(__name__)

_contact_list = TypeAdapter(list[Contact])


def serialize_contacts(contacts: list[Contact]) -> str:
    return json.dumps(
        [c.model_dump(mode="json", by_alias=True, exclude=set(RUNTIME_FIELDS)) for c in contacts]
    )


def deserialize_contacts(payload: str | None) -> list[Contact] | None:
    """Parse a snapshot. Empty or corrupted payloads come back as None (a miss)."""
    if not payload or not payload.strip():
        return None
    try:
        contacts = _contact_list.validate_json(payload)
    except ValidationError as e:
        logger.warning("Contact cache payload invalid, treating as miss", error_count=e.error_count())
        return None
    return contacts or None


class ConnectivityGate:
    """
    Decides per read whether the cached snapshot is trusted.

    - force_refresh: never trusted.
    - offline: trusted even when expired.
    - online: trusted only while unexpired.
    """

    def __init__(self, probe: ConnectivityProbe, store: CacheStore):
        self.probe = probe
        self.store = store

    async def should_trust_cache(self, key: str, force_refresh: bool = False) -> bool:
        if force_refresh:
            return False

        if not await self.probe.is_online():
            logger.info("Offline, trusting cached contacts regardless of expiry", key=key)
            return True

        return not await self.store.is_expired(key)


class ContactListCache:
    """Reads and writes the contact list snapshot under a single fixed key."""

    def __init__(self, store: CacheStore, gate: ConnectivityGate, key: str, ttl_s: int):
        self.store = store
        self.gate = gate
        self.key = key
        self.ttl_s = ttl_s

    async def load(self, force_refresh: bool = False) -> list[Contact] | None:
        if not await self.gate.should_trust_cache(self.key, force_refresh):
            return None

        contacts = deserialize_contacts(await self.store.get(self.key))
        if contacts is not None:
            logger.debug("Contact cache hit", key=self.key, contact_count=len(contacts))
        return contacts

    async def save(self, contacts: list[Contact]) -> None:
        stored = await self.store.put(self.key, serialize_contacts(contacts), self.ttl_s)
        if not stored:
            logger.warning("Contact cache write failed", key=self.key)
