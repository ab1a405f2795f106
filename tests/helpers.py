"""Fakes and constants shared by the test suite."""

import math
from collections import Counter
from datetime import UTC, datetime, timedelta

from geocontacts.models.domain.contact_domain import Contact
from geocontacts.models.domain.geo_domain import GeoPoint
from geocontacts.models.domain.location_domain import LocationUpdate
from geocontacts.services.cache.cache_store import decode_entry, encode_entry

NOW = datetime(2026, 10, 19, 15, 30, tzinfo=UTC)
CACHE_KEY = "contacts:all"
CACHE_TTL_S = 2 * 60 * 60
RADIUS_M = 50_000.0
EARTH_RADIUS_M = 6_371_000.0


def point_east_of_origin(meters: float) -> GeoPoint:
    """Point on the equator `meters` east of (0, 0)."""
    return GeoPoint.from_lon_lat(math.degrees(meters / EARTH_RADIUS_M), 0.0)


def distance_m(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in meters (haversine), standing in for PostGIS ST_Distance."""
    phi1, phi2 = map(math.radians, (a.latitude, b.latitude))
    d_phi = math.radians(b.latitude - a.latitude)
    d_lambda = math.radians(b.longitude - a.longitude)
    h = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(h))


class MutableClock:
    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeRedis:
    def __init__(self):
        self.store: dict[str, str] = {}
        self.ttls: dict[str, int | None] = {}

    async def set_with_ttl(self, key: str, value: str, ttl_s: int | None = None) -> bool:
        self.store[key] = value
        self.ttls[key] = ttl_s
        return True

    async def get(self, key: str) -> str | None:
        return self.store.get(key)


class FakeCacheStore:
    """In-memory CacheStore sharing the production envelope format."""

    def __init__(self, clock: MutableClock):
        self.clock = clock
        self.entries: dict[str, str] = {}
        self.puts = 0
        self.accept_writes = True

    async def get(self, key: str) -> str | None:
        entry = decode_entry(self.entries.get(key))
        return entry[0] if entry else None

    async def put(self, key: str, value: str, ttl_s: int) -> bool:
        self.puts += 1
        if not self.accept_writes:
            return False
        self.entries[key] = encode_entry(value, ttl_s, self.clock())
        return True

    async def is_expired(self, key: str) -> bool:
        entry = decode_entry(self.entries.get(key))
        return entry is None or self.clock() >= entry[1]


class FakeProbe:
    def __init__(self, online: bool = True):
        self.online = online
        self.checks = 0

    async def is_online(self) -> bool:
        self.checks += 1
        return self.online


class InMemoryContactStore:
    """ContactStore over lists; returns fresh copies the way a remote store would."""

    def __init__(self, contacts=None, updates=None):
        self.contacts: list[Contact] = list(contacts or [])
        self.updates: list[LocationUpdate] = list(updates or [])
        self.calls: Counter = Counter()
        self.fail_with: Exception | None = None

    def _check_failure(self):
        if self.fail_with is not None:
            raise self.fail_with

    async def fetch_all_contacts(self) -> list[Contact]:
        self.calls["fetch_all_contacts"] += 1
        self._check_failure()
        ordered = sorted(self.contacts, key=lambda c: (c.name, c.user_principal_name))
        return [c.model_copy(deep=True) for c in ordered]

    async def fetch_contacts_near_home(self, point: GeoPoint, radius_meters: float):
        self.calls["fetch_contacts_near_home"] += 1
        self._check_failure()
        return [
            c.model_copy(deep=True)
            for c in self.contacts
            if distance_m(point, c.hometown.position) < radius_meters
        ]

    async def fetch_recent_locations(self, point: GeoPoint, radius_meters: float, since):
        self.calls["fetch_recent_locations"] += 1
        self._check_failure()
        return [
            u.model_copy(deep=True)
            for u in self.updates
            if u.insert_time > since and distance_m(point, u.position) < radius_meters
        ]

    async def fetch_contact(self, user_principal_name: str):
        self.calls["fetch_contact"] += 1
        self._check_failure()
        for contact in self.contacts:
            if contact.user_principal_name == user_principal_name:
                return contact.model_copy(deep=True)
        return None
