from datetime import timedelta

import pytest

from geocontacts.models.domain.contact_domain import Contact, Hometown
from geocontacts.models.domain.location_domain import LocationUpdate
from geocontacts.services.cache.contact_cache import ConnectivityGate, ContactListCache
from geocontacts.services.contact_service import ContactDirectoryService
from geocontacts.services.proximity_service import ProximityResolver
from tests.helpers import (
    CACHE_KEY,
    CACHE_TTL_S,
    NOW,
    RADIUS_M,
    FakeCacheStore,
    FakeProbe,
    FakeRedis,
    InMemoryContactStore,
    MutableClock,
    point_east_of_origin,
)


@pytest.fixture
def clock():
    return MutableClock()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def cache_store(clock):
    return FakeCacheStore(clock)


@pytest.fixture
def probe():
    return FakeProbe(online=True)


@pytest.fixture
def contact_store():
    return InMemoryContactStore()


@pytest.fixture
def contact_cache(cache_store, probe):
    gate = ConnectivityGate(probe, cache_store)
    return ContactListCache(cache_store, gate, key=CACHE_KEY, ttl_s=CACHE_TTL_S)


@pytest.fixture
def directory(contact_store, contact_cache):
    return ContactDirectoryService(contact_store, contact_cache)


@pytest.fixture
def resolver(directory, contact_store, clock):
    return ProximityResolver(
        directory, contact_store, radius_meters=RADIUS_M, checkin_days=7, clock=clock
    )


@pytest.fixture
def make_contact():
    def _make(
        upn: str,
        name: str | None = None,
        home_m: float = 10_000.0,
        src: str | None = "img/default.png",
        twitter: str | None = None,
    ) -> Contact:
        image = {"Src": src} if src is not None else {}
        return Contact(
            user_principal_name=upn,
            name=name or upn.split("@")[0].title(),
            hometown=Hometown(name="Somewhere", position=point_east_of_origin(home_m)),
            image=image,
            twitter=twitter if twitter is not None else f"https://twitter.com/{upn.split('@')[0]}",
        )

    return _make


@pytest.fixture
def make_update():
    def _make(
        upn: str,
        distance_m: float = 5_000.0,
        age: timedelta = timedelta(days=1),
        mood: str | None = "Happy",
    ) -> LocationUpdate:
        return LocationUpdate(
            user_principal_name=upn,
            insert_time=NOW - age,
            position=point_east_of_origin(distance_m),
            mood=mood,
        )

    return _make
