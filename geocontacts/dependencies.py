"""
Service wiring. The container is built once in the application lifespan and
stored on app.state; routes resolve services through the FastAPI
dependencies below, which tests replace via app.dependency_overrides.
"""

from dataclasses import dataclass

from fastapi import Request

from geocontacts.config import settings
from geocontacts.infrastructure.observability.logging import get_logger
from geocontacts.repositories.contact_repository import PostgresContactStore
from geocontacts.services.cache.cache_store import CacheStore, FileCacheStore, RedisCacheStore
from geocontacts.services.cache.contact_cache import ConnectivityGate, ContactListCache
from geocontacts.services.connectivity import ConnectivityProbe
from geocontacts.services.contact_service import ContactDirectoryService
from geocontacts.services.location_service import LocationSubmitter
from geocontacts.services.proximity_service import ProximityResolver
from geocontacts.services.redis_client import fast_redis

logger = get_logger(__name__)


@dataclass
class ServiceContainer:
    probe: ConnectivityProbe
    directory: ContactDirectoryService
    resolver: ProximityResolver
    submitter: LocationSubmitter

    async def close(self) -> None:
        await self.probe.close()
        await self.submitter.close()


def build_cache_store() -> CacheStore:
    if settings.CACHE_BACKEND == "file":
        return FileCacheStore(settings.CACHE_DIR)
    return RedisCacheStore(fast_redis, retention_s=settings.CACHE_RETENTION_S)


def build_services() -> ServiceContainer:
    store = PostgresContactStore(page_size=settings.QUERY_PAGE_SIZE)
    cache_store = build_cache_store()
    probe = ConnectivityProbe()

    cache = ContactListCache(
        store=cache_store,
        gate=ConnectivityGate(probe, cache_store),
        key=settings.CONTACT_CACHE_KEY,
        ttl_s=settings.CONTACT_CACHE_TTL_S,
    )
    directory = ContactDirectoryService(store, cache)

    logger.info(
        "Services built",
        cache_backend=settings.CACHE_BACKEND,
        radius_meters=settings.NEARBY_RADIUS_METERS,
    )
    return ServiceContainer(
        probe=probe,
        directory=directory,
        resolver=ProximityResolver(directory, store),
        submitter=LocationSubmitter(),
    )


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services


def get_directory_service(request: Request) -> ContactDirectoryService:
    return get_services(request).directory


def get_proximity_resolver(request: Request) -> ProximityResolver:
    return get_services(request).resolver


def get_location_submitter(request: Request) -> LocationSubmitter:
    return get_services(request).submitter
