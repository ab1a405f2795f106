"""
Contact directory read path: cache-aside over the contact store.
"""

from geocontacts.infrastructure.observability.logging import get_logger
from geocontacts.models.domain.contact_domain import Contact
from geocontacts.repositories.contact_repository import ContactStore
from geocontacts.services.cache.contact_cache import ContactListCache
from geocontacts.services.image_normalizer import normalize_contact

logger = get_logger(__name__)


class ContactDirectoryService:
    def __init__(self, store: ContactStore, cache: ContactListCache):
        self.store = store
        self.cache = cache

    async def get_all_contacts(self, force_refresh: bool = False) -> list[Contact]:
        """
        Full contact list sorted by name.

        Served from the cached snapshot when the connectivity gate trusts it;
        otherwise fetched, normalized and written back with the cache TTL.
        Store failures propagate; there is no fallback to an empty list.
        """
        cached = await self.cache.load(force_refresh)
        if cached is not None:
            return cached

        logger.info("Fetching contacts from store", force_refresh=force_refresh)
        contacts = await self.store.fetch_all_contacts()
        for contact in contacts:
            normalize_contact(contact)

        await self.cache.save(contacts)
        return contacts

    async def get_contact(self, user_principal_name: str) -> Contact | None:
        contact = await self.store.fetch_contact(user_principal_name)
        if contact is None:
            return None
        return normalize_contact(contact)
