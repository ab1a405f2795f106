"""Derives display fields (PhotoUrl, TwitterHandle) from raw contact metadata."""

from geocontacts.config import settings
from geocontacts.infrastructure.observability.logging import get_logger
from geocontacts.models.domain.contact_domain import Contact

logger = get_logger(__name__)

IMAGE_SOURCE_KEY = "Src"


def resolve_photo_url(image_src: str, base_url: str) -> str:
    # The image source may be a full URL or a path relative to base_url
    if image_src.lower().startswith("http"):
        return image_src
    return f"{base_url}{image_src}"


def resolve_twitter_handle(raw_handle: str | None) -> str | None:
    """'https://twitter.com/jane' or 'jane' -> '@jane'. None when nothing usable remains."""
    if not raw_handle:
        return None
    user_name = raw_handle[raw_handle.rfind("/") + 1 :].strip()
    if not user_name:
        return None
    return f"@{user_name}"


def normalize_contact(contact: Contact, base_url: str | None = None) -> Contact:
    """Set photo_url and twitter_handle in place. Safe to call repeatedly."""
    image_src = contact.image.get(IMAGE_SOURCE_KEY)
    if image_src:
        contact.photo_url = resolve_photo_url(image_src, base_url or settings.image_base_url())

    handle = resolve_twitter_handle(contact.twitter)
    if handle is None:
        logger.debug(
            "Contact has no usable twitter handle",
            user_principal_name=contact.user_principal_name,
        )
    contact.twitter_handle = handle
    return contact
