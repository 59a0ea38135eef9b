from enum import StrEnum


class CacheTag(StrEnum):
    products = "products"
    collections = "collections"


class CacheMode(StrEnum):
    """Cache directive attached to an outgoing Storefront request."""

    default = "default"
    force_cache = "force-cache"
    no_store = "no-store"


COLLECTION_TOPICS = frozenset(
    {"collections/create", "collections/delete", "collections/update"}
)
PRODUCT_TOPICS = frozenset({"products/create", "products/delete", "products/update"})


def tags_for_topic(topic: str) -> list[CacheTag]:
    """Return the cache tags a webhook ``topic`` invalidates (empty when unrecognised).

    Collection and product checks are independent, so a topic could match both.
    """
    tags: list[CacheTag] = []
    if topic in COLLECTION_TOPICS:
        tags.append(CacheTag.collections)
    if topic in PRODUCT_TOPICS:
        tags.append(CacheTag.products)
    return tags
