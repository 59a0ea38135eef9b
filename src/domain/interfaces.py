from typing import Protocol

from .cache_tags import CacheTag
from .storefront import CartLineInput, CartLineUpdate


class IStorefrontRepository(Protocol):
    """Source of raw, upstream-shaped Storefront payloads.

    Implementations return dicts exactly as the Storefront API would (camelCase
    keys, edge/node connections) and ``None`` where the API returns ``null``.
    """

    def get_product(self, handle: str) -> dict | None: ...

    def get_products(self, query: str | None = None) -> list[dict]: ...

    def get_product_recommendations(self, product_id: str) -> list[dict]: ...

    def get_collection(self, handle: str) -> dict | None: ...

    def get_collections(self) -> list[dict]: ...

    def get_collection_products(self, handle: str) -> list[dict] | None: ...

    def get_page(self, handle: str) -> dict | None: ...

    def get_pages(self) -> list[dict]: ...

    def get_menu(self, handle: str) -> list[dict] | None: ...

    def get_cart(self, cart_id: str) -> dict | None: ...

    def create_cart(self, lines: list[CartLineInput] | None = None) -> dict: ...

    def add_to_cart(self, cart_id: str, lines: list[CartLineInput]) -> dict: ...

    def remove_from_cart(self, cart_id: str, line_ids: list[str]) -> dict: ...

    def update_cart(self, cart_id: str, lines: list[CartLineUpdate]) -> dict: ...


class ITagInvalidator(Protocol):
    def invalidate(self, tag: CacheTag) -> None:
        """Ask the external cache store to drop every entry tagged ``tag``."""
        ...
