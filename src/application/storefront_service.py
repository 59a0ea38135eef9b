from collections.abc import Callable
from datetime import UTC, datetime
from operator import attrgetter
from typing import Any

from loguru import logger

from src.application.normalizer import (
    normalize_cart,
    normalize_collection,
    normalize_collections,
    normalize_menu,
    normalize_page,
    normalize_pages,
    normalize_product,
    normalize_products,
)
from src.domain.errors import NotFoundError
from src.domain.interfaces import IStorefrontRepository
from src.domain.storefront import (
    HIDDEN_COLLECTION_PREFIX,
    Cart,
    CartLineInput,
    CartLineUpdate,
    Collection,
    MenuItem,
    Page,
    Product,
)


def _min_price(product: Product) -> Any:
    return product.price_range.min_variant_price.to_decimal()


# Product field names (both spellings) and Storefront ``ProductSortKeys`` values
SORT_KEYS: dict[str, Callable[[Product], Any]] = {
    "id": attrgetter("id"),
    "handle": attrgetter("handle"),
    "title": attrgetter("title"),
    "description": attrgetter("description"),
    "description_html": attrgetter("description_html"),
    "descriptionHtml": attrgetter("description_html"),
    "available_for_sale": attrgetter("available_for_sale"),
    "availableForSale": attrgetter("available_for_sale"),
    "updated_at": attrgetter("updated_at"),
    "updatedAt": attrgetter("updated_at"),
    "ID": attrgetter("id"),
    "TITLE": attrgetter("title"),
    "PRICE": _min_price,
    "UPDATED_AT": attrgetter("updated_at"),
}


def sort_products(
    products: list[Product], sort_key: str | None, reverse: bool = False
) -> list[Product]:
    """Stable sort on ``sort_key``, descending when ``reverse``.

    Products comparing equal keep their relative order in both directions.
    An unrecognised key leaves the input order untouched.
    """
    key = SORT_KEYS.get(sort_key or "")
    if key is None:
        if sort_key:
            logger.debug(f"Ignoring unrecognised sort key '{sort_key}'")
        return list(products)
    return sorted(products, key=key, reverse=reverse)


def search_products(products: list[Product], query: str | None) -> list[Product]:
    """Keep products whose title or description contains ``query`` (case-insensitive)."""
    if not query:
        return list(products)
    needle = query.lower()
    return [
        product
        for product in products
        if needle in product.title.lower() or needle in product.description.lower()
    ]


class StorefrontService:
    """Application service exposing normalized storefront reads and cart writes.

    Lookups return ``None`` (or an empty list) when the upstream has nothing
    for the requested handle; only ``get_page`` treats a miss as an error.
    Upstream and transport failures propagate unchanged.
    """

    def __init__(self, repository: IStorefrontRepository, store_domain: str) -> None:
        self._repository = repository
        self._store_domain = store_domain

    # --- products ---

    def get_product(self, handle: str) -> Product | None:
        # Direct lookups still resolve hidden products
        return normalize_product(self._repository.get_product(handle), filter_hidden=False)

    def get_products(
        self,
        query: str | None = None,
        sort_key: str | None = None,
        reverse: bool = False,
    ) -> list[Product]:
        products = normalize_products(self._repository.get_products(query))
        return sort_products(search_products(products, query), sort_key, reverse)

    def get_product_recommendations(self, product_id: str) -> list[Product]:
        return normalize_products(self._repository.get_product_recommendations(product_id))

    # --- collections ---

    def get_collection(self, handle: str) -> Collection | None:
        return normalize_collection(self._repository.get_collection(handle))

    def get_collection_products(
        self,
        collection: str,
        reverse: bool = False,
        sort_key: str | None = None,
    ) -> list[Product]:
        """Products of ``collection``; an unknown collection yields an empty list.

        With a recognised ``sort_key`` the listing is sorted exactly like
        ``get_products``; without one, ``reverse`` flips the listing order.
        """
        raw = self._repository.get_collection_products(collection)
        if raw is None:
            logger.info(f"No products for collection '{collection}'")
            return []

        products = normalize_products(raw)
        if sort_key in SORT_KEYS:
            return sort_products(products, sort_key, reverse)
        if sort_key:
            logger.debug(f"Ignoring unrecognised sort key '{sort_key}'")
        return products[::-1] if reverse else products

    def get_collections(self) -> list[Collection]:
        """All visible collections, led by the "All" pseudo-collection."""
        all_products = normalize_collection(
            {
                "handle": "",
                "title": "All",
                "description": "All products",
                "seo": {"title": "All", "description": "All products"},
                "updatedAt": datetime.now(UTC).isoformat(),
            }
        )
        collections = [all_products, *normalize_collections(self._repository.get_collections())]
        return [
            collection
            for collection in collections
            if collection.handle == ""
            or not collection.handle.startswith(HIDDEN_COLLECTION_PREFIX)
        ]

    # --- content ---

    def find_page(self, handle: str) -> Page | None:
        return normalize_page(self._repository.get_page(handle))

    def get_page(self, handle: str) -> Page:
        """Return the page for ``handle``.

        Raises:
            NotFoundError: if no page has that handle.
        """
        page = self.find_page(handle)
        if page is None:
            raise NotFoundError("Page", handle)
        return page

    def get_pages(self) -> list[Page]:
        return normalize_pages(self._repository.get_pages())

    def get_menu(self, handle: str) -> list[MenuItem]:
        items = self._repository.get_menu(handle)
        if items is None:
            logger.info(f"No menu found for handle '{handle}'")
            return []
        return normalize_menu(items, self._store_domain)

    # --- cart ---

    def get_cart(self, cart_id: str | None) -> Cart | None:
        if not cart_id:
            return None
        raw = self._repository.get_cart(cart_id)
        return normalize_cart(raw) if raw else None

    def create_cart(self, lines: list[CartLineInput] | None = None) -> Cart:
        cart = normalize_cart(self._repository.create_cart(lines))
        logger.info(f"Created cart {cart.id} ({cart.total_quantity} item(s))")
        return cart

    def add_to_cart(self, cart_id: str, lines: list[CartLineInput]) -> Cart:
        cart = normalize_cart(self._repository.add_to_cart(cart_id, lines))
        logger.info(f"Added {len(lines)} line(s) to cart {cart_id}, now {cart.total_quantity} item(s)")
        return cart

    def remove_from_cart(self, cart_id: str, line_ids: list[str]) -> Cart:
        cart = normalize_cart(self._repository.remove_from_cart(cart_id, line_ids))
        logger.info(f"Removed {len(line_ids)} line(s) from cart {cart_id}")
        return cart

    def update_cart(self, cart_id: str, lines: list[CartLineUpdate]) -> Cart:
        cart = normalize_cart(self._repository.update_cart(cart_id, lines))
        logger.info(f"Updated {len(lines)} line(s) in cart {cart_id}")
        return cart
