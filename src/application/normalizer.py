"""Reshape raw Storefront API payloads into the flat storefront domain models.

Every function here is pure: inputs are never mutated, and each entity is
built field by field so a missing upstream field fails at this boundary.
"""

import copy
import re
from urllib.parse import urlsplit

from loguru import logger

from src.domain.storefront import (
    DEFAULT_CURRENCY_CODE,
    HIDDEN_PRODUCT_TAG,
    SEO,
    Cart,
    CartCost,
    CartLine,
    CartLineCost,
    CartProduct,
    Collection,
    Image,
    MenuItem,
    Merchandise,
    Money,
    Page,
    PriceRange,
    Product,
    ProductOption,
    ProductVariant,
    SelectedOption,
)

_COLLECTIONS_SEGMENT = re.compile(r"/collections(?=[/?#]|$)")
_PAGES_SEGMENT = re.compile(r"/pages(?=[/?#]|$)")
_SEARCH_ROUTE = re.compile(r"/search(?=[/?#]|$)")


def flatten(connection: dict | None) -> list:
    """Return the ``node`` of every edge in ``connection``, in edge order."""
    if not connection:
        return []
    return [edge["node"] for edge in connection.get("edges", [])]


def _money(raw: dict) -> Money:
    return Money(amount=raw["amount"], currency_code=raw["currencyCode"])


def _seo(raw: dict | None) -> SEO:
    if not raw:
        return SEO()
    return SEO(title=raw.get("title"), description=raw.get("description"))


def _selected_options(raw: list[dict] | None) -> list[SelectedOption]:
    return [SelectedOption(name=o["name"], value=o["value"]) for o in raw or []]


def derive_alt_text(url: str, product_title: str) -> str:
    """``"{title} - {filename}"``, or just the title when the URL has no filename.

    The filename is the last path segment up to its final dot.
    """
    path = urlsplit(url).path
    segment = path.rsplit("/", 1)[-1] if "/" in path else ""
    filename, dot, _ = segment.rpartition(".")
    if not dot:
        filename = ""
    return f"{product_title} - {filename}" if filename else product_title


def _image(raw: dict, product_title: str) -> Image:
    return Image(
        url=raw["url"],
        alt_text=raw.get("altText") or derive_alt_text(raw["url"], product_title),
        width=raw.get("width"),
        height=raw.get("height"),
    )


def normalize_images(connection: dict | None, product_title: str) -> list[Image]:
    return [_image(node, product_title) for node in flatten(connection)]


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------


def _variant(raw: dict) -> ProductVariant:
    return ProductVariant(
        id=raw["id"],
        title=raw["title"],
        available_for_sale=raw["availableForSale"],
        selected_options=_selected_options(raw.get("selectedOptions")),
        price=_money(raw["price"]),
    )


def normalize_product(product: dict | None, filter_hidden: bool = True) -> Product | None:
    """Flatten a product's images and variants.

    Returns ``None`` for a missing product, and for a hidden one unless
    ``filter_hidden`` is off.
    """
    if not product:
        return None
    tags: list[str] = product.get("tags") or []
    if filter_hidden and HIDDEN_PRODUCT_TAG in tags:
        return None

    title: str = product["title"]
    featured = product.get("featuredImage")
    price_range = product["priceRange"]

    return Product(
        id=product["id"],
        handle=product["handle"],
        title=title,
        description=product.get("description") or "",
        description_html=product.get("descriptionHtml") or "",
        available_for_sale=product["availableForSale"],
        options=[
            ProductOption(id=o["id"], name=o["name"], values=o.get("values", []))
            for o in product.get("options") or []
        ],
        price_range=PriceRange(
            max_variant_price=_money(price_range["maxVariantPrice"]),
            min_variant_price=_money(price_range["minVariantPrice"]),
        ),
        variants=[_variant(node) for node in flatten(product.get("variants"))],
        images=normalize_images(product.get("images"), title),
        featured_image=_image(featured, title) if featured else None,
        seo=_seo(product.get("seo")),
        tags=list(tags),
        updated_at=product["updatedAt"],
    )


def normalize_products(products: list[dict | None]) -> list[Product]:
    """Normalize ``products`` in order, dropping missing and hidden ones."""
    normalized = (normalize_product(product) for product in products)
    return [product for product in normalized if product is not None]


# ---------------------------------------------------------------------------
# Collections
# ---------------------------------------------------------------------------


def collection_path(handle: str) -> str:
    return f"/search/{handle}"


def normalize_collection(collection: dict | None) -> Collection | None:
    if not collection:
        return None
    return Collection(
        handle=collection["handle"],
        title=collection["title"],
        description=collection.get("description") or "",
        seo=_seo(collection.get("seo")),
        updated_at=collection["updatedAt"],
        path=collection_path(collection["handle"]),
    )


def normalize_collections(collections: list[dict | None]) -> list[Collection]:
    normalized = (normalize_collection(collection) for collection in collections)
    return [collection for collection in normalized if collection is not None]


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------


def ensure_total_tax(cart: dict) -> dict:
    """Return a copy of ``cart`` whose cost always carries ``totalTaxAmount``.

    A missing tax amount becomes zero in the cart's own currency.
    """
    result = copy.deepcopy(cart)
    cost = result.setdefault("cost", {})
    if not cost.get("totalTaxAmount"):
        reference = cost.get("totalAmount") or cost.get("subtotalAmount") or {}
        cost["totalTaxAmount"] = {
            "amount": "0.0",
            "currencyCode": reference.get("currencyCode") or DEFAULT_CURRENCY_CODE,
        }
    return result


def _cart_line(raw: dict) -> CartLine:
    merchandise = raw["merchandise"]
    product = merchandise["product"]
    featured = product.get("featuredImage")
    return CartLine(
        id=raw["id"],
        quantity=raw["quantity"],
        cost=CartLineCost(total_amount=_money(raw["cost"]["totalAmount"])),
        merchandise=Merchandise(
            id=merchandise["id"],
            title=merchandise["title"],
            selected_options=_selected_options(merchandise.get("selectedOptions")),
            product=CartProduct(
                id=product["id"],
                handle=product["handle"],
                title=product["title"],
                featured_image=_image(featured, product["title"]) if featured else None,
            ),
        ),
    )


def normalize_cart(cart: dict) -> Cart:
    cart = ensure_total_tax(cart)
    cost = cart["cost"]
    lines = [_cart_line(node) for node in flatten(cart.get("lines"))]
    total_quantity = sum(line.quantity for line in lines)

    upstream_quantity = cart.get("totalQuantity")
    if upstream_quantity is not None and upstream_quantity != total_quantity:
        logger.warning(
            f"Cart {cart['id']} reports totalQuantity={upstream_quantity} "
            f"but its lines add up to {total_quantity}"
        )

    return Cart(
        id=cart["id"],
        checkout_url=cart["checkoutUrl"],
        cost=CartCost(
            subtotal_amount=_money(cost["subtotalAmount"]),
            total_amount=_money(cost["totalAmount"]),
            total_tax_amount=_money(cost["totalTaxAmount"]),
        ),
        lines=lines,
        total_quantity=total_quantity,
    )


# ---------------------------------------------------------------------------
# Content
# ---------------------------------------------------------------------------


def normalize_page(page: dict | None) -> Page | None:
    if not page:
        return None
    return Page(
        id=page["id"],
        title=page["title"],
        handle=page["handle"],
        body=page.get("body") or "",
        body_summary=page.get("bodySummary") or "",
        seo=_seo(page.get("seo")),
        created_at=page["createdAt"],
        updated_at=page["updatedAt"],
    )


def normalize_pages(pages: list[dict | None]) -> list[Page]:
    normalized = (normalize_page(page) for page in pages)
    return [page for page in normalized if page is not None]


def rewrite_menu_path(url: str, store_domain: str) -> str:
    """Turn a Shopify menu URL into a storefront route.

    The store domain is stripped once, then either ``/collections`` becomes
    ``/search`` or, failing that, ``/pages`` is dropped. Paths already under
    ``/search`` come back unchanged.
    """
    path = url.removeprefix(store_domain) if store_domain else url
    if _SEARCH_ROUTE.match(path):
        return path
    path, rewritten = _COLLECTIONS_SEGMENT.subn("/search", path, count=1)
    if not rewritten:
        path = _PAGES_SEGMENT.sub("", path, count=1)
    return path or "/"


def normalize_menu(items: list[dict], store_domain: str) -> list[MenuItem]:
    return [
        MenuItem(title=item["title"], path=rewrite_menu_path(item["url"], store_domain))
        for item in items
    ]
