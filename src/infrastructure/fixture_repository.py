import copy
import threading
from decimal import Decimal
from uuid import uuid4

from loguru import logger

from src.domain.storefront import HIDDEN_PRODUCT_TAG, CartLineInput, CartLineUpdate

CENT = Decimal("0.01")
CURRENCY = "USD"
UPDATED_AT = "2024-05-01T12:00:00Z"

# Price used for merchandise ids the catalogue does not know about
PLACEHOLDER_PRICE = Decimal("40.00")


def _money(amount: Decimal | str) -> dict:
    return {"amount": str(Decimal(amount).quantize(CENT)), "currencyCode": CURRENCY}


def _image(url: str, alt_text: str | None) -> dict:
    return {"url": url, "altText": alt_text, "width": 500, "height": 500}


def _seo(title: str, description: str) -> dict:
    return {"title": title, "description": description}


def _product(
    product_id: str,
    handle: str,
    title: str,
    description: str,
    price: str,
    image_url: str,
    tags: list[str],
    sizes: tuple[str, ...] = ("Small", "Medium", "Large"),
    alt_text: str | None = None,
) -> dict:
    """Build a product node in the Storefront API shape."""
    image = _image(image_url, alt_text)
    return {
        "id": f"gid://shopify/Product/{product_id}",
        "handle": handle,
        "title": title,
        "description": description,
        "descriptionHtml": f"<p>{description}</p>",
        "availableForSale": True,
        "options": [{"id": f"opt-{product_id}", "name": "Size", "values": list(sizes)}],
        "priceRange": {"maxVariantPrice": _money(price), "minVariantPrice": _money(price)},
        "variants": {
            "edges": [
                {
                    "node": {
                        "id": f"gid://shopify/ProductVariant/{product_id}-{size.lower()}",
                        "title": f"{size} Size",
                        "availableForSale": True,
                        "selectedOptions": [{"name": "Size", "value": size}],
                        "price": _money(price),
                    }
                }
                for size in sizes
            ]
        },
        "featuredImage": dict(image),
        "images": {"edges": [{"node": dict(image)}]},
        "seo": _seo(f"Buy {title}", description),
        "tags": tags,
        "updatedAt": UPDATED_AT,
    }


def _catalogue() -> dict[str, dict]:
    products = [
        _product(
            "001",
            "classic-t-shirt",
            "Classic T-Shirt",
            "A perfect t-shirt for everyday wear.",
            "19.99",
            "/local_data_store/t-shirt-1.avif",
            ["fashion", "cotton", "t-shirt"],
            alt_text="Classic T-Shirt",
        ),
        _product(
            "002",
            "acme-cup",
            "Acme Cup",
            "A stylish cup for all your drinking needs.",
            "9.99",
            "/local_data_store/image copy.png",
            ["home", "cup", "acme"],
            alt_text="Acme Cup",
        ),
        _product(
            "003",
            "acme-drawstring-bag",
            "Acme Drawstring Bag",
            "Perfect for on-the-go storage of your essentials.",
            "14.99",
            "/local_data_store/image.png",
            ["fashion", "bag", "drawstring"],
        ),
        _product(
            "004",
            "vintage-hoodie",
            "Vintage Hoodie",
            "A cozy hoodie for chilly evenings.",
            "39.99",
            "/local_data_store/hoodie-1.avif",
            ["hoodie", "vintage", "winter"],
            alt_text="Vintage Hoodie",
        ),
        _product(
            "005",
            "acme-prototype-mug",
            "Acme Prototype Mug",
            "An unreleased mug kept out of the storefront.",
            "12.00",
            "/local_data_store/mug.png",
            ["home", "cup", HIDDEN_PRODUCT_TAG],
        ),
    ]
    return {product["handle"]: product for product in products}


def _collection(handle: str, title: str, description: str) -> dict:
    return {
        "handle": handle,
        "title": title,
        "description": description,
        "seo": _seo(title, description),
        "updatedAt": UPDATED_AT,
    }


def _page(page_id: str, handle: str, title: str, body: str, summary: str) -> dict:
    return {
        "id": f"gid://shopify/Page/{page_id}",
        "title": title,
        "handle": handle,
        "body": body,
        "bodySummary": summary,
        "seo": _seo(title, summary),
        "createdAt": UPDATED_AT,
        "updatedAt": UPDATED_AT,
    }


class FixtureStorefrontRepository:
    """In-memory stand-in for the Storefront API.

    Serves a fixed catalogue in exactly the shape the GraphQL API returns and
    keeps cart state per cart id, so it can replace ``StorefrontRepository``
    without any change to the services above it. Cart totals are recomputed
    on every write. Carts carry no tax line unless ``tax_rate`` is set, the
    same as Shopify before checkout has computed taxes.
    """

    STARTER_MERCHANDISE_ID = "gid://shopify/ProductVariant/001-medium"

    def __init__(self, store_domain: str, tax_rate: Decimal = Decimal("0")) -> None:
        self._store_domain = store_domain.rstrip("/")
        self._tax_rate = tax_rate
        self._products = _catalogue()
        self._variants: dict[str, tuple[dict, dict]] = {
            edge["node"]["id"]: (edge["node"], product)
            for product in self._products.values()
            for edge in product["variants"]["edges"]
        }
        self._collections = {
            collection["handle"]: collection
            for collection in (
                _collection(
                    "spring-2020",
                    "Spring 2020 Collection",
                    "Explore our exciting new collection for Spring 2020!",
                ),
                _collection(
                    "accessories", "Accessories", "Cups, bags and everything in between."
                ),
                _collection(
                    "hidden-homepage-featured-items",
                    "Featured",
                    "Products featured on the home page.",
                ),
            )
        }
        self._collection_products = {
            "spring-2020": ["classic-t-shirt", "vintage-hoodie", "acme-prototype-mug"],
            "accessories": ["acme-drawstring-bag", "acme-cup"],
            "hidden-homepage-featured-items": ["classic-t-shirt", "acme-cup"],
        }
        self._recommendations = {
            "gid://shopify/Product/001": ["vintage-hoodie", "acme-cup"],
            "gid://shopify/Product/004": ["classic-t-shirt"],
        }
        self._pages = {
            page["handle"]: page
            for page in (
                _page(
                    "1",
                    "about",
                    "About Us",
                    "This is the shop for the EcoEdu Society.",
                    "Short summary of the About Us page.",
                ),
                _page(
                    "2",
                    "contact",
                    "Contact Us",
                    "Email, phone and office location.",
                    "Reach out to us via email, phone, or visit our office.",
                ),
                _page(
                    "3",
                    "services",
                    "Services",
                    "Custom solutions and support.",
                    "Overview of our services.",
                ),
            )
        }
        domain = self._store_domain
        self._menus = {
            "next-js-frontend-header-menu": [
                {"title": "All", "url": f"{domain}/search"},
                {"title": "Spring 2020", "url": f"{domain}/collections/spring-2020"},
                {"title": "Accessories", "url": f"{domain}/collections/accessories"},
            ],
            "next-js-frontend-footer-menu": [
                {"title": "Home", "url": f"{domain}/"},
                {"title": "About Us", "url": f"{domain}/pages/about"},
                {"title": "Contact", "url": f"{domain}/pages/contact"},
            ],
        }
        self._carts: dict[str, list[dict]] = {}
        self._lock = threading.Lock()

    # --- products ---

    def get_product(self, handle: str) -> dict | None:
        return copy.deepcopy(self._products.get(handle))

    def get_products(self, query: str | None = None) -> list[dict]:
        # Search is applied by the service on top of the raw listing
        return copy.deepcopy(list(self._products.values()))

    def get_product_recommendations(self, product_id: str) -> list[dict]:
        handles = self._recommendations.get(product_id, [])
        return copy.deepcopy([self._products[handle] for handle in handles])

    # --- collections ---

    def get_collection(self, handle: str) -> dict | None:
        return copy.deepcopy(self._collections.get(handle))

    def get_collections(self) -> list[dict]:
        return copy.deepcopy(list(self._collections.values()))

    def get_collection_products(self, handle: str) -> list[dict] | None:
        handles = self._collection_products.get(handle)
        if handles is None:
            return None
        return copy.deepcopy([self._products[h] for h in handles])

    # --- content ---

    def get_page(self, handle: str) -> dict | None:
        return copy.deepcopy(self._pages.get(handle))

    def get_pages(self) -> list[dict]:
        return copy.deepcopy(list(self._pages.values()))

    def get_menu(self, handle: str) -> list[dict] | None:
        return copy.deepcopy(self._menus.get(handle))

    # --- cart ---

    def get_cart(self, cart_id: str) -> dict | None:
        with self._lock:
            lines = self._carts.get(cart_id)
            if lines is None:
                # Unknown ids read as a starter cart that is only stored on first write
                lines = self._starter_lines()
            return self._cart_payload(cart_id, lines)

    def create_cart(self, lines: list[CartLineInput] | None = None) -> dict:
        cart_id = f"gid://shopify/Cart/{uuid4().hex}"
        with self._lock:
            stored: list[dict] = []
            self._carts[cart_id] = stored
            self._merge(stored, lines or [])
            logger.debug(f"[Fixture] Created cart {cart_id} with {len(stored)} line(s)")
            return self._cart_payload(cart_id, stored)

    def add_to_cart(self, cart_id: str, lines: list[CartLineInput]) -> dict:
        with self._lock:
            stored = self._lines(cart_id)
            self._merge(stored, lines)
            return self._cart_payload(cart_id, stored)

    def remove_from_cart(self, cart_id: str, line_ids: list[str]) -> dict:
        with self._lock:
            stored = self._lines(cart_id)
            removed = set(line_ids)
            stored[:] = [line for line in stored if line["id"] not in removed]
            return self._cart_payload(cart_id, stored)

    def update_cart(self, cart_id: str, lines: list[CartLineUpdate]) -> dict:
        with self._lock:
            stored = self._lines(cart_id)
            by_id = {line["id"]: line for line in stored}
            for update in lines:
                line = by_id.get(update.id)
                if line is None:
                    logger.warning(f"[Fixture] Cart {cart_id} has no line {update.id}")
                    continue
                line["merchandiseId"] = update.merchandise_id
                line["quantity"] = update.quantity
            stored[:] = [line for line in stored if line["quantity"] > 0]
            return self._cart_payload(cart_id, stored)

    def _lines(self, cart_id: str) -> list[dict]:
        """Return the stored lines of ``cart_id``, seeding a starter cart for unknown ids."""
        if cart_id not in self._carts:
            logger.debug(f"[Fixture] Seeding starter cart for {cart_id}")
            self._carts[cart_id] = self._starter_lines()
        return self._carts[cart_id]

    def _starter_lines(self) -> list[dict]:
        return [{"id": "line1", "merchandiseId": self.STARTER_MERCHANDISE_ID, "quantity": 2}]

    @staticmethod
    def _merge(stored: list[dict], lines: list[CartLineInput]) -> None:
        for new in lines:
            existing = next(
                (line for line in stored if line["merchandiseId"] == new.merchandise_id),
                None,
            )
            if existing is not None:
                existing["quantity"] += new.quantity
            else:
                stored.append(
                    {
                        "id": f"gid://shopify/CartLine/{uuid4().hex}",
                        "merchandiseId": new.merchandise_id,
                        "quantity": new.quantity,
                    }
                )

    def _merchandise(self, merchandise_id: str) -> tuple[dict, dict]:
        if found := self._variants.get(merchandise_id):
            return found
        # Unknown merchandise is priced as a generic placeholder product
        variant = {
            "id": merchandise_id,
            "title": "Acme Product",
            "selectedOptions": [{"name": "Size", "value": "Default"}],
            "price": _money(PLACEHOLDER_PRICE),
        }
        product = {
            "id": merchandise_id,
            "handle": "product-handle",
            "title": "Acme Product",
            "featuredImage": _image("/local_data_store/t-shirt-1.avif", "Product Image"),
        }
        return variant, product

    def _cart_payload(self, cart_id: str, lines: list[dict]) -> dict:
        edges: list[dict] = []
        subtotal = Decimal("0")
        for line in lines:
            variant, product = self._merchandise(line["merchandiseId"])
            line_total = Decimal(variant["price"]["amount"]) * line["quantity"]
            subtotal += line_total
            edges.append(
                {
                    "node": {
                        "id": line["id"],
                        "quantity": line["quantity"],
                        "cost": {"totalAmount": _money(line_total)},
                        "merchandise": {
                            "id": variant["id"],
                            "title": variant["title"],
                            "selectedOptions": copy.deepcopy(variant["selectedOptions"]),
                            "product": {
                                "id": product["id"],
                                "handle": product["handle"],
                                "title": product["title"],
                                "featuredImage": copy.deepcopy(product["featuredImage"]),
                            },
                        },
                    }
                }
            )

        tax = (subtotal * self._tax_rate).quantize(CENT)
        cost = {"subtotalAmount": _money(subtotal), "totalAmount": _money(subtotal + tax)}
        if self._tax_rate:
            cost["totalTaxAmount"] = _money(tax)

        return {
            "id": cart_id,
            "checkoutUrl": f"{self._store_domain}/cart/c/{cart_id.rsplit('/', 1)[-1]}",
            "cost": cost,
            "lines": {"edges": edges},
            "totalQuantity": sum(line["quantity"] for line in lines),
        }
