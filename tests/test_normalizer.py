"""Tests for the pure reshaping functions in src.application.normalizer."""

import copy

import pytest
from pydantic import ValidationError

from src.application.normalizer import (
    derive_alt_text,
    ensure_total_tax,
    flatten,
    normalize_cart,
    normalize_collection,
    normalize_collections,
    normalize_images,
    normalize_menu,
    normalize_product,
    normalize_products,
    rewrite_menu_path,
)
from src.domain.storefront import HIDDEN_PRODUCT_TAG, Cart, Money, Product

DOMAIN = "https://acme.myshopify.com"


def _money(amount: str, currency: str = "USD") -> dict:
    return {"amount": amount, "currencyCode": currency}


def _make_product(
    handle: str = "classic-t-shirt",
    title: str = "Classic T-Shirt",
    tags: list[str] | None = None,
    images: list[dict] | None = None,
) -> dict:
    """Helper: build a minimal Storefront product node."""
    if images is None:
        images = [{"url": "/img/t-shirt-1.avif", "altText": "A t-shirt", "width": 500, "height": 500}]
    return {
        "id": f"gid://shopify/Product/{handle}",
        "handle": handle,
        "title": title,
        "description": "A perfect t-shirt.",
        "descriptionHtml": "<p>A perfect t-shirt.</p>",
        "availableForSale": True,
        "options": [{"id": "opt1", "name": "Size", "values": ["S", "M"]}],
        "priceRange": {"maxVariantPrice": _money("19.99"), "minVariantPrice": _money("19.99")},
        "variants": {
            "edges": [
                {
                    "node": {
                        "id": f"{handle}-s",
                        "title": "S",
                        "availableForSale": True,
                        "selectedOptions": [{"name": "Size", "value": "S"}],
                        "price": _money("19.99"),
                    }
                },
                {
                    "node": {
                        "id": f"{handle}-m",
                        "title": "M",
                        "availableForSale": False,
                        "selectedOptions": [{"name": "Size", "value": "M"}],
                        "price": _money("21.99"),
                    }
                },
            ]
        },
        "featuredImage": images[0] if images else None,
        "images": {"edges": [{"node": image} for image in images]},
        "seo": {"title": f"Buy {title}", "description": None},
        "tags": tags if tags is not None else ["fashion"],
        "updatedAt": "2024-05-01T12:00:00Z",
    }


def _make_cart(tax: dict | None = None, currency: str = "EUR") -> dict:
    """Helper: build a Storefront cart with one line of two items."""
    cost = {"subtotalAmount": _money("40.00", currency), "totalAmount": _money("40.00", currency)}
    if tax is not None:
        cost["totalTaxAmount"] = tax
    return {
        "id": "gid://shopify/Cart/abc",
        "checkoutUrl": f"{DOMAIN}/cart/c/abc",
        "cost": cost,
        "lines": {
            "edges": [
                {
                    "node": {
                        "id": "line1",
                        "quantity": 2,
                        "cost": {"totalAmount": _money("40.00", currency)},
                        "merchandise": {
                            "id": "variant-1",
                            "title": "Medium",
                            "selectedOptions": [{"name": "Size", "value": "Medium"}],
                            "product": {
                                "id": "product-1",
                                "handle": "classic-t-shirt",
                                "title": "Classic T-Shirt",
                                "featuredImage": {"url": "/img/t-shirt-1.avif", "altText": None},
                            },
                        },
                    }
                }
            ]
        },
        "totalQuantity": 2,
    }


# ---------------------------------------------------------------------------
# flatten
# ---------------------------------------------------------------------------


def test_flatten_preserves_edge_order_and_length() -> None:
    """Nodes come back in edge order, one per edge, duplicates included."""
    connection = {"edges": [{"node": "b"}, {"node": "a"}, {"node": "b"}]}

    assert flatten(connection) == ["b", "a", "b"]


def test_flatten_missing_connection_is_empty() -> None:
    assert flatten(None) == []
    assert flatten({"edges": []}) == []


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------


def test_missing_alt_text_is_derived_from_title_and_filename() -> None:
    """A missing altText becomes "{title} - {filename without extension}"."""
    images = normalize_images(
        {"edges": [{"node": {"url": "https://cdn.shopify.com/files/image copy.png?v=1", "altText": None}}]},
        "Acme Cup",
    )

    assert images[0].alt_text == "Acme Cup - image copy"


def test_existing_alt_text_is_kept() -> None:
    images = normalize_images({"edges": [{"node": {"url": "/img/cup.png", "altText": "A cup"}}]}, "Acme Cup")

    assert images[0].alt_text == "A cup"


@pytest.mark.parametrize("url", ["cup.png", "https://cdn.shopify.com/files/cup", ""])
def test_alt_text_falls_back_to_title_without_filename(url: str) -> None:
    """URLs with no extractable filename yield the bare product title."""
    assert derive_alt_text(url, "Acme Cup") == "Acme Cup"


def test_derived_alt_text_starts_with_product_title() -> None:
    for url in ["/a/b.png", "/x/y/z.tar.gz", "nothing"]:
        assert derive_alt_text(url, "Hoodie").startswith("Hoodie")


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------


def test_normalize_product_flattens_variants_and_images() -> None:
    """Variants and images connections become plain lists, other fields are mapped."""
    product = normalize_product(_make_product())

    assert isinstance(product, Product)
    assert [v.id for v in product.variants] == ["classic-t-shirt-s", "classic-t-shirt-m"]
    assert product.variants[1].price.amount == "21.99"
    assert product.variants[1].available_for_sale is False
    assert [i.url for i in product.images] == ["/img/t-shirt-1.avif"]
    assert product.featured_image is not None
    assert product.price_range.min_variant_price.currency_code == "USD"
    assert product.seo.title == "Buy Classic T-Shirt"
    assert product.updated_at.year == 2024


def test_normalize_product_does_not_mutate_input() -> None:
    raw = _make_product(images=[{"url": "/img/a.png", "altText": None}])
    snapshot = copy.deepcopy(raw)

    normalize_product(raw)

    assert raw == snapshot


def test_hidden_product_is_filtered_unless_disabled() -> None:
    """Products tagged with the hidden marker only survive with filtering off."""
    raw = _make_product(tags=["fashion", HIDDEN_PRODUCT_TAG])

    assert normalize_product(raw) is None
    assert normalize_product(raw, filter_hidden=True) is None
    assert normalize_product(raw, filter_hidden=False) is not None


def test_missing_product_normalizes_to_none() -> None:
    assert normalize_product(None) is None
    assert normalize_product(None, filter_hidden=False) is None


def test_normalize_products_drops_hidden_and_missing_in_order() -> None:
    raws = [
        _make_product("a", "A"),
        None,
        _make_product("hidden", "Hidden", tags=[HIDDEN_PRODUCT_TAG]),
        _make_product("b", "B"),
    ]

    assert [p.handle for p in normalize_products(raws)] == ["a", "b"]


def test_missing_required_field_fails_at_the_boundary() -> None:
    """A product without a title is rejected instead of propagating silently."""
    raw = _make_product()
    del raw["title"]

    with pytest.raises(KeyError):
        normalize_product(raw)


# ---------------------------------------------------------------------------
# Collections
# ---------------------------------------------------------------------------


def test_normalize_collection_derives_search_path() -> None:
    collection = normalize_collection(
        {"handle": "spring-2020", "title": "Spring", "updatedAt": "2024-05-01T12:00:00Z"}
    )

    assert collection is not None
    assert collection.path == "/search/spring-2020"


def test_normalize_collections_drops_missing_entries() -> None:
    raws = [
        {"handle": "a", "title": "A", "updatedAt": "2024-05-01T12:00:00Z"},
        None,
        {"handle": "b", "title": "B", "updatedAt": "2024-05-01T12:00:00Z"},
    ]

    assert [c.handle for c in normalize_collections(raws)] == ["a", "b"]
    assert normalize_collection(None) is None


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------


def test_missing_tax_defaults_to_zero_in_cart_currency() -> None:
    cart = normalize_cart(_make_cart(tax=None, currency="EUR"))

    assert isinstance(cart, Cart)
    assert cart.cost.total_tax_amount.currency_code == "EUR"
    assert cart.cost.total_tax_amount.to_decimal() == 0


def test_existing_tax_is_kept() -> None:
    cart = normalize_cart(_make_cart(tax=_money("3.20", "EUR")))

    assert cart.cost.total_tax_amount.amount == "3.20"


def test_ensure_total_tax_is_idempotent_and_pure() -> None:
    raw = _make_cart(tax=None)
    snapshot = copy.deepcopy(raw)

    once = ensure_total_tax(raw)

    assert ensure_total_tax(once) == once
    assert raw == snapshot
    assert normalize_cart(raw) == normalize_cart(once)


def test_normalize_cart_flattens_lines() -> None:
    cart = normalize_cart(_make_cart(tax=None))

    assert len(cart.lines) == 1
    line = cart.lines[0]
    assert line.quantity == 2
    assert line.merchandise.product.handle == "classic-t-shirt"
    assert line.merchandise.product.featured_image.alt_text == "Classic T-Shirt - t-shirt-1"
    assert cart.total_quantity == 2


def test_cart_line_quantity_must_be_positive() -> None:
    raw = _make_cart(tax=None)
    raw["lines"]["edges"][0]["node"]["quantity"] = 0

    with pytest.raises(ValidationError):
        normalize_cart(raw)


@pytest.mark.parametrize("amount", ["NaN", "-1.00", "abc"])
def test_money_rejects_invalid_amounts(amount: str) -> None:
    with pytest.raises(ValidationError):
        Money(amount=amount, currency_code="USD")


# ---------------------------------------------------------------------------
# Menu
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        (f"{DOMAIN}/collections/shirts", "/search/shirts"),
        (f"{DOMAIN}/pages/about", "/about"),
        (f"{DOMAIN}/", "/"),
        (f"{DOMAIN}/search", "/search"),
        ("/collections", "/search"),
        ("/collections-sale", "/collections-sale"),
        (f"{DOMAIN}/collections/collections", "/search/collections"),
        (f"{DOMAIN}/collections/pages", "/search/pages"),
    ],
)
def test_rewrite_menu_path(url: str, expected: str) -> None:
    assert rewrite_menu_path(url, DOMAIN) == expected


def test_rewrite_menu_path_is_idempotent() -> None:
    for url in [
        f"{DOMAIN}/collections/shirts",
        f"{DOMAIN}/collections/collections",
        f"{DOMAIN}/collections/pages",
        f"{DOMAIN}/pages/about",
        f"{DOMAIN}/",
    ]:
        once = rewrite_menu_path(url, DOMAIN)
        assert rewrite_menu_path(once, DOMAIN) == once


def test_rewrite_menu_path_strips_domain_once() -> None:
    """A domain repeated inside the path is only stripped at the front."""
    url = f"{DOMAIN}/pages/{DOMAIN}"

    assert rewrite_menu_path(url, DOMAIN) == f"/{DOMAIN}"


def test_normalize_menu_maps_titles_and_paths() -> None:
    items = normalize_menu(
        [{"title": "Shirts", "url": f"{DOMAIN}/collections/shirts"}, {"title": "About", "url": f"{DOMAIN}/pages/about"}],
        DOMAIN,
    )

    assert [(i.title, i.path) for i in items] == [("Shirts", "/search/shirts"), ("About", "/about")]
