from datetime import datetime
from decimal import Decimal, InvalidOperation

from pydantic import BaseModel, Field, field_validator

# Products carrying this tag are left out of every listing
HIDDEN_PRODUCT_TAG = "nextjs-frontend-hidden"

# Collections whose handle starts with this prefix are left out of listings
HIDDEN_COLLECTION_PREFIX = "hidden"

DEFAULT_CURRENCY_CODE = "USD"


class Money(BaseModel):
    amount: str  # decimal string, e.g. "19.99"
    currency_code: str  # ISO-4217, e.g. "USD"

    @field_validator("amount")
    @classmethod
    def _check_amount(cls, value: str) -> str:
        try:
            parsed = Decimal(value)
        except InvalidOperation as exc:
            raise ValueError(f"amount {value!r} is not a decimal string") from exc
        if parsed.is_nan() or parsed.is_infinite() or parsed < 0:
            raise ValueError(f"amount {value!r} must be a non-negative number")
        return value

    def to_decimal(self) -> Decimal:
        return Decimal(self.amount)


class Image(BaseModel):
    url: str
    alt_text: str
    width: int | None = None
    height: int | None = None


class SEO(BaseModel):
    title: str | None = None
    description: str | None = None


class ProductOption(BaseModel):
    id: str
    name: str
    values: list[str] = Field(default_factory=list)


class SelectedOption(BaseModel):
    name: str
    value: str


class ProductVariant(BaseModel):
    id: str
    title: str
    available_for_sale: bool
    selected_options: list[SelectedOption] = Field(default_factory=list)
    price: Money


class PriceRange(BaseModel):
    max_variant_price: Money
    min_variant_price: Money


class Product(BaseModel):
    """Storefront product with variants and images flattened out of their connections."""

    id: str  # Shopify GID, e.g. "gid://shopify/Product/123"
    handle: str
    title: str
    description: str = ""
    description_html: str = ""
    available_for_sale: bool
    options: list[ProductOption] = Field(default_factory=list)
    price_range: PriceRange
    variants: list[ProductVariant] = Field(default_factory=list)
    images: list[Image] = Field(default_factory=list)
    featured_image: Image | None = None
    seo: SEO = Field(default_factory=SEO)
    tags: list[str] = Field(default_factory=list)
    updated_at: datetime


class Collection(BaseModel):
    handle: str  # "" is the "All products" pseudo-collection
    title: str
    description: str = ""
    seo: SEO = Field(default_factory=SEO)
    updated_at: datetime
    path: str  # always "/search/{handle}"


class CartProduct(BaseModel):
    """Product snapshot frozen into a cart line."""

    id: str
    handle: str
    title: str
    featured_image: Image | None = None


class Merchandise(BaseModel):
    id: str
    title: str
    selected_options: list[SelectedOption] = Field(default_factory=list)
    product: CartProduct


class CartLineCost(BaseModel):
    total_amount: Money


class CartLine(BaseModel):
    id: str
    quantity: int = Field(..., gt=0)
    cost: CartLineCost
    merchandise: Merchandise


class CartCost(BaseModel):
    subtotal_amount: Money
    total_amount: Money
    total_tax_amount: Money


class Cart(BaseModel):
    """Cart projection; lines are flattened and the tax amount is always present."""

    id: str
    checkout_url: str
    cost: CartCost
    lines: list[CartLine] = Field(default_factory=list)
    total_quantity: int = 0


class CartLineInput(BaseModel):
    merchandise_id: str
    quantity: int = Field(default=1, ge=1)


class CartLineUpdate(BaseModel):
    id: str  # cart line id
    merchandise_id: str
    quantity: int = Field(..., ge=0)  # 0 removes the line


class Page(BaseModel):
    id: str
    title: str
    handle: str
    body: str = ""
    body_summary: str = ""
    seo: SEO = Field(default_factory=SEO)
    created_at: datetime
    updated_at: datetime


class MenuItem(BaseModel):
    title: str
    path: str
