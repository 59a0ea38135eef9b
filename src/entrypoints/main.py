import httpx
from loguru import logger

from src.application.revalidation_service import RevalidationService
from src.application.storefront_service import StorefrontService
from src.domain.interfaces import IStorefrontRepository
from src.domain.storefront import CartLineInput
from src.domain.webhook import WebhookRequest
from src.entrypoints.settings import Config
from src.infrastructure.cache_invalidator import HttpTagInvalidator
from src.infrastructure.fixture_repository import FixtureStorefrontRepository
from src.infrastructure.storefront_client import StorefrontGraphQLClient
from src.infrastructure.storefront_repository import StorefrontRepository

HEADER_MENU = "next-js-frontend-header-menu"


def _mock_cache_handler(request: httpx.Request) -> httpx.Response:
    """Mock transport handler: logs the invalidation that would be sent and returns a 200."""
    logger.info(f"[Cache] MOCK POST {request.url}\n{request.content.decode()}")
    return httpx.Response(200, json={"invalidated": True})


def build_repository(config: Config, http_client: httpx.Client) -> IStorefrontRepository:
    if config.STOREFRONT_SOURCE == "graphql":
        client = StorefrontGraphQLClient(
            client=http_client,
            store_domain=config.SHOPIFY_STORE_DOMAIN,
            access_token=config.SHOPIFY_STOREFRONT_ACCESS_TOKEN,
            api_version=config.SHOPIFY_API_VERSION,
        )
        logger.info(f"Using Storefront API at {client.endpoint}")
        return StorefrontRepository(client)

    logger.info("Using the bundled fixture catalogue")
    return FixtureStorefrontRepository(store_domain=config.SHOPIFY_STORE_DOMAIN)


def main() -> None:
    config = Config()  # type: ignore[call-arg]

    # --- Storefront layer ---
    storefront_service = StorefrontService(
        repository=build_repository(config, httpx.Client()),
        store_domain=config.SHOPIFY_STORE_DOMAIN,
    )

    # --- Cache layer ---
    # To go live: replace MockTransport with httpx.Client() (no transport arg).
    cache_client = httpx.Client(transport=httpx.MockTransport(_mock_cache_handler))
    revalidation_service = RevalidationService(
        secret=config.SHOPIFY_REVALIDATION_SECRET,
        invalidator=HttpTagInvalidator(
            client=cache_client,
            endpoint=config.CACHE_INVALIDATION_URL,
            token=config.CACHE_INVALIDATION_TOKEN,
        ),
    )

    # --- Walk through the storefront ---
    for item in storefront_service.get_menu(HEADER_MENU):
        logger.info(f"Menu: {item.title} -> {item.path}")

    for collection in storefront_service.get_collections():
        products = storefront_service.get_collection_products(collection.handle)
        logger.info(f"Collection '{collection.title}' ({collection.path}): {len(products)} product(s)")

    for product in storefront_service.get_products(sort_key="PRICE"):
        price = product.price_range.min_variant_price
        logger.debug(f"{product.handle} | {product.title} | {price.amount} {price.currency_code}")

    cart = storefront_service.create_cart()
    first_variant = storefront_service.get_products()[0].variants[0]
    cart = storefront_service.add_to_cart(
        cart.id, [CartLineInput(merchandise_id=first_variant.id, quantity=2)]
    )
    logger.info(
        f"Cart {cart.id}: {cart.total_quantity} item(s), "
        f"total {cart.cost.total_amount.amount} {cart.cost.total_amount.currency_code}"
    )

    # --- Simulate a product webhook ---
    response = revalidation_service.handle(
        WebhookRequest(topic="products/update", secret=config.SHOPIFY_REVALIDATION_SECRET)
    )
    logger.info(f"Webhook acknowledged: {response.to_json()}")


if __name__ == "__main__":
    main()
