from loguru import logger

from src.domain.cache_tags import CacheMode, CacheTag
from src.domain.storefront import CartLineInput, CartLineUpdate
from src.infrastructure import queries
from src.infrastructure.error_classifier import classify_error
from src.infrastructure.storefront_client import StorefrontGraphQLClient

# Cart user errors are caller mistakes (bad ids, quantities)
USER_ERROR_STATUS = 400


class StorefrontRepository:
    """Fetches raw Storefront payloads from the Shopify Storefront GraphQL API.

    Every method returns the upstream shape untouched (connections, camelCase
    keys); reshaping is left to ``src.application.normalizer``.
    """

    def __init__(self, client: StorefrontGraphQLClient) -> None:
        self._client = client

    def _data(
        self,
        query: str,
        variables: dict | None = None,
        tags: list[CacheTag] | None = None,
        cache: CacheMode = CacheMode.force_cache,
    ) -> dict:
        response = self._client.fetch(query, variables, tags=tags, cache=cache)
        return response.body.get("data") or {}

    @staticmethod
    def _nodes(connection: dict | None) -> list[dict]:
        if not connection:
            return []
        return [edge["node"] for edge in connection.get("edges", [])]

    # --- products ---

    def get_product(self, handle: str) -> dict | None:
        data = self._data(
            queries.GET_PRODUCT_QUERY, {"handle": handle}, tags=[CacheTag.products]
        )
        return data.get("product")

    def get_products(self, query: str | None = None) -> list[dict]:
        data = self._data(
            queries.GET_PRODUCTS_QUERY, {"query": query}, tags=[CacheTag.products]
        )
        return self._nodes(data.get("products"))

    def get_product_recommendations(self, product_id: str) -> list[dict]:
        data = self._data(
            queries.GET_PRODUCT_RECOMMENDATIONS_QUERY,
            {"productId": product_id},
            tags=[CacheTag.products],
        )
        return data.get("productRecommendations") or []

    # --- collections ---

    def get_collection(self, handle: str) -> dict | None:
        data = self._data(
            queries.GET_COLLECTION_QUERY, {"handle": handle}, tags=[CacheTag.collections]
        )
        return data.get("collection")

    def get_collections(self) -> list[dict]:
        data = self._data(queries.GET_COLLECTIONS_QUERY, tags=[CacheTag.collections])
        return self._nodes(data.get("collections"))

    def get_collection_products(self, handle: str) -> list[dict] | None:
        data = self._data(
            queries.GET_COLLECTION_PRODUCTS_QUERY,
            {"handle": handle},
            tags=[CacheTag.collections, CacheTag.products],
        )
        collection = data.get("collection")
        if collection is None:
            logger.debug(f"No collection found for handle '{handle}'")
            return None
        return self._nodes(collection.get("products"))

    # --- content ---

    def get_page(self, handle: str) -> dict | None:
        data = self._data(queries.GET_PAGE_QUERY, {"handle": handle})
        return data.get("pageByHandle")

    def get_pages(self) -> list[dict]:
        data = self._data(queries.GET_PAGES_QUERY)
        return self._nodes(data.get("pages"))

    def get_menu(self, handle: str) -> list[dict] | None:
        data = self._data(
            queries.GET_MENU_QUERY, {"handle": handle}, tags=[CacheTag.collections]
        )
        menu = data.get("menu")
        return menu.get("items", []) if menu else None

    # --- cart ---

    def get_cart(self, cart_id: str) -> dict | None:
        data = self._data(
            queries.GET_CART_QUERY, {"cartId": cart_id}, cache=CacheMode.no_store
        )
        return data.get("cart")

    def create_cart(self, lines: list[CartLineInput] | None = None) -> dict:
        variables = {"lineItems": [self._line_input(line) for line in lines or []]}
        return self._mutate_cart(queries.CREATE_CART_MUTATION, variables, "cartCreate")

    def add_to_cart(self, cart_id: str, lines: list[CartLineInput]) -> dict:
        return self._mutate_cart(
            queries.ADD_TO_CART_MUTATION,
            {"cartId": cart_id, "lines": [self._line_input(line) for line in lines]},
            "cartLinesAdd",
        )

    def remove_from_cart(self, cart_id: str, line_ids: list[str]) -> dict:
        return self._mutate_cart(
            queries.REMOVE_FROM_CART_MUTATION,
            {"cartId": cart_id, "lineIds": line_ids},
            "cartLinesRemove",
        )

    def update_cart(self, cart_id: str, lines: list[CartLineUpdate]) -> dict:
        return self._mutate_cart(
            queries.EDIT_CART_ITEMS_MUTATION,
            {
                "cartId": cart_id,
                "lines": [
                    {
                        "id": line.id,
                        "merchandiseId": line.merchandise_id,
                        "quantity": line.quantity,
                    }
                    for line in lines
                ],
            },
            "cartLinesUpdate",
        )

    def _mutate_cart(self, mutation: str, variables: dict, field: str) -> dict:
        """Run a cart mutation and return its cart.

        Raises:
            UpstreamError: if Shopify reports user errors or returns no cart
                (e.g. an unknown or expired cart id).
        """
        data = self._data(mutation, variables, cache=CacheMode.no_store)
        payload = data.get(field) or {}
        user_errors = payload.get("userErrors") or []
        cart = payload.get("cart")
        if not user_errors and cart is not None:
            return cart

        if user_errors:
            first = user_errors[0]
            error = {
                "message": first.get("message") or "Cart mutation rejected",
                "cause": first.get("code") or "USER_ERROR",
                "status": USER_ERROR_STATUS,
            }
        else:
            error = {"message": f"{field} returned no cart"}
        logger.warning(f"[{field}] {error['message']}")
        raise classify_error(error, mutation)

    @staticmethod
    def _line_input(line: CartLineInput) -> dict:
        return {"merchandiseId": line.merchandise_id, "quantity": line.quantity}
