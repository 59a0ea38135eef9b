import httpx
from pydantic import BaseModel

from src.domain.cache_tags import CacheMode, CacheTag
from src.infrastructure.error_classifier import classify_error
from src.shared.decorators import log_errors

SECURE_SCHEME = "https://"


class StorefrontResponse(BaseModel):
    status: int
    body: dict


class StorefrontGraphQLClient:
    """Thin httpx wrapper for the Shopify Storefront GraphQL API.

    Cache tags and the cache directive are attached to the outgoing request as
    ``httpx`` extensions (``cache_tags`` / ``cache_mode``) so a caching
    transport can honour them; this client never caches anything itself.
    """

    GRAPHQL_PATH = "/api/{api_version}/graphql.json"

    def __init__(
        self,
        client: httpx.Client,
        store_domain: str,
        access_token: str,
        api_version: str,
    ) -> None:
        if not store_domain.startswith(SECURE_SCHEME):
            raise ValueError(
                f"Store domain must start with {SECURE_SCHEME!r}, got {store_domain!r}"
            )
        self._client = client
        self._endpoint = store_domain.rstrip("/") + self.GRAPHQL_PATH.format(
            api_version=api_version
        )
        self._headers = {
            "X-Shopify-Storefront-Access-Token": access_token,
            "Content-Type": "application/json",
        }

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @log_errors
    def fetch(
        self,
        query: str,
        variables: dict | None = None,
        tags: list[CacheTag] | None = None,
        cache: CacheMode = CacheMode.force_cache,
        headers: dict[str, str] | None = None,
    ) -> StorefrontResponse:
        """POST a GraphQL document and return the HTTP status with the parsed body.

        Only the first entry of a GraphQL ``errors`` list is reported; the rest
        are dropped. Nothing is retried.

        Raises:
            UpstreamError: on GraphQL errors or non-2xx HTTP responses.
            TransportError: on network failures or undecodable bodies.
        """
        payload: dict = {"query": query}
        if variables:
            payload["variables"] = variables

        # Caller headers never override the credential or the content type
        request_headers = httpx.Headers(headers or {})
        request_headers.update(self._headers)
        if cache is CacheMode.no_store:
            request_headers["Cache-Control"] = "no-store"

        request = self._client.build_request(
            "POST",
            self._endpoint,
            headers=request_headers,
            json=payload,
            extensions={
                "cache_tags": [str(tag) for tag in tags or []],
                "cache_mode": str(cache),
            },
        )

        try:
            response = self._client.send(request)
            response.raise_for_status()
            body = response.json()
            if not isinstance(body, dict):
                raise ValueError(f"Expected a JSON object, got {type(body).__name__}")
        except Exception as exc:
            raise classify_error(exc, query) from exc

        if errors := body.get("errors"):
            first = errors[0] if isinstance(errors, list) else errors
            if not isinstance(first, dict) or "message" not in first:
                first = {"message": str(first)}
            raise classify_error(first, query)

        return StorefrontResponse(status=response.status_code, body=body)
