import httpx
from loguru import logger

from src.domain.cache_tags import CacheTag
from src.shared.decorators import log_errors


class CacheInvalidationError(Exception):
    """Raised when the cache store answers an invalidation with a non-2xx response."""


class HttpTagInvalidator:
    """Asks the external cache store to drop every entry carrying a cache tag."""

    def __init__(self, client: httpx.Client, endpoint: str, token: str) -> None:
        self._client = client
        self._endpoint = endpoint
        self._headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

    @log_errors
    def invalidate(self, tag: CacheTag) -> None:
        """POST ``{"tag": tag}`` to the cache store's invalidation endpoint.

        Raises:
            CacheInvalidationError: on non-2xx HTTP responses.
        """
        response = self._client.post(
            self._endpoint, headers=self._headers, json={"tag": str(tag)}
        )

        if not response.is_success:
            raise CacheInvalidationError(
                f"Cache store error {response.status_code}: {response.text}"
            )

        logger.info(f"[Cache] Tag '{tag}' invalidated ({response.status_code})")
