import hmac
import time

from loguru import logger

from src.domain.cache_tags import tags_for_topic
from src.domain.interfaces import ITagInvalidator
from src.domain.webhook import RevalidationResponse, WebhookRequest


class RevalidationService:
    """Turns Shopify product/collection webhooks into cache-tag invalidations.

    Every outcome is acknowledged with status 200: Shopify keeps retrying a
    webhook until it gets a 2xx.
    """

    def __init__(self, secret: str, invalidator: ITagInvalidator) -> None:
        self._secret = secret
        self._invalidator = invalidator

    def handle(self, request: WebhookRequest) -> RevalidationResponse:
        if not request.secret or not hmac.compare_digest(
            request.secret.encode(), self._secret.encode()
        ):
            logger.error("Invalid revalidation secret.")
            return RevalidationResponse()

        tags = tags_for_topic(request.topic)
        if not tags:
            logger.debug(f"Ignoring webhook topic '{request.topic}'")
            return RevalidationResponse()

        for tag in tags:
            # Best effort: the webhook is acknowledged whatever the cache store says
            try:
                self._invalidator.invalidate(tag)
            except Exception as exc:
                logger.error(f"Invalidating cache tag '{tag}' failed: {exc}")
            else:
                logger.info(f"Invalidated cache tag '{tag}' for topic '{request.topic}'")

        return RevalidationResponse(revalidated=True, now=int(time.time() * 1000))
