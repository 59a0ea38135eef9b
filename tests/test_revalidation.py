"""Tests for the webhook revalidation handler, cache tags and the HTTP invalidator."""

import json
import time
from unittest.mock import MagicMock

import httpx
import pytest

from src.application.revalidation_service import RevalidationService
from src.domain.cache_tags import CacheTag, tags_for_topic
from src.domain.webhook import RevalidationResponse, WebhookRequest
from src.infrastructure.cache_invalidator import CacheInvalidationError, HttpTagInvalidator

SECRET = "s3cret"


def _make_service() -> tuple[RevalidationService, MagicMock]:
    invalidator = MagicMock(spec=HttpTagInvalidator)
    return RevalidationService(secret=SECRET, invalidator=invalidator), invalidator


# ---------------------------------------------------------------------------
# Topic → tag mapping
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("topic", "expected"),
    [
        ("products/create", [CacheTag.products]),
        ("products/update", [CacheTag.products]),
        ("products/delete", [CacheTag.products]),
        ("collections/create", [CacheTag.collections]),
        ("collections/update", [CacheTag.collections]),
        ("collections/delete", [CacheTag.collections]),
        ("orders/create", []),
        ("unknown", []),
    ],
)
def test_tags_for_topic(topic: str, expected: list[CacheTag]) -> None:
    assert tags_for_topic(topic) == expected


# ---------------------------------------------------------------------------
# Handler
# ---------------------------------------------------------------------------


def test_product_update_with_valid_secret_invalidates_products() -> None:
    service, invalidator = _make_service()
    before = int(time.time() * 1000)

    response = service.handle(WebhookRequest(topic="products/update", secret=SECRET))

    invalidator.invalidate.assert_called_once_with(CacheTag.products)
    assert response.status == 200
    assert response.revalidated is True
    assert response.now >= before


def test_collection_update_invalidates_collections() -> None:
    service, invalidator = _make_service()

    service.handle(WebhookRequest(topic="collections/delete", secret=SECRET))

    invalidator.invalidate.assert_called_once_with(CacheTag.collections)


@pytest.mark.parametrize("secret", [None, "", "wrong"])
def test_bad_secret_is_acknowledged_without_invalidation(secret: str | None) -> None:
    """Missing or wrong secrets get a plain 200 and nothing is invalidated."""
    service, invalidator = _make_service()

    response = service.handle(WebhookRequest(topic="products/update", secret=secret))

    invalidator.invalidate.assert_not_called()
    assert response.to_json() == {"status": 200}


def test_unrecognised_topic_is_acknowledged_without_invalidation() -> None:
    service, invalidator = _make_service()

    response = service.handle(WebhookRequest(topic="orders/create", secret=SECRET))

    invalidator.invalidate.assert_not_called()
    assert response.to_json() == {"status": 200}


def test_invalidation_failure_still_acknowledges() -> None:
    """The cache store failing does not turn into a non-200 for Shopify."""
    service, invalidator = _make_service()
    invalidator.invalidate.side_effect = CacheInvalidationError("Cache store error 503")

    response = service.handle(WebhookRequest(topic="products/create", secret=SECRET))

    assert response.status == 200
    assert response.revalidated is True


def test_response_json_omits_absent_fields() -> None:
    assert RevalidationResponse().to_json() == {"status": 200}
    assert RevalidationResponse(revalidated=True, now=1).to_json() == {
        "status": 200,
        "revalidated": True,
        "now": 1,
    }


# ---------------------------------------------------------------------------
# WebhookRequest.from_http
# ---------------------------------------------------------------------------


def test_from_http_reads_topic_case_insensitively() -> None:
    request = WebhookRequest.from_http(
        {"X-Shopify-Topic": "products/update", "Content-Type": "application/json"},
        {"secret": SECRET},
    )

    assert request.topic == "products/update"
    assert request.secret == SECRET


def test_from_http_defaults_missing_topic_and_secret() -> None:
    request = WebhookRequest.from_http({}, {})

    assert request.topic == "unknown"
    assert request.secret is None


# ---------------------------------------------------------------------------
# HttpTagInvalidator
# ---------------------------------------------------------------------------


def test_http_invalidator_posts_tag() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"invalidated": True})

    invalidator = HttpTagInvalidator(
        client=httpx.Client(transport=httpx.MockTransport(handler)),
        endpoint="https://cache.example.com/invalidate",
        token="cache-token",
    )

    invalidator.invalidate(CacheTag.collections)

    assert json.loads(requests[0].content) == {"tag": "collections"}
    assert requests[0].headers["Authorization"] == "Bearer cache-token"
    assert str(requests[0].url) == "https://cache.example.com/invalidate"


def test_http_invalidator_raises_on_error_status() -> None:
    invalidator = HttpTagInvalidator(
        client=httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(503, text="busy"))),
        endpoint="https://cache.example.com/invalidate",
        token="cache-token",
    )

    with pytest.raises(CacheInvalidationError):
        invalidator.invalidate(CacheTag.products)
