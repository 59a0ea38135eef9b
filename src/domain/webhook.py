from collections.abc import Mapping

from pydantic import BaseModel

TOPIC_HEADER = "x-shopify-topic"


class WebhookRequest(BaseModel):
    """The parts of an inbound Shopify webhook the revalidation handler looks at."""

    topic: str = "unknown"
    secret: str | None = None

    @classmethod
    def from_http(
        cls, headers: Mapping[str, str], query_params: Mapping[str, str]
    ) -> "WebhookRequest":
        # HTTP header names are case-insensitive
        topic = next(
            (value for name, value in headers.items() if name.lower() == TOPIC_HEADER),
            None,
        )
        return cls(topic=topic or "unknown", secret=query_params.get("secret"))


class RevalidationResponse(BaseModel):
    """JSON body returned to the webhook sender; the HTTP status is always 200."""

    status: int = 200
    revalidated: bool | None = None
    now: int | None = None  # epoch milliseconds

    def to_json(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)
