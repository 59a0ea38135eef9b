"""Error taxonomy shared by the storefront client, data sources and services."""


class StorefrontError(Exception):
    """Base class for every classified storefront failure."""

    kind = "StorefrontError"


class UpstreamError(StorefrontError):
    """The Storefront API answered with a structured error or a non-2xx status."""

    kind = "UpstreamError"

    def __init__(self, cause: str, status: int, message: str, query: str) -> None:
        super().__init__(f"{message} (cause={cause}, status={status})")
        self.cause = cause
        self.status = status
        self.message = message
        self.query = query


class TransportError(StorefrontError):
    """The request never produced a usable response (network or parse failure)."""

    kind = "TransportError"

    def __init__(self, error: BaseException, query: str) -> None:
        super().__init__(f"{type(error).__name__}: {error}")
        self.error = error
        self.query = query


class NotFoundError(StorefrontError):
    """A lookup that treats a miss as exceptional (page by handle)."""

    kind = "NotFound"

    def __init__(self, entity: str, handle: str) -> None:
        super().__init__(f"{entity} with handle '{handle}' not found.")
        self.entity = entity
        self.handle = handle
