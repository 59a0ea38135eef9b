import httpx

from src.domain.errors import StorefrontError, TransportError, UpstreamError

DEFAULT_ERROR_STATUS = 500


def _is_graphql_error(error: object) -> bool:
    return isinstance(error, dict) and "message" in error


def _status(value: object) -> int:
    """HTTP status carried by an error entry, 500 when absent or not a positive integer."""
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value)
    if isinstance(value, int) and not isinstance(value, bool) and value > 0:
        return value
    return DEFAULT_ERROR_STATUS


def classify_error(error: object, query: str) -> StorefrontError:
    """Map a failure raised while talking to the Storefront API to a ``StorefrontError``.

    - a GraphQL error entry (``{"message": ..., "extensions": {"code": ...}}``)
      or a non-2xx ``httpx`` response becomes an ``UpstreamError``;
    - anything else (network failures, undecodable bodies) becomes a
      ``TransportError`` wrapping the original exception;
    - errors that are already classified are returned unchanged.
    """
    if isinstance(error, StorefrontError):
        return error

    if _is_graphql_error(error):
        extensions = error.get("extensions") or {}
        cause = error.get("cause") or extensions.get("code") or "unknown"
        return UpstreamError(
            cause=str(cause),
            status=_status(error.get("status")),
            message=str(error["message"]),
            query=query,
        )

    if isinstance(error, httpx.HTTPStatusError):
        response = error.response
        return UpstreamError(
            cause=response.reason_phrase or "unknown",
            status=response.status_code,
            message=str(error),
            query=query,
        )

    if isinstance(error, BaseException):
        return TransportError(error=error, query=query)

    # Non-exception values that are not GraphQL errors either
    return TransportError(error=ValueError(repr(error)), query=query)
