from collections.abc import Callable
from functools import wraps
from typing import ParamSpec, TypeVar

from loguru import logger

from src.domain.errors import TransportError, UpstreamError

P = ParamSpec("P")
R = TypeVar("R")

# Longest query excerpt written to the log
QUERY_EXCERPT = 80


def _excerpt(query: str) -> str:
    flat = " ".join(query.split())
    return flat if len(flat) <= QUERY_EXCERPT else flat[:QUERY_EXCERPT] + "…"


def log_errors(func: Callable[P, R]) -> Callable[P, R]:
    """Catch, log, and re-raise any exception raised by the decorated method.

    Classified storefront errors are logged with their kind, status and the
    first characters of the offending query; anything else is logged with its
    type and message.

    Usage::

        @log_errors
        def fetch(self, query: str) -> StorefrontResponse: ...
    """

    @wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return func(*args, **kwargs)
        except UpstreamError as exc:
            logger.error(
                f"[{func.__qualname__}] {exc.kind} {exc.status} ({exc.cause}): "
                f"{exc.message} | query: {_excerpt(exc.query)}"
            )
            raise
        except TransportError as exc:
            logger.error(
                f"[{func.__qualname__}] {exc.kind}: {exc} | query: {_excerpt(exc.query)}"
            )
            raise
        except Exception as exc:
            logger.error(f"[{func.__qualname__}] {type(exc).__name__}: {exc}")
            raise

    return wrapper
