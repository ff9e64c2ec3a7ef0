"""
Retry Decorators

Retry for transport-level failures only. Venue errors (classified
responses) are never retried here; callers decide using ``retryable``.
"""

import asyncio
from functools import wraps
from typing import Tuple, Type, Callable, Any, Optional

import aiohttp

from ..exceptions.exchange import ExchangeNetworkError
from ..logging import get_logger


def calculate_delay(attempt: int, backoff: str, base_delay: float, max_delay: float) -> float:
    """Delay before the retry following ``attempt`` (1-based)."""
    if backoff == "exponential":
        return min(base_delay * (2 ** (attempt - 1)), max_delay)
    if backoff == "linear":
        return min(base_delay * attempt, max_delay)
    return base_delay


def retry_decorator(
    max_attempts: int = 3,
    backoff: str = "exponential",
    base_delay: float = 0.1,
    max_delay: float = 5.0,
    exceptions: Optional[Tuple[Type[Exception], ...]] = None,
):
    """
    Retry decorator for async REST calls.

    Args:
        max_attempts: Maximum attempts including the first one
        backoff: "exponential", "linear" or "fixed"
        base_delay: Base delay in seconds
        max_delay: Maximum delay cap in seconds
        exceptions: Exceptions that trigger a retry; defaults to connection
            errors, timeouts and ExchangeNetworkError

    When the decorated method's ``self`` has ``max_attempts`` or
    ``retry_delay`` attributes they take precedence over the arguments.
    """
    if exceptions is None:
        exceptions = (
            aiohttp.ClientConnectionError,
            asyncio.TimeoutError,
            ExchangeNetworkError
        )

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            owner = args[0] if args else None
            attempts = max(1, getattr(owner, 'max_attempts', max_attempts))
            first_delay = getattr(owner, 'retry_delay', base_delay)

            for attempt in range(1, attempts + 1):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    if attempt >= attempts:
                        raise

                    delay = calculate_delay(attempt, backoff, first_delay, max_delay)
                    get_logger('bingx_connector.retry').debug(
                        "Request failed, retrying", attempt=attempt, delay=delay, error=str(e))
                    await asyncio.sleep(delay)

        return wrapper
    return decorator
