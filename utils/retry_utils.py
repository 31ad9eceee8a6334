"""
Exponential backoff for calls that may be rate limited upstream.
"""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar
from openai import RateLimitError
from core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def get_status_code(error: BaseException) -> Optional[int]:
    """HTTP status carried by an SDK error, if any."""
    status_code = getattr(error, "status_code", None)
    return status_code if isinstance(status_code, int) else None


def is_rate_limit_error(error: BaseException) -> bool:
    """True for HTTP 429 errors or errors whose message mentions a rate limit."""
    if isinstance(error, RateLimitError) or get_status_code(error) == 429:
        return True

    message = str(error)
    return "429" in message or "rate limit" in message.lower()


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    base_delay: float = 1.0,
    sleep: Optional[Callable[[float], Awaitable[None]]] = None,
) -> T:
    """
    Run an async operation, retrying only when it is rate limited.

    Args:
        operation: Zero-argument coroutine factory
        max_retries: Total number of attempts, including the first
        base_delay: Delay in seconds before the first retry; doubles each retry
        sleep: Awaitable delay function, asyncio.sleep by default

    Returns:
        The operation's result

    Raises:
        The last error raised by the operation
    """
    sleep = sleep or asyncio.sleep
    attempts = max(1, max_retries)

    for attempt in range(attempts):
        try:
            return await operation()
        except Exception as e:
            if is_rate_limit_error(e) and attempt < attempts - 1:
                delay = base_delay * (2 ** attempt)
                logger.warning(
                    f"Rate limited. Retrying in {delay:.1f}s (attempt {attempt + 1}/{attempts})"
                )
                await sleep(delay)
                continue
            raise
