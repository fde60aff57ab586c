"""
Retry with backoff for source API calls.

Schedule, for attempt = 0, 1, ... max_attempts - 1:
- RateLimitError: sleep 2 ** attempt seconds, then retry
- ServerError / TransportError: sleep attempt + 1 seconds, then retry
- anything else: re-raise immediately, no retry

After the last attempt the error is re-raised for the caller's failure
policy to interpret.
"""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from teampulse.errors import RateLimitError, ServerError, SourceError, TransportError

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


def backoff_delay(error: SourceError, attempt: int) -> float | None:
    """Seconds to wait before retrying after `error`, or None if not retryable."""
    if isinstance(error, RateLimitError):
        return float(2 ** attempt)
    if isinstance(error, (ServerError, TransportError)):
        return float(attempt + 1)
    return None


async def retry_with_backoff(
    fn: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    sleep: Sleep = asyncio.sleep,
) -> T:
    """
    Call `fn` until it succeeds or the retry budget runs out.

    Args:
        fn: Zero-argument coroutine factory; called once per attempt
        max_attempts: Total attempts, including the first
        sleep: Awaitable sleep, injectable for tests

    Returns:
        Whatever `fn` returns on the first successful attempt
    """
    max_attempts = max(1, int(max_attempts))
    for attempt in range(max_attempts):
        try:
            return await fn()
        except SourceError as e:
            delay = backoff_delay(e, attempt)
            if delay is None or attempt == max_attempts - 1:
                raise
            if isinstance(e, RateLimitError):
                logger.info(f"{e.source} rate limited during {e.operation}, waiting {delay:.0f}s...")
            else:
                logger.warning(f"{e.source} {e.operation} failed ({e}), retrying in {delay:.0f}s")
            await sleep(delay)
