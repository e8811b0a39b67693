"""Bounded exponential-backoff retry for async calls."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from infrastructure.catalog.errors import PermanentCatalogError

T = TypeVar("T")

logger = logging.getLogger(__name__)


def backoff_delay(attempt: int, base_delay: float) -> float:
    """Delay before 1-indexed ``attempt`` (k >= 2): base_delay * 2**(k-2)."""
    if attempt < 2:
        return 0.0
    return base_delay * (2 ** (attempt - 2))


async def retry_with_backoff(
    task: Callable[[], Awaitable[T]],
    *,
    max_attempts: int,
    base_delay: float,
    sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
) -> T:
    """
    Run ``task`` up to ``max_attempts`` times.

    Every exception is retried, except PermanentCatalogError which is re-raised at once.
    The error of the last attempt is propagated unchanged.

    Args:
        task: Zero-argument factory returning a fresh awaitable per attempt
        max_attempts: Total attempts including the first one
        base_delay: Delay in seconds before the second attempt; doubles afterwards
        sleep: Awaitable sleep, injectable for tests
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")

    attempt = 1
    while True:
        try:
            return await task()
        except PermanentCatalogError:
            raise
        except Exception as e:
            if attempt >= max_attempts:
                raise

            delay = backoff_delay(attempt + 1, base_delay)
            logger.warning(
                "Call failed (attempt %d/%d): %s. Retrying in %.2fs",
                attempt,
                max_attempts,
                e,
                delay,
            )
            await sleep(delay)
            attempt += 1
