"""Bounded retry with exponential backoff for async actions."""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from .exceptions import FvgError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_retryable(error: BaseException) -> bool:
    """Classify an error before backing off.

    Pipeline errors decide for themselves (see ``FvgError.retryable``);
    anything else, such as transport failures, is worth another attempt.
    """
    if isinstance(error, FvgError):
        return error.retryable
    return True


async def with_retry(
    action: Callable[[], Awaitable[T]],
    *,
    attempts: int = 3,
    delay: float = 1.0,
    should_retry: Callable[[BaseException], bool] = is_retryable,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Await ``action`` until it succeeds or ``attempts`` are exhausted.

    The wait before attempt ``k`` (k >= 2) is ``delay * 2 ** (k - 2)``.
    No wait follows the final attempt, and the last error is raised.

    Args:
        action: Zero-argument coroutine function to call.
        attempts: Maximum number of calls.
        delay: Base delay in seconds.
        should_retry: Returns False for errors that must not be repeated.
        sleep: Awaitable sleep, replaceable in tests.
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    for attempt in range(1, attempts + 1):
        try:
            return await action()
        except Exception as e:
            if attempt >= attempts or not should_retry(e):
                raise
            backoff = delay * (2 ** (attempt - 1))
            logger.warning(f"Attempt {attempt}/{attempts} failed: {e}. Retrying in {backoff:.1f}s...")
            await sleep(backoff)

    raise AssertionError("unreachable")
