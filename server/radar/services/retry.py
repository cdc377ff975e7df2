"""Exponential backoff around asynchronous fetch operations."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from .errors import is_retryable

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY = 1.0


class RetryExecutor:
    """Run an async operation, retrying retryable failures with backoff.

    The delay before retry ``n`` (counted from 0) is ``base_delay * 2**n``,
    so the defaults wait 1s, 2s and 4s before the fourth and final attempt.
    Non-retryable errors propagate on first occurrence.
    """

    def __init__(
        self,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
        classifier: Callable[[BaseException], bool] = is_retryable,
    ):
        self._sleep = sleep or asyncio.sleep
        self._classifier = classifier

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        max_retries: int = DEFAULT_MAX_RETRIES,
        base_delay: float = DEFAULT_BASE_DELAY,
    ) -> T:
        if max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {max_retries}")

        for attempt in range(max_retries + 1):
            try:
                return await operation()
            except Exception as exc:
                if not self._classifier(exc):
                    raise
                if attempt == max_retries:
                    logger.warning(
                        "Giving up after %d attempts: %s", max_retries + 1, exc
                    )
                    raise

                delay = base_delay * (2 ** attempt)
                logger.info(
                    "Retry %d/%d in %.2fs after: %s",
                    attempt + 1, max_retries + 1, delay, exc,
                )
                await self._sleep(delay)

        # range() always yields at least one attempt
        raise AssertionError("unreachable")
