"""Bounded concurrency for async operations.

Mirror, Clean and Repair run per-file work through a ConcurrencyLimiter so
that no more than N tasks touch the network or the storage bridge at once.
"""

import asyncio
import inspect
import logging
import math
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from ucdstore.errors import InvalidArgumentError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def validate_concurrency(concurrency: object) -> int:
    """Validate a concurrency value.

    Args:
        concurrency: Value to check.

    Returns:
        The value as an int.

    Raises:
        InvalidArgumentError: If the value is not a positive integer.
    """
    if isinstance(concurrency, bool) or not isinstance(concurrency, int | float):
        raise InvalidArgumentError("Concurrency must be a positive integer")
    if isinstance(concurrency, float) and (
        math.isnan(concurrency) or not concurrency.is_integer()
    ):
        raise InvalidArgumentError("Concurrency must be a positive integer")
    if concurrency < 1:
        raise InvalidArgumentError("Concurrency must be a positive integer")
    return int(concurrency)


class ConcurrencyLimiter:
    """Runs callables with at most N in flight; the rest wait in FIFO order.

    asyncio.Semaphore wakes waiters in the order they started waiting, which
    gives the queueing order.
    """

    def __init__(self, concurrency: int) -> None:
        self._concurrency = validate_concurrency(concurrency)
        self._semaphore = asyncio.Semaphore(self._concurrency)
        self._active = 0

    @property
    def concurrency(self) -> int:
        """Maximum number of calls allowed to run at once."""
        return self._concurrency

    @property
    def active(self) -> int:
        """Number of calls currently running."""
        return self._active

    async def __call__(
        self,
        func: Callable[..., Awaitable[T] | T],
        *args: Any,
        **kwargs: Any,
    ) -> T:
        """Run func once a slot is free and return its result.

        Args:
            func: Coroutine function or plain callable.
            *args: Positional arguments for func.
            **kwargs: Keyword arguments for func.

        Returns:
            Whatever func returns (awaited if it is awaitable).
        """
        async with self._semaphore:
            self._active += 1
            try:
                result = func(*args, **kwargs)
                if inspect.isawaitable(result):
                    result = await result
                return result  # type: ignore[return-value]
            finally:
                self._active -= 1


def create_concurrency_limiter(concurrency: int) -> ConcurrencyLimiter:
    """Create a limiter, validating the bound eagerly.

    Args:
        concurrency: Maximum number of simultaneous calls.

    Returns:
        A new ConcurrencyLimiter.

    Raises:
        InvalidArgumentError: If concurrency is not a positive integer.
    """
    limiter = ConcurrencyLimiter(concurrency)
    logger.debug("Created concurrency limiter with %d slots", limiter.concurrency)
    return limiter
