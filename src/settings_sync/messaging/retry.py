"""RetryPolicy — bounded attempts with fixed or exponential backoff and jitter."""

from __future__ import annotations

import asyncio
import enum
import random
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    Sleep = Callable[[float], Awaitable[None]]


class Backoff(str, enum.Enum):
    FIXED = "fixed"
    EXPONENTIAL = "exponential"


class RetryPolicy:
    """Configurable in-process retry with pluggable backoff.

    The ``sleep`` callable is injectable so tests can record waits instead of
    spending wall-clock time on them.
    """

    def __init__(
        self,
        *,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 60.0,
        backoff: Backoff | str = Backoff.FIXED,
        jitter: bool = False,
        sleep: Sleep | None = None,
    ) -> None:
        """Configure retry behavior.

        Args:
            max_attempts: Maximum number of handling attempts (including first).
            base_delay: Delay in seconds after the first failed attempt.
            max_delay: Cap on delay in seconds.
            backoff: ``fixed`` keeps ``base_delay`` for every retry,
                ``exponential`` doubles it after each failed attempt.
            jitter: If True, multiply delays by a random factor in [0.5, 1.5].
            sleep: Async sleep used between attempts; ``asyncio.sleep`` if None.
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if base_delay < 0 or max_delay < 0:
            raise ValueError("base_delay and max_delay must be >= 0")
        if base_delay > max_delay:
            raise ValueError("base_delay must be <= max_delay")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.backoff = Backoff(backoff)
        self.jitter = jitter
        self._sleep: Sleep = sleep or asyncio.sleep

    def should_retry(self, attempt: int) -> bool:
        """Return True if another attempt is allowed after *attempt* failed (1-based)."""
        return 1 <= attempt < self.max_attempts

    def delay_for_attempt(self, attempt: int) -> float:
        """Return the delay in seconds after the given 1-based failed attempt."""
        if attempt < 1:
            return 0.0
        if self.backoff is Backoff.EXPONENTIAL:
            delay = min(self.base_delay * (2 ** (attempt - 1)), self.max_delay)
        else:
            delay = min(self.base_delay, self.max_delay)
        if self.jitter:
            delay = delay * (0.5 + random.random())  # noqa: S311
        return float(max(0.0, delay))

    async def wait_before_retry(self, attempt: int) -> None:
        """Sleep for the delay of the given attempt."""
        d = self.delay_for_attempt(attempt)
        if d > 0:
            await self._sleep(d)
