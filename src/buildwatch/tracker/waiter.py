"""Waiter — condition polling with an optional deadline.

Evaluates an async condition at fixed intervals until it holds.
Without a deadline the loop only ends when the condition is met
(or the awaiting task is cancelled).
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable

Condition = Callable[[], Awaitable[bool]]


class Waiter:
    """Sleep-then-retry poll loop."""

    def __init__(
        self,
        poll_interval_ms: int = 1000,
        max_wait_s: float | None = None,
    ) -> None:
        self._poll_interval = poll_interval_ms / 1000
        self._max_wait = max_wait_s
        self._polls = 0

    @property
    def polls(self) -> int:
        """Number of times the condition was evaluated in the last wait."""
        return self._polls

    async def wait_for(self, condition: Condition) -> bool:
        """Poll ``condition`` until it returns True.

        The condition is always evaluated at least once, and once more after
        each sleep. Exceptions raised by the condition propagate.

        Returns:
            True if the condition held, False if max_wait_s elapsed first.
        """
        start = time.monotonic()
        self._polls = 0

        while True:
            self._polls += 1
            if await condition():
                return True
            if self._max_wait is not None and (time.monotonic() - start) >= self._max_wait:
                return False
            await asyncio.sleep(self._poll_interval)
