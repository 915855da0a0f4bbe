"""Tests for Waiter — condition polling with an optional deadline."""

from __future__ import annotations

import pytest

from buildwatch.tracker.waiter import Waiter


class CountdownCondition:
    """Condition that becomes true after a number of evaluations."""

    def __init__(self, false_count: int) -> None:
        self._false_count = false_count
        self.calls = 0

    async def __call__(self) -> bool:
        self.calls += 1
        return self.calls > self._false_count


class TestWaiter:
    @pytest.mark.asyncio
    async def test_met_immediately(self) -> None:
        condition = CountdownCondition(0)
        waiter = Waiter(poll_interval_ms=10, max_wait_s=5)
        assert await waiter.wait_for(condition) is True
        assert condition.calls == 1
        assert waiter.polls == 1

    @pytest.mark.asyncio
    async def test_met_after_retries(self) -> None:
        condition = CountdownCondition(3)
        waiter = Waiter(poll_interval_ms=10, max_wait_s=5)
        assert await waiter.wait_for(condition) is True
        assert condition.calls == 4

    @pytest.mark.asyncio
    async def test_never_met(self) -> None:
        """Condition keeps failing → returns False after max_wait."""
        condition = CountdownCondition(10_000)
        waiter = Waiter(poll_interval_ms=10, max_wait_s=0.05)
        assert await waiter.wait_for(condition) is False
        assert condition.calls >= 2

    @pytest.mark.asyncio
    async def test_zero_deadline_still_evaluates_once(self) -> None:
        condition = CountdownCondition(0)
        waiter = Waiter(poll_interval_ms=10, max_wait_s=0)
        assert await waiter.wait_for(condition) is True

    @pytest.mark.asyncio
    async def test_no_deadline_waits_until_met(self) -> None:
        condition = CountdownCondition(5)
        waiter = Waiter(poll_interval_ms=10)
        assert await waiter.wait_for(condition) is True
        assert waiter.polls == 6

    @pytest.mark.asyncio
    async def test_condition_errors_propagate(self) -> None:
        async def broken() -> bool:
            raise RuntimeError("boom")

        waiter = Waiter(poll_interval_ms=10, max_wait_s=1)
        with pytest.raises(RuntimeError, match="boom"):
            await waiter.wait_for(broken)

    def test_default_params(self) -> None:
        waiter = Waiter()
        assert waiter._poll_interval == 1.0
        assert waiter._max_wait is None
