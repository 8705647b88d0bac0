"""
Test suite for the virtual and asyncio schedulers.

System role: Verification of the capture clock abstraction
"""

import asyncio

import pytest

from prelude.core.capture import AsyncioScheduler, VirtualScheduler


class TestVirtualScheduler:
    """Test suite for VirtualScheduler."""

    def test_advance_should_fire_due_timers_in_order(self) -> None:
        """Test timers fire by due time, ties in scheduling order."""
        # Arrange
        scheduler = VirtualScheduler(start_ms=100)
        fired: list[tuple[str, int]] = []
        scheduler.call_later(50, lambda: fired.append(("b", scheduler.now())))
        scheduler.call_later(10, lambda: fired.append(("a", scheduler.now())))
        scheduler.call_later(50, lambda: fired.append(("c", scheduler.now())))

        # Act
        scheduler.advance(60)

        # Assert
        assert fired == [("a", 110), ("b", 150), ("c", 150)]
        assert scheduler.now() == 160

    def test_advance_should_skip_cancelled_timers(self) -> None:
        scheduler = VirtualScheduler()
        fired: list[str] = []
        timer = scheduler.call_later(10, lambda: fired.append("x"))

        timer.cancel()
        scheduler.advance(100)

        assert fired == []
        assert scheduler.pending_timers == 0

    def test_advance_should_fire_timers_scheduled_by_callbacks(self) -> None:
        """Test a callback re-arming inside the window fires in the same advance."""
        scheduler = VirtualScheduler()
        fired: list[int] = []

        def first() -> None:
            fired.append(scheduler.now())
            scheduler.call_later(20, lambda: fired.append(scheduler.now()))

        scheduler.call_later(10, first)
        scheduler.advance(50)

        assert fired == [10, 30]

    def test_advance_should_reject_negative_delta(self) -> None:
        with pytest.raises(ValueError):
            VirtualScheduler().advance(-1)

    async def test_settle_should_await_spawned_tasks(self) -> None:
        scheduler = VirtualScheduler()
        results: list[int] = []

        async def work(value: int) -> int:
            results.append(value)
            if value < 3:
                scheduler.spawn(work(value + 1))
            return value

        handle = scheduler.spawn(work(1))
        await scheduler.settle()

        assert results == [1, 2, 3]
        assert await handle == 1


class TestAsyncioScheduler:
    """Test suite for AsyncioScheduler."""

    async def test_call_later_should_run_callback_on_loop(self) -> None:
        scheduler = AsyncioScheduler()
        fired = asyncio.Event()

        scheduler.call_later(1, fired.set)

        await asyncio.wait_for(fired.wait(), timeout=1)

    async def test_cancel_should_prevent_callback(self) -> None:
        scheduler = AsyncioScheduler()
        fired: list[bool] = []

        timer = scheduler.call_later(5, lambda: fired.append(True))
        timer.cancel()
        await asyncio.sleep(0.02)

        assert timer.cancelled
        assert fired == []

    async def test_spawn_should_return_awaitable_result(self) -> None:
        scheduler = AsyncioScheduler()

        async def answer() -> int:
            return 42

        assert await scheduler.spawn(answer()) == 42
