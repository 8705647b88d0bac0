"""
Scheduled-task abstraction for the event tracker.

The tracker never calls ``asyncio`` timers directly; it asks a Scheduler for
the time and for cancellable delayed callbacks. Production code uses
AsyncioScheduler. Tests use VirtualScheduler and advance a virtual clock
deterministically instead of sleeping on real timers.

Dependencies: asyncio (stdlib)
System role: Clock and timer provider for the capture side
"""

import asyncio
import heapq
import itertools
import time
from collections.abc import Awaitable, Callable, Coroutine
from typing import Any, Protocol


class TimerHandle(Protocol):
    """Cancellation handle returned by Scheduler.call_later."""

    @property
    def cancelled(self) -> bool: ...

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Clock, delayed callbacks and background coroutine spawning."""

    def now(self) -> int:
        """Current time in epoch milliseconds."""
        ...

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` once after ``delay_ms`` unless cancelled first."""
        ...

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> Awaitable[Any]:
        """Run ``coro`` in the background and return an awaitable for its result."""
        ...


class _AsyncioTimer:
    def __init__(self, handle: asyncio.TimerHandle) -> None:
        self._handle = handle

    @property
    def cancelled(self) -> bool:
        return self._handle.cancelled()

    def cancel(self) -> None:
        self._handle.cancel()


class AsyncioScheduler:
    """Scheduler backed by the running asyncio event loop and the wall clock."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop
        self._tasks: set[asyncio.Task] = set()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now(self) -> int:
        return int(time.time() * 1000)

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        return _AsyncioTimer(self.loop.call_later(delay_ms / 1000, callback))

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> Awaitable[Any]:
        task = self.loop.create_task(coro)
        # Keep a strong reference until the task finishes
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task


class VirtualTimer:
    """Timer entry of the virtual scheduler."""

    def __init__(self, due_ms: int, callback: Callable[[], None]) -> None:
        self.due_ms = due_ms
        self.callback = callback
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


class VirtualScheduler:
    """
    Deterministic scheduler driven by an explicit virtual clock.

    Timers fire only inside ``advance``, in due-time order (ties fire in the
    order they were scheduled). Spawned coroutines become asyncio tasks on the
    running loop; ``settle`` awaits every one of them, including tasks spawned
    while settling.

    Usage:
        scheduler = VirtualScheduler(start_ms=0)
        tracker = EventTracker("s1", transport, scheduler, provider)
        tracker.record_activity()
        scheduler.advance(1000)
        await scheduler.settle()
    """

    def __init__(self, start_ms: int = 0) -> None:
        self._now = start_ms
        self._heap: list[tuple[int, int, VirtualTimer]] = []
        self._counter = itertools.count()
        self._tasks: list[asyncio.Task] = []

    def now(self) -> int:
        return self._now

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> VirtualTimer:
        timer = VirtualTimer(self._now + max(0, delay_ms), callback)
        heapq.heappush(self._heap, (timer.due_ms, next(self._counter), timer))
        return timer

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> Awaitable[Any]:
        task = asyncio.ensure_future(coro)
        self._tasks.append(task)
        return task

    @property
    def pending_timers(self) -> int:
        """Number of timers still waiting to fire."""
        return sum(1 for _, _, timer in self._heap if not timer.cancelled)

    def advance(self, delta_ms: int) -> None:
        """
        Move the clock forward, firing every timer that becomes due.

        Args:
            delta_ms: Milliseconds to advance (must not be negative)

        Raises:
            ValueError: If delta_ms is negative
        """
        if delta_ms < 0:
            raise ValueError("Virtual time cannot go backwards")
        target = self._now + delta_ms
        while self._heap and self._heap[0][0] <= target:
            due_ms, _, timer = heapq.heappop(self._heap)
            if timer.cancelled:
                continue
            self._now = due_ms
            timer.callback()
        self._now = target

    async def settle(self) -> None:
        """Await all spawned tasks until none are left running."""
        while self._tasks:
            tasks, self._tasks = self._tasks, []
            await asyncio.gather(*tasks)
