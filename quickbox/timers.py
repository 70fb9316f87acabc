"""
Cancellable timers for history coalescing.

The engine is single-threaded, so timers never fire on a thread of their
own. ``LoopScheduler`` runs callbacks on the asyncio event loop that also
handles every command; ``ManualScheduler`` keeps a virtual clock that the
host (or a test) advances explicitly.
"""

import asyncio
import heapq
import itertools
from typing import Callable, Optional, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Runs a callback once after a delay, on the mutation thread."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class LoopScheduler:
    """Scheduler backed by an asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)


class _ManualHandle:
    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """
    Scheduler with a virtual clock.

    Nothing fires until ``advance()`` moves the clock past a timer's due time.
    Used by tests and by synchronous hosts that pump time themselves.
    """

    def __init__(self, start: float = 0.0):
        self.now = start
        self._queue: list[tuple[float, int, _ManualHandle]] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> _ManualHandle:
        handle = _ManualHandle(self.now + max(0.0, delay), callback)
        heapq.heappush(self._queue, (handle.due, next(self._seq), handle))
        return handle

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward and fire every timer that became due.

        Args:
            seconds: Time to advance

        Returns:
            Number of callbacks fired
        """
        target = self.now + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _seq, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self.now = due
            handle.callback()
            fired += 1
        self.now = target
        return fired

    @property
    def pending(self) -> int:
        return sum(1 for _due, _seq, handle in self._queue if not handle.cancelled)


class CoalescingTimer:
    """
    Debounce timer: every ``restart()`` supersedes the previous one.

    The callback runs once the window elapses without another restart.
    """

    def __init__(self, scheduler: Scheduler, window: float, callback: Callable[[], None]):
        self._scheduler = scheduler
        self.window = window
        self._callback = callback
        self._handle: Optional[TimerHandle] = None

    @property
    def is_pending(self) -> bool:
        return self._handle is not None

    def restart(self) -> None:
        self.cancel()
        self._handle = self._scheduler.call_later(self.window, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def fire_now(self) -> None:
        """Run the callback immediately if a firing is pending."""
        if self._handle is not None:
            self.cancel()
            self._callback()

    def _fire(self) -> None:
        self._handle = None
        self._callback()
