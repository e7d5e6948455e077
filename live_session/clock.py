"""Timer sources used by the scheduler and the mock segment source.

Every delayed callback in a session goes through a :class:`Clock` so a
session can cancel its pending work as a unit. ``ThreadingClock`` backs
production sessions with ``threading.Timer``; ``ManualClock`` drives the
same code deterministically in tests and replays.
"""
from __future__ import annotations

import heapq
import itertools
import threading
import time
from typing import Callable, List, Optional, Protocol, Tuple


class TimerHandle(Protocol):  # Cancellable pending callback
    @property
    def active(self) -> bool: ...

    def cancel(self) -> None: ...


class Clock(Protocol):  # Time source plus delayed execution
    def now(self) -> float: ...

    def call_later(self, delay: float, fn: Callable[[], None]) -> TimerHandle: ...


class _ThreadTimerHandle:
    def __init__(self, timer: threading.Timer) -> None:
        self._timer = timer

    @property
    def active(self) -> bool:
        return not self._timer.finished.is_set()

    def cancel(self) -> None:
        self._timer.cancel()


class ThreadingClock:
    """Monotonic clock that runs callbacks on daemon ``threading.Timer`` threads."""

    def __init__(self) -> None:
        self._origin = time.monotonic()

    def now(self) -> float:
        return time.monotonic() - self._origin

    def call_later(self, delay: float, fn: Callable[[], None]) -> _ThreadTimerHandle:
        timer = threading.Timer(max(0.0, delay), fn)
        timer.daemon = True
        timer.start()
        return _ThreadTimerHandle(timer)


class _ManualTimerHandle:
    def __init__(self, due: float) -> None:
        self.due = due
        self._done = False

    @property
    def active(self) -> bool:
        return not self._done

    def cancel(self) -> None:
        self._done = True

    def _mark_fired(self) -> None:
        self._done = True


class ManualClock:
    """Deterministic clock advanced explicitly by the caller.

    Callbacks due at the same instant run in the order they were scheduled.
    Callbacks scheduled while advancing run in the same ``advance`` call if
    they fall due before the target time.
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._seq = itertools.count()
        self._queue: List[Tuple[float, int, _ManualTimerHandle, Callable[[], None]]] = []

    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, fn: Callable[[], None]) -> _ManualTimerHandle:
        due = self._now + max(0.0, delay)
        handle = _ManualTimerHandle(due)
        heapq.heappush(self._queue, (due, next(self._seq), handle, fn))
        return handle

    def pending(self) -> int:
        """Number of callbacks still scheduled and not cancelled."""

        return sum(1 for _, _, handle, _ in self._queue if handle.active)

    def next_due(self) -> Optional[float]:
        for due, _, handle, _ in sorted(self._queue):
            if handle.active:
                return due
        return None

    def advance(self, seconds: float) -> int:
        """Move time forward by ``seconds`` and run every callback that falls due.

        Returns the number of callbacks executed.
        """

        if seconds < 0:
            raise ValueError("cannot advance a clock backwards")
        target = self._now + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, handle, fn = heapq.heappop(self._queue)
            if not handle.active:
                continue
            self._now = due
            handle._mark_fired()
            fn()
            fired += 1
        self._now = target
        return fired


__all__ = ["Clock", "ManualClock", "ThreadingClock", "TimerHandle"]
