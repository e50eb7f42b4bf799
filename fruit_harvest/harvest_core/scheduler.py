"""
Frame Scheduler
===============

Single-threaded cooperative timer queue pumped once per frame by the host
loop. Every scheduled callback is tied to a TimerHandle; cancelling the
handle guarantees the callback never runs again, even if it is already due
in the pump currently executing.
"""

from __future__ import annotations

import heapq
import itertools
import time
from typing import Callable, List, Optional, Tuple


class VirtualClock:
    """Manually advanced time source for tests and headless runs."""

    def __init__(self, start: float = 0.0):
        self._now = float(start)

    def __call__(self) -> float:
        return self._now

    def advance(self, seconds: float) -> float:
        if seconds < 0:
            raise ValueError(f"Cannot advance clock backwards ({seconds})")
        self._now += seconds
        return self._now


class TimerHandle:
    """
    Cancellation token for a scheduled callback.

    `interval` is None for one-shot timers and frame requests.
    """

    __slots__ = ("_when", "_callback", "_interval", "_cancelled", "_is_frame")

    def __init__(
        self,
        when: float,
        callback: Callable[[], None],
        interval: Optional[float] = None,
        is_frame: bool = False
    ):
        self._when = when
        self._callback = callback
        self._interval = interval
        self._cancelled = False
        self._is_frame = is_frame

    @property
    def when(self) -> float:
        """Time the callback is next due."""
        return self._when

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def repeating(self) -> bool:
        return self._interval is not None

    def cancel(self) -> None:
        """Stop the callback from running. Safe to call more than once."""
        self._cancelled = True
        self._callback = None

    def _run(self) -> None:
        if self._cancelled:
            return
        self._callback()

    def __repr__(self) -> str:
        kind = "frame" if self._is_frame else ("every" if self.repeating else "once")
        state = "cancelled" if self._cancelled else f"due={self._when:.3f}"
        return f"TimerHandle({kind}, {state})"


class FrameScheduler:
    """
    Timer queue driven by explicit `pump()` calls.

    - call_later: one-shot after a delay
    - call_every: repeating; catches up missed intervals within one pump
    - request_frame: runs on the next pump (animation frame)
    """

    def __init__(self, time_source: Optional[Callable[[], float]] = None):
        """
        Initialize scheduler.

        Args:
            time_source: Callable returning seconds. Defaults to time.perf_counter.
        """
        self._time = time_source if time_source is not None else time.perf_counter
        self._timers: List[Tuple[float, int, TimerHandle]] = []
        self._frames: List[TimerHandle] = []
        self._seq = itertools.count()

    def now(self) -> float:
        """Current time according to the time source."""
        return self._time()

    @property
    def pending(self) -> int:
        """Number of live (non-cancelled) scheduled callbacks."""
        live_timers = sum(1 for _, _, h in self._timers if not h.cancelled)
        live_frames = sum(1 for h in self._frames if not h.cancelled)
        return live_timers + live_frames

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run `callback` once, `delay` seconds from now."""
        if delay < 0:
            raise ValueError(f"delay must be non-negative, got {delay}")
        handle = TimerHandle(self.now() + delay, callback)
        self._push(handle)
        return handle

    def call_every(self, interval: float, callback: Callable[[], None]) -> TimerHandle:
        """Run `callback` every `interval` seconds, first run one interval from now."""
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        handle = TimerHandle(self.now() + interval, callback, interval=interval)
        self._push(handle)
        return handle

    def request_frame(self, callback: Callable[[], None]) -> TimerHandle:
        """Run `callback` once on the next pump."""
        handle = TimerHandle(self.now(), callback, is_frame=True)
        self._frames.append(handle)
        return handle

    def cancel_all(self) -> None:
        """Cancel every scheduled callback."""
        for _, _, handle in self._timers:
            handle.cancel()
        for handle in self._frames:
            handle.cancel()
        self._timers.clear()
        self._frames.clear()

    def pump(self) -> int:
        """
        Run everything that is due.

        Timers run in due-time order, then the frame callbacks that were
        requested before this pump started.

        Returns:
            Number of callbacks executed.
        """
        now = self.now()
        executed = 0

        while self._timers and self._timers[0][0] <= now:
            _, _, handle = heapq.heappop(self._timers)
            if handle.cancelled:
                continue
            if handle.repeating:
                # Reschedule before running so the callback may cancel it
                handle._when += handle._interval
                self._push(handle)
            handle._run()
            executed += 1

        frames, self._frames = self._frames, []
        for handle in frames:
            if handle.cancelled:
                continue
            handle._run()
            executed += 1

        return executed

    def _push(self, handle: TimerHandle) -> None:
        heapq.heappush(self._timers, (handle.when, next(self._seq), handle))
