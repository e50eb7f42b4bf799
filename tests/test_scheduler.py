"""
Tests for the frame scheduler and its cancellation handles.
"""

import pytest

from fruit_harvest.harvest_core.scheduler import FrameScheduler, VirtualClock


@pytest.fixture
def clock():
    return VirtualClock()


@pytest.fixture
def scheduler(clock):
    return FrameScheduler(clock)


class TestTimers:
    """Test one-shot and repeating timers."""

    def test_call_later_fires_once_when_due(self, scheduler, clock):
        """One-shot timer runs once, only after its delay."""
        calls = []
        scheduler.call_later(1.0, lambda: calls.append(clock()))

        clock.advance(0.5)
        scheduler.pump()
        assert calls == []

        clock.advance(0.5)
        scheduler.pump()
        clock.advance(5.0)
        scheduler.pump()
        assert calls == [1.0]

    def test_cancel_before_due(self, scheduler, clock):
        """Cancelled timer never runs."""
        calls = []
        handle = scheduler.call_later(1.0, lambda: calls.append(1))
        handle.cancel()

        clock.advance(2.0)
        assert scheduler.pump() == 0
        assert calls == []
        assert handle.cancelled

    def test_cancel_is_idempotent(self, scheduler):
        """Cancelling twice is harmless."""
        handle = scheduler.call_later(1.0, lambda: None)
        handle.cancel()
        handle.cancel()
        assert handle.cancelled

    def test_cancel_during_same_pump(self, scheduler, clock):
        """A timer cancelled by an earlier callback in the same pump does not run."""
        calls = []
        second = None

        def first():
            calls.append("first")
            second.cancel()

        scheduler.call_later(0.5, first)
        second = scheduler.call_later(0.6, lambda: calls.append("second"))

        clock.advance(1.0)
        scheduler.pump()
        assert calls == ["first"]

    def test_timers_run_in_due_order(self, scheduler, clock):
        """Due timers run earliest first."""
        calls = []
        scheduler.call_later(0.3, lambda: calls.append("c"))
        scheduler.call_later(0.1, lambda: calls.append("a"))
        scheduler.call_later(0.2, lambda: calls.append("b"))

        clock.advance(1.0)
        scheduler.pump()
        assert calls == ["a", "b", "c"]

    def test_call_every_catches_up(self, scheduler, clock):
        """A stalled loop runs every missed interval in one pump."""
        calls = []
        scheduler.call_every(1.0, lambda: calls.append(1))

        clock.advance(3.0)
        scheduler.pump()
        assert len(calls) == 3

        clock.advance(0.5)
        scheduler.pump()
        assert len(calls) == 3

    def test_repeating_timer_can_cancel_itself(self, scheduler, clock):
        """Cancelling from inside the callback stops the repeats."""
        calls = []
        handle = None

        def tick():
            calls.append(1)
            if len(calls) == 2:
                handle.cancel()

        handle = scheduler.call_every(1.0, tick)
        clock.advance(10.0)
        scheduler.pump()
        assert len(calls) == 2
        assert scheduler.pending == 0

    def test_invalid_arguments(self, scheduler):
        """Negative delays and non-positive intervals are rejected."""
        with pytest.raises(ValueError):
            scheduler.call_later(-1.0, lambda: None)
        with pytest.raises(ValueError):
            scheduler.call_every(0.0, lambda: None)

    def test_cancel_all(self, scheduler, clock):
        """cancel_all clears timers and frames."""
        calls = []
        scheduler.call_later(0.1, lambda: calls.append(1))
        scheduler.call_every(0.1, lambda: calls.append(2))
        scheduler.request_frame(lambda: calls.append(3))
        assert scheduler.pending == 3

        scheduler.cancel_all()
        clock.advance(1.0)
        scheduler.pump()
        assert calls == []
        assert scheduler.pending == 0


class TestFrames:
    """Test animation frame requests."""

    def test_frame_runs_on_next_pump(self, scheduler):
        """Frame callback runs once on the next pump."""
        calls = []
        scheduler.request_frame(lambda: calls.append(1))
        scheduler.pump()
        scheduler.pump()
        assert calls == [1]

    def test_rerequest_runs_on_following_pump(self, scheduler):
        """A frame requested from a frame callback waits for the next pump."""
        calls = []

        def frame():
            calls.append(1)
            scheduler.request_frame(frame)

        scheduler.request_frame(frame)
        scheduler.pump()
        assert len(calls) == 1
        scheduler.pump()
        assert len(calls) == 2

    def test_cancelled_frame_does_not_run(self, scheduler):
        """Frame handles cancel like timers."""
        calls = []
        handle = scheduler.request_frame(lambda: calls.append(1))
        handle.cancel()
        scheduler.pump()
        assert calls == []


class TestVirtualClock:
    """Test the manual time source."""

    def test_advance(self):
        clock = VirtualClock(start=5.0)
        assert clock() == 5.0
        assert clock.advance(1.5) == 6.5

    def test_cannot_go_backwards(self):
        clock = VirtualClock()
        with pytest.raises(ValueError):
            clock.advance(-0.1)
