"""
Tests for countdown and motion stepping.
"""

import pytest

from fruit_harvest.harvest_core.config_loader import load_config
from fruit_harvest.harvest_core.fruit_catalog import Category, FruitSize
from fruit_harvest.harvest_core.fruit_factory import Fruit
from fruit_harvest.harvest_core.scheduler import FrameScheduler, VirtualClock
from fruit_harvest.harvest_core.session import Session, SessionState, HeldFruit
from fruit_harvest.harvest_core.simulation_clock import SimulationClock, advance_fruit


def make_fruit(fruit_id=1, x=40.0, y=50.0, dx=2.0, dy=3.0, category=Category.A):
    return Fruit(id=fruit_id, category=category, size=FruitSize.MEDIUM, x=x, y=y, dx=dx, dy=dy)


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def clock():
    return VirtualClock()


@pytest.fixture
def scheduler(clock):
    return FrameScheduler(clock)


@pytest.fixture
def session(config):
    session = Session(duration=config.session.duration_seconds, state=SessionState.PLAYING)
    fruit = make_fruit()
    session.fruits[fruit.id] = fruit
    return session


class Recorder:
    def __init__(self):
        self.changes = 0
        self.expired = 0

    def on_change(self):
        self.changes += 1

    def on_expired(self):
        self.expired += 1


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def sim(session, scheduler, config, recorder):
    return SimulationClock(
        session, scheduler, config,
        on_change=recorder.on_change,
        on_expired=recorder.on_expired
    )


class TestReflection:
    """Test single-fruit motion and wall reflection."""

    def test_moves_by_velocity(self):
        """Position advances by velocity * dt."""
        fruit = make_fruit(x=40.0, y=50.0, dx=2.0, dy=-4.0)
        bounced = advance_fruit(fruit, 0.5, 84.0, 100.0)
        assert not bounced
        assert fruit.x == pytest.approx(41.0)
        assert fruit.y == pytest.approx(48.0)

    def test_reflects_at_right_wall(self):
        """Fruit at the play width moving right turns around without overshoot."""
        fruit = make_fruit(x=84.0, dx=10.0, dy=0.0)
        assert advance_fruit(fruit, 0.1, 84.0, 100.0)
        assert fruit.dx < 0
        assert fruit.x <= 84.0

    def test_reflects_at_left_wall(self):
        """Crossing zero clamps to zero and flips dx."""
        fruit = make_fruit(x=0.5, dx=-10.0, dy=0.0)
        advance_fruit(fruit, 0.1, 84.0, 100.0)
        assert fruit.x == 0.0
        assert fruit.dx == 10.0

    def test_reflects_vertically(self):
        """Y axis reflects against the full height."""
        fruit = make_fruit(y=99.0, dx=0.0, dy=5.0)
        advance_fruit(fruit, 1.0, 84.0, 100.0)
        assert fruit.y == 100.0
        assert fruit.dy == -5.0

    def test_axes_independent(self):
        """Only the axis that hit a wall reflects."""
        fruit = make_fruit(x=83.0, y=50.0, dx=10.0, dy=3.0)
        advance_fruit(fruit, 1.0, 84.0, 100.0)
        assert fruit.dx == -10.0
        assert fruit.dy == 3.0
        assert fruit.y == pytest.approx(53.0)

    def test_drop_zone_does_not_extend_bounds(self, config):
        """Reflection uses the play width, not the full board width."""
        fruit = make_fruit(x=80.0, dx=100.0, dy=0.0)
        advance_fruit(fruit, 1.0, config.board.play_width, config.board.height)
        assert fruit.x == config.board.play_width
        assert fruit.x < config.board.width


class TestCountdown:
    """Test the one-second countdown."""

    def test_ticks_once_per_second(self, sim, session, clock, scheduler, recorder):
        """Each second removes one from time_remaining."""
        sim.start()
        clock.advance(1.0)
        scheduler.pump()
        assert session.time_remaining == 179
        assert recorder.changes == 1

        clock.advance(0.5)
        scheduler.pump()
        assert session.time_remaining == 179

    def test_expires_once_at_zero(self, sim, session, clock, scheduler, recorder):
        """Reaching zero stops the clock and reports expiry once."""
        session.time_remaining = 2
        sim.start()
        clock.advance(5.0)
        scheduler.pump()

        assert session.time_remaining == 0
        assert recorder.expired == 1
        assert not sim.running
        assert scheduler.pending == 0

    def test_stop_cancels_countdown(self, sim, session, clock, scheduler):
        """No countdown step fires after stop."""
        sim.start()
        sim.stop()
        clock.advance(10.0)
        scheduler.pump()
        assert session.time_remaining == 180


class TestMotion:
    """Test frame-driven motion."""

    def test_no_motion_when_disabled(self, sim, session, clock, scheduler):
        """Default config leaves fruits in place."""
        sim.start()
        clock.advance(0.5)
        scheduler.pump()
        fruit = session.fruits[1]
        assert fruit.position == (40.0, 50.0)
        assert not sim.motion_scheduled

    def test_frames_move_fruits(self, sim, session, clock, scheduler):
        """Enabled motion applies elapsed time since the last frame."""
        sim.set_motion_enabled(True)
        sim.start()
        clock.advance(0.5)
        scheduler.pump()
        fruit = session.fruits[1]
        assert fruit.x == pytest.approx(41.0)
        assert fruit.y == pytest.approx(51.5)

        clock.advance(0.25)
        scheduler.pump()
        assert fruit.x == pytest.approx(41.5)

    def test_stop_freezes_positions(self, sim, session, clock, scheduler):
        """No frame runs after stop, even if one was queued."""
        sim.set_motion_enabled(True)
        sim.start()
        clock.advance(0.1)
        scheduler.pump()
        position = session.fruits[1].position

        sim.stop()
        clock.advance(3.0)
        scheduler.pump()
        assert session.fruits[1].position == position
        assert scheduler.pending == 0

    def test_restart_does_not_replay_elapsed_time(self, sim, session, clock, scheduler):
        """dt restarts from the moment motion resumes."""
        sim.set_motion_enabled(True)
        sim.start()
        clock.advance(0.1)
        scheduler.pump()

        sim.stop()
        clock.advance(10.0)
        sim.start()
        clock.advance(0.1)
        scheduler.pump()

        # Two 0.1 s frames at dx=2
        assert session.fruits[1].x == pytest.approx(40.4)

    def test_toggle_off_while_running(self, sim, session, clock, scheduler):
        """Turning motion off stops position updates in place."""
        sim.set_motion_enabled(True)
        sim.start()
        clock.advance(0.1)
        scheduler.pump()
        sim.set_motion_enabled(False)
        position = session.fruits[1].position

        clock.advance(0.5)
        scheduler.pump()
        assert session.fruits[1].position == position
        assert sim.running

    def test_toggle_on_while_running_uses_fresh_baseline(self, sim, session, clock, scheduler):
        """Turning motion on mid-session starts dt from the toggle."""
        sim.start()
        clock.advance(0.9)
        scheduler.pump()
        sim.set_motion_enabled(True)
        clock.advance(0.05)
        scheduler.pump()
        assert session.fruits[1].x == pytest.approx(40.1)

    def test_held_fruit_keeps_moving(self, sim, session, clock, scheduler):
        """A dragged fruit is still live and keeps drifting."""
        other = make_fruit(fruit_id=2, x=20.0, y=20.0, dx=4.0, dy=0.0)
        session.fruits[other.id] = other
        session.held = HeldFruit(fruit_id=1, pointer=(0, 0))

        sim.set_motion_enabled(True)
        sim.start()
        clock.advance(0.5)
        scheduler.pump()
        assert session.fruits[1].x == pytest.approx(41.0)
        assert session.fruits[1].y == pytest.approx(51.5)
        assert session.fruits[2].x == pytest.approx(22.0)

    def test_fruits_stay_in_bounds(self, sim, session, clock, scheduler, config):
        """Long runs never leave the play area."""
        fast = make_fruit(fruit_id=3, x=10.0, y=10.0, dx=15.0, dy=-15.0)
        session.fruits[fast.id] = fast
        sim.set_motion_enabled(True)
        sim.start()
        for _ in range(600):
            clock.advance(1 / 60)
            scheduler.pump()
            for fruit in session.fruits.values():
                assert 0.0 <= fruit.x <= config.board.play_width
                assert 0.0 <= fruit.y <= config.board.height
