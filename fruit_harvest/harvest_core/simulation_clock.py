"""
Simulation Clock
================

Drives the two timed behaviours of a session on a FrameScheduler:

- Countdown: one step per countdown interval, ending the session at zero.
- Motion: once per frame, moves every live fruit by velocity * dt and
  reflects it off the play-area walls.

Both only run between start() and stop(); stop() cancels the scheduler
handles so no queued tick fires afterwards.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional, Tuple, TYPE_CHECKING

from fruit_harvest.harvest_core.config_loader import GameConfig, get_config
from fruit_harvest.harvest_core.fruit_factory import Fruit
from fruit_harvest.harvest_core.scheduler import FrameScheduler, TimerHandle

if TYPE_CHECKING:
    from fruit_harvest.harvest_core.session import Session

logger = logging.getLogger(__name__)


def _reflect_axis(position: float, velocity: float, limit: float) -> Tuple[float, float]:
    """Clamp to [0, limit], inverting velocity if the position left the range."""
    if position < 0.0:
        return 0.0, -velocity
    if position > limit:
        return limit, -velocity
    return position, velocity


def advance_fruit(fruit: Fruit, dt: float, max_x: float, max_y: float) -> bool:
    """
    Move one fruit by dt seconds, reflecting off the walls.

    Axes are handled independently; a wall hit clamps the position to the
    wall for this tick instead of bouncing back past it.

    Returns:
        True if the fruit hit a wall on either axis.
    """
    new_x, new_dx = _reflect_axis(fruit.x + fruit.dx * dt, fruit.dx, max_x)
    new_y, new_dy = _reflect_axis(fruit.y + fruit.dy * dt, fruit.dy, max_y)
    bounced = new_dx != fruit.dx or new_dy != fruit.dy
    fruit.x, fruit.y, fruit.dx, fruit.dy = new_x, new_y, new_dx, new_dy
    return bounced


def advance_fruits(
    fruits: Iterable[Fruit],
    dt: float,
    max_x: float,
    max_y: float
) -> int:
    """Move every fruit by dt. Returns how many hit a wall."""
    return sum(1 for fruit in fruits if advance_fruit(fruit, dt, max_x, max_y))


class SimulationClock:
    """
    Countdown and motion timers for one Session.

    The clock mutates `session.time_remaining` and fruit positions directly;
    the owner is told about it through two callbacks:

    - on_change(): after every countdown step or motion frame
    - on_expired(): once, when time_remaining reaches zero
    """

    def __init__(
        self,
        session: "Session",
        scheduler: FrameScheduler,
        config: Optional[GameConfig] = None,
        on_change: Optional[Callable[[], None]] = None,
        on_expired: Optional[Callable[[], None]] = None
    ):
        if config is None:
            config = get_config()

        self._session = session
        self._scheduler = scheduler
        self._config = config
        self._on_change = on_change
        self._on_expired = on_expired

        self._play_width = config.board.play_width
        self._height = config.board.height
        self._interval = config.session.countdown_interval

        self._motion_enabled = config.motion.enabled
        self._countdown_handle: Optional[TimerHandle] = None
        self._frame_handle: Optional[TimerHandle] = None
        self._last_frame_time: float = 0.0

    @property
    def running(self) -> bool:
        """True between start() and stop()."""
        return self._countdown_handle is not None

    @property
    def motion_enabled(self) -> bool:
        return self._motion_enabled

    @property
    def motion_scheduled(self) -> bool:
        """True while a motion frame is queued."""
        return self._frame_handle is not None

    def start(self) -> None:
        """Begin countdown and (if enabled) motion from a fresh time baseline."""
        self.stop()
        self._countdown_handle = self._scheduler.call_every(self._interval, self._on_countdown)
        if self._motion_enabled:
            self._start_motion()

    def stop(self) -> None:
        """Cancel all scheduled ticks."""
        if self._countdown_handle is not None:
            self._countdown_handle.cancel()
            self._countdown_handle = None
        self._stop_motion()

    def set_motion_enabled(self, enabled: bool) -> None:
        """
        Toggle motion. While running, turning it on resumes motion from the
        current positions with a fresh dt baseline; turning it off leaves
        fruits where they are.
        """
        enabled = bool(enabled)
        if enabled == self._motion_enabled:
            return
        self._motion_enabled = enabled
        if not self.running:
            return
        if enabled:
            self._start_motion()
        else:
            self._stop_motion()

    def step_motion(self, dt: float) -> int:
        """
        Advance all live fruits by dt seconds, including a held one.

        Returns:
            Number of fruits that hit a wall.
        """
        return advance_fruits(self._session.fruits.values(), dt, self._play_width, self._height)

    def _start_motion(self) -> None:
        self._stop_motion()
        self._last_frame_time = self._scheduler.now()
        self._frame_handle = self._scheduler.request_frame(self._on_frame)

    def _stop_motion(self) -> None:
        if self._frame_handle is not None:
            self._frame_handle.cancel()
            self._frame_handle = None

    def _on_frame(self) -> None:
        now = self._scheduler.now()
        dt = now - self._last_frame_time
        self._last_frame_time = now

        # Queue the next frame first so a listener can still cancel it
        self._frame_handle = self._scheduler.request_frame(self._on_frame)
        if dt > 0:
            self.step_motion(dt)
        if self._on_change is not None:
            self._on_change()

    def _on_countdown(self) -> None:
        session = self._session
        session.time_remaining = max(0, session.time_remaining - 1)

        if session.time_remaining == 0:
            logger.debug("Countdown reached zero")
            self.stop()
            if self._on_expired is not None:
                self._on_expired()
            return

        if self._on_change is not None:
            self._on_change()
