"""
Session Controller
==================

Owns the session state machine and wires the fruit factory, simulation
clock and interaction resolver together.

    idle --start--> playing --pause--> paused --pause--> playing
    playing --countdown hits 0--> ended --(high score reconciled)--> idle
    any --reset--> idle
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from fruit_harvest.harvest_core.config_loader import GameConfig, get_config
from fruit_harvest.harvest_core.fruit_catalog import Category, Gesture, FruitCatalog, get_catalog
from fruit_harvest.harvest_core.fruit_factory import Fruit, FruitFactory
from fruit_harvest.harvest_core.interaction import (
    HarvestEvent,
    InteractionResolver,
    ResolvedHarvest
)
from fruit_harvest.harvest_core.scheduler import FrameScheduler
from fruit_harvest.harvest_core.simulation_clock import SimulationClock
from fruit_harvest.harvest_core.state_snapshot import SessionSnapshot, SnapshotBuilder

logger = logging.getLogger(__name__)

Listener = Callable[[SessionSnapshot], None]


class SessionState(Enum):
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"
    ENDED = "ended"


@dataclass
class HeldFruit:
    """
    Fruit picked up by a drag and the last pointer position seen.

    The core never interprets `pointer`; it is passed through to snapshots
    in the caller's coordinates (screen pixels in the pygame front end).
    Whether a release is inside the drop zone is decided by the caller.
    """
    fruit_id: int
    pointer: Tuple[float, float]


def _zero_counts() -> Dict[Category, int]:
    return {category: 0 for category in Category}


@dataclass
class Session:
    """
    Mutable state of the game run.

    `fruits` keeps insertion order, so a replacement fruit is always last.
    `high_score` and the completed-session fields survive reset.
    """
    duration: int
    state: SessionState = SessionState.IDLE
    score: int = 0
    time_remaining: int = -1
    harvest_counts: Dict[Category, int] = field(default_factory=_zero_counts)
    fruits: Dict[int, Fruit] = field(default_factory=dict)
    held: Optional[HeldFruit] = None
    harvest_events: List[HarvestEvent] = field(default_factory=list)
    high_score: int = 0
    last_final_score: Optional[int] = None
    sessions_completed: int = 0

    def __post_init__(self):
        if self.time_remaining < 0:
            self.time_remaining = self.duration

    @property
    def is_playing(self) -> bool:
        return self.state is SessionState.PLAYING

    def clear_round(self) -> None:
        """Zero the per-session counters and empty the board."""
        self.score = 0
        self.time_remaining = self.duration
        self.harvest_counts = _zero_counts()
        self.fruits.clear()
        self.held = None
        self.harvest_events.clear()

    def prune_harvest_events(self, now: float, duration: float) -> None:
        self.harvest_events = [
            e for e in self.harvest_events if not e.is_expired(now, duration)
        ]


class SessionController:
    """
    Main entry point for a render collaborator.

    All methods are safe to call in any state; actions that do not apply
    to the current state are ignored and report that through their return
    value. Every change is followed by a snapshot pushed to subscribers.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        scheduler: Optional[FrameScheduler] = None
    ):
        """
        Initialize controller.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for fruit generation. Random if None.
            scheduler: Timer queue the host loop pumps. Real-time if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._scheduler = scheduler if scheduler is not None else FrameScheduler()
        self._catalog = get_catalog(config)
        self._population = config.session.population
        self._event_duration = config.feedback.harvest_event_duration

        self._session = Session(duration=config.session.duration_seconds)
        self._factory = FruitFactory(config, seed, self._catalog)
        self._resolver = InteractionResolver(
            session=self._session,
            factory=self._factory,
            time_source=self._scheduler.now,
            catalog=self._catalog,
            event_duration=self._event_duration
        )
        self._clock = SimulationClock(
            session=self._session,
            scheduler=self._scheduler,
            config=config,
            on_change=self._notify,
            on_expired=self._end_session
        )
        self._snapshot_builder = SnapshotBuilder(config)
        self._listeners: List[Listener] = []

        self._drag_category = self._catalog.for_gesture(Gesture.DRAG_AND_DROP).category

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def config(self) -> GameConfig:
        return self._config

    @property
    def catalog(self) -> FruitCatalog:
        return self._catalog

    @property
    def scheduler(self) -> FrameScheduler:
        return self._scheduler

    @property
    def clock(self) -> SimulationClock:
        return self._clock

    @property
    def session(self) -> Session:
        return self._session

    @property
    def state(self) -> SessionState:
        return self._session.state

    @property
    def score(self) -> int:
        return self._session.score

    @property
    def high_score(self) -> int:
        return self._session.high_score

    @property
    def time_remaining(self) -> int:
        return self._session.time_remaining

    @property
    def harvest_counts(self) -> Dict[Category, int]:
        return dict(self._session.harvest_counts)

    @property
    def fruits(self) -> List[Fruit]:
        """Live fruits in insertion order."""
        return list(self._session.fruits.values())

    @property
    def held(self) -> Optional[HeldFruit]:
        return self._session.held

    @property
    def motion_enabled(self) -> bool:
        return self._clock.motion_enabled

    def get_fruit(self, fruit_id: int) -> Optional[Fruit]:
        return self._session.fruits.get(fruit_id)

    def snapshot(self) -> SessionSnapshot:
        """Immutable view of the current state."""
        now = self._scheduler.now()
        self._session.prune_harvest_events(now, self._event_duration)
        return self._snapshot_builder.build(self._session, self._clock.motion_enabled, now)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener called with a snapshot after every change.

        Returns:
            Callable that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def pump(self) -> int:
        """Run due timers and frames. Call once per host frame."""
        return self._scheduler.pump()

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def start(self) -> bool:
        """
        Start a new session with a fresh board.

        Returns:
            False if a session is already playing.
        """
        session = self._session
        if session.state is SessionState.PLAYING:
            return False

        self._clock.stop()
        session.clear_round()
        for fruit in self._factory.generate_many(self._population):
            session.fruits[fruit.id] = fruit

        self._transition(SessionState.PLAYING)
        self._clock.start()
        logger.info(
            "Session started: %d fruits, %ds, motion=%s",
            len(session.fruits), session.time_remaining, self._clock.motion_enabled
        )
        self._notify()
        return True

    def toggle_pause(self) -> bool:
        """
        Pause a playing session or resume a paused one.

        Returns:
            False if there is no session to pause or resume.
        """
        state = self._session.state
        if state is SessionState.PLAYING:
            self._clock.stop()
            self._transition(SessionState.PAUSED)
        elif state is SessionState.PAUSED:
            self._transition(SessionState.PLAYING)
            self._clock.start()
        else:
            return False

        self._notify()
        return True

    def reset(self) -> None:
        """Stop everything and return to idle with an empty board."""
        self._clock.stop()
        self._session.clear_round()
        self._transition(SessionState.IDLE)
        self._notify()

    def set_motion_enabled(self, enabled: bool) -> None:
        """Toggle fruit motion. Takes effect from the next frame."""
        if bool(enabled) == self._clock.motion_enabled:
            return
        self._clock.set_motion_enabled(enabled)
        logger.debug("Motion %s", "enabled" if enabled else "disabled")
        self._notify()

    # ------------------------------------------------------------------
    # Gestures
    # ------------------------------------------------------------------

    def interact(self, fruit_id: int, gesture: Gesture) -> Optional[ResolvedHarvest]:
        """
        Perform a gesture on a fruit.

        Ignored while a fruit is held or when the fruit is not live.
        """
        session = self._session
        if not session.is_playing or session.held is not None:
            return None

        fruit = session.fruits.get(fruit_id)
        if fruit is None:
            logger.debug("Ignoring %s on unknown fruit %s", gesture.value, fruit_id)
            return None

        result = self._resolver.resolve(fruit, gesture)
        if result is not None:
            self._notify()
        return result

    def begin_drag(self, fruit_id: int, pointer: Tuple[float, float]) -> bool:
        """
        Pick up a fruit. Only fruit of the drag-and-drop category can be held,
        and only one at a time.
        """
        session = self._session
        if not session.is_playing or session.held is not None:
            return False

        fruit = session.fruits.get(fruit_id)
        if fruit is None or fruit.category is not self._drag_category:
            return False

        session.held = HeldFruit(fruit_id=fruit_id, pointer=tuple(pointer))
        logger.debug("Drag started on fruit %d", fruit_id)
        self._notify()
        return True

    def update_drag(self, pointer: Tuple[float, float]) -> bool:
        """Track the pointer while a fruit is held."""
        session = self._session
        held = session.held
        if held is None or not session.is_playing:
            return False
        held.pointer = tuple(pointer)
        self._notify()
        return True

    def end_drag(
        self,
        pointer: Tuple[float, float],
        in_drop_zone: bool
    ) -> Optional[ResolvedHarvest]:
        """
        Release the held fruit.

        Args:
            pointer: Release position.
            in_drop_zone: True if the release happened inside the drop zone.

        Returns:
            ResolvedHarvest if the drop harvested the fruit, else None; the
            fruit then stays live where it was.
        """
        session = self._session
        held = session.held
        if held is None or not session.is_playing:
            return None

        session.held = None
        result = None
        fruit = session.fruits.get(held.fruit_id)
        if in_drop_zone and fruit is not None:
            result = self._resolver.resolve(fruit, Gesture.DRAG_AND_DROP)
        if result is None:
            logger.debug("Drag on fruit %d released at %s without harvest", held.fruit_id, pointer)

        self._notify()
        return result

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _transition(self, new_state: SessionState) -> None:
        old_state = self._session.state
        self._session.state = new_state
        logger.debug("Session %s -> %s", old_state.value, new_state.value)

    def _end_session(self) -> None:
        session = self._session
        self._clock.stop()
        session.held = None

        final_score = session.score
        previous_high = session.high_score
        if final_score > previous_high:
            session.high_score = final_score
        session.last_final_score = final_score
        session.sessions_completed += 1

        self._transition(SessionState.ENDED)
        logger.info(
            "Session ended: score=%d high_score=%d%s",
            final_score, session.high_score,
            " (new high score)" if final_score > previous_high else ""
        )
        self._notify()

        # A listener may already have started a new session
        if session.state is SessionState.ENDED:
            self._transition(SessionState.IDLE)
            self._notify()

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)
