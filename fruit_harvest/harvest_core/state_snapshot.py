"""
State Snapshot
==============

Immutable views of a session handed to render collaborators after every
state change, plus fixed-size numpy packing of the live population.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple, TYPE_CHECKING
import numpy as np

from fruit_harvest.harvest_core.config_loader import GameConfig, get_config
from fruit_harvest.harvest_core.fruit_catalog import Category, FruitSize
from fruit_harvest.harvest_core.interaction import HarvestEvent

if TYPE_CHECKING:
    from fruit_harvest.harvest_core.session import Session, SessionState

# Category ids used in packed arrays; -1 marks an empty slot
CATEGORY_INDEX = {category: i for i, category in enumerate(Category)}


def format_time(seconds: int) -> str:
    """Format remaining seconds as M:SS."""
    seconds = max(0, int(seconds))
    return f"{seconds // 60}:{seconds % 60:02d}"


@dataclass(frozen=True)
class FruitView:
    """Read-only copy of one fruit."""
    id: int
    category: Category
    size: FruitSize
    x: float
    y: float
    dx: float
    dy: float


@dataclass(frozen=True)
class HeldView:
    """The fruit currently being dragged and the last pointer position."""
    fruit_id: int
    pointer: Tuple[float, float]


@dataclass(frozen=True)
class SessionSnapshot:
    """Complete read-only session state at one instant."""
    state: "SessionState"
    score: int
    high_score: int
    time_remaining: int
    fruits: Tuple[FruitView, ...]
    harvest_counts: Dict[Category, int]
    held: Optional[HeldView]
    harvest_events: Tuple[HarvestEvent, ...]
    motion_enabled: bool
    last_final_score: Optional[int]
    sessions_completed: int

    # Board info
    board_width: float
    board_height: float
    play_width: float

    @property
    def fruit_count(self) -> int:
        return len(self.fruits)

    @property
    def time_text(self) -> str:
        return format_time(self.time_remaining)

    def get_fruit(self, fruit_id: int) -> Optional[FruitView]:
        for fruit in self.fruits:
            if fruit.id == fruit_id:
                return fruit
        return None

    def to_arrays(self, max_objects: Optional[int] = None) -> Dict[str, np.ndarray]:
        """
        Pack the live population into fixed-size arrays.

        Args:
            max_objects: Array length. Defaults to the current fruit count.

        Returns:
            Dict of arrays: fruit_id, category, x, y, dx, dy, mask.
        """
        size = len(self.fruits) if max_objects is None else max_objects
        fruit_id = np.full(size, -1, dtype=np.int64)
        category = np.full(size, -1, dtype=np.int16)
        x = np.zeros(size, dtype=np.float32)
        y = np.zeros(size, dtype=np.float32)
        dx = np.zeros(size, dtype=np.float32)
        dy = np.zeros(size, dtype=np.float32)
        mask = np.zeros(size, dtype=bool)

        for i, fruit in enumerate(self.fruits[:size]):
            fruit_id[i] = fruit.id
            category[i] = CATEGORY_INDEX[fruit.category]
            x[i] = fruit.x
            y[i] = fruit.y
            dx[i] = fruit.dx
            dy[i] = fruit.dy
            mask[i] = True

        return {
            "fruit_id": fruit_id,
            "category": category,
            "x": x,
            "y": y,
            "dx": dx,
            "dy": dy,
            "mask": mask,
        }


class SnapshotBuilder:
    """Builds SessionSnapshots, dropping harvest events that have expired."""

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._config = config
        self._event_duration = config.feedback.harvest_event_duration
        self._board_width = config.board.width
        self._board_height = config.board.height
        self._play_width = config.board.play_width

    def build(self, session: "Session", motion_enabled: bool, now: float) -> SessionSnapshot:
        """Build a snapshot from current session state."""
        fruits = tuple(
            FruitView(
                id=f.id, category=f.category, size=f.size,
                x=f.x, y=f.y, dx=f.dx, dy=f.dy
            )
            for f in session.fruits.values()
        )

        held = None
        if session.held is not None:
            held = HeldView(fruit_id=session.held.fruit_id, pointer=session.held.pointer)

        events = tuple(
            e for e in session.harvest_events
            if not e.is_expired(now, self._event_duration)
        )

        return SessionSnapshot(
            state=session.state,
            score=session.score,
            high_score=session.high_score,
            time_remaining=session.time_remaining,
            fruits=fruits,
            harvest_counts=dict(session.harvest_counts),
            held=held,
            harvest_events=events,
            motion_enabled=motion_enabled,
            last_final_score=session.last_final_score,
            sessions_completed=session.sessions_completed,
            board_width=self._board_width,
            board_height=self._board_height,
            play_width=self._play_width
        )
