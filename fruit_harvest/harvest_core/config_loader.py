"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple, Optional

import yaml


# Closed sets the rest of the engine is written against
CATEGORY_KEYS = ("A", "B", "C", "D")
GESTURE_NAMES = ("primary_click", "double_click", "secondary_click", "drag_and_drop")
SIZE_NAMES = ("small", "medium", "large")


@dataclass(frozen=True)
class BoardConfig:
    """Board geometry in logical units."""
    width: float                 # Full board width (play area + drop zone)
    height: float                # Full board height
    drop_zone_width: float       # Width of the drop strip on the right edge
    spawn_margin: float          # Minimum distance from play-area edges at spawn

    @property
    def play_width(self) -> float:
        """Width of the region fruits live and bounce in."""
        return self.width - self.drop_zone_width


@dataclass(frozen=True)
class SessionConfig:
    """Session length and population."""
    duration_seconds: int
    population: int
    countdown_interval: float    # Wall-clock seconds per countdown step


@dataclass(frozen=True)
class MotionConfig:
    """Fruit motion parameters."""
    enabled: bool                # Initial value of the runtime toggle
    max_speed: float             # Velocity components drawn from [-max, +max]


@dataclass(frozen=True)
class FeedbackConfig:
    """Visual feedback timings."""
    harvest_event_duration: float


@dataclass(frozen=True)
class CategoryConfig:
    """Configuration for a single fruit category."""
    id: int
    key: str
    name: str
    gesture: str
    points: int
    color: Tuple[int, int, int]


@dataclass(frozen=True)
class SizeConfig:
    """Visual size class. Has no gameplay effect."""
    name: str
    render_scale: float


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    board: BoardConfig
    session: SessionConfig
    motion: MotionConfig
    feedback: FeedbackConfig
    categories: Tuple[CategoryConfig, ...]
    sizes: Tuple[SizeConfig, ...]

    @property
    def num_categories(self) -> int:
        return len(self.categories)

    def get_category(self, key: str) -> CategoryConfig:
        """Get category config by key (A-D)."""
        for category in self.categories:
            if category.key == key:
                return category
        raise ValueError(f"Invalid category key: {key}")


def _parse_color(color_data: List) -> Tuple[int, int, int]:
    """Parse RGB color from YAML."""
    if len(color_data) != 3:
        raise ValueError(f"Color must have 3 values [R, G, B], got {color_data}")
    return (int(color_data[0]), int(color_data[1]), int(color_data[2]))


def _parse_category(category_data: dict) -> CategoryConfig:
    """Parse a single category configuration from YAML."""
    return CategoryConfig(
        id=int(category_data["id"]),
        key=str(category_data["key"]),
        name=str(category_data["name"]),
        gesture=str(category_data["gesture"]),
        points=int(category_data["points"]),
        color=_parse_color(category_data.get("color", [200, 200, 200]))
    )


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    # Category IDs are sequential
    for i, category in enumerate(config.categories):
        if category.id != i:
            raise ValueError(f"Category ID mismatch: expected {i}, got {category.id}")

    keys = tuple(c.key for c in config.categories)
    if sorted(keys) != sorted(CATEGORY_KEYS):
        raise ValueError(f"Categories must be exactly {CATEGORY_KEYS}, got {keys}")

    # Every gesture bound to exactly one category
    gestures = [c.gesture for c in config.categories]
    for gesture in gestures:
        if gesture not in GESTURE_NAMES:
            raise ValueError(f"Unknown gesture '{gesture}', expected one of {GESTURE_NAMES}")
    if len(set(gestures)) != len(gestures):
        raise ValueError(f"Each gesture must be bound to exactly one category, got {gestures}")

    for category in config.categories:
        if category.points <= 0:
            raise ValueError(f"Category {category.key} points must be positive, got {category.points}")

    sizes = tuple(s.name for s in config.sizes)
    if sorted(sizes) != sorted(SIZE_NAMES):
        raise ValueError(f"Sizes must be exactly {SIZE_NAMES}, got {sizes}")

    board = config.board
    if not 0 <= board.drop_zone_width < board.width:
        raise ValueError(
            f"drop_zone_width ({board.drop_zone_width}) must be in [0, width={board.width})"
        )
    if board.spawn_margin * 2 >= board.play_width or board.spawn_margin * 2 >= board.height:
        raise ValueError(
            f"spawn_margin ({board.spawn_margin}) leaves no room in a "
            f"{board.play_width}x{board.height} play area"
        )

    if config.session.population <= 0:
        raise ValueError(f"population must be positive, got {config.session.population}")
    if config.session.duration_seconds <= 0:
        raise ValueError(f"duration_seconds must be positive, got {config.session.duration_seconds}")
    if config.session.countdown_interval <= 0:
        raise ValueError(
            f"countdown_interval must be positive, got {config.session.countdown_interval}"
        )
    if config.motion.max_speed < 0:
        raise ValueError(f"max_speed must be non-negative, got {config.motion.max_speed}")


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "game_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    board_data = raw["board"]
    board = BoardConfig(
        width=float(board_data["width"]),
        height=float(board_data["height"]),
        drop_zone_width=float(board_data.get("drop_zone_width", 16)),
        spawn_margin=float(board_data.get("spawn_margin", 5))
    )

    session_data = raw["session"]
    session = SessionConfig(
        duration_seconds=int(session_data["duration_seconds"]),
        population=int(session_data["population"]),
        countdown_interval=float(session_data.get("countdown_interval", 1.0))
    )

    motion_data = raw.get("motion", {})
    motion = MotionConfig(
        enabled=bool(motion_data.get("enabled", False)),
        max_speed=float(motion_data.get("max_speed", 15.0))
    )

    feedback_data = raw.get("feedback", {})
    feedback = FeedbackConfig(
        harvest_event_duration=float(feedback_data.get("harvest_event_duration", 0.5))
    )

    categories = tuple(_parse_category(c) for c in raw["categories"])

    sizes = tuple(
        SizeConfig(name=str(s["name"]), render_scale=float(s.get("render_scale", 1.0)))
        for s in raw["sizes"]
    )

    config = GameConfig(
        board=board,
        session=session,
        motion=motion,
        feedback=feedback,
        categories=categories,
        sizes=sizes
    )

    _validate_config(config)
    return config


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
