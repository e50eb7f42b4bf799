"""
Fruit Factory
=============

Creates fruit entities with random category, size, position and velocity.
"""

from __future__ import annotations

import itertools
import random
from dataclasses import dataclass
from typing import List, Optional, Tuple

from fruit_harvest.harvest_core.config_loader import GameConfig, get_config
from fruit_harvest.harvest_core.fruit_catalog import (
    Category,
    FruitSize,
    FruitCatalog,
    get_catalog
)


@dataclass
class Fruit:
    """
    One harvestable fruit on the board.

    Category and size are fixed at creation; position and velocity are
    updated in place by the simulation clock when motion is enabled.
    """
    id: int
    category: Category
    size: FruitSize
    x: float
    y: float
    dx: float
    dy: float

    @property
    def position(self) -> Tuple[float, float]:
        return self.x, self.y

    @property
    def velocity(self) -> Tuple[float, float]:
        return self.dx, self.dy


class FruitFactory:
    """
    Generates fruits for the play area.

    Category and size are uniform over their closed sets. Position is uniform
    inside the play area shrunk by the spawn margin. Velocity components are
    uniform in [-max_speed, +max_speed] whether or not motion is enabled.
    Ids come from a counter and are never reused by a factory instance.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        catalog: Optional[FruitCatalog] = None
    ):
        """
        Initialize factory.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed. Random if None.
            catalog: Fruit catalog. Built from config if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._catalog = catalog if catalog is not None else get_catalog(config)
        self._rng = random.Random(seed)
        self._ids = itertools.count(1)

        self._categories = self._catalog.categories
        self._sizes = self._catalog.sizes

        board = config.board
        margin = board.spawn_margin
        self._x_range = (margin, board.play_width - margin)
        self._y_range = (margin, board.height - margin)
        self._max_speed = config.motion.max_speed

    @property
    def spawn_region(self) -> Tuple[Tuple[float, float], Tuple[float, float]]:
        """((min_x, max_x), (min_y, max_y)) fruits are placed in."""
        return self._x_range, self._y_range

    def generate(self) -> Fruit:
        """Create one fruit."""
        rng = self._rng
        return Fruit(
            id=next(self._ids),
            category=rng.choice(self._categories),
            size=rng.choice(self._sizes),
            x=rng.uniform(*self._x_range),
            y=rng.uniform(*self._y_range),
            dx=rng.uniform(-self._max_speed, self._max_speed),
            dy=rng.uniform(-self._max_speed, self._max_speed)
        )

    def generate_many(self, count: int) -> List[Fruit]:
        """
        Create `count` independent fruits.

        Raises:
            ValueError: If count is not positive.
        """
        if count <= 0:
            raise ValueError(f"count must be positive, got {count}")
        return [self.generate() for _ in range(count)]

    def reseed(self, seed: Optional[int] = None) -> None:
        """Replace the random source. Id counter is kept so ids stay unique."""
        self._rng = random.Random(seed)
