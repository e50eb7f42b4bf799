"""
Fruit Catalog
=============

Provides convenient access to fruit categories, their bound gestures and
point values, as loaded from config.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from fruit_harvest.harvest_core.config_loader import (
    GameConfig,
    CategoryConfig,
    get_config
)


class Category(Enum):
    """The four fruit kinds."""
    A = "A"
    B = "B"
    C = "C"
    D = "D"


class Gesture(Enum):
    """Input gestures a player can perform on a fruit."""
    PRIMARY_CLICK = "primary_click"
    DOUBLE_CLICK = "double_click"
    SECONDARY_CLICK = "secondary_click"
    DRAG_AND_DROP = "drag_and_drop"


class FruitSize(Enum):
    """Visual size class. Has no gameplay effect."""
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


@dataclass
class CategoryType:
    """
    Runtime representation of a fruit category.

    Wraps CategoryConfig with enum-typed accessors.
    """
    config: CategoryConfig

    @property
    def category(self) -> Category:
        return Category(self.config.key)

    @property
    def id(self) -> int:
        return self.config.id

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def gesture(self) -> Gesture:
        return Gesture(self.config.gesture)

    @property
    def points(self) -> int:
        return self.config.points

    @property
    def color(self) -> Tuple[int, int, int]:
        return self.config.color

    def accepts(self, gesture: Gesture) -> bool:
        """True if this gesture harvests fruit of this category."""
        return gesture is self.gesture

    def __repr__(self) -> str:
        return f"CategoryType({self.category.value}: {self.name})"


class FruitCatalog:
    """
    Collection of all fruit categories and the gesture binding table.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize catalog from game config.

        Args:
            config: GameConfig instance. If None, loads from default location.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._types: Tuple[CategoryType, ...] = tuple(
            CategoryType(category_config) for category_config in config.categories
        )
        self._by_category = {t.category: t for t in self._types}
        self._by_gesture = {t.gesture: t for t in self._types}
        self._size_scales = {FruitSize(s.name): s.render_scale for s in config.sizes}

    def __len__(self) -> int:
        return len(self._types)

    def __getitem__(self, category: Category) -> CategoryType:
        """Get category type by Category."""
        return self._by_category[category]

    def __iter__(self):
        return iter(self._types)

    @property
    def categories(self) -> Tuple[Category, ...]:
        """All categories in id order."""
        return tuple(t.category for t in self._types)

    @property
    def sizes(self) -> Tuple[FruitSize, ...]:
        """All size classes."""
        return tuple(self._size_scales)

    def points_for(self, category: Category, gesture: Gesture) -> int:
        """
        Points awarded for performing a gesture on a category.

        Returns:
            The category's points on a match, 0 otherwise.
        """
        category_type = self._by_category[category]
        return category_type.points if category_type.accepts(gesture) else 0

    def for_gesture(self, gesture: Gesture) -> CategoryType:
        """The single category bound to a gesture."""
        return self._by_gesture[gesture]

    def render_scale(self, size: FruitSize) -> float:
        """Relative on-screen scale for a size class."""
        return self._size_scales[size]

    def get_by_name(self, name: str) -> Optional[CategoryType]:
        """Get category type by fruit name (case-insensitive)."""
        name_lower = name.lower()
        for category_type in self._types:
            if category_type.name.lower() == name_lower:
                return category_type
        return None


# Module-level singleton
_cached_catalog: Optional[FruitCatalog] = None


def get_catalog(config: Optional[GameConfig] = None) -> FruitCatalog:
    """
    Get the fruit catalog singleton.

    Args:
        config: Optional config to use. If None, uses cached or default config.

    Returns:
        FruitCatalog instance.
    """
    global _cached_catalog
    if _cached_catalog is None or config is not None:
        _cached_catalog = FruitCatalog(config)
    return _cached_catalog
