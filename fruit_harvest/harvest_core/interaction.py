"""
Interaction Resolver
====================

Maps a gesture on a fruit to a harvest: score, harvest count, replacement
fruit and a visual harvest event.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Callable, Optional, TYPE_CHECKING

from fruit_harvest.harvest_core.config_loader import get_config
from fruit_harvest.harvest_core.fruit_catalog import (
    Category,
    Gesture,
    FruitCatalog,
    get_catalog
)
from fruit_harvest.harvest_core.fruit_factory import Fruit, FruitFactory

if TYPE_CHECKING:
    from fruit_harvest.harvest_core.session import Session

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HarvestEvent:
    """Popup notification left where a fruit was harvested."""
    id: int
    category: Category
    x: float
    y: float
    created_at: float

    def is_expired(self, now: float, duration: float) -> bool:
        return now - self.created_at >= duration


@dataclass(frozen=True)
class ResolvedHarvest:
    """Record of a successful harvest."""
    fruit_id: int
    category: Category
    gesture: Gesture
    points: int
    replacement_id: int
    event: HarvestEvent

    def __repr__(self) -> str:
        return f"ResolvedHarvest({self.category.value} via {self.gesture.value}: +{self.points})"


class InteractionResolver:
    """
    Applies gestures to the live population of a Session.

    A gesture scores only on the category it is bound to; anything else,
    including gestures on fruits that are no longer live or any gesture
    while the session is not playing, is ignored and returns None.
    """

    def __init__(
        self,
        session: "Session",
        factory: FruitFactory,
        time_source: Callable[[], float],
        catalog: Optional[FruitCatalog] = None,
        event_duration: Optional[float] = None
    ):
        """
        Initialize resolver.

        Args:
            session: Session whose counters and population are updated.
            factory: Source of replacement fruits.
            time_source: Clock used to stamp harvest events.
            catalog: Gesture binding table. Uses default if None.
            event_duration: Seconds a harvest event is kept. Uses config if None.
        """
        self._session = session
        self._factory = factory
        self._time = time_source
        self._catalog = catalog if catalog is not None else get_catalog()
        self._event_ids = itertools.count(1)
        if event_duration is None:
            event_duration = get_config().feedback.harvest_event_duration
        self._event_duration = event_duration

    def resolve(self, fruit: Fruit, gesture: Gesture) -> Optional[ResolvedHarvest]:
        """
        Resolve a gesture performed on a fruit.

        Returns:
            ResolvedHarvest on a match, None otherwise.
        """
        session = self._session
        if not session.is_playing:
            return None

        if session.fruits.get(fruit.id) is not fruit:
            logger.debug("Ignoring %s on fruit %d: not live", gesture.value, fruit.id)
            return None

        points = self._catalog.points_for(fruit.category, gesture)
        if points == 0:
            logger.debug(
                "Ignoring %s on fruit %d (category %s)",
                gesture.value, fruit.id, fruit.category.value
            )
            return None

        # Apply the whole harvest before anyone can observe it
        session.score += points
        session.harvest_counts[fruit.category] += 1
        del session.fruits[fruit.id]

        replacement = self._factory.generate()
        session.fruits[replacement.id] = replacement

        now = self._time()
        session.prune_harvest_events(now, self._event_duration)
        event = HarvestEvent(
            id=next(self._event_ids),
            category=fruit.category,
            x=fruit.x,
            y=fruit.y,
            created_at=now
        )
        session.harvest_events.append(event)

        return ResolvedHarvest(
            fruit_id=fruit.id,
            category=fruit.category,
            gesture=gesture,
            points=points,
            replacement_id=replacement.id,
            event=event
        )
