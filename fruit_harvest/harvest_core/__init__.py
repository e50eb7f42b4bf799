"""
Harvest Core - The session engine behind the game.

This module provides the session state machine, fruit generation, motion
simulation and gesture resolution.

Main exports:
- SessionController: Entry point for front ends (start/pause/reset/gestures)
- SessionSnapshot: Immutable state pushed to subscribers
- FrameScheduler: Timer queue the host loop pumps every frame
- GameConfig: Configuration loaded from game_config.yaml
"""

from fruit_harvest.harvest_core.config_loader import GameConfig, load_config
from fruit_harvest.harvest_core.fruit_catalog import Category, Gesture, FruitSize, FruitCatalog
from fruit_harvest.harvest_core.fruit_factory import Fruit, FruitFactory
from fruit_harvest.harvest_core.scheduler import FrameScheduler, TimerHandle, VirtualClock
from fruit_harvest.harvest_core.simulation_clock import SimulationClock
from fruit_harvest.harvest_core.interaction import (
    HarvestEvent,
    InteractionResolver,
    ResolvedHarvest,
)
from fruit_harvest.harvest_core.state_snapshot import SessionSnapshot, format_time
from fruit_harvest.harvest_core.session import SessionController, SessionState

__all__ = [
    "GameConfig",
    "load_config",
    "Category",
    "Gesture",
    "FruitSize",
    "FruitCatalog",
    "Fruit",
    "FruitFactory",
    "FrameScheduler",
    "TimerHandle",
    "VirtualClock",
    "SimulationClock",
    "HarvestEvent",
    "InteractionResolver",
    "ResolvedHarvest",
    "SessionSnapshot",
    "format_time",
    "SessionController",
    "SessionState",
]
