"""
Autoplay Harness
================

Plays headless sessions on a virtual clock with a simple bot and reports
score statistics. Useful for checking balance changes to game_config.yaml.

Usage:
    python -m fruit_harvest.evaluation.run_autoplay --sessions 20 --accuracy 0.8
"""

from __future__ import annotations

import argparse
import json
import logging
import random
import sys
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np

from fruit_harvest.harvest_core.config_loader import GameConfig, load_config
from fruit_harvest.harvest_core.fruit_catalog import Gesture
from fruit_harvest.harvest_core.scheduler import FrameScheduler, VirtualClock
from fruit_harvest.harvest_core.session import SessionController, SessionState
from fruit_harvest.harvest_core.state_snapshot import SessionSnapshot


@dataclass
class AutoplayResult:
    """Result for a single session."""
    seed: int
    final_score: int
    harvests: int
    attempts: int
    harvest_counts: Dict[str, int]
    elapsed_time: float


@dataclass
class AutoplaySummary:
    """Summary across all sessions."""
    mean_score: float
    std_score: float
    min_score: int
    max_score: int
    median_score: float
    total_time: float
    results: List[AutoplayResult] = field(default_factory=list)


class AutoplayBot:
    """
    Picks a random live fruit at a fixed rate and performs a gesture on it.

    With probability `accuracy` the gesture is the one bound to the fruit's
    category; otherwise it is one of the other three.
    """

    def __init__(
        self,
        controller: SessionController,
        accuracy: float = 0.8,
        seed: Optional[int] = None
    ):
        if not 0.0 <= accuracy <= 1.0:
            raise ValueError(f"accuracy must be in [0, 1], got {accuracy}")
        self._controller = controller
        self._accuracy = accuracy
        self._rng = random.Random(seed)
        self.attempts = 0

        board = controller.config.board
        # Centre of the drop strip
        self._drop_point = (board.play_width + board.drop_zone_width / 2, board.height / 2)

    def act(self) -> None:
        """Perform one gesture on a random fruit."""
        controller = self._controller
        fruits = controller.fruits
        if controller.state is not SessionState.PLAYING or not fruits:
            return

        fruit = self._rng.choice(fruits)
        correct = controller.catalog[fruit.category].gesture
        if self._rng.random() < self._accuracy:
            gesture = correct
        else:
            gesture = self._rng.choice([g for g in Gesture if g is not correct])

        self.attempts += 1
        if gesture is Gesture.DRAG_AND_DROP:
            # begin_drag refuses non-draggable fruit, which counts as a miss
            if controller.begin_drag(fruit.id, fruit.position):
                controller.update_drag(self._drop_point)
                controller.end_drag(self._drop_point, in_drop_zone=True)
        else:
            controller.interact(fruit.id, gesture)


def play_session(
    seed: int,
    config: Optional[GameConfig] = None,
    accuracy: float = 0.8,
    actions_per_second: float = 2.0,
    frame_rate: float = 30.0,
    motion: bool = False,
    verbose: bool = False
) -> AutoplayResult:
    """
    Play one full session headlessly.

    Args:
        seed: Seed for fruit generation and bot choices.
        config: Game configuration. Loads default if None.
        accuracy: Probability the bot uses the correct gesture.
        actions_per_second: Bot action rate in game time.
        frame_rate: Virtual frames per second.
        motion: Enable fruit motion.
        verbose: If True, print result.

    Returns:
        AutoplayResult for this session.
    """
    if config is None:
        config = load_config()
    if actions_per_second <= 0 or frame_rate <= 0:
        raise ValueError("actions_per_second and frame_rate must be positive")

    clock = VirtualClock()
    scheduler = FrameScheduler(clock)
    controller = SessionController(config=config, seed=seed, scheduler=scheduler)
    bot = AutoplayBot(controller, accuracy=accuracy, seed=seed)

    finished: List[SessionSnapshot] = []

    def on_change(snapshot: SessionSnapshot) -> None:
        if snapshot.state is SessionState.ENDED:
            finished.append(snapshot)

    controller.subscribe(on_change)
    controller.set_motion_enabled(motion)

    start_time = time.time()
    controller.start()
    bot_handle = scheduler.call_every(1.0 / actions_per_second, bot.act)

    frame_dt = 1.0 / frame_rate
    while not finished:
        clock.advance(frame_dt)
        controller.pump()
    bot_handle.cancel()

    elapsed = time.time() - start_time
    final = finished[0]
    counts = {controller.catalog[c].name: n for c, n in final.harvest_counts.items()}

    result = AutoplayResult(
        seed=seed,
        final_score=final.score,
        harvests=sum(counts.values()),
        attempts=bot.attempts,
        harvest_counts=counts,
        elapsed_time=elapsed
    )

    if verbose:
        print(f"  Seed {seed}: score={result.final_score}, "
              f"harvests={result.harvests}/{result.attempts}, time={elapsed:.2f}s")

    return result


def run_autoplay(
    seeds: List[int],
    config: Optional[GameConfig] = None,
    accuracy: float = 0.8,
    actions_per_second: float = 2.0,
    motion: bool = False,
    verbose: bool = True
) -> AutoplaySummary:
    """
    Play one session per seed and aggregate the scores.

    Returns:
        AutoplaySummary with aggregate statistics.
    """
    if not seeds:
        raise ValueError("At least one seed is required")
    if config is None:
        config = load_config()

    if verbose:
        print(f"Playing {len(seeds)} sessions (accuracy={accuracy:.2f}, motion={motion})...")

    results: List[AutoplayResult] = []
    total_start = time.time()

    for seed in seeds:
        results.append(play_session(
            seed,
            config=config,
            accuracy=accuracy,
            actions_per_second=actions_per_second,
            motion=motion,
            verbose=verbose
        ))

    total_time = time.time() - total_start
    scores = [r.final_score for r in results]

    summary = AutoplaySummary(
        mean_score=float(np.mean(scores)),
        std_score=float(np.std(scores)),
        min_score=int(min(scores)),
        max_score=int(max(scores)),
        median_score=float(np.median(scores)),
        total_time=total_time,
        results=results
    )

    if verbose:
        print()
        print("=" * 50)
        print("AUTOPLAY SUMMARY")
        print("=" * 50)
        print(f"Sessions played: {len(seeds)}")
        print(f"Mean score:      {summary.mean_score:.2f}")
        print(f"Std deviation:   {summary.std_score:.2f}")
        print(f"Min score:       {summary.min_score}")
        print(f"Max score:       {summary.max_score}")
        print(f"Median score:    {summary.median_score:.2f}")
        print(f"Total time:      {total_time:.2f}s")
        print("=" * 50)

    return summary


def save_results(summary: AutoplaySummary, output_path: str) -> None:
    """Save autoplay results to JSON."""
    data = {
        "timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
        "mean_score": summary.mean_score,
        "std_score": summary.std_score,
        "min_score": summary.min_score,
        "max_score": summary.max_score,
        "median_score": summary.median_score,
        "total_time": summary.total_time,
        "results": [
            {
                "seed": r.seed,
                "final_score": r.final_score,
                "harvests": r.harvests,
                "attempts": r.attempts,
                "harvest_counts": r.harvest_counts,
                "elapsed_time": r.elapsed_time
            }
            for r in summary.results
        ]
    }

    with open(output_path, "w") as f:
        json.dump(data, f, indent=2)

    print(f"Results saved to {output_path}")


def main():
    parser = argparse.ArgumentParser(description="Play Fruit Harvest sessions with a bot")
    parser.add_argument("--sessions", type=int, default=10, help="Number of sessions")
    parser.add_argument("--seed-start", type=int, default=0, help="First seed")
    parser.add_argument("--accuracy", type=float, default=0.8, help="Correct-gesture probability")
    parser.add_argument("--rate", type=float, default=2.0, help="Bot actions per second")
    parser.add_argument("--motion", action="store_true", help="Enable fruit motion")
    parser.add_argument("--config", type=str, default=None, help="Path to game_config.yaml")
    parser.add_argument("--output", type=str, default=None, help="Path to save results JSON")
    parser.add_argument("--quiet", action="store_true", help="Reduce output verbosity")
    parser.add_argument("--log-level", type=str, default="WARNING", help="Logging level")

    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(name)s %(levelname)s: %(message)s")

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading config: {e}")
        return 1

    seeds = list(range(args.seed_start, args.seed_start + args.sessions))
    summary = run_autoplay(
        seeds,
        config=config,
        accuracy=args.accuracy,
        actions_per_second=args.rate,
        motion=args.motion,
        verbose=not args.quiet
    )

    if args.output:
        save_results(summary, args.output)

    return 0


if __name__ == "__main__":
    sys.exit(main())
