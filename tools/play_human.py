"""
Human Play Mode
================

Play Fruit Harvest interactively with the mouse.

Controls:
    - Left click: harvest apples
    - Double click: harvest blueberries
    - Right click: harvest lemons
    - Drag a watermelon into the drop zone on the right
    - Space: Start   P: Pause/Resume   R: Reset
    - M: Toggle moving fruit   H: Help   ESC: Quit

Usage:
    python -m tools.play_human [--seed SEED] [--width WIDTH] [--height HEIGHT] [--motion]
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Tuple

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

from fruit_harvest.harvest_core.config_loader import load_config, GameConfig
from fruit_harvest.harvest_core.fruit_catalog import Gesture
from fruit_harvest.harvest_core.scheduler import FrameScheduler
from fruit_harvest.harvest_core.session import SessionController, SessionState
from fruit_harvest.harvest_core.state_snapshot import SessionSnapshot, FruitView

# Two left clicks on the same fruit within this many seconds make a double click
DOUBLE_CLICK_WINDOW = 0.35

# Fruit radius in logical units before the size scale is applied
BASE_FRUIT_RADIUS = 3.5


class HarvestRenderer:
    """
    Draws a SessionSnapshot and maps screen positions to the board.
    """

    def __init__(self, config: GameConfig, controller: SessionController,
                 window_width: int, window_height: int):
        """Initialize renderer."""
        self._config = config
        self._catalog = controller.catalog
        self._window_width = window_width
        self._window_height = window_height

        # Colors
        self._bg = (235, 245, 225)
        self._board_fill = (150, 210, 130)
        self._board_border = (90, 140, 80)
        self._drop_fill = (250, 235, 150)
        self._drop_border = (220, 190, 60)
        self._panel = (245, 250, 240)
        self._text_dark = (50, 60, 40)
        self._text_light = (110, 120, 100)

        pygame.font.init()
        self._font_huge = pygame.font.Font(None, 56)
        self._font_large = pygame.font.Font(None, 40)
        self._font_medium = pygame.font.Font(None, 28)
        self._font_small = pygame.font.Font(None, 20)

        self._calculate_layout()

    def _calculate_layout(self) -> None:
        """Calculate layout for game elements."""
        self._top_ui_height = 90
        self._bottom_ui_height = 50

        board = self._config.board
        available_height = self._window_height - self._top_ui_height - self._bottom_ui_height - 20
        available_width = self._window_width - 40

        self._scale = min(available_width / board.width, available_height / board.height)
        self._board_render_width = int(board.width * self._scale)
        self._board_render_height = int(board.height * self._scale)
        self._board_x = (self._window_width - self._board_render_width) // 2
        self._board_y = self._top_ui_height + (available_height - self._board_render_height) // 2

        drop_width = int(board.drop_zone_width * self._scale)
        self._drop_rect = pygame.Rect(
            self._board_x + self._board_render_width - drop_width, self._board_y,
            drop_width, self._board_render_height
        )

    @property
    def drop_rect(self) -> "pygame.Rect":
        """Drop zone in screen coordinates."""
        return self._drop_rect

    def world_to_screen(self, x: float, y: float) -> Tuple[int, int]:
        return int(self._board_x + x * self._scale), int(self._board_y + y * self._scale)

    def fruit_radius(self, fruit: FruitView) -> int:
        return max(4, int(BASE_FRUIT_RADIUS * self._catalog.render_scale(fruit.size) * self._scale))

    def hit_test(self, snapshot: SessionSnapshot, pos: Tuple[int, int]) -> Optional[FruitView]:
        """Topmost fruit under a screen position, if any."""
        px, py = pos
        for fruit in reversed(snapshot.fruits):
            cx, cy = self.world_to_screen(fruit.x, fruit.y)
            radius = self.fruit_radius(fruit)
            if (px - cx) ** 2 + (py - cy) ** 2 <= radius ** 2:
                return fruit
        return None

    def render(self, screen: "pygame.Surface", snapshot: SessionSnapshot,
               now: float, show_help: bool = False) -> None:
        """Render the complete game scene."""
        screen.fill(self._bg)
        self._draw_board(screen)
        self._draw_fruits(screen, snapshot)
        self._draw_harvest_events(screen, snapshot, now)
        self._draw_held(screen, snapshot)
        self._draw_score_ui(screen, snapshot)
        self._draw_controls_ui(screen, snapshot)

        if show_help:
            self._draw_help(screen)
        elif snapshot.state is SessionState.IDLE:
            self._draw_idle(screen, snapshot)
        elif snapshot.state is SessionState.PAUSED:
            self._draw_banner(screen, "PAUSED", "Press P to resume")

    def _draw_board(self, screen: "pygame.Surface") -> None:
        board_rect = pygame.Rect(self._board_x, self._board_y,
                                 self._board_render_width, self._board_render_height)
        pygame.draw.rect(screen, self._board_fill, board_rect)
        pygame.draw.rect(screen, self._drop_fill, self._drop_rect)
        pygame.draw.line(screen, self._drop_border, self._drop_rect.topleft,
                         self._drop_rect.bottomleft, 3)
        pygame.draw.rect(screen, self._board_border, board_rect, 3)

        label = self._font_small.render("DROP", True, self._drop_border)
        screen.blit(label, label.get_rect(center=self._drop_rect.center))

    def _draw_fruit(self, screen: "pygame.Surface", fruit: FruitView,
                    center: Tuple[int, int], alpha: int = 255) -> None:
        category_type = self._catalog[fruit.category]
        radius = self.fruit_radius(fruit)
        surf = pygame.Surface((radius * 2, radius * 2), pygame.SRCALPHA)
        pygame.draw.circle(surf, (*category_type.color, alpha), (radius, radius), radius)
        highlight = tuple(min(255, c + 60) for c in category_type.color)
        pygame.draw.circle(surf, (*highlight, alpha),
                           (radius - radius // 3, radius - radius // 3), radius // 3)
        screen.blit(surf, (center[0] - radius, center[1] - radius))

        initial = self._font_small.render(category_type.name[0].upper(), True, self._text_dark)
        screen.blit(initial, initial.get_rect(center=center))

    def _draw_fruits(self, screen: "pygame.Surface", snapshot: SessionSnapshot) -> None:
        held_id = snapshot.held.fruit_id if snapshot.held is not None else None
        for fruit in snapshot.fruits:
            alpha = 110 if fruit.id == held_id else 255
            self._draw_fruit(screen, fruit, self.world_to_screen(fruit.x, fruit.y), alpha)

    def _draw_held(self, screen: "pygame.Surface", snapshot: SessionSnapshot) -> None:
        if snapshot.held is None:
            return
        fruit = snapshot.get_fruit(snapshot.held.fruit_id)
        if fruit is not None:
            pointer = (int(snapshot.held.pointer[0]), int(snapshot.held.pointer[1]))
            self._draw_fruit(screen, fruit, pointer, alpha=180)

    def _draw_harvest_events(self, screen: "pygame.Surface",
                             snapshot: SessionSnapshot, now: float) -> None:
        duration = self._config.feedback.harvest_event_duration
        for event in snapshot.harvest_events:
            t = (now - event.created_at) / duration
            if not 0.0 <= t < 1.0:
                continue
            cx, cy = self.world_to_screen(event.x, event.y)
            radius = int(BASE_FRUIT_RADIUS * self._scale * (1.0 + t))
            color = self._catalog[event.category].color
            surf = pygame.Surface((radius * 2, radius * 2), pygame.SRCALPHA)
            pygame.draw.circle(surf, (*color, int(255 * (1.0 - t))), (radius, radius), radius)
            screen.blit(surf, (cx - radius, cy - radius - int(20 * t)))

    def _draw_score_ui(self, screen: "pygame.Surface", snapshot: SessionSnapshot) -> None:
        """Draw score, high score, timer and harvest counts at the top."""
        label = self._font_small.render("SCORE", True, self._text_light)
        screen.blit(label, (20, 10))
        value = self._font_large.render(f"{snapshot.score:,}", True, self._text_dark)
        screen.blit(value, (20, 28))

        high = self._font_small.render(f"HIGH {snapshot.high_score:,}", True, self._text_light)
        screen.blit(high, (20, 62))

        timer = self._font_huge.render(snapshot.time_text, True, self._text_dark)
        screen.blit(timer, timer.get_rect(midtop=(self._window_width // 2, 12)))

        x = self._window_width - 20
        for category_type in reversed(list(self._catalog)):
            count = snapshot.harvest_counts.get(category_type.category, 0)
            text = self._font_medium.render(str(count), True, self._text_dark)
            x -= text.get_width()
            screen.blit(text, (x, 30))
            x -= 18
            pygame.draw.circle(screen, category_type.color, (x + 8, 40), 8)
            x -= 16

    def _draw_controls_ui(self, screen: "pygame.Surface", snapshot: SessionSnapshot) -> None:
        """Draw controls at the bottom."""
        y = self._window_height - self._bottom_ui_height + 10
        controls = [
            ("Space", "Start"),
            ("P", "Resume" if snapshot.state is SessionState.PAUSED else "Pause"),
            ("R", "Reset"),
            ("M", "Moving: on" if snapshot.motion_enabled else "Moving: off"),
            ("H", "Help"),
            ("ESC", "Quit"),
        ]

        x = 20
        for key, action in controls:
            key_text = self._font_small.render(key, True, self._text_dark)
            box_width = key_text.get_width() + 12
            pygame.draw.rect(screen, self._panel, (x, y, box_width, 24), border_radius=4)
            pygame.draw.rect(screen, self._board_border, (x, y, box_width, 24), 1, border_radius=4)
            screen.blit(key_text, (x + 6, y + 4))

            action_text = self._font_small.render(action, True, self._text_light)
            screen.blit(action_text, (x + box_width + 6, y + 4))
            x += box_width + action_text.get_width() + 18

    def _draw_banner(self, screen: "pygame.Surface", title: str, hint: str,
                     detail: Optional[str] = None) -> None:
        overlay = pygame.Surface((self._window_width, self._window_height), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 120))
        screen.blit(overlay, (0, 0))

        box_w, box_h = 320, 170
        box_x = (self._window_width - box_w) // 2
        box_y = (self._window_height - box_h) // 2
        pygame.draw.rect(screen, self._panel, (box_x, box_y, box_w, box_h), border_radius=16)
        pygame.draw.rect(screen, self._board_border, (box_x, box_y, box_w, box_h), 3, border_radius=16)

        title_surf = self._font_huge.render(title, True, self._text_dark)
        screen.blit(title_surf, title_surf.get_rect(midtop=(box_x + box_w // 2, box_y + 22)))
        if detail:
            detail_surf = self._font_large.render(detail, True, self._text_dark)
            screen.blit(detail_surf, detail_surf.get_rect(midtop=(box_x + box_w // 2, box_y + 75)))
        hint_surf = self._font_medium.render(hint, True, self._text_light)
        screen.blit(hint_surf, hint_surf.get_rect(midtop=(box_x + box_w // 2, box_y + 125)))

    def _draw_idle(self, screen: "pygame.Surface", snapshot: SessionSnapshot) -> None:
        if snapshot.last_final_score is None:
            self._draw_banner(screen, "FRUIT HARVEST", "Press SPACE to start")
        else:
            self._draw_banner(screen, "TIME UP", "Press SPACE to play again",
                              detail=f"Score: {snapshot.last_final_score:,}")

    def _draw_help(self, screen: "pygame.Surface") -> None:
        overlay = pygame.Surface((self._window_width, self._window_height), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 150))
        screen.blit(overlay, (0, 0))

        gesture_text = {
            Gesture.PRIMARY_CLICK: "click",
            Gesture.DOUBLE_CLICK: "double click",
            Gesture.SECONDARY_CLICK: "right click",
            Gesture.DRAG_AND_DROP: "drag into the drop zone",
        }
        lines = ["HOW TO PLAY", ""]
        for category_type in self._catalog:
            lines.append(f"{category_type.name.title()}: {gesture_text[category_type.gesture]}"
                         f"  (+{category_type.points})")
        minutes = self._config.session.duration_seconds // 60
        lines += ["", "Moving mode: fruits bounce around",
                  f"You have {minutes} minutes. Harvest as much as you can!"]

        y = self._board_y + 20
        for line in lines:
            surf = self._font_medium.render(line, True, (255, 255, 255))
            screen.blit(surf, surf.get_rect(midtop=(self._window_width // 2, y)))
            y += 30


class HumanPlayer:
    """
    Human-playable Fruit Harvest. Turns pygame mouse events into
    SessionController gestures and renders the latest snapshot each frame.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        window_width: int = 800,
        window_height: int = 720,
        target_fps: int = 60,
        motion: Optional[bool] = None
    ):
        if not PYGAME_AVAILABLE:
            raise ImportError("pygame required. Install: pip install pygame")

        if config is None:
            config = load_config()

        self._config = config
        self._target_fps = target_fps

        self._scheduler = FrameScheduler()
        self._controller = SessionController(config=config, seed=seed, scheduler=self._scheduler)
        if motion is not None:
            self._controller.set_motion_enabled(motion)

        pygame.init()
        self._screen = pygame.display.set_mode((window_width, window_height))
        pygame.display.set_caption("Fruit Harvest")
        self._clock = pygame.time.Clock()

        self._renderer = HarvestRenderer(config, self._controller, window_width, window_height)

        self._running = True
        self._show_help = False
        self._snapshot = self._controller.snapshot()
        self._last_click: Optional[Tuple[int, float]] = None
        self._last_state = self._snapshot.state

        self._controller.subscribe(self._on_change)

    def _on_change(self, snapshot: SessionSnapshot) -> None:
        if snapshot.state is SessionState.ENDED and self._last_state is not SessionState.ENDED:
            print(f"\nTIME UP - Score: {snapshot.score}  (High score: {snapshot.high_score})")
        self._last_state = snapshot.state
        self._snapshot = snapshot

    def run(self) -> int:
        """Run the game loop. Returns the high score."""
        print("=== Fruit Harvest ===")
        print("Space to start, P to pause, R to reset, M for moving fruit, H for help")
        print()

        while self._running:
            self._handle_events()
            self._controller.pump()
            self._renderer.render(self._screen, self._snapshot,
                                  self._scheduler.now(), self._show_help)
            pygame.display.flip()
            self._clock.tick(self._target_fps)

        pygame.quit()
        return self._controller.high_score

    def _handle_events(self) -> None:
        """Process pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False

            elif event.type == pygame.KEYDOWN:
                self._handle_key(event.key)

            elif event.type == pygame.MOUSEBUTTONDOWN:
                if event.button == 1:
                    self._on_left_down(event.pos)
                elif event.button == 3:
                    self._on_right_down(event.pos)

            elif event.type == pygame.MOUSEMOTION:
                if self._controller.held is not None:
                    self._controller.update_drag(event.pos)

            elif event.type == pygame.MOUSEBUTTONUP:
                if event.button == 1 and self._controller.held is not None:
                    inside = self._renderer.drop_rect.collidepoint(event.pos)
                    result = self._controller.end_drag(event.pos, in_drop_zone=bool(inside))
                    self._report(result)

    def _handle_key(self, key: int) -> None:
        controller = self._controller
        if key == pygame.K_ESCAPE:
            self._running = False
        elif key == pygame.K_SPACE:
            if controller.start():
                self._show_help = False
                print("\n=== Session Started ===\n")
        elif key == pygame.K_p:
            controller.toggle_pause()
        elif key == pygame.K_r:
            controller.reset()
            print("\n=== Reset ===\n")
        elif key == pygame.K_m:
            controller.set_motion_enabled(not controller.motion_enabled)
        elif key == pygame.K_h:
            self._show_help = not self._show_help

    def _on_left_down(self, pos: Tuple[int, int]) -> None:
        """Left press: start a drag on a watermelon, otherwise a click."""
        fruit = self._renderer.hit_test(self._snapshot, pos)
        if fruit is None:
            return

        if self._controller.begin_drag(fruit.id, pos):
            return

        self._report(self._controller.interact(fruit.id, Gesture.PRIMARY_CLICK))

        now = self._scheduler.now()
        if self._last_click is not None:
            last_id, last_time = self._last_click
            if last_id == fruit.id and now - last_time <= DOUBLE_CLICK_WINDOW:
                self._last_click = None
                self._report(self._controller.interact(fruit.id, Gesture.DOUBLE_CLICK))
                return
        self._last_click = (fruit.id, now)

    def _on_right_down(self, pos: Tuple[int, int]) -> None:
        fruit = self._renderer.hit_test(self._snapshot, pos)
        if fruit is not None:
            self._report(self._controller.interact(fruit.id, Gesture.SECONDARY_CLICK))

    def _report(self, result) -> None:
        if result is not None:
            print(f"  +{result.points} {self._controller.catalog[result.category].name} "
                  f"(Total: {self._controller.score})")


def main():
    parser = argparse.ArgumentParser(description="Play Fruit Harvest interactively")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--width", type=int, default=800, help="Window width (default: 800)")
    parser.add_argument("--height", type=int, default=720, help="Window height (default: 720)")
    parser.add_argument("--fps", type=int, default=60, help="Target FPS")
    parser.add_argument("--motion", action="store_true", help="Start with moving fruit")
    parser.add_argument("--log-level", type=str, default="WARNING", help="Logging level")

    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(name)s %(levelname)s: %(message)s")

    try:
        config = load_config()
        player = HumanPlayer(
            config=config,
            seed=args.seed,
            window_width=args.width,
            window_height=args.height,
            target_fps=args.fps,
            motion=True if args.motion else None
        )
        high_score = player.run()
        print(f"\nHigh Score: {high_score}")
        return 0
    except ImportError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
