"""
Human Play Mode
================

Play Catch the Knife interactively. Tap (click or space) when the knife's
handle crosses the catch zone; the blade must stay clear of it.

Controls:
    - Click: Tap at the cursor
    - Space: Tap at the catch zone
    - P: Pause / resume
    - V: Watch an ad to revive (after a miss)
    - R: Restart
    - S: Watch an ad for slow motion
    - D: Toggle daily mode
    - T: Next theme
    - ESC: Quit

Usage:
    python -m tools.play_human [--seed SEED] [--scale SCALE] [--best-file PATH]
"""

from __future__ import annotations

import argparse
import logging
import math
import sys
import time
from typing import List, Optional, Tuple

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

from catch_the_knife.knife_core.collaborators import (
    DeferredRewards,
    InMemoryBestScoreStore,
    JsonBestScoreStore,
)
from catch_the_knife.knife_core.config_loader import GameConfig, ThemeConfig, load_config
from catch_the_knife.knife_core.controller import SessionController
from catch_the_knife.knife_core.session import GameplaySession

Point = Tuple[float, float]


class KnifeRenderer:
    """
    Flat neon renderer. Scene coordinates have y up; the window is scaled
    from the configured scene size.
    """

    def __init__(self, config: GameConfig, scale: float):
        self._config = config
        self._scale = scale
        self._window_width = int(config.screen.width * scale)
        self._window_height = int(config.screen.height * scale)

        self._handle_color = (170, 120, 70)
        self._blade_color = (210, 215, 225)
        self._perfect_color = (255, 255, 255)
        self._fever_color = (255, 90, 60)
        self._slow_color = (120, 170, 255)

        pygame.font.init()
        self._font_huge = pygame.font.Font(None, int(64 * scale))
        self._font_medium = pygame.font.Font(None, int(30 * scale))
        self._font_small = pygame.font.Font(None, int(22 * scale))

    @property
    def window_size(self) -> Tuple[int, int]:
        return self._window_width, self._window_height

    def render(
        self,
        screen: pygame.Surface,
        render_data: dict,
        theme: Optional[ThemeConfig],
        ad_showing: bool = False
    ) -> None:
        """Render the complete scene."""
        background = theme.background if theme is not None else (0, 0, 0)
        accent = theme.tint if theme is not None else (0, 199, 190)
        screen.fill(background)

        self._draw_catch_zone(screen, render_data, accent)

        if render_data["knife"] is not None:
            self._draw_knife(screen, render_data["knife"])

        self._draw_hud(screen, render_data, accent)

        state = render_data["state"]
        if ad_showing:
            self._draw_overlay(screen, "AD", "Rewarded video playing...")
        elif state == "awaiting_revive":
            self._draw_overlay(screen, "MISSED", "V: revive   R: restart")
        elif state == "paused":
            self._draw_overlay(screen, "PAUSED", "P: resume")

    def _draw_catch_zone(self, screen: pygame.Surface, render_data: dict, accent: Tuple[int, int, int]) -> None:
        zone = self._bb_to_rect(render_data["catch_zone"])
        pygame.draw.rect(screen, accent, zone, 3, border_radius=int(8 * self._scale))

        window = self._bb_to_rect(render_data["perfect_window"])
        pygame.draw.rect(screen, self._perfect_color, window, 1)

        if render_data["fever_active"]:
            pygame.draw.rect(screen, self._fever_color, zone.inflate(8, 8), 2, border_radius=int(10 * self._scale))

    def _draw_knife(self, screen: pygame.Surface, knife: dict) -> None:
        """Draw the knife as two rotated boxes: handle below, blade above."""
        width, height = knife["sprite_size"]
        geometry = self._config.knife_geometry
        parts = [
            (width * geometry.handle_width, height * geometry.handle_height,
             height * geometry.handle_offset_y, self._handle_color),
            (width * geometry.blade_width, height * geometry.blade_height,
             height * geometry.blade_offset_y, self._blade_color),
        ]
        for part_w, part_h, offset_y, color in parts:
            corners = self._rotated_box(knife["x"], knife["y"], knife["angle"], part_w, part_h, offset_y)
            pygame.draw.polygon(screen, color, corners)

    def _rotated_box(
        self, x: float, y: float, angle: float, w: float, h: float, offset_y: float
    ) -> List[Tuple[int, int]]:
        cos_a = math.cos(angle)
        sin_a = math.sin(angle)
        corners = []
        for lx, ly in ((-w / 2, -h / 2), (w / 2, -h / 2), (w / 2, h / 2), (-w / 2, h / 2)):
            ly += offset_y
            wx = x + lx * cos_a - ly * sin_a
            wy = y + lx * sin_a + ly * cos_a
            corners.append(self.world_to_screen((wx, wy)))
        return corners

    def _draw_hud(self, screen: pygame.Surface, render_data: dict, accent: Tuple[int, int, int]) -> None:
        score = self._font_huge.render(str(render_data["score"]), True, accent)
        screen.blit(score, ((self._window_width - score.get_width()) // 2, int(40 * self._scale)))

        lines = [
            f"BEST {render_data['best_score']}",
            f"LEVEL {render_data['level']}",
            f"COMBO {render_data['combo_count']}",
        ]
        y = int(110 * self._scale)
        for line in lines:
            text = self._font_small.render(line, True, accent)
            screen.blit(text, (int(16 * self._scale), y))
            y += text.get_height() + 4

        tags = []
        if render_data["fever_active"]:
            tags.append(("FEVER x2", self._fever_color))
        if render_data["slow_motion_active"]:
            tags.append(("SLOW-MO", self._slow_color))
        if render_data["daily_mode"]:
            tags.append(("DAILY", accent))
        y = int(110 * self._scale)
        for label, color in tags:
            text = self._font_medium.render(label, True, color)
            screen.blit(text, (self._window_width - text.get_width() - int(16 * self._scale), y))
            y += text.get_height() + 4

    def _draw_overlay(self, screen: pygame.Surface, title: str, hint: str) -> None:
        overlay = pygame.Surface((self._window_width, self._window_height), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 160))
        screen.blit(overlay, (0, 0))

        title_surface = self._font_huge.render(title, True, (255, 255, 255))
        hint_surface = self._font_medium.render(hint, True, (200, 200, 200))
        cy = self._window_height // 2
        screen.blit(title_surface, ((self._window_width - title_surface.get_width()) // 2, cy - 60))
        screen.blit(hint_surface, ((self._window_width - hint_surface.get_width()) // 2, cy + 10))

    def _bb_to_rect(self, bb: Tuple[float, float, float, float]) -> pygame.Rect:
        left, bottom, right, top = bb
        x0, y0 = self.world_to_screen((left, top))
        x1, y1 = self.world_to_screen((right, bottom))
        return pygame.Rect(x0, y0, max(1, x1 - x0), max(1, y1 - y0))

    def world_to_screen(self, point: Point) -> Tuple[int, int]:
        """Convert scene coordinates to window pixels (y is flipped)."""
        x, y = point
        return int(x * self._scale), int((self._config.screen.height - y) * self._scale)

    def screen_to_world(self, pixel: Tuple[int, int]) -> Point:
        px, py = pixel
        return px / self._scale, self._config.screen.height - py / self._scale


class HumanPlayer:
    """
    Interactive host for a GameplaySession.

    Rewarded ads are simulated: a request shows an overlay for ad_seconds
    and is then granted.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        scale: float = 1.0,
        best_file: Optional[str] = None,
        ad_seconds: float = 1.5,
        target_fps: int = 60
    ):
        if not PYGAME_AVAILABLE:
            raise ImportError("pygame required. Install: pip install pygame")

        if config is None:
            config = load_config()

        self._config = config
        self._target_fps = target_fps
        self._ad_seconds = ad_seconds

        store = JsonBestScoreStore(best_file) if best_file else InMemoryBestScoreStore()
        self._rewards = DeferredRewards()
        self._session = GameplaySession(config=config, seed=seed, best_score_store=store)
        self._controller = SessionController(self._session, self._rewards, clock=time.monotonic)

        self._renderer = KnifeRenderer(config, scale)
        pygame.init()
        self._screen = pygame.display.set_mode(self._renderer.window_size)
        pygame.display.set_caption("Catch the Knife")
        self._clock = pygame.time.Clock()

        self._running = True
        self._ad_ends_at: Optional[float] = None
        self._daily = False

    def run(self) -> int:
        """Run the game loop. Returns the best score."""
        print("=== Catch the Knife ===")
        print("Click or Space to catch, P pause, V revive, R restart")
        print("S slow motion, D daily mode, T theme, ESC quit")
        print()

        while self._running:
            now = time.monotonic()
            taps = self._handle_events(now)
            self._update_ad(now)

            last_score = self._session.score
            for outcome in self._session.advance_frame(now, taps):
                if outcome.is_catch:
                    print(f"  Catch{' (perfect)' if outcome.perfect else ''}: {self._session.score}")
                elif outcome.is_miss:
                    print(f"\nMISS - Score: {last_score}")

            self._render()
            self._clock.tick(self._target_fps)

        pygame.quit()
        return self._session.best_score

    def _handle_events(self, now: float) -> List[Point]:
        """Process pygame events. Returns the frame's taps in scene coordinates."""
        taps: List[Point] = []
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False

            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self._running = False
                elif self._ad_ends_at is not None:
                    continue
                elif event.key == pygame.K_SPACE:
                    zone = self._session.catch_zone_rect
                    taps.append(((zone.left + zone.right) / 2, (zone.bottom + zone.top) / 2))
                elif event.key == pygame.K_p:
                    self._controller.toggle_pause()
                elif event.key == pygame.K_r:
                    self._controller.cancel_revive_and_restart()
                    print("\n=== Game Restarted ===\n")
                elif event.key == pygame.K_v:
                    if self._controller.show_revive:
                        self._controller.revive()
                        self._start_ad(now)
                elif event.key == pygame.K_s:
                    self._controller.request_slow_motion()
                    self._start_ad(now)
                elif event.key == pygame.K_d:
                    self._daily = not self._daily
                    self._controller.set_daily_mode(self._daily)
                    print(f"Daily mode {'on' if self._daily else 'off'}")
                elif event.key == pygame.K_t:
                    index = (self._controller.theme_index + 1) % len(self._config.themes)
                    theme = self._controller.request_theme(index)
                    print(f"Theme: {theme.name}")

            elif event.type == pygame.MOUSEBUTTONDOWN:
                if event.button == 1 and self._ad_ends_at is None:
                    taps.append(self._renderer.screen_to_world(event.pos))
        return taps

    def _start_ad(self, now: float) -> None:
        if self._rewards.pending:
            self._ad_ends_at = now + self._ad_seconds

    def _update_ad(self, now: float) -> None:
        if self._ad_ends_at is not None and now >= self._ad_ends_at:
            self._ad_ends_at = None
            while self._rewards.resolve_next(True):
                pass

    def _render(self) -> None:
        self._renderer.render(
            self._screen,
            self._session.get_render_data(),
            self._controller.theme,
            ad_showing=self._ad_ends_at is not None
        )
        pygame.display.flip()


def main():
    parser = argparse.ArgumentParser(description="Play Catch the Knife interactively")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--scale", type=float, default=1.0, help="Window scale (default: 1.0)")
    parser.add_argument("--best-file", type=str, default=None, help="JSON file for the best score")
    parser.add_argument("--ad-seconds", type=float, default=1.5, help="Simulated rewarded ad length")
    parser.add_argument("--fps", type=int, default=60, help="Target FPS")
    parser.add_argument("--log-level", type=str, default="WARNING", help="Logging level")

    args = parser.parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s %(name)s %(levelname)s: %(message)s"
    )

    try:
        config = load_config()
        player = HumanPlayer(
            config=config,
            seed=args.seed,
            scale=args.scale,
            best_file=args.best_file,
            ad_seconds=args.ad_seconds,
            target_fps=args.fps
        )
        best = player.run()
        print(f"\nBest Score: {best}")
        return 0
    except ImportError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
