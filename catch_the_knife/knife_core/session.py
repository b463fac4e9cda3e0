"""
Gameplay Session
================

Main state machine combining difficulty, catch evaluation, combo/fever,
scoring and the falling knife.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

import pymunk

from catch_the_knife.knife_core.catch_evaluator import CatchEvaluator, TapOutcome
from catch_the_knife.knife_core.collaborators import (
    BestScoreStore,
    CalendarDailySeed,
    DailySeedProvider,
    InMemoryBestScoreStore,
)
from catch_the_knife.knife_core.combo_fever import ComboFeverTracker
from catch_the_knife.knife_core.config_loader import GameConfig, get_config
from catch_the_knife.knife_core.difficulty import DifficultyModel
from catch_the_knife.knife_core.fall_world import FallWorld
from catch_the_knife.knife_core.knife_catalog import KnifeCatalog, get_catalog
from catch_the_knife.knife_core.rng import SeededUniformSource, UniformSource
from catch_the_knife.knife_core.rules import CatchZoneState, FallingObjectSpec, GameRules
from catch_the_knife.knife_core.scoring import ScoreTracker
from catch_the_knife.knife_core.state_snapshot import SessionSnapshot, SessionState

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


class GameplaySession:
    """
    One play session, replayable indefinitely.

    States:
    - PLAYING: knife falls, taps are evaluated
    - AWAITING_REVIVE: after a miss, until request_revive(True) or restart()
    - PAUSED: knife frozen, taps ignored; timers still expire on tick

    The host calls tick(now) every frame and on_tap(point, now) on input,
    all on one thread. Taps of a frame must be applied before that frame's
    tick (advance_frame does this). Operations that do not apply to the
    current state are no-ops.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rng: Optional[UniformSource] = None,
        seed: Optional[int] = None,
        best_score_store: Optional[BestScoreStore] = None,
        daily_seed: Optional[DailySeedProvider] = None,
        on_game_over: Optional[Callable[[int], None]] = None
    ):
        """
        Initialize session and spawn the first knife.

        Args:
            config: Game configuration. Uses default if None.
            rng: Uniform source for spawns. Seeded from `seed` if None.
            seed: Seed used when no rng is given.
            best_score_store: Persistence for the best score. In-memory if None.
            daily_seed: Seed source for daily mode. Calendar date if None.
            on_game_over: Called with the miss count after every miss.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._rng = rng if rng is not None else SeededUniformSource(seed)
        self._store = best_score_store if best_score_store is not None else InMemoryBestScoreStore()
        self._daily_seed = daily_seed if daily_seed is not None else CalendarDailySeed()
        self.on_game_over = on_game_over

        # Subsystems
        self._catalog: KnifeCatalog = get_catalog(config)
        self._difficulty = DifficultyModel(config)
        self._evaluator = CatchEvaluator(config)
        self._combo = ComboFeverTracker(config)
        self._scorer = ScoreTracker(config, best_score=self._store.load_best_score())
        self._rules = GameRules(self._rng, config)
        self._world = FallWorld(config)

        # Session state
        self._state = SessionState.PLAYING
        self._catch_zone: CatchZoneState = self._rules.initial_catch_zone()
        self._falling: Optional[FallingObjectSpec] = None
        self._daily_factor: Optional[float] = None
        self._slow_motion_expiry: Optional[float] = None
        self._miss_count: int = 0
        self._last_tick: Optional[float] = None

        self.spawn_next()

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def config(self) -> GameConfig:
        return self._config

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def score(self) -> int:
        return self._scorer.score

    @property
    def level(self) -> int:
        return self._scorer.level

    @property
    def best_score(self) -> int:
        return self._scorer.best_score

    @property
    def combo_count(self) -> int:
        return self._combo.combo_count

    @property
    def fever_active(self) -> bool:
        return self._combo.fever_active

    @property
    def fever_expiry_time(self) -> Optional[float]:
        return self._combo.fever_expiry_time

    @property
    def slow_motion_active(self) -> bool:
        return self._slow_motion_expiry is not None

    @property
    def slow_motion_expiry_time(self) -> Optional[float]:
        return self._slow_motion_expiry

    @property
    def awaiting_revive(self) -> bool:
        return self._state is SessionState.AWAITING_REVIVE

    @property
    def paused(self) -> bool:
        return self._state is SessionState.PAUSED

    @property
    def miss_count(self) -> int:
        """Total misses this session. Never decreases."""
        return self._miss_count

    @property
    def daily_mode(self) -> bool:
        return self._daily_factor is not None

    @property
    def catch_zone(self) -> CatchZoneState:
        return self._catch_zone

    @property
    def catch_zone_rect(self) -> pymunk.BB:
        return self._catch_zone.rect

    @property
    def falling_object(self) -> Optional[FallingObjectSpec]:
        """Spec of the current knife."""
        return self._falling

    @property
    def world(self) -> FallWorld:
        return self._world

    @property
    def scorer(self) -> ScoreTracker:
        return self._scorer

    # ------------------------------------------------------------------
    # Spawning
    # ------------------------------------------------------------------

    def _current_width_factor(self) -> float:
        if self._daily_factor is not None:
            return self._daily_factor
        return self._difficulty.catch_zone_width_factor(self.level)

    def spawn_next(self) -> FallingObjectSpec:
        """
        Spawn a fresh knife for the current level.

        Returns:
            The new FallingObjectSpec.
        """
        params = self._difficulty.parameters_for(self.level)
        speed_factor = self._config.slow_motion.speed_factor if self.slow_motion_active else 1.0
        spec = self._rules.spawn.next_spec(params, speed_factor)

        self._catch_zone = self._catch_zone.with_width_factor(self._current_width_factor())

        knife_type = self._catalog[spec.knife_id]
        self._world.spawn_knife(
            knife_type,
            scale=spec.size_scale,
            x=spec.spawn_x,
            y=spec.spawn_y,
            fall_speed=spec.fall_speed,
            angular_velocity=spec.angular_velocity
        )
        self._falling = spec
        return spec

    # ------------------------------------------------------------------
    # Input and time
    # ------------------------------------------------------------------

    def _expire_timers(self, now: float) -> None:
        self._combo.on_tick(now)
        if self._slow_motion_expiry is not None and now >= self._slow_motion_expiry:
            self._slow_motion_expiry = None
            logger.debug("Slow motion off at %.3f", now)

    def on_tap(self, point: Point, now: float) -> TapOutcome:
        """
        Handle a tap.

        Args:
            point: Tap location in scene coordinates.
            now: Current time in seconds.

        Returns:
            The TapOutcome. Ignored outside PLAYING.
        """
        if self._state is not SessionState.PLAYING:
            return TapOutcome.ignored()

        knife = self._world.knife
        if knife is None:
            return TapOutcome.ignored()

        self._expire_timers(now)

        outcome = self._evaluator.evaluate(
            point,
            self.catch_zone_rect,
            knife.handle_bb,
            knife.blade_bb,
            knife.handle_point
        )
        if outcome.is_catch:
            self._register_catch(outcome.perfect, now)
        elif outcome.is_miss:
            self._register_miss("tap")
        return outcome

    def _register_catch(self, perfect: bool, now: float) -> None:
        # Fever doubles only catches made while it was already running
        event = self._scorer.apply_catch(perfect, self._combo.fever_active)
        update = self._combo.on_catch_result(perfect, now)
        if update.fever_just_activated:
            logger.debug("Fever activated at score %d", self.score)
        if event.level_up:
            logger.debug("Level up: %d", self.level)
        self.spawn_next()

    def _register_miss(self, reason: str) -> None:
        self._state = SessionState.AWAITING_REVIVE
        self._miss_count += 1
        self._combo.on_miss()
        if self._scorer.record_best():
            self._store.save_best_score(self._scorer.best_score)
        logger.debug(
            "Miss (%s) at score %d, miss #%d", reason, self.score, self._miss_count
        )
        if self.on_game_over is not None:
            self.on_game_over(self._miss_count)

    def tick(self, now: float) -> None:
        """
        Advance one frame.

        Expires fever and slow motion in every state. In PLAYING also steps
        the knife and turns a fall-through into a miss. While paused the
        knife stays frozen.

        Args:
            now: Current time in seconds.
        """
        if self._last_tick is None or now < self._last_tick:
            dt = 0.0
        else:
            dt = now - self._last_tick
        self._last_tick = now

        self._expire_timers(now)

        if self._state is SessionState.PLAYING:
            time_scale = self._config.slow_motion.speed_factor if self.slow_motion_active else 1.0
            self._world.step(dt, time_scale)
            knife = self._world.knife
            knife_y = knife.position[1] if knife is not None else None
            if self._rules.miss.fell_through(knife_y):
                self._register_miss("fell")

    def advance_frame(self, now: float, taps: Iterable[Point] = ()) -> List[TapOutcome]:
        """
        Apply a frame's taps, then tick.

        Returns:
            Outcomes of the taps, in order.
        """
        outcomes = [self.on_tap(point, now) for point in taps]
        self.tick(now)
        return outcomes

    def sync_knife_position(self, x: float, y: float, angle: float = 0.0) -> None:
        """Report the knife pose from a host that animates it itself."""
        self._world.place_knife(x, y, angle)

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    def request_revive(self, granted: bool) -> bool:
        """
        Resolve a revive request.

        Args:
            granted: Result of the rewarded grant.

        Returns:
            True if play resumed.
        """
        if self._state is not SessionState.AWAITING_REVIVE or not granted:
            return False
        self._state = SessionState.PLAYING
        self._combo.on_miss()
        logger.debug("Revived at score %d", self.score)
        self.spawn_next()
        return True

    def restart(self) -> None:
        """Start a new run. Best score and miss count are kept."""
        self._scorer.reset()
        self._combo.reset()
        self._state = SessionState.PLAYING
        logger.debug("Restart")
        self.spawn_next()

    def toggle_pause(self) -> bool:
        """
        Toggle PLAYING and PAUSED.

        Returns:
            True if the session is paused afterwards.
        """
        if self._state is SessionState.PLAYING:
            self._state = SessionState.PAUSED
        elif self._state is SessionState.PAUSED:
            self._state = SessionState.PLAYING
        return self._state is SessionState.PAUSED

    def activate_slow_motion(self, now: float) -> None:
        """Slow motion on for the configured duration from now."""
        self._slow_motion_expiry = now + self._config.slow_motion.duration
        logger.debug("Slow motion on until %.3f", self._slow_motion_expiry)

    def request_slow_motion(self, granted: bool, now: float) -> bool:
        if not granted:
            return False
        self.activate_slow_motion(now)
        return True

    def set_daily_mode(self, enabled: bool) -> None:
        """
        Turn daily mode on or off.

        While on, the date-seeded width factor replaces the level-driven one.
        The catch zone updates immediately.
        """
        if enabled:
            seed = self._daily_seed.seed_for_today()
            self._daily_factor = self._difficulty.daily_width_factor(seed)
        else:
            self._daily_factor = None
        self._catch_zone = self._catch_zone.with_width_factor(self._current_width_factor())

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def snapshot(self) -> SessionSnapshot:
        knife = self._world.knife
        return SessionSnapshot(
            score=self.score,
            best_score=self.best_score,
            level=self.level,
            combo_count=self.combo_count,
            fever_active=self.fever_active,
            slow_motion_active=self.slow_motion_active,
            daily_mode=self.daily_mode,
            catch_zone_width_factor=self._catch_zone.width_factor,
            catch_zone_rect=self.catch_zone_rect,
            falling_object=self._falling,
            knife_position=knife.position if knife is not None else None,
            knife_angle=knife.angle if knife is not None else 0.0,
            state=self._state,
            miss_count=self._miss_count
        )

    def get_render_data(self) -> Dict[str, Any]:
        """
        Get data needed for rendering.

        Returns:
            Dict with the catch zone, knife pose and hit boxes, and HUD values.
        """
        knife = self._world.knife
        knife_data = None
        if knife is not None:
            knife_data = {
                "uid": knife.uid,
                "variant": knife.knife_type.name,
                "x": knife.position[0],
                "y": knife.position[1],
                "angle": knife.angle,
                "sprite_size": knife.sprite_size,
                "handle_bb": tuple(knife.handle_bb),
                "blade_bb": tuple(knife.blade_bb),
            }

        return {
            "screen_width": self._config.screen.width,
            "screen_height": self._config.screen.height,
            "catch_zone": tuple(self.catch_zone_rect),
            "perfect_window": tuple(self._evaluator.perfect_window(self.catch_zone_rect)),
            "knife": knife_data,
            "score": self.score,
            "best_score": max(self.best_score, self.score),
            "level": self.level,
            "combo_count": self.combo_count,
            "fever_active": self.fever_active,
            "slow_motion_active": self.slow_motion_active,
            "daily_mode": self.daily_mode,
            "state": self._state.value,
        }
