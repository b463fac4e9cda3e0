"""
Game Rules
==========

Handles spawn parameters, catch zone geometry and miss conditions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import pymunk

from catch_the_knife.knife_core.config_loader import GameConfig, get_config
from catch_the_knife.knife_core.difficulty import DifficultyParameters
from catch_the_knife.knife_core.knife_catalog import KnifeCatalog, KnifeType, KnifeVariant, get_catalog
from catch_the_knife.knife_core.rng import UniformSource


@dataclass(frozen=True)
class FallingObjectSpec:
    """
    Parameters of one spawned knife.

    Produced fresh for each spawn and never modified afterwards.
    """
    variant: KnifeVariant
    knife_id: int
    size_scale: float
    spin_enabled: bool
    fall_speed: float
    spawn_x: float
    spawn_y: float
    angular_velocity: float = 0.0


@dataclass(frozen=True)
class CatchZoneState:
    """Catch zone width factor and placement."""
    width_factor: float
    base_position: Tuple[float, float]
    base_width: float
    height: float

    @property
    def width(self) -> float:
        return self.base_width * self.width_factor

    @property
    def rect(self) -> pymunk.BB:
        x, y = self.base_position
        half_w = self.width / 2.0
        half_h = self.height / 2.0
        return pymunk.BB(x - half_w, y - half_h, x + half_w, y + half_h)

    def with_width_factor(self, width_factor: float) -> "CatchZoneState":
        return CatchZoneState(
            width_factor=width_factor,
            base_position=self.base_position,
            base_width=self.base_width,
            height=self.height
        )


class SpawnRules:
    """
    Turns difficulty parameters and uniform draws into a FallingObjectSpec.

    Draw order per spawn: variant, scale, x, then spin rate when spinning.
    The spin flag alternates on every spawn, starting with no spin.
    """

    def __init__(
        self,
        rng: UniformSource,
        config: Optional[GameConfig] = None,
        catalog: Optional[KnifeCatalog] = None
    ):
        """
        Initialize spawn rules.

        Args:
            rng: Uniform source for variant, scale, position and spin.
            config: Game configuration. Uses default if None.
            catalog: Knife catalog. Built from config if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._catalog = catalog if catalog is not None else get_catalog(config)
        self._rng = rng
        self._next_should_spin = False

        screen = config.screen
        self._min_x = screen.spawn_margin_x
        self._max_x = screen.width - screen.spawn_margin_x
        self._spawn_y = screen.spawn_y

    @property
    def next_should_spin(self) -> bool:
        return self._next_should_spin

    def _draw_index(self, count: int) -> int:
        return min(int(self._rng.next_uniform() * count), count - 1)

    def _draw_range(self, low: float, high: float) -> float:
        return low + self._rng.next_uniform() * (high - low)

    def next_spec(
        self,
        params: DifficultyParameters,
        speed_factor: float = 1.0
    ) -> FallingObjectSpec:
        """
        Produce the next knife spec and flip the spin flag.

        Args:
            params: Difficulty for the current level.
            speed_factor: Extra fall speed scaling (slow motion).
        """
        spawn_cfg = self._config.spawn
        knife_type: KnifeType = self._catalog[self._draw_index(len(self._catalog))]
        scale = self._draw_range(spawn_cfg.scale_min, spawn_cfg.scale_max)
        if self._min_x < self._max_x:
            x = self._draw_range(self._min_x, self._max_x)
        else:
            x = self._config.screen.mid_x

        spin = self._next_should_spin
        self._next_should_spin = not self._next_should_spin
        angular_velocity = 0.0
        if spin:
            angular_velocity = self._draw_range(-spawn_cfg.max_spin_rate, spawn_cfg.max_spin_rate)

        return FallingObjectSpec(
            variant=knife_type.variant,
            knife_id=knife_type.id,
            size_scale=scale,
            spin_enabled=spin,
            fall_speed=params.fall_speed_multiplier * speed_factor,
            spawn_x=x,
            spawn_y=self._spawn_y,
            angular_velocity=angular_velocity
        )


class MissRules:
    """
    Miss conditions.

    - Fall-through: knife center below despawn_y.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._despawn_y = config.screen.despawn_y

    def fell_through(self, knife_y: Optional[float]) -> bool:
        return knife_y is not None and knife_y < self._despawn_y


class GameRules:
    """
    Combined interface for all game rules.
    """

    def __init__(self, rng: UniformSource, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._config = config
        self.spawn = SpawnRules(rng, config)
        self.miss = MissRules(config)

    def initial_catch_zone(self) -> CatchZoneState:
        zone = self._config.catch_zone
        return CatchZoneState(
            width_factor=1.0,
            base_position=(self._config.screen.mid_x, zone.y),
            base_width=zone.base_width,
            height=zone.height
        )
