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


@dataclass(frozen=True)
class ScreenConfig:
    """Screen geometry and falling physics."""
    width: int                   # Screen width in points
    height: int                  # Screen height in points
    gravity_y: float             # Vertical gravity (negative = down)
    despawn_y: float             # Knife below this Y is a miss
    spawn_offset_y: float        # Spawn height above the top edge
    spawn_margin_x: float        # Margin from the side edges for spawn X
    max_frame_dt: float          # Frame gaps are clamped to this

    @property
    def mid_x(self) -> float:
        return self.width / 2.0

    @property
    def spawn_y(self) -> float:
        return self.height + self.spawn_offset_y


@dataclass(frozen=True)
class CatchZoneConfig:
    """Catch zone geometry and tap tolerance."""
    base_width: float
    height: float
    y: float
    tap_tolerance: float
    perfect_window_ratio: float


@dataclass(frozen=True)
class DifficultyConfig:
    """Level-driven difficulty ramp."""
    base_fall_speed: float
    fall_speed_per_level: float
    max_fall_speed: float
    shrink_per_level: float
    min_width_factor: float
    points_per_level: int
    daily_width_factors: Tuple[float, ...]


@dataclass(frozen=True)
class KnifeConfig:
    """Configuration for a single knife variant."""
    id: int
    name: str
    base_width: float
    base_height: float


@dataclass(frozen=True)
class KnifeGeometryConfig:
    """Handle and blade hit boxes as fractions of the scaled sprite size."""
    handle_width: float
    handle_height: float
    handle_offset_y: float
    blade_width: float
    blade_height: float
    blade_offset_y: float
    mass: float


@dataclass(frozen=True)
class SpawnConfig:
    """Per-spawn randomisation ranges."""
    scale_min: float
    scale_max: float
    max_spin_rate: float
    velocity_scale: float


@dataclass(frozen=True)
class FeverConfig:
    """Combo / fever parameters."""
    combo_threshold: int
    duration: float
    multiplier: int


@dataclass(frozen=True)
class SlowMotionConfig:
    """Slow motion power-up."""
    duration: float
    speed_factor: float


@dataclass(frozen=True)
class AdsConfig:
    """Monetization cadence."""
    interstitial_every: int


@dataclass(frozen=True)
class ThemeConfig:
    """A cosmetic color theme."""
    name: str
    background: Tuple[int, int, int]
    tint: Tuple[int, int, int]


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    screen: ScreenConfig
    catch_zone: CatchZoneConfig
    difficulty: DifficultyConfig
    knives: Tuple[KnifeConfig, ...]
    knife_geometry: KnifeGeometryConfig
    spawn: SpawnConfig
    fever: FeverConfig
    slow_motion: SlowMotionConfig
    ads: AdsConfig
    themes: Tuple[ThemeConfig, ...]

    @property
    def num_knife_types(self) -> int:
        """Total number of knife variants."""
        return len(self.knives)


def _parse_color(color_data: List) -> Tuple[int, int, int]:
    """Parse RGB color from YAML."""
    if len(color_data) != 3:
        raise ValueError(f"Color must have 3 values [R, G, B], got {color_data}")
    return (int(color_data[0]), int(color_data[1]), int(color_data[2]))


def _parse_knife(index: int, knife_data: dict) -> KnifeConfig:
    """Parse a single knife variant from YAML."""
    return KnifeConfig(
        id=index,
        name=str(knife_data["name"]),
        base_width=float(knife_data["base_width"]),
        base_height=float(knife_data["base_height"])
    )


def _parse_theme(theme_data: dict) -> ThemeConfig:
    return ThemeConfig(
        name=str(theme_data["name"]),
        background=_parse_color(theme_data["background"]),
        tint=_parse_color(theme_data["tint"])
    )


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    if not config.knives:
        raise ValueError("At least one knife variant is required")

    for knife in config.knives:
        if knife.base_width <= 0 or knife.base_height <= 0:
            raise ValueError(f"Knife '{knife.name}' must have a positive base size")

    difficulty = config.difficulty
    if not 0.0 < difficulty.min_width_factor <= 1.0:
        raise ValueError(
            f"difficulty.min_width_factor must be in (0, 1], got {difficulty.min_width_factor}"
        )
    if not difficulty.daily_width_factors:
        raise ValueError("difficulty.daily_width_factors must not be empty")
    for factor in difficulty.daily_width_factors:
        if not 0.0 < factor <= 1.0:
            raise ValueError(f"Daily width factor must be in (0, 1], got {factor}")
    if difficulty.points_per_level < 1:
        raise ValueError(
            f"difficulty.points_per_level must be >= 1, got {difficulty.points_per_level}"
        )
    if difficulty.base_fall_speed <= 0 or difficulty.max_fall_speed < difficulty.base_fall_speed:
        raise ValueError("difficulty fall speeds must satisfy 0 < base_fall_speed <= max_fall_speed")

    if config.spawn.scale_min <= 0 or config.spawn.scale_min > config.spawn.scale_max:
        raise ValueError(
            f"spawn scale range is invalid: [{config.spawn.scale_min}, {config.spawn.scale_max}]"
        )

    if not 0.0 < config.catch_zone.perfect_window_ratio <= 1.0:
        raise ValueError(
            f"catch_zone.perfect_window_ratio must be in (0, 1], "
            f"got {config.catch_zone.perfect_window_ratio}"
        )

    if config.fever.combo_threshold < 1:
        raise ValueError(f"fever.combo_threshold must be >= 1, got {config.fever.combo_threshold}")

    if not 0.0 < config.slow_motion.speed_factor <= 1.0:
        raise ValueError(
            f"slow_motion.speed_factor must be in (0, 1], got {config.slow_motion.speed_factor}"
        )

    if config.ads.interstitial_every < 1:
        raise ValueError(f"ads.interstitial_every must be >= 1, got {config.ads.interstitial_every}")

    if config.screen.max_frame_dt <= 0:
        raise ValueError(f"screen.max_frame_dt must be positive, got {config.screen.max_frame_dt}")


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

    screen_data = raw["screen"]
    screen = ScreenConfig(
        width=int(screen_data["width"]),
        height=int(screen_data["height"]),
        gravity_y=float(screen_data["gravity_y"]),
        despawn_y=float(screen_data.get("despawn_y", -120.0)),
        spawn_offset_y=float(screen_data.get("spawn_offset_y", 80.0)),
        spawn_margin_x=float(screen_data.get("spawn_margin_x", 80.0)),
        max_frame_dt=float(screen_data.get("max_frame_dt", 0.1))
    )

    zone_data = raw["catch_zone"]
    catch_zone = CatchZoneConfig(
        base_width=float(zone_data["base_width"]),
        height=float(zone_data["height"]),
        y=float(zone_data["y"]),
        tap_tolerance=float(zone_data.get("tap_tolerance", 120.0)),
        perfect_window_ratio=float(zone_data.get("perfect_window_ratio", 0.18))
    )

    diff_data = raw["difficulty"]
    difficulty = DifficultyConfig(
        base_fall_speed=float(diff_data["base_fall_speed"]),
        fall_speed_per_level=float(diff_data["fall_speed_per_level"]),
        max_fall_speed=float(diff_data["max_fall_speed"]),
        shrink_per_level=float(diff_data["shrink_per_level"]),
        min_width_factor=float(diff_data["min_width_factor"]),
        points_per_level=int(diff_data.get("points_per_level", 5)),
        daily_width_factors=tuple(
            float(f) for f in diff_data.get("daily_width_factors", [0.8, 0.9, 1.0])
        )
    )

    knives = tuple(
        _parse_knife(i, k) for i, k in enumerate(raw["knives"])
    )

    geom_data = raw["knife_geometry"]
    knife_geometry = KnifeGeometryConfig(
        handle_width=float(geom_data["handle_width"]),
        handle_height=float(geom_data["handle_height"]),
        handle_offset_y=float(geom_data["handle_offset_y"]),
        blade_width=float(geom_data["blade_width"]),
        blade_height=float(geom_data["blade_height"]),
        blade_offset_y=float(geom_data["blade_offset_y"]),
        mass=float(geom_data.get("mass", 1.0))
    )

    spawn_data = raw["spawn"]
    spawn = SpawnConfig(
        scale_min=float(spawn_data["scale_min"]),
        scale_max=float(spawn_data["scale_max"]),
        max_spin_rate=float(spawn_data.get("max_spin_rate", 4.0)),
        velocity_scale=float(spawn_data.get("velocity_scale", 100.0))
    )

    fever_data = raw["fever"]
    fever = FeverConfig(
        combo_threshold=int(fever_data["combo_threshold"]),
        duration=float(fever_data["duration"]),
        multiplier=int(fever_data.get("multiplier", 2))
    )

    slow_data = raw.get("slow_motion", {})
    slow_motion = SlowMotionConfig(
        duration=float(slow_data.get("duration", 6.0)),
        speed_factor=float(slow_data.get("speed_factor", 0.5))
    )

    ads_data = raw.get("ads", {})
    ads = AdsConfig(
        interstitial_every=int(ads_data.get("interstitial_every", 3))
    )

    themes = tuple(_parse_theme(t) for t in raw.get("themes", []))

    config = GameConfig(
        screen=screen,
        catch_zone=catch_zone,
        difficulty=difficulty,
        knives=knives,
        knife_geometry=knife_geometry,
        spawn=spawn,
        fever=fever,
        slow_motion=slow_motion,
        ads=ads,
        themes=themes
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
