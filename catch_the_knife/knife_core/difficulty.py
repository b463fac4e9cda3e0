"""
Difficulty Model
================

Maps level to fall speed and catch zone width. Daily mode swaps the
level-driven width for a date-seeded one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from catch_the_knife.knife_core.config_loader import GameConfig, get_config


@dataclass(frozen=True)
class DifficultyParameters:
    """Spawn parameters for one level."""
    fall_speed_multiplier: float
    catch_zone_width_factor: float


class DifficultyModel:
    """
    Pure level -> difficulty mapping.

    - fall speed: min(base + per_level * level, max)
    - zone width: max(min_factor, 1 - shrink * level)
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._config = config.difficulty

    def fall_speed_multiplier(self, level: int) -> float:
        level = max(1, level)
        cfg = self._config
        return min(cfg.base_fall_speed + cfg.fall_speed_per_level * level, cfg.max_fall_speed)

    def catch_zone_width_factor(self, level: int) -> float:
        level = max(1, level)
        cfg = self._config
        return max(cfg.min_width_factor, 1.0 - cfg.shrink_per_level * level)

    def parameters_for(self, level: int) -> DifficultyParameters:
        """
        Get difficulty parameters for a level.

        Args:
            level: Current level (values below 1 are treated as 1).

        Returns:
            DifficultyParameters for that level.
        """
        return DifficultyParameters(
            fall_speed_multiplier=self.fall_speed_multiplier(level),
            catch_zone_width_factor=self.catch_zone_width_factor(level)
        )

    def daily_width_factor(self, seed: int) -> float:
        """Width factor for daily mode: factors[seed mod len(factors)]."""
        factors = self._config.daily_width_factors
        return factors[seed % len(factors)]
