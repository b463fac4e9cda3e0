"""
Combo / Fever Tracker
=====================

Counts consecutive perfect catches and runs the timed fever state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from catch_the_knife.knife_core.config_loader import GameConfig, get_config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComboUpdate:
    """Tracker state after a catch."""
    combo_count: int
    fever_just_activated: bool


class ComboFeverTracker:
    """
    Combo and fever state.

    - Perfect catch: combo + 1. Regular catch: combo = 0.
    - Combo at or above the threshold with fever off: fever on until now + duration.
      Further catches never extend it.
    - Miss: combo = 0 and fever off immediately.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._threshold = config.fever.combo_threshold
        self._duration = config.fever.duration
        self._combo: int = 0
        self._fever_expiry: Optional[float] = None

    @property
    def combo_count(self) -> int:
        return self._combo

    @property
    def fever_active(self) -> bool:
        return self._fever_expiry is not None

    @property
    def fever_expiry_time(self) -> Optional[float]:
        """When fever ends, or None while inactive."""
        return self._fever_expiry

    def on_catch_result(self, perfect: bool, now: float) -> ComboUpdate:
        """
        Record a catch.

        Args:
            perfect: True for a perfect catch.
            now: Current time in seconds.

        Returns:
            ComboUpdate with the new combo count and whether fever just started.
        """
        self._combo = self._combo + 1 if perfect else 0

        activated = False
        if self._combo >= self._threshold and not self.fever_active:
            self._fever_expiry = now + self._duration
            activated = True
            logger.debug("Fever on at combo %d, expires at %.3f", self._combo, self._fever_expiry)

        return ComboUpdate(combo_count=self._combo, fever_just_activated=activated)

    def on_tick(self, now: float) -> bool:
        """
        Expire fever once its time has passed.

        Returns:
            True if fever ended on this tick.
        """
        if self._fever_expiry is not None and now >= self._fever_expiry:
            self._fever_expiry = None
            logger.debug("Fever expired at %.3f", now)
            return True
        return False

    def on_miss(self) -> None:
        self._combo = 0
        self._fever_expiry = None

    def reset(self) -> None:
        """Reset combo and fever."""
        self.on_miss()
