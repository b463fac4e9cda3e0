"""
Scoring System
==============

Applies catch scores and derives the level from the score.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from catch_the_knife.knife_core.config_loader import GameConfig, get_config


@dataclass
class CatchEvent:
    """Record of a scoring event."""
    points: int
    perfect: bool
    fever_bonus: bool
    level_up: bool = False

    def __repr__(self) -> str:
        kind = "perfect" if self.perfect else "catch"
        if self.fever_bonus:
            return f"CatchEvent({kind}={self.points}, fever)"
        return f"CatchEvent({kind}={self.points})"


class ScoreTracker:
    """
    Tracks run score, level and best score.

    Fever doubles a catch only if fever was already active before that catch,
    so the catch that triggers fever scores normally.

    Level is always 1 + score // points_per_level.
    """

    def __init__(self, config: Optional[GameConfig] = None, best_score: int = 0):
        """
        Initialize score tracker.

        Args:
            config: Game configuration. Uses default if None.
            best_score: Best score carried over from earlier sessions.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._points_per_level = config.difficulty.points_per_level
        self._fever_multiplier = config.fever.multiplier
        self._score: int = 0
        self._best: int = max(0, best_score)

    @property
    def score(self) -> int:
        """Current run score."""
        return self._score

    @property
    def level(self) -> int:
        """Current level, derived from score."""
        return 1 + self._score // self._points_per_level

    @property
    def best_score(self) -> int:
        return self._best

    def apply_catch(self, perfect: bool, fever_active: bool) -> CatchEvent:
        """
        Apply score for a catch and return the event.

        Args:
            perfect: True for a perfect catch.
            fever_active: Fever state before this catch.

        Returns:
            CatchEvent describing the points awarded.
        """
        level_before = self.level
        points = self._fever_multiplier if fever_active else 1
        self._score += points
        return CatchEvent(
            points=points,
            perfect=perfect,
            fever_bonus=fever_active,
            level_up=self.level > level_before
        )

    def record_best(self) -> bool:
        """
        Fold the current score into the best score.

        Returns:
            True if a new best was set.
        """
        if self._score > self._best:
            self._best = self._score
            return True
        return False

    def reset(self) -> None:
        """Reset the run. Best score is kept."""
        self._score = 0
