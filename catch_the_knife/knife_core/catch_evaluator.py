"""
Catch Evaluator
===============

Classifies a tap against the knife's handle/blade hit boxes and the catch zone.

A catch needs the handle inside the zone while the blade stays out of it.
Rectangles are pymunk bounding boxes (left, bottom, right, top), y-up.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import pymunk

from catch_the_knife.knife_core.config_loader import GameConfig, get_config

Point = Tuple[float, float]


class TapKind(Enum):
    IGNORED = "ignored"
    MISS = "miss"
    CATCH = "catch"


@dataclass(frozen=True)
class TapOutcome:
    """Result of evaluating one tap."""
    kind: TapKind
    perfect: bool = False

    @staticmethod
    def ignored() -> "TapOutcome":
        return TapOutcome(TapKind.IGNORED)

    @staticmethod
    def miss() -> "TapOutcome":
        return TapOutcome(TapKind.MISS)

    @staticmethod
    def catch(perfect: bool) -> "TapOutcome":
        return TapOutcome(TapKind.CATCH, perfect)

    @property
    def is_ignored(self) -> bool:
        return self.kind is TapKind.IGNORED

    @property
    def is_miss(self) -> bool:
        return self.kind is TapKind.MISS

    @property
    def is_catch(self) -> bool:
        return self.kind is TapKind.CATCH

    def __repr__(self) -> str:
        if self.is_catch:
            return f"TapOutcome(catch, perfect={self.perfect})"
        return f"TapOutcome({self.kind.value})"


def bb_center(bb: pymunk.BB) -> Point:
    return ((bb.left + bb.right) / 2.0, (bb.bottom + bb.top) / 2.0)


def bb_width(bb: pymunk.BB) -> float:
    return bb.right - bb.left


class CatchEvaluator:
    """
    Tap classification.

    - Taps further than tap_tolerance (vertically) from the zone center are ignored.
    - Handle intersects zone and blade does not -> catch.
    - Catch is perfect when the handle reference point lies in the perfect
      window: centered on the zone, perfect_window_ratio of its width, full height.
    - Anything else -> miss.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._tolerance = config.catch_zone.tap_tolerance
        self._perfect_ratio = config.catch_zone.perfect_window_ratio

    @property
    def tap_tolerance(self) -> float:
        return self._tolerance

    def is_near_zone(self, tap_point: Point, catch_zone_rect: pymunk.BB) -> bool:
        """True if the tap is close enough to the zone to count."""
        _, zone_y = bb_center(catch_zone_rect)
        return abs(tap_point[1] - zone_y) < self._tolerance

    def perfect_window(self, catch_zone_rect: pymunk.BB) -> pymunk.BB:
        """Narrow window centered on the catch zone."""
        zone_x, _ = bb_center(catch_zone_rect)
        pad = bb_width(catch_zone_rect) * self._perfect_ratio
        return pymunk.BB(
            zone_x - pad / 2.0,
            catch_zone_rect.bottom,
            zone_x + pad / 2.0,
            catch_zone_rect.top
        )

    def evaluate(
        self,
        tap_point: Point,
        catch_zone_rect: pymunk.BB,
        handle_hit_rect: pymunk.BB,
        blade_hit_rect: pymunk.BB,
        handle_point: Optional[Point] = None
    ) -> TapOutcome:
        """
        Classify a tap.

        Args:
            tap_point: Tap location in scene coordinates.
            catch_zone_rect: Current catch zone.
            handle_hit_rect: Handle hit box in scene coordinates.
            blade_hit_rect: Blade hit box in scene coordinates.
            handle_point: Handle reference point. Defaults to the handle box center.

        Returns:
            TapOutcome (ignored, miss or catch).
        """
        if not self.is_near_zone(tap_point, catch_zone_rect):
            return TapOutcome.ignored()

        handle_ok = handle_hit_rect.intersects(catch_zone_rect)
        blade_hit = blade_hit_rect.intersects(catch_zone_rect)
        if not handle_ok or blade_hit:
            return TapOutcome.miss()

        if handle_point is None:
            handle_point = bb_center(handle_hit_rect)
        window = self.perfect_window(catch_zone_rect)
        perfect = window.contains_vect(pymunk.Vec2d(handle_point[0], handle_point[1]))
        return TapOutcome.catch(perfect)
