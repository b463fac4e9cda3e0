"""
State Snapshot
==============

Read-only view of a gameplay session for presentation, plus packing into
numpy arrays for recording and analysis.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

import numpy as np
import pymunk

from catch_the_knife.knife_core.rules import FallingObjectSpec


class SessionState(Enum):
    PLAYING = "playing"
    AWAITING_REVIVE = "awaiting_revive"
    PAUSED = "paused"


# Stable integer codes for SessionState in observation arrays
STATE_CODES: Dict[SessionState, int] = {
    SessionState.PLAYING: 0,
    SessionState.AWAITING_REVIVE: 1,
    SessionState.PAUSED: 2,
}


@dataclass(frozen=True)
class SessionSnapshot:
    """
    Complete session state as seen by the host.

    The host reads it every frame and never mutates the session through it.
    """
    score: int
    best_score: int
    level: int
    combo_count: int
    fever_active: bool
    slow_motion_active: bool
    daily_mode: bool
    catch_zone_width_factor: float
    catch_zone_rect: pymunk.BB
    falling_object: Optional[FallingObjectSpec]
    knife_position: Optional[Tuple[float, float]]
    knife_angle: float
    state: SessionState
    miss_count: int

    @property
    def game_over(self) -> bool:
        """True while the session waits for a revive or restart."""
        return self.state is SessionState.AWAITING_REVIVE

    @property
    def paused(self) -> bool:
        return self.state is SessionState.PAUSED

    @property
    def display_best(self) -> int:
        """Best score as shown in the HUD (includes the running score)."""
        return max(self.best_score, self.score)

    def to_obs_dict(self) -> Dict[str, np.ndarray]:
        """Convert to a dictionary of numpy arrays."""
        zone = self.catch_zone_rect
        if self.knife_position is not None:
            knife_xy = np.array(self.knife_position, dtype=np.float32)
            knife_mask = True
        else:
            knife_xy = np.zeros(2, dtype=np.float32)
            knife_mask = False

        spec = self.falling_object
        obs = {
            "score": np.array(self.score, dtype=np.int64),
            "best_score": np.array(self.best_score, dtype=np.int64),
            "level": np.array(self.level, dtype=np.int32),
            "combo_count": np.array(self.combo_count, dtype=np.int32),
            "fever_active": np.array(self.fever_active, dtype=bool),
            "slow_motion_active": np.array(self.slow_motion_active, dtype=bool),
            "daily_mode": np.array(self.daily_mode, dtype=bool),
            "state": np.array(STATE_CODES[self.state], dtype=np.int32),
            "miss_count": np.array(self.miss_count, dtype=np.int32),

            # Catch zone as (left, bottom, right, top)
            "catch_zone_width_factor": np.array(self.catch_zone_width_factor, dtype=np.float32),
            "catch_zone": np.array(
                [zone.left, zone.bottom, zone.right, zone.top], dtype=np.float32
            ),

            # Knife
            "knife_xy": knife_xy,
            "knife_angle": np.array(self.knife_angle, dtype=np.float32),
            "knife_mask": np.array(knife_mask, dtype=bool),
            "knife_id": np.array(spec.knife_id if spec is not None else -1, dtype=np.int32),
            "knife_scale": np.array(spec.size_scale if spec is not None else 0.0, dtype=np.float32),
            "knife_fall_speed": np.array(spec.fall_speed if spec is not None else 0.0, dtype=np.float32),
        }
        return obs
