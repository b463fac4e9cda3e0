"""
Fall World
==========

Manages the pymunk Space holding the single falling knife and its
handle/blade hit boxes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

import pymunk

from catch_the_knife.knife_core.config_loader import GameConfig, get_config
from catch_the_knife.knife_core.knife_catalog import KnifeType


def _box_vertices(
    center: Tuple[float, float],
    size: Tuple[float, float]
) -> List[Tuple[float, float]]:
    cx, cy = center
    half_w = size[0] / 2.0
    half_h = size[1] / 2.0
    return [
        (cx - half_w, cy - half_h),
        (cx + half_w, cy - half_h),
        (cx + half_w, cy + half_h),
        (cx - half_w, cy + half_h),
    ]


@dataclass
class KnifeBody:
    """
    Represents the falling knife in the physics world.

    Wraps the pymunk Body and its two sensor shapes.
    """
    uid: int
    knife_type: KnifeType
    scale: float
    body: pymunk.Body
    handle_shape: pymunk.Poly
    blade_shape: pymunk.Poly

    @property
    def position(self) -> Tuple[float, float]:
        return self.body.position.x, self.body.position.y

    @property
    def angle(self) -> float:
        return self.body.angle

    @property
    def velocity(self) -> Tuple[float, float]:
        return self.body.velocity.x, self.body.velocity.y

    @property
    def sprite_size(self) -> Tuple[float, float]:
        return self.knife_type.sprite_size(self.scale)

    @property
    def handle_offset(self) -> pymunk.Vec2d:
        """Handle center in body-local coordinates."""
        x, y = self.knife_type.handle_offset(self.scale)
        return pymunk.Vec2d(x, y)

    @property
    def handle_bb(self) -> pymunk.BB:
        """Axis-aligned handle hit box in scene coordinates."""
        return self.handle_shape.cache_bb()

    @property
    def blade_bb(self) -> pymunk.BB:
        """Axis-aligned blade hit box in scene coordinates."""
        return self.blade_shape.cache_bb()

    @property
    def handle_point(self) -> Tuple[float, float]:
        """Handle center in scene coordinates (follows rotation)."""
        point = self.body.local_to_world(self.handle_offset)
        return point.x, point.y


class FallWorld:
    """
    Manages the pymunk simulation for the falling knife.

    Handles:
    - Space creation with gravity
    - Knife body creation and removal (one knife at a time)
    - Stepping with frame-gap clamping and time scaling
    - Host-driven placement for hosts that animate the knife themselves

    Hit box shapes are sensors, nothing collides.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize fall world.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._space = pymunk.Space()
        self._space.gravity = (0.0, config.screen.gravity_y)
        self._max_frame_dt = config.screen.max_frame_dt
        self._velocity_scale = config.spawn.velocity_scale

        self._knife: Optional[KnifeBody] = None
        self._next_uid = 0

    @property
    def space(self) -> pymunk.Space:
        return self._space

    @property
    def knife(self) -> Optional[KnifeBody]:
        """The current knife, or None after clear()."""
        return self._knife

    def spawn_knife(
        self,
        knife_type: KnifeType,
        scale: float,
        x: float,
        y: float,
        fall_speed: float,
        angular_velocity: float = 0.0
    ) -> KnifeBody:
        """
        Replace the current knife with a new one.

        Args:
            knife_type: Variant to spawn.
            scale: Multiplier applied to the base sprite size.
            x: Spawn X.
            y: Spawn Y.
            fall_speed: Initial downward speed is fall_speed * velocity_scale.
            angular_velocity: Spin rate in rad/s (0 for no spin).

        Returns:
            The new KnifeBody.
        """
        self.clear()

        sprite_size = knife_type.sprite_size(scale)
        mass = knife_type.mass
        moment = pymunk.moment_for_box(mass, sprite_size)
        body = pymunk.Body(mass, moment)
        body.position = (x, y)
        body.velocity = (0.0, -fall_speed * self._velocity_scale)
        body.angular_velocity = angular_velocity

        handle = pymunk.Poly(
            body,
            _box_vertices(knife_type.handle_offset(scale), knife_type.handle_size(scale))
        )
        blade = pymunk.Poly(
            body,
            _box_vertices(knife_type.blade_offset(scale), knife_type.blade_size(scale))
        )
        handle.sensor = True
        blade.sensor = True

        self._space.add(body, handle, blade)

        self._knife = KnifeBody(
            uid=self._next_uid,
            knife_type=knife_type,
            scale=scale,
            body=body,
            handle_shape=handle,
            blade_shape=blade
        )
        self._next_uid += 1
        return self._knife

    def place_knife(self, x: float, y: float, angle: float = 0.0) -> None:
        """Set the knife pose directly (host-driven animation)."""
        if self._knife is None:
            return
        body = self._knife.body
        body.position = (x, y)
        body.angle = angle
        self._space.reindex_shapes_for_body(body)

    def step(self, dt: float, time_scale: float = 1.0) -> float:
        """
        Advance the simulation.

        Args:
            dt: Wall-clock frame delta. Clamped to max_frame_dt.
            time_scale: Simulation speed (0.5 in slow motion).

        Returns:
            Simulated time actually stepped.
        """
        if dt <= 0.0 or self._knife is None:
            return 0.0
        sim_dt = min(dt, self._max_frame_dt) * time_scale
        self._space.step(sim_dt)
        return sim_dt

    def is_below(self, y: float) -> bool:
        return self._knife is not None and self._knife.body.position.y < y

    def clear(self) -> None:
        """Remove the current knife."""
        if self._knife is not None:
            knife = self._knife
            self._space.remove(knife.body, knife.handle_shape, knife.blade_shape)
            self._knife = None
