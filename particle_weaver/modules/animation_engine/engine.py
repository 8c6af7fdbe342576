"""
#WHERE
    Driven by weaver.py (ParticleWeaver.tick) once per render frame;
    tested by test_animation_engine.py.

#WHAT
    Per-frame kinematics: phase-based floating motion, optional Euler
    drift along per-particle velocities, and a radial pointer push.
    All effects add onto the cloud's original positions.

#INPUT
    ParticleCloud, delta time (seconds), optional world-space pointer.

#OUTPUT
    cloud.working_positions, rewritten in place and returned.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from particle_weaver.shared.constants import (
    DEFAULT_ANIMATION_RADIUS, DEFAULT_ANIMATION_SPEED,
    DEFAULT_MOUSE_INFLUENCE, DEFAULT_MOUSE_RADIUS, POINTER_FORCE_SCALE,
)
from particle_weaver.modules.particle_cloud import ParticleCloud

log = logging.getLogger(__name__)

# direction used when a particle sits exactly on the pointer
_FALLBACK_DIRECTION = np.array([1.0, 0.0, 0.0])


@dataclass
class AnimationSettings:
    animated: bool = False
    animation_speed: float = DEFAULT_ANIMATION_SPEED
    animation_radius: float = DEFAULT_ANIMATION_RADIUS
    interactive: bool = False
    mouse_influence: float = DEFAULT_MOUSE_INFLUENCE
    mouse_radius: float = DEFAULT_MOUSE_RADIUS
    drift: bool = False

    @property
    def enabled(self) -> bool:
        return self.animated or self.interactive or self.drift


@dataclass
class AnimationState:
    time: float = 0.0
    pointer: Optional[np.ndarray] = None
    drift_offsets: Optional[np.ndarray] = None    # (N, 3), drift mode only

    def reset(self) -> None:
        self.time = 0.0
        self.pointer = None
        self.drift_offsets = None


def floating_offsets(count: int, time: float, radius: float) -> np.ndarray:
    """(N, 3) sinusoidal offsets; per-particle phase comes from the index."""
    i = np.arange(count, dtype=np.float64)
    return np.stack([
        np.sin(time + i * 0.1) * radius,
        np.cos(time + i * 0.15) * radius * 0.5,
        np.sin(time + i * 0.2) * radius * 0.3,
    ], axis=1)


def pointer_push(points: np.ndarray, pointer: np.ndarray,
                 radius: float, influence: float) -> np.ndarray:
    """(N, 3) displacement away from *pointer* for points within *radius*.

    Force falls off linearly: (1 - d / radius) * influence * POINTER_FORCE_SCALE.
    """
    delta = points - pointer
    dist = np.linalg.norm(delta, axis=1)
    push = np.zeros_like(points)
    if radius <= 0:
        return push

    inside = dist < radius
    if not inside.any():
        return push
    d = dist[inside]
    safe = np.where(d > 0, d, 1.0)
    direction = np.where((d > 0)[:, None], delta[inside] / safe[:, None], _FALLBACK_DIRECTION)
    force = (1.0 - d / radius) * influence * POINTER_FORCE_SCALE
    push[inside] = direction * force[:, None]
    return push


class AnimationEngine:
    """Owns the AnimationState for one cloud; never raises mid-tick."""

    def __init__(self, settings: Optional[AnimationSettings] = None) -> None:
        self.settings = settings or AnimationSettings()
        self.state = AnimationState()

    def reset(self) -> None:
        self.state.reset()

    def set_pointer(self, point: Optional[Sequence[float]]) -> None:
        if point is None:
            self.state.pointer = None
            return
        p = np.asarray(point, dtype=np.float64).reshape(-1)
        self.state.pointer = p[:3] if p.size >= 3 and np.all(np.isfinite(p[:3])) else None

    def clear_pointer(self) -> None:
        self.state.pointer = None

    def tick(self, cloud: ParticleCloud, delta_time: float,
             pointer: Optional[Sequence[float]] = None) -> np.ndarray:
        s = self.settings
        if not s.enabled:
            return cloud.working_positions

        if pointer is not None:
            self.set_pointer(pointer)
        dt = float(delta_time) if math.isfinite(delta_time) and delta_time > 0 else 0.0
        self.state.time += dt * s.animation_speed

        original = cloud.original_positions.reshape(-1, 3).astype(np.float64)
        points = original.copy()

        if s.animated:
            points += floating_offsets(cloud.count, self.state.time, s.animation_radius)

        if s.drift and cloud.velocities is not None:
            if self.state.drift_offsets is None or len(self.state.drift_offsets) != cloud.count:
                self.state.drift_offsets = np.zeros((cloud.count, 3))
            self.state.drift_offsets += cloud.velocities.reshape(-1, 3) * dt * s.animation_speed
            points += self.state.drift_offsets

        if s.interactive and self.state.pointer is not None:
            points += pointer_push(points, self.state.pointer, s.mouse_radius, s.mouse_influence)

        np.copyto(cloud.working_positions, points.reshape(-1), casting="same_kind")
        return cloud.working_positions
