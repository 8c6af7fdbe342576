"""ParticleCloud: one animatable set of positions plus color/size attributes."""

import logging
from typing import Optional

import numpy as np

from particle_weaver.shared.constants import (
    DEFAULT_PARTICLE_COLOR, DEFAULT_PARTICLE_SIZE, MIN_PARTICLE_SIZE,
)
from particle_weaver.shared.errors import InvalidRequest
from .appearance import ColorLike, init_colors, init_sizes, init_velocities

log = logging.getLogger(__name__)


def _as_buffer(name: str, values) -> np.ndarray:
    buf = np.array(values, dtype=np.float32).reshape(-1)
    if not np.all(np.isfinite(buf)):
        raise InvalidRequest(f"{name} contains non-finite values")
    return buf


def _frozen(buf: np.ndarray) -> np.ndarray:
    buf.setflags(write=False)
    return buf


class ParticleCloud:
    """Flat float32 buffers for N particles.

    ``original_positions`` is read-only and is the reference frame for
    animation; ``working_positions`` is rewritten in place every tick.
    ``velocities`` is present only for clouds animated in drift mode.
    """

    def __init__(self, positions, colors, sizes, velocities=None) -> None:
        original = _as_buffer("positions", positions)
        if original.size % 3:
            raise InvalidRequest("Position data must be divisible by 3 (x,y,z components)")
        count = original.size // 3
        colors = self._check_colors(_as_buffer("colors", colors), count)
        sizes = self._check_sizes(_as_buffer("sizes", sizes), count)

        self.original_positions = _frozen(original)
        self.working_positions = original.copy()
        self.colors = colors
        self.sizes = sizes
        self.velocities: Optional[np.ndarray] = None
        if velocities is not None:
            velocities = _as_buffer("velocities", velocities)
            if velocities.size != original.size:
                raise InvalidRequest("Velocity data length mismatch")
            self.velocities = _frozen(velocities)
        self.version = 0
        self.disposed = False

    @classmethod
    def create(cls, positions, size: float = DEFAULT_PARTICLE_SIZE,
               color: ColorLike = DEFAULT_PARTICLE_COLOR,
               size_variation: float = 0.0, color_variation: float = 0.0,
               with_velocities: bool = False,
               rng: Optional[np.random.Generator] = None) -> "ParticleCloud":
        positions = _as_buffer("positions", positions)
        count = positions.size // 3
        return cls(
            positions,
            colors=init_colors(count, color, color_variation, rng),
            sizes=init_sizes(count, size, size_variation, rng),
            velocities=init_velocities(count, rng) if with_velocities else None,
        )

    @property
    def count(self) -> int:
        return self.original_positions.size // 3

    @staticmethod
    def _check_colors(colors: np.ndarray, count: int) -> np.ndarray:
        if colors.size != count * 3:
            raise InvalidRequest("Color data length mismatch")
        return np.clip(colors, 0.0, 1.0)

    @staticmethod
    def _check_sizes(sizes: np.ndarray, count: int) -> np.ndarray:
        if sizes.size != count:
            raise InvalidRequest("Size data length mismatch")
        return np.maximum(sizes, MIN_PARTICLE_SIZE)

    def update_positions(self, positions) -> None:
        """Replace the reference positions; the particle count must not change."""
        new = _as_buffer("positions", positions)
        if new.size != self.original_positions.size:
            raise InvalidRequest("Position data length mismatch")
        self.original_positions = _frozen(new)
        self.working_positions = new.copy()
        self.version += 1

    def update_colors(self, colors) -> None:
        self.colors = self._check_colors(_as_buffer("colors", colors), self.count)

    def update_sizes(self, sizes) -> None:
        self.sizes = self._check_sizes(_as_buffer("sizes", sizes), self.count)

    def reset_working(self) -> None:
        np.copyto(self.working_positions, self.original_positions)

    def dispose(self) -> None:
        empty = np.zeros(0, dtype=np.float32)
        self.original_positions = _frozen(empty.copy())
        self.working_positions = empty.copy()
        self.colors = empty.copy()
        self.sizes = empty.copy()
        self.velocities = None
        self.disposed = True
        log.debug("Particle cloud disposed")
