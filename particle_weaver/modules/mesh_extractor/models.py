"""
#WHERE
    Used by extractor.py, resample.py, cache.py, surface_sampler,
    weaver.py, and the mesh tests.

#WHAT
    Data models for mesh-derived particles: MeshPart (one already-parsed
    mesh with its world transform), CountAdjustment (a reported cap
    reduction), ExtractionResult and ResampleResult.

#INPUT
    Vertex positions (V, 3) or flat 3V, optional 4x4 world matrix,
    optional (F, 3) triangle indices.

#OUTPUT
    Dataclass instances with read-only numpy buffers.
"""

from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from particle_weaver.shared.errors import InvalidRequest


def _readonly(array: np.ndarray) -> np.ndarray:
    array.setflags(write=False)
    return array


@dataclass(slots=True)
class MeshPart:
    positions: np.ndarray
    matrix_world: Optional[np.ndarray] = None
    indices: Optional[np.ndarray] = None
    name: str = ""

    def __post_init__(self) -> None:
        pos = np.array(self.positions, dtype=np.float64)
        if pos.ndim == 1:
            if pos.size % 3:
                raise InvalidRequest(f"mesh part '{self.name}': flat positions not divisible by 3")
            pos = pos.reshape(-1, 3)
        if pos.ndim != 2 or pos.shape[1] != 3:
            raise InvalidRequest(f"mesh part '{self.name}': positions must be (V, 3)")
        self.positions = _readonly(pos)

        matrix = np.eye(4) if self.matrix_world is None else np.array(self.matrix_world, dtype=np.float64)
        if matrix.shape != (4, 4):
            raise InvalidRequest(f"mesh part '{self.name}': matrix_world must be 4x4")
        self.matrix_world = _readonly(matrix)

        if self.indices is not None:
            idx = np.array(self.indices, dtype=np.int64).reshape(-1, 3)
            if idx.size and (idx.min() < 0 or idx.max() >= len(pos)):
                raise InvalidRequest(f"mesh part '{self.name}': triangle index out of range")
            self.indices = _readonly(idx)

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    def to_world(self, points: np.ndarray) -> np.ndarray:
        """Apply matrix_world to local (K, 3) points, with the w divide."""
        m = self.matrix_world
        out = points @ m[:3, :3].T + m[:3, 3]
        w = points @ m[3, :3] + m[3, 3]
        if not np.allclose(w, 1.0):
            out = out / np.where(w == 0, 1.0, w)[:, None]
        return out

    def world_positions(self) -> np.ndarray:
        return self.to_world(self.positions)

    def world_triangles(self) -> np.ndarray:
        """(F, 3, 3) world-space triangles; unindexed parts read vertices in triples."""
        world = self.world_positions()
        if self.indices is not None:
            return world[self.indices]
        usable = len(world) - len(world) % 3
        return world[:usable].reshape(-1, 3, 3)


@dataclass(slots=True)
class CountAdjustment:
    """A particle count the core reduced; surfaced to the caller, not just logged."""
    stage: str
    requested: int
    granted: int
    reason: str


@dataclass(slots=True)
class ResampleResult:
    positions: np.ndarray
    adjustment: Optional[CountAdjustment] = None

    @property
    def count(self) -> int:
        return self.positions.size // 3


@dataclass(slots=True)
class ExtractionResult:
    positions: np.ndarray
    total_vertices: int
    stride: int
    extracted_count: int
    adjustments: list[CountAdjustment] = field(default_factory=list)

    @property
    def count(self) -> int:
        return self.positions.size // 3
