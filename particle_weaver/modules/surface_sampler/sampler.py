"""Raycast placement of particles on the visible surface of mesh parts."""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from particle_weaver.shared.cancellation import CancellationToken, check_cancelled
from particle_weaver.shared.constants import (
    DEFAULT_MAX_VERTICES, DEFAULT_MODEL_SCALE, SURFACE_ATTEMPT_FACTOR,
)
from particle_weaver.shared.errors import CeilingExceeded, DegenerateInput, InvalidRequest, NoGeometry
from particle_weaver.shared.mem_profile import profile_memory
from particle_weaver.shared.random_source import ensure_rng
from particle_weaver.modules.mesh_extractor import MeshPart, extract_vertices
from .raycast import AXIS_DIRECTIONS, nearest_hits

log = logging.getLogger(__name__)

# rays x triangles evaluated per numpy batch
_MAX_PAIRS_PER_BATCH = 250_000


@dataclass(slots=True)
class SurfaceSample:
    positions: np.ndarray
    placed: int            # points that came from a ray hit
    attempts: int
    fallback_count: int    # points filled from the vertex buffer

    @property
    def count(self) -> int:
        return self.positions.size // 3


def union_bounds(parts: Sequence[MeshPart]) -> tuple[np.ndarray, np.ndarray]:
    world = [part.world_positions() for part in parts if part.vertex_count]
    stacked = np.concatenate(world)
    return stacked.min(axis=0), stacked.max(axis=0)


@profile_memory
def sample_surface(parts: Sequence[MeshPart], count: int,
                   scale: float = DEFAULT_MODEL_SCALE,
                   rng: Optional[np.random.Generator] = None,
                   max_vertices: int = DEFAULT_MAX_VERTICES,
                   cancel: Optional[CancellationToken] = None) -> SurfaceSample:
    """Place *count* points by casting axis-aligned rays from random points
    inside the union bounding box.  After ``10 * count`` attempts the
    shortfall is filled with random extracted vertices, so the output
    always holds exactly *count* points.
    """
    if not parts or sum(part.vertex_count for part in parts) == 0:
        raise NoGeometry("No meshes found in the model")
    if count < 0:
        raise InvalidRequest(f"count must be >= 0, got {count}")
    if count > max_vertices:
        raise CeilingExceeded(f"surface count {count} exceeds max_vertices={max_vertices}",
                              requested=count, limit=max_vertices)

    rng = ensure_rng(rng)
    lo, hi = union_bounds(parts)
    if np.linalg.norm(hi - lo) == 0:
        raise DegenerateInput("mesh bounding box has zero size")

    positions = np.zeros((count, 3), dtype=np.float64)
    triangles = np.concatenate([part.world_triangles() for part in parts])
    placed = attempts = 0
    max_attempts = SURFACE_ATTEMPT_FACTOR * count

    if len(triangles) == 0:
        log.warning("Mesh has no triangles, skipping raycast placement")
        max_attempts = 0
    batch = max(1, _MAX_PAIRS_PER_BATCH // max(1, len(triangles)))

    while placed < count and attempts < max_attempts:
        check_cancelled(cancel, "surface sampling")
        n = min(batch, max_attempts - attempts)
        origins = rng.uniform(lo, hi, size=(n, 3))
        directions = AXIS_DIRECTIONS[rng.integers(0, len(AXIS_DIRECTIONS), size=n)]
        t = nearest_hits(origins, directions, triangles)

        hit = np.flatnonzero(np.isfinite(t))[: count - placed]
        points = origins[hit] + directions[hit] * t[hit, None]
        positions[placed: placed + len(hit)] = points * scale
        placed += len(hit)
        # rays after the one that completed the target were never needed
        attempts += int(hit[-1]) + 1 if placed == count else n
        log.debug("surface batch: %d rays, %d placed so far", n, placed)

    fallback = count - placed
    if fallback:
        log.warning("Surface sampling placed %d/%d points, filling %d from vertices",
                    placed, count, fallback)
        vertices = extract_vertices(parts, scale=scale, max_vertices=max_vertices,
                                    cancel=cancel).positions.reshape(-1, 3)
        positions[placed:] = vertices[rng.integers(0, len(vertices), size=fallback)]

    return SurfaceSample(positions=positions.astype(np.float32).reshape(-1),
                         placed=placed, attempts=attempts, fallback_count=fallback)
