"""Pairwise proximity edges between particles.

Naive O(N^2) distance checks, evaluated in row blocks so peak memory stays
at ``block * N`` distances.  Fine for the low thousands of particles this
library targets; beyond that a uniform grid or k-d tree would replace the
all-pairs scan.
"""

import logging
import math
from dataclasses import dataclass

import numpy as np

from particle_weaver.shared.errors import InvalidRequest

log = logging.getLogger(__name__)

_BLOCK_ELEMENTS = 1_000_000


@dataclass(slots=True)
class ConnectionGraph:
    pairs: np.ndarray          # (E, 2) int64, i < j, lexicographic order
    positions: np.ndarray      # (N, 3) float32 the pairs index into
    max_distance: float

    @property
    def edge_count(self) -> int:
        return len(self.pairs)

    @property
    def segments(self) -> np.ndarray:
        """Flat endpoint buffer: x1 y1 z1 x2 y2 z2 per edge."""
        if not len(self.pairs):
            return np.zeros(0, dtype=np.float32)
        return self.positions[self.pairs].reshape(-1).astype(np.float32)


def build_connections(positions: np.ndarray, count: int, max_distance: float) -> ConnectionGraph:
    if math.isnan(max_distance) or max_distance < 0:
        raise InvalidRequest(f"connection distance must be >= 0, got {max_distance}")

    pts = np.asarray(positions, dtype=np.float32).reshape(-1, 3)
    if count < 0 or count > len(pts):
        raise InvalidRequest(f"count {count} out of range for {len(pts)} points")
    pts = pts[:count]

    if math.isinf(max_distance):
        i, j = np.triu_indices(count, k=1)
        pairs = np.stack([i, j], axis=1).astype(np.int64)
    else:
        pairs = _pairs_within(pts.astype(np.float64), max_distance)

    log.info("Connections: %d edges among %d particles (d <= %s)", len(pairs), count, max_distance)
    return ConnectionGraph(pairs=pairs, positions=pts, max_distance=float(max_distance))


def _pairs_within(pts: np.ndarray, max_distance: float) -> np.ndarray:
    n = len(pts)
    limit_sq = max_distance * max_distance
    block = max(1, _BLOCK_ELEMENTS // max(1, n))
    found = []
    for start in range(0, n, block):
        rows = pts[start: start + block]
        diff = rows[:, None, :] - pts[None, :, :]
        dist_sq = np.einsum("ijk,ijk->ij", diff, diff)
        row_idx = np.arange(start, start + len(rows))[:, None]
        mask = (dist_sq <= limit_sq) & (np.arange(n)[None, :] > row_idx)
        i, j = np.nonzero(mask)
        found.append(np.stack([i + start, j], axis=1))
    if not found:
        return np.zeros((0, 2), dtype=np.int64)
    return np.concatenate(found).astype(np.int64)
