"""Vertex extraction from mesh parts under a single hard ceiling.

Two passes over the parts: count, then take every ``stride``-th vertex
(``stride = ceil(total / max_vertices)``), transform to world space,
scale, and stop the moment ``max_vertices`` is reached.  The same
``max_vertices`` bounds the resample target.  Because each part is sliced
to the remaining room, the ``3 * max_vertices`` element budget holds by
construction and needs no separate check.
"""

import logging
import math
from typing import Optional, Sequence

import numpy as np

from particle_weaver.shared.cancellation import CancellationToken, check_cancelled
from particle_weaver.shared.constants import DEFAULT_MAX_VERTICES, DEFAULT_MODEL_SCALE
from particle_weaver.shared.errors import EmptyGeometry, InvalidRequest
from particle_weaver.shared.mem_profile import profile_memory
from particle_weaver.shared.requests import MeshSource, ModelRequest
from .cache import ModelCache
from .models import ExtractionResult, MeshPart
from .resample import resample

log = logging.getLogger(__name__)


def resolve_parts(mesh: MeshSource) -> tuple[MeshPart, ...]:
    """Materialise a MeshSource: call it if it is a loader, then type-check."""
    parts = mesh() if callable(mesh) else mesh
    if parts is None:
        raise InvalidRequest("mesh loader returned nothing")
    if isinstance(parts, MeshPart):
        parts = (parts,)
    parts = tuple(parts)
    for part in parts:
        if not isinstance(part, MeshPart):
            raise InvalidRequest(f"expected MeshPart, got {type(part).__name__}")
    return parts


def compute_stride(total: int, max_vertices: int) -> int:
    return max(1, math.ceil(total / max_vertices))


@profile_memory
def extract_vertices(parts: Sequence[MeshPart], scale: float = DEFAULT_MODEL_SCALE,
                     max_vertices: int = DEFAULT_MAX_VERTICES,
                     target_count: Optional[int] = None,
                     rng: Optional[np.random.Generator] = None,
                     cancel: Optional[CancellationToken] = None) -> ExtractionResult:
    if max_vertices < 1:
        raise InvalidRequest(f"max_vertices must be >= 1, got {max_vertices}")

    total = sum(part.vertex_count for part in parts)
    log.info("Total vertices in model: %d", total)
    if total == 0:
        raise EmptyGeometry("No vertices found in the model")

    stride = compute_stride(total, max_vertices)
    log.info("Using sampling stride: %d", stride)

    chunks = []
    collected = 0
    for part in parts:
        check_cancelled(cancel, "vertex extraction")
        if collected >= max_vertices:
            break
        picked = part.positions[::stride][: max_vertices - collected]
        if len(picked) == 0:
            continue
        chunks.append(part.to_world(picked) * scale)
        collected += len(picked)

    positions = np.concatenate(chunks).astype(np.float32).reshape(-1)
    extracted = positions.size // 3
    log.info("Extracted %d particles from model", extracted)
    result = ExtractionResult(positions=positions, total_vertices=total,
                              stride=stride, extracted_count=extracted)

    if target_count is not None and target_count != extracted:
        resampled = resample(positions, target_count, rng=rng, max_count=max_vertices)
        result.positions = resampled.positions
        if resampled.adjustment is not None:
            result.adjustments.append(resampled.adjustment)
    return result


class MeshVertexExtractor:
    """Extraction with an injected model cache.

    Requests that carry a ``source_key`` resolve their parts through the
    cache, so a repeated asset is loaded once.  The cache owns the parts.
    """

    def __init__(self, max_vertices: int = DEFAULT_MAX_VERTICES,
                 cache: Optional[ModelCache] = None) -> None:
        if max_vertices < 1:
            raise InvalidRequest(f"max_vertices must be >= 1, got {max_vertices}")
        self.max_vertices = max_vertices
        self.cache = cache

    def resolve(self, request: ModelRequest) -> tuple[MeshPart, ...]:
        if request.source_key is not None and self.cache is not None:
            return self.cache.get_or_load(request.source_key, lambda: resolve_parts(request.mesh))
        return resolve_parts(request.mesh)

    def extract(self, request: ModelRequest,
                rng: Optional[np.random.Generator] = None,
                cancel: Optional[CancellationToken] = None,
                parts: Optional[Sequence[MeshPart]] = None) -> ExtractionResult:
        parts = self.resolve(request) if parts is None else parts
        return extract_vertices(parts, scale=request.scale, max_vertices=self.max_vertices,
                                target_count=request.target_count, rng=rng, cancel=cancel)
