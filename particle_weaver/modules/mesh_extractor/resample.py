"""Resample a vertex buffer to a target particle count.

Downsampling is nearest-index decimation (source = floor(i * n / target)),
so outputs are always input coordinates.  Upsampling cycles through the
input (source = i mod n) and jitters every output point independently so
duplicates never coincide.  Equal counts return an untouched copy.
"""

import logging
from typing import Optional

import numpy as np

from particle_weaver.shared.constants import JITTER_AMPLITUDE
from particle_weaver.shared.errors import EmptyGeometry, InvalidRequest
from particle_weaver.shared.random_source import ensure_rng
from .models import CountAdjustment, ResampleResult

log = logging.getLogger(__name__)


def resample(positions: np.ndarray, target: int,
             rng: Optional[np.random.Generator] = None,
             max_count: Optional[int] = None) -> ResampleResult:
    src = np.asarray(positions, dtype=np.float32).reshape(-1, 3)
    n = len(src)
    if n == 0:
        raise EmptyGeometry("cannot resample an empty vertex buffer")
    if target <= 0:
        raise InvalidRequest(f"resample target must be >= 1, got {target}")

    adjustment = None
    granted = int(target)
    if max_count is not None and granted > max_count:
        granted = int(max_count)
        adjustment = CountAdjustment(
            stage="resample", requested=int(target), granted=granted,
            reason=f"particle count capped at max_vertices={max_count}",
        )
        log.warning("Reduced particle count from %d to %d (max_vertices)", target, granted)

    if granted == n:
        return ResampleResult(src.reshape(-1).copy(), adjustment)

    log.info("Resampling %d → %d particles", n, granted)
    i = np.arange(granted, dtype=np.int64)
    if granted < n:
        out = src[(i * n) // granted]
    else:
        half = JITTER_AMPLITUDE / 2.0
        jitter = ensure_rng(rng).uniform(-half, half, size=(granted, 3))
        out = (src[i % n] + jitter).astype(np.float32)

    return ResampleResult(np.ascontiguousarray(out, dtype=np.float32).reshape(-1), adjustment)
