"""Procedural point distributions with a dispatch table keyed by shape kind."""

import logging
from typing import Callable, Dict, Optional

import numpy as np

from particle_weaver.shared.constants import GOLDEN_ANGLE, MAX_REJECTION_ATTEMPTS
from particle_weaver.shared.errors import InvalidRequest
from particle_weaver.shared.random_source import ensure_rng
from particle_weaver.shared.requests import ShapeRequest

log = logging.getLogger(__name__)


def _check_count(count: int) -> int:
    if count < 0:
        raise InvalidRequest(f"count must be >= 0, got {count}")
    return int(count)


def _check_positive(name: str, value: float) -> float:
    if not np.isfinite(value) or value <= 0:
        raise InvalidRequest(f"{name} must be positive, got {value}")
    return float(value)


def _flat(points: np.ndarray) -> np.ndarray:
    return np.ascontiguousarray(points, dtype=np.float32).reshape(-1)


def sample_sphere_surface(count: int, radius: float) -> np.ndarray:
    """Fibonacci lattice on a sphere.  Deterministic; returns float32[3*count].

    y runs from +1 to -1 in equal steps and theta advances by the golden
    angle, which spreads points near-uniformly without randomness.
    """
    count = _check_count(count)
    radius = _check_positive("radius", radius)
    if count == 0:
        return np.zeros(0, dtype=np.float32)
    if count == 1:
        return np.array([0.0, radius, 0.0], dtype=np.float32)

    i = np.arange(count, dtype=np.float64)
    y = 1.0 - (i / (count - 1)) * 2.0
    r = np.sqrt(np.maximum(0.0, 1.0 - y * y))
    theta = i * GOLDEN_ANGLE

    points = np.stack([np.cos(theta) * r, y, np.sin(theta) * r], axis=1) * radius
    return _flat(points)


def sample_sphere_volume(count: int, radius: float,
                         rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """Rejection sampling in [-1, 1]^3, scaled by *radius*.

    Each point gets at most MAX_REJECTION_ATTEMPTS draws (~1.9 expected).
    A point that never lands inside is projected onto the unit sphere
    from its last candidate.
    """
    count = _check_count(count)
    radius = _check_positive("radius", radius)
    rng = ensure_rng(rng)

    out = np.zeros((count, 3), dtype=np.float64)
    pending = np.arange(count)
    last = np.zeros((0, 3))

    for _ in range(MAX_REJECTION_ATTEMPTS):
        if pending.size == 0:
            break
        cand = np.asarray(rng.uniform(-1.0, 1.0, size=(pending.size, 3)), dtype=np.float64)
        inside = np.einsum("ij,ij->i", cand, cand) <= 1.0
        out[pending[inside]] = cand[inside]
        last = cand[~inside]
        pending = pending[~inside]

    if pending.size:
        log.warning("sphere volume: %d points hit the rejection cap, projected to boundary",
                    pending.size)
        out[pending] = _project_to_unit(last)

    return _flat(out * radius)


def _project_to_unit(points: np.ndarray) -> np.ndarray:
    norms = np.linalg.norm(points, axis=1, keepdims=True)
    safe = np.where(norms > 0, norms, 1.0)
    projected = points / safe
    projected[norms[:, 0] == 0] = (0.0, 1.0, 0.0)
    return projected


def sample_cube(count: int, width: float, height: float, depth: float,
                rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """Uniform points inside an axis-aligned box centred on the origin."""
    count = _check_count(count)
    half = np.array([_check_positive("width", width),
                     _check_positive("height", height),
                     _check_positive("depth", depth)]) / 2.0
    rng = ensure_rng(rng)
    return _flat(rng.uniform(-half, half, size=(count, 3)))


def sample_torus(count: int, radius: float, tube_radius: float,
                 rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """Area-uniform points on a torus whose ring lies in the XY plane.

    The tube angle v is accepted with probability (R + r cos v) / (R + r),
    matching the surface element.
    """
    count = _check_count(count)
    big_r = _check_positive("radius", radius)
    small_r = _check_positive("tube_radius", tube_radius)
    rng = ensure_rng(rng)

    v = np.zeros(count)
    pending = np.arange(count)
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if pending.size == 0:
            break
        cand = rng.uniform(0.0, 2.0 * np.pi, size=pending.size)
        accept = rng.uniform(0.0, 1.0, size=pending.size) * (big_r + small_r) \
            <= big_r + small_r * np.cos(cand)
        v[pending] = cand   # rejected slots are overwritten next round
        pending = pending[~accept]

    u = rng.uniform(0.0, 2.0 * np.pi, size=count)
    ring = big_r + small_r * np.cos(v)
    points = np.stack([ring * np.cos(u), ring * np.sin(u), small_r * np.sin(v)], axis=1)
    return _flat(points)


def sample_cylinder(count: int, radius: float, height: float,
                    rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """Uniform points on the lateral surface of a Y-axis cylinder."""
    count = _check_count(count)
    radius = _check_positive("radius", radius)
    height = _check_positive("height", height)
    rng = ensure_rng(rng)

    theta = rng.uniform(0.0, 2.0 * np.pi, size=count)
    y = rng.uniform(-height / 2.0, height / 2.0, size=count)
    points = np.stack([np.cos(theta) * radius, y, np.sin(theta) * radius], axis=1)
    return _flat(points)


def sample_plane(count: int, width: float, depth: float) -> np.ndarray:
    """Deterministic grid of cell centres in the XZ plane (y = 0)."""
    count = _check_count(count)
    width = _check_positive("width", width)
    depth = _check_positive("depth", depth)
    if count == 0:
        return np.zeros(0, dtype=np.float32)

    cols = max(1, int(np.ceil(np.sqrt(count * width / depth))))
    rows = int(np.ceil(count / cols))
    idx = np.arange(count)
    col, row = idx % cols, idx // cols
    x = -width / 2.0 + (col + 0.5) * width / cols
    z = -depth / 2.0 + (row + 0.5) * depth / rows
    points = np.stack([x, np.zeros(count), z], axis=1)
    return _flat(points)


_SAMPLERS: Dict[str, Callable[[ShapeRequest, np.random.Generator], np.ndarray]] = {
    "sphere-surface": lambda req, rng: sample_sphere_surface(req.count, req.radius),
    "sphere-volume": lambda req, rng: sample_sphere_volume(req.count, req.radius, rng),
    "cube": lambda req, rng: sample_cube(req.count, req.width, req.height, req.depth, rng),
    "torus": lambda req, rng: sample_torus(req.count, req.radius, req.tube_radius, rng),
    "cylinder": lambda req, rng: sample_cylinder(req.count, req.radius, req.height, rng),
    "plane": lambda req, rng: sample_plane(req.count, req.width, req.depth),
}


def sample_shape(request: ShapeRequest, rng: Optional[np.random.Generator] = None) -> np.ndarray:
    sampler = _SAMPLERS.get(request.kind)
    if sampler is None:
        raise InvalidRequest(f"Unknown shape: {request.kind}")
    positions = sampler(request, ensure_rng(rng))
    log.info("Sampled %s: %d points", request.kind, positions.size // 3)
    return positions
