"""Batched ray/triangle intersection (Möller–Trumbore) in numpy.

Triangles are double-sided.  Rays only hit forward (t >= 0); a ray that
starts on a triangle hits it at t = 0.

Every ray is tested against every triangle, so surface sampling costs
about ``10 * count * F`` triangle tests (15000 points on a 50k-triangle
mesh is ~7.5e9).  Batching bounds memory, not time; meshes that large
want decimating first, or a BVH-backed ray query.
"""

import numpy as np

AXIS_DIRECTIONS = np.array([
    [1.0, 0.0, 0.0],
    [-1.0, 0.0, 0.0],
    [0.0, 1.0, 0.0],
    [0.0, -1.0, 0.0],
    [0.0, 0.0, 1.0],
    [0.0, 0.0, -1.0],
])

_EPS = 1e-12


def nearest_hits(origins: np.ndarray, directions: np.ndarray, triangles: np.ndarray) -> np.ndarray:
    """Distance along each ray to its nearest triangle; ``inf`` on a miss.

    Args:
        origins: (R, 3) ray origins.
        directions: (R, 3) unit directions.
        triangles: (F, 3, 3) world-space triangle vertices.

    Returns:
        (R,) array of hit distances.
    """
    if len(triangles) == 0 or len(origins) == 0:
        return np.full(len(origins), np.inf)

    v0 = triangles[:, 0]
    e1 = triangles[:, 1] - v0
    e2 = triangles[:, 2] - v0

    pvec = np.cross(directions[:, None, :], e2[None, :, :])        # (R, F, 3)
    det = np.einsum("rfk,fk->rf", pvec, e1)
    valid = np.abs(det) > _EPS
    inv_det = np.divide(1.0, det, out=np.zeros_like(det), where=valid)

    tvec = origins[:, None, :] - v0[None, :, :]                     # (R, F, 3)
    u = np.einsum("rfk,rfk->rf", tvec, pvec) * inv_det
    qvec = np.cross(tvec, e1[None, :, :])
    v = np.einsum("rfk,rk->rf", qvec, directions) * inv_det
    t = np.einsum("rfk,fk->rf", qvec, e2) * inv_det

    hit = valid & (u >= 0.0) & (v >= 0.0) & (u + v <= 1.0) & (t >= 0.0)
    return np.where(hit, t, np.inf).min(axis=1)
