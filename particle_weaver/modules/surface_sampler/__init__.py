"""
#WHERE
    Imported by weaver.py (ModelRequest with sampling="surface") and
    test_surface_sampler.py.

#WHAT
    Surface Sampler: places particles on the visible surface of mesh
    parts by random axis-aligned ray casting, with a vertex-buffer
    fallback fill when attempts run out.

#INPUT
    MeshPart sequence, point count, scale, max_vertices, optional numpy
    Generator and CancellationToken.

#OUTPUT
    SurfaceSample: flat float32 buffer plus placed/fallback counts.
"""

from .raycast import AXIS_DIRECTIONS, nearest_hits
from .sampler import SurfaceSample, sample_surface, union_bounds

__all__ = ["AXIS_DIRECTIONS", "nearest_hits", "SurfaceSample", "sample_surface", "union_bounds"]
