"""
#WHERE
    Imported by weaver.py, main.py, and test_geometry_sampler.py.

#WHAT
    Geometry Sampler: procedural point distributions: Fibonacci sphere
    surface, rejection-sampled sphere volume, box volume, torus and
    cylinder surfaces, and a flat grid.

#INPUT
    ShapeRequest (kind, count, radius / box dimensions), optional
    numpy Generator for the random kinds.

#OUTPUT
    Flat float32 position buffer of length 3 * count.
"""

from .sampler import (
    sample_shape,
    sample_sphere_surface,
    sample_sphere_volume,
    sample_cube,
    sample_torus,
    sample_cylinder,
    sample_plane,
)

__all__ = [
    "sample_shape", "sample_sphere_surface", "sample_sphere_volume",
    "sample_cube", "sample_torus", "sample_cylinder", "sample_plane",
]
