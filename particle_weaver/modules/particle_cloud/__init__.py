"""
#WHERE
    Imported by weaver.py, animation_engine, main.py, and
    test_particle_cloud.py.

#WHAT
    Particle Cloud: the central buffer set (original/working positions,
    colors, sizes, optional drift velocities) with length invariants,
    plus color/size/velocity initialisation.

#INPUT
    Flat position buffer, appearance settings, optional numpy Generator.

#OUTPUT
    ParticleCloud instance exposing flat float32 renderable buffers.
"""

from .appearance import parse_color, hsl_to_rgb, init_colors, init_sizes, init_velocities
from .cloud import ParticleCloud

__all__ = [
    "ParticleCloud", "parse_color", "hsl_to_rgb",
    "init_colors", "init_sizes", "init_velocities",
]
