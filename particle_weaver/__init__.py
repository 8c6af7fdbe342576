"""
#WHERE
    Imported by main.py, host applications, and the test suite.

#WHAT
    ParticleWeaver: particle clouds generated from procedural shapes or
    externally supplied meshes, animated per frame, with optional
    proximity connections.

#INPUT
    WeaverConfig plus a ShapeRequest or ModelRequest.

#OUTPUT
    ParticleCloud buffers (positions, colors, sizes) and line segments.
"""

from .weaver import ParticleWeaver, WeaverConfig, GenerationReport
from .shared import (
    ShapeRequest,
    ModelRequest,
    build_request,
    CancellationToken,
    ParticleWeaverError,
    InvalidRequest,
    EmptyGeometry,
    NoGeometry,
    CeilingExceeded,
    DegenerateInput,
    GenerationCancelled,
)
from .modules.mesh_extractor import MeshPart, ModelCache, CountAdjustment
from .modules.particle_cloud import ParticleCloud

__version__ = "0.1.0"

__all__ = [
    "ParticleWeaver", "WeaverConfig", "GenerationReport",
    "ShapeRequest", "ModelRequest", "build_request", "CancellationToken",
    "MeshPart", "ModelCache", "CountAdjustment", "ParticleCloud",
    "ParticleWeaverError", "InvalidRequest", "EmptyGeometry", "NoGeometry",
    "CeilingExceeded", "DegenerateInput", "GenerationCancelled",
]
