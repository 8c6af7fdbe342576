"""
#WHERE
    Imported by every particle_weaver module, main.py, and the tests.

#WHAT
    Shared constants, error hierarchy, request types, cancellation token,
    random source and memory profiling helpers.

#INPUT
    None (constants and small helper types).

#OUTPUT
    ShapeRequest / ModelRequest, ParticleWeaverError subclasses,
    CancellationToken, ensure_rng, profiling helpers.
"""

from .errors import (
    ParticleWeaverError,
    InvalidRequest,
    EmptyGeometry,
    NoGeometry,
    CeilingExceeded,
    DegenerateInput,
    GenerationCancelled,
)
from .requests import (
    ShapeRequest,
    ModelRequest,
    GenerationRequest,
    build_request,
    SHAPE_KINDS,
    SAMPLING_MODES,
)
from .cancellation import CancellationToken, check_cancelled
from .random_source import ensure_rng

__all__ = [
    "ParticleWeaverError",
    "InvalidRequest",
    "EmptyGeometry",
    "NoGeometry",
    "CeilingExceeded",
    "DegenerateInput",
    "GenerationCancelled",
    "ShapeRequest",
    "ModelRequest",
    "GenerationRequest",
    "build_request",
    "SHAPE_KINDS",
    "SAMPLING_MODES",
    "CancellationToken",
    "check_cancelled",
    "ensure_rng",
]
