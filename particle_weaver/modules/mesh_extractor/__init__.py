"""
#WHERE
    Imported by weaver.py, surface_sampler (fallback fill), and the mesh
    tests.

#WHAT
    Mesh Vertex Extractor: stride down-sampling of externally supplied
    mesh parts under one hard ceiling, resampling to a target count, and
    the bounded LRU ModelCache injected into the extractor.

#INPUT
    MeshPart sequence (or loader), scale, max_vertices, target count,
    optional numpy Generator and CancellationToken.

#OUTPUT
    ExtractionResult with a flat float32 buffer plus any CountAdjustment.
"""

from .models import MeshPart, CountAdjustment, ExtractionResult, ResampleResult
from .resample import resample
from .cache import ModelCache, is_supported_model_key
from .extractor import MeshVertexExtractor, extract_vertices, resolve_parts, compute_stride

__all__ = [
    "MeshPart", "CountAdjustment", "ExtractionResult", "ResampleResult",
    "resample", "ModelCache", "is_supported_model_key",
    "MeshVertexExtractor", "extract_vertices", "resolve_parts", "compute_stride",
]
