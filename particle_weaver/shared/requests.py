"""
#WHERE
    Built by weaver.py (generate_from_options), main.py, and tests;
    consumed by geometry_sampler, mesh_extractor and surface_sampler.

#WHAT
    GenerationRequest discriminated union: ShapeRequest (procedural
    distribution) or ModelRequest (externally supplied mesh parts).
    Validation happens on construction so samplers can trust fields.

#INPUT
    Keyword arguments, or option dicts in the {"type", "count",
    "params": {...}} layout used by front-end configuration.

#OUTPUT
    ShapeRequest / ModelRequest dataclass instances.
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional, Sequence, Union

from .constants import DEFAULT_MODEL_SCALE, DEFAULT_PARTICLE_COUNT, DEFAULT_SPHERE_RADIUS
from .errors import InvalidRequest

if TYPE_CHECKING:
    from particle_weaver.modules.mesh_extractor.models import MeshPart

SHAPE_KINDS = ("sphere-surface", "sphere-volume", "cube", "torus", "cylinder", "plane")
SAMPLING_MODES = ("vertices", "surface")

# Short names accepted from option dicts.
_SHAPE_ALIASES = {"sphere": "sphere-surface"}


def _positive(name: str, value: Any) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidRequest(f"{name} must be a number, got {value!r}") from exc
    if not math.isfinite(value) or value <= 0:
        raise InvalidRequest(f"{name} must be a positive number, got {value}")
    return value


def _count(name: str, value: Any) -> int:
    if (isinstance(value, bool) or not isinstance(value, numbers.Real)
            or not math.isfinite(value) or value != int(value)):
        raise InvalidRequest(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise InvalidRequest(f"{name} must be >= 0, got {value}")
    return int(value)


@dataclass(slots=True)
class ShapeRequest:
    kind: str
    count: int = DEFAULT_PARTICLE_COUNT
    radius: float = DEFAULT_SPHERE_RADIUS
    width: float = 2.0
    height: float = 2.0
    depth: float = 2.0
    tube_radius: float = 0.5

    def __post_init__(self) -> None:
        if self.kind not in SHAPE_KINDS:
            raise InvalidRequest(f"Unknown shape: {self.kind}")
        self.count = _count("count", self.count)
        self.radius = _positive("radius", self.radius)
        self.width = _positive("width", self.width)
        self.height = _positive("height", self.height)
        self.depth = _positive("depth", self.depth)
        self.tube_radius = _positive("tube_radius", self.tube_radius)

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> "ShapeRequest":
        opts = dict(options)
        kind = opts.pop("kind", None) or opts.pop("type", None)
        if kind is None:
            raise InvalidRequest("shape options need a 'type' or 'kind'")
        kind = _SHAPE_ALIASES.get(kind, kind)
        params = opts.pop("params", None) or {}
        merged = {**opts, **params}
        if "tubeRadius" in merged:
            merged["tube_radius"] = merged.pop("tubeRadius")
        merged.pop("segments", None)
        try:
            return cls(kind=kind, **merged)
        except TypeError as exc:
            raise InvalidRequest(f"bad shape options: {exc}") from exc


MeshSource = Union[Sequence["MeshPart"], Callable[[], Sequence["MeshPart"]]]


@dataclass(slots=True)
class ModelRequest:
    """Particles from mesh parts.

    ``mesh`` is either the parts themselves or a zero-argument loader.
    ``source_key`` (e.g. the asset URL) routes the loader through the
    weaver's ModelCache.
    """
    mesh: MeshSource
    scale: float = DEFAULT_MODEL_SCALE
    target_count: Optional[int] = None
    sampling: str = "vertices"
    source_key: Optional[str] = None

    def __post_init__(self) -> None:
        if self.mesh is None:
            raise InvalidRequest("model request needs mesh data or a loader")
        self.scale = _positive("scale", self.scale)
        if self.target_count is not None:
            self.target_count = _count("target_count", self.target_count)
            if self.target_count == 0:
                raise InvalidRequest("target_count must be >= 1")
        if self.sampling not in SAMPLING_MODES:
            raise InvalidRequest(f"Unknown sampling mode: {self.sampling}")

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> "ModelRequest":
        opts = dict(options)
        if "particleCount" in opts:
            opts["target_count"] = opts.pop("particleCount")
        if "url" in opts:
            opts["source_key"] = opts.pop("url")
        try:
            return cls(**opts)
        except TypeError as exc:
            raise InvalidRequest(f"bad model options: {exc}") from exc


GenerationRequest = Union[ShapeRequest, ModelRequest]


def build_request(shape: Optional[Any] = None, model: Optional[Any] = None) -> GenerationRequest:
    """Exactly one of *shape* / *model*; each may be a request or an option dict."""
    if shape is not None and model is not None:
        raise InvalidRequest("shape and model options are mutually exclusive")
    if shape is None and model is None:
        raise InvalidRequest("either shape or model options are required")
    if shape is not None:
        return shape if isinstance(shape, ShapeRequest) else ShapeRequest.from_options(shape)
    return model if isinstance(model, ModelRequest) else ModelRequest.from_options(model)
