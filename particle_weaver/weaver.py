"""
#WHERE
    Entry point of the library, called by main.py, host applications,
    and test_weaver.py.

#WHAT
    ParticleWeaver facade: GenerationRequest → positions (geometry
    sampler / mesh extractor / surface sampler) → ParticleCloud →
    per-frame AnimationEngine ticks, with the ConnectionGraph rebuilt on
    structural change.  A failed request never replaces the current cloud.

#INPUT
    WeaverConfig, GenerationRequest (or shape/model option dicts),
    delta time and optional world-space pointer per tick.

#OUTPUT
    GenerationReport per request; flat renderable buffers via buffers().
"""

from __future__ import annotations

import dataclasses
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import numpy as np

from particle_weaver.shared import constants as C
from particle_weaver.shared.cancellation import CancellationToken
from particle_weaver.shared.errors import CeilingExceeded, InvalidRequest
from particle_weaver.shared.mem_profile import estimate_cloud_mb, tracemalloc_snapshot
from particle_weaver.shared.random_source import ensure_rng
from particle_weaver.shared.requests import GenerationRequest, ModelRequest, ShapeRequest, build_request
from particle_weaver.modules.animation_engine import AnimationEngine, AnimationSettings
from particle_weaver.modules.connection_graph import ConnectionGraph, build_connections
from particle_weaver.modules.geometry_sampler import sample_shape
from particle_weaver.modules.mesh_extractor import CountAdjustment, MeshVertexExtractor, ModelCache
from particle_weaver.modules.particle_cloud import ParticleCloud
from particle_weaver.modules.surface_sampler import sample_surface

log = logging.getLogger(__name__)


def _check_distance(distance: float) -> float:
    """Non-negative or inf; NaN never reaches the graph builder."""
    if math.isnan(distance) or distance < 0:
        raise InvalidRequest(f"connection_distance must be >= 0, got {distance}")
    return float(distance)


@dataclass
class WeaverConfig:
    # ── Generation ───────────────────────────────────────────────────────────
    count: int = C.DEFAULT_PARTICLE_COUNT
    radius: float = C.DEFAULT_SPHERE_RADIUS
    scale: float = C.DEFAULT_MODEL_SCALE
    target_particle_count: Optional[int] = None
    max_vertices: int = C.DEFAULT_MAX_VERTICES      # single ceiling, every stage

    # ── Appearance ───────────────────────────────────────────────────────────
    size: float = C.DEFAULT_PARTICLE_SIZE
    color: Any = C.DEFAULT_PARTICLE_COLOR
    size_variation: float = 0.0
    color_variation: float = 0.0

    # ── Animation ────────────────────────────────────────────────────────────
    animated: bool = False
    animation_speed: float = C.DEFAULT_ANIMATION_SPEED
    animation_radius: float = C.DEFAULT_ANIMATION_RADIUS
    drift: bool = False                             # Euler drift along velocities

    # ── Connections ──────────────────────────────────────────────────────────
    connected: bool = False
    connection_distance: float = C.DEFAULT_CONNECTION_DISTANCE

    # ── Interaction ──────────────────────────────────────────────────────────
    interactive: bool = False
    mouse_influence: float = C.DEFAULT_MOUSE_INFLUENCE
    mouse_radius: float = C.DEFAULT_MOUSE_RADIUS

    # ── Resources ────────────────────────────────────────────────────────────
    seed: Optional[int] = None
    cache_capacity: int = C.DEFAULT_CACHE_CAPACITY

    def __post_init__(self) -> None:
        if self.max_vertices < 1:
            raise InvalidRequest(f"max_vertices must be >= 1, got {self.max_vertices}")
        self.connection_distance = _check_distance(self.connection_distance)
        if self.mouse_radius < 0:
            raise InvalidRequest("mouse_radius must be >= 0")

    # camelCase keys as front-end option objects spell them
    _ALIASES = {
        "targetParticleCount": "target_particle_count", "maxVertices": "max_vertices",
        "animationSpeed": "animation_speed", "animationRadius": "animation_radius",
        "connectionDistance": "connection_distance", "mouseInfluence": "mouse_influence",
        "mouseRadius": "mouse_radius", "sizeVariation": "size_variation",
        "colorVariation": "color_variation", "cacheCapacity": "cache_capacity",
    }

    @classmethod
    def from_options(cls, options: Optional[Mapping[str, Any]] = None) -> "WeaverConfig":
        """Merge a partial option dict over the defaults; unknown keys are rejected."""
        names = {f.name for f in dataclasses.fields(cls)}
        merged: Dict[str, Any] = {}
        for key, value in (options or {}).items():
            name = cls._ALIASES.get(key, key)
            if name not in names:
                raise InvalidRequest(f"Unknown option: {key}")
            merged[name] = value
        return cls(**merged)

    def animation_settings(self) -> AnimationSettings:
        return AnimationSettings(
            animated=self.animated, animation_speed=self.animation_speed,
            animation_radius=self.animation_radius, interactive=self.interactive,
            mouse_influence=self.mouse_influence, mouse_radius=self.mouse_radius,
            drift=self.drift,
        )


@dataclass
class GenerationReport:
    source: str                   # shape kind, "model" or "model-surface"
    count: int
    adjustments: list[CountAdjustment] = field(default_factory=list)
    stride: Optional[int] = None
    total_vertices: Optional[int] = None
    fallback_count: int = 0
    connection_count: int = 0
    estimated_mb: float = 0.0


class ParticleWeaver:
    """Generation + animation for one particle cloud at a time."""

    def __init__(self, config: WeaverConfig | None = None,
                 cache: ModelCache | None = None,
                 rng: np.random.Generator | None = None) -> None:
        self.config = config or WeaverConfig()
        self.rng = ensure_rng(rng, seed=self.config.seed)
        self.cache = cache if cache is not None else ModelCache(self.config.cache_capacity)
        self.extractor = MeshVertexExtractor(self.config.max_vertices, cache=self.cache)
        self.engine = AnimationEngine(self.config.animation_settings())
        self.cloud: Optional[ParticleCloud] = None
        self.connections: Optional[ConnectionGraph] = None
        self._connections_version = -1

    # ── Generation ───────────────────────────────────────────────────────────

    def generate(self, request: GenerationRequest,
                 cancel: CancellationToken | None = None) -> GenerationReport:
        with tracemalloc_snapshot(f"generate {type(request).__name__}"):
            if isinstance(request, ShapeRequest):
                positions, report = self._generate_shape(request)
            elif isinstance(request, ModelRequest):
                positions, report = self._generate_model(request, cancel)
            else:
                raise InvalidRequest(f"Unsupported request: {type(request).__name__}")

            cloud = ParticleCloud.create(
                positions, size=self.config.size, color=self.config.color,
                size_variation=self.config.size_variation,
                color_variation=self.config.color_variation,
                with_velocities=self.config.drift, rng=self.rng,
            )

        report.estimated_mb = estimate_cloud_mb(cloud.count, with_velocities=self.config.drift)
        if report.estimated_mb > C.MEMORY_WARNING_MB:
            log.warning("High memory usage estimated: %.1f MB", report.estimated_mb)

        self._publish(cloud, self._connections_for(cloud, self.config.connection_distance))
        report.connection_count = self.connections.edge_count if self.connections else 0
        log.info("[weaver] %s cloud ready: %d particles, %d connections",
                 report.source, report.count, report.connection_count)
        return report

    def generate_from_options(self, shape: Optional[Mapping[str, Any]] = None,
                              model: Optional[Mapping[str, Any]] = None,
                              cancel: CancellationToken | None = None) -> GenerationReport:
        """Option-dict entry point; shape defaults come from the config."""
        if shape is not None:
            shape = {"count": self.config.count, "radius": self.config.radius, **shape}
        if model is not None:
            model = {"scale": self.config.scale,
                     "target_count": self.config.target_particle_count, **model}
        return self.generate(build_request(shape=shape, model=model), cancel=cancel)

    def _generate_shape(self, request: ShapeRequest) -> tuple[np.ndarray, GenerationReport]:
        if request.count > self.config.max_vertices:
            raise CeilingExceeded(
                f"Requested {request.count} particles, maximum is {self.config.max_vertices}",
                requested=request.count, limit=self.config.max_vertices,
            )
        positions = sample_shape(request, self.rng)
        return positions, GenerationReport(source=request.kind, count=positions.size // 3)

    def _generate_model(self, request: ModelRequest,
                        cancel: CancellationToken | None) -> tuple[np.ndarray, GenerationReport]:
        parts = self.extractor.resolve(request)

        if request.sampling == "surface":
            count = request.target_count or C.DEFAULT_SURFACE_COUNT
            sample = sample_surface(parts, count, scale=request.scale, rng=self.rng,
                                    max_vertices=self.config.max_vertices, cancel=cancel)
            return sample.positions, GenerationReport(
                source="model-surface", count=sample.count, fallback_count=sample.fallback_count,
            )

        result = self.extractor.extract(request, rng=self.rng, cancel=cancel, parts=parts)
        return result.positions, GenerationReport(
            source="model", count=result.count, adjustments=list(result.adjustments),
            stride=result.stride, total_vertices=result.total_vertices,
        )

    def _publish(self, cloud: ParticleCloud, connections: Optional[ConnectionGraph]) -> None:
        """Swap in a fully built cloud; everything that can fail ran before this."""
        if self.cloud is not None:
            self.cloud.dispose()
        self.cloud = cloud
        self.engine.reset()
        self.connections = connections
        self._connections_version = cloud.version

    # ── Connections ──────────────────────────────────────────────────────────

    def _connections_for(self, cloud: ParticleCloud, distance: float) -> Optional[ConnectionGraph]:
        if not self.config.connected:
            return None
        return build_connections(cloud.original_positions, cloud.count, distance)

    def _refresh_connections(self) -> None:
        if self.cloud is None or not self.config.connected:
            self.connections = None
            return
        if self.connections is not None and self._connections_version == self.cloud.version:
            return
        self.connections = self._connections_for(self.cloud, self.config.connection_distance)
        self._connections_version = self.cloud.version

    def set_connection_distance(self, distance: float) -> None:
        distance = _check_distance(distance)
        if self.cloud is not None:
            self.connections = self._connections_for(self.cloud, distance)
            self._connections_version = self.cloud.version
        self.config.connection_distance = distance

    def update_positions(self, positions) -> None:
        """Replace the cloud's reference positions (a structural change)."""
        if self.cloud is None:
            raise InvalidRequest("no particle cloud to update")
        self.cloud.update_positions(positions)
        self._refresh_connections()

    @property
    def connection_graph(self) -> Optional[ConnectionGraph]:
        return self.connections

    # ── Per-frame ────────────────────────────────────────────────────────────

    def tick(self, delta_time: float, pointer=None) -> Optional[np.ndarray]:
        if self.cloud is None:
            return None
        return self.engine.tick(self.cloud, delta_time, pointer)

    def set_pointer(self, point) -> None:
        self.engine.set_pointer(point)

    def buffers(self) -> Dict[str, np.ndarray]:
        empty = np.zeros(0, dtype=np.float32)
        if self.cloud is None:
            return {"positions": empty, "colors": empty, "sizes": empty, "segments": empty}
        return {
            "positions": self.cloud.working_positions,
            "colors": self.cloud.colors,
            "sizes": self.cloud.sizes,
            "segments": self.connections.segments if self.connections else empty,
        }

    def dispose(self) -> None:
        if self.cloud is not None:
            self.cloud.dispose()
        self.cloud = None
        self.connections = None
        self.engine.reset()
        log.info("[weaver] disposed")
