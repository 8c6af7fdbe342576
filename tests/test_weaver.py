"""Tests for ParticleWeaver - request routing, publishing, per-frame buffers."""

import logging

import pytest
import numpy as np

from particle_weaver import (
    CancellationToken, CeilingExceeded, GenerationCancelled, InvalidRequest,
    MeshPart, ModelCache, ModelRequest, ParticleWeaver, ShapeRequest, WeaverConfig,
)
from particle_weaver.shared import constants


def _mesh(n=500, seed=0):
    return [MeshPart(np.random.default_rng(seed).uniform(-1, 1, size=(n, 3)))]


def _cube():
    vertices = np.array([[x, y, z] for x in (-1, 1) for y in (-1, 1) for z in (-1, 1)], dtype=float)
    faces = [[0, 1, 3], [0, 3, 2], [4, 6, 7], [4, 7, 5], [0, 4, 5], [0, 5, 1],
             [2, 3, 7], [2, 7, 6], [0, 2, 6], [0, 6, 4], [1, 5, 7], [1, 7, 3]]
    return [MeshPart(vertices, indices=faces)]


class TestWeaverConfig:

    def test_defaults(self):
        config = WeaverConfig()
        assert config.count == 5000
        assert config.max_vertices == 15000
        assert config.connected is False

    def test_from_options_accepts_camel_case(self):
        config = WeaverConfig.from_options({"maxVertices": 100, "connectionDistance": 0.5, "animated": True})
        assert (config.max_vertices, config.connection_distance, config.animated) == (100, 0.5, True)

    def test_unknown_option_rejected(self):
        with pytest.raises(InvalidRequest, match="Unknown option"):
            WeaverConfig.from_options({"wobble": 1})

    def test_invalid_values_rejected(self):
        with pytest.raises(InvalidRequest):
            WeaverConfig(max_vertices=0)
        with pytest.raises(InvalidRequest):
            WeaverConfig(connection_distance=-1.0)

    def test_animation_settings_mirror_config(self):
        settings = WeaverConfig(animated=True, mouse_radius=3.0).animation_settings()
        assert settings.animated and settings.mouse_radius == 3.0


class TestGenerateShape:

    def test_sphere_surface_scenario(self):
        weaver = ParticleWeaver()
        report = weaver.generate(ShapeRequest(kind="sphere-surface", count=100, radius=1.0))
        buffers = weaver.buffers()
        assert report.count == 100
        assert buffers["positions"].shape == (300,)
        assert buffers["colors"].shape == (300,)
        assert buffers["sizes"].shape == (100,)
        assert np.allclose(np.linalg.norm(buffers["positions"].reshape(-1, 3), axis=1), 1.0, atol=1e-3)

    def test_seed_makes_generation_reproducible(self):
        request = ShapeRequest(kind="sphere-volume", count=200)
        a = ParticleWeaver(WeaverConfig(seed=11))
        b = ParticleWeaver(WeaverConfig(seed=11))
        a.generate(request)
        b.generate(request)
        assert np.array_equal(a.buffers()["positions"], b.buffers()["positions"])

    def test_count_above_ceiling_raises(self):
        weaver = ParticleWeaver(WeaverConfig(max_vertices=100))
        with pytest.raises(CeilingExceeded) as info:
            weaver.generate(ShapeRequest(kind="cube", count=101))
        assert (info.value.requested, info.value.limit) == (101, 100)

    def test_failed_request_keeps_previous_cloud(self):
        weaver = ParticleWeaver(WeaverConfig(max_vertices=100))
        weaver.generate(ShapeRequest(kind="plane", count=50))
        previous = weaver.cloud
        with pytest.raises(CeilingExceeded):
            weaver.generate(ShapeRequest(kind="plane", count=500))
        assert weaver.cloud is previous
        assert weaver.cloud.count == 50

    def test_generate_from_options_uses_config_defaults(self):
        weaver = ParticleWeaver(WeaverConfig(count=64, radius=3.0))
        report = weaver.generate_from_options(shape={"type": "sphere"})
        assert report.source == "sphere-surface"
        assert report.count == 64
        assert np.allclose(np.linalg.norm(weaver.buffers()["positions"].reshape(-1, 3), axis=1), 3.0, atol=1e-4)

    def test_shape_and_model_exclusive(self):
        with pytest.raises(InvalidRequest, match="mutually exclusive"):
            ParticleWeaver().generate_from_options(shape={"type": "cube"}, model={"mesh": _mesh()})

    def test_unsupported_request_type(self):
        with pytest.raises(InvalidRequest):
            ParticleWeaver().generate("sphere")

    def test_memory_warning_logged(self, monkeypatch, caplog):
        monkeypatch.setattr(constants, "MEMORY_WARNING_MB", 0.0)
        with caplog.at_level(logging.WARNING, logger="particle_weaver.weaver"):
            ParticleWeaver().generate(ShapeRequest(kind="cube", count=10))
        assert "High memory usage" in caplog.text


class TestGenerateModel:

    def test_vertex_extraction_report(self):
        weaver = ParticleWeaver(WeaverConfig(max_vertices=15_000))
        report = weaver.generate(ModelRequest(mesh=_mesh(50_000)))
        assert (report.source, report.stride, report.total_vertices) == ("model", 4, 50_000)
        assert report.count == 12_500

    def test_target_count_capped_and_reported(self):
        weaver = ParticleWeaver(WeaverConfig(max_vertices=300, seed=1))
        report = weaver.generate(ModelRequest(mesh=_mesh(100), target_count=1000))
        assert report.count == 300
        assert [(a.requested, a.granted) for a in report.adjustments] == [(1000, 300)]

    def test_surface_sampling(self):
        weaver = ParticleWeaver(WeaverConfig(seed=2))
        report = weaver.generate(ModelRequest(mesh=_cube(), sampling="surface", target_count=120))
        points = weaver.buffers()["positions"].reshape(-1, 3)
        assert report.source == "model-surface"
        assert report.count == 120
        assert np.allclose(np.abs(points).max(axis=1), 1.0, atol=1e-5)

    def test_surface_default_count(self):
        weaver = ParticleWeaver(WeaverConfig(seed=3))
        report = weaver.generate(ModelRequest(mesh=_cube(), sampling="surface"))
        assert report.count == constants.DEFAULT_SURFACE_COUNT

    def test_injected_cache_shared(self):
        cache = ModelCache(capacity=4)
        calls = []

        def loader():
            calls.append(1)
            return _mesh(50)

        weaver = ParticleWeaver(cache=cache)
        weaver.generate(ModelRequest(mesh=loader, source_key="https://cdn.test/fox.glb"))
        weaver.generate(ModelRequest(mesh=loader, source_key="https://cdn.test/fox.glb"))
        assert len(calls) == 1
        assert cache.hits == 1

    def test_cancelled_generation_publishes_nothing(self):
        weaver = ParticleWeaver()
        token = CancellationToken()
        token.cancel()
        with pytest.raises(GenerationCancelled):
            weaver.generate(ModelRequest(mesh=_mesh()), cancel=token)
        assert weaver.cloud is None


class TestConnectionsAndTicks:

    def test_connections_built_when_enabled(self):
        weaver = ParticleWeaver(WeaverConfig(connected=True, connection_distance=1.0))
        report = weaver.generate(ShapeRequest(kind="sphere-surface", count=50, radius=1.0))
        assert report.connection_count > 0
        assert weaver.buffers()["segments"].size == 6 * report.connection_count

    def test_no_connections_when_disabled(self):
        weaver = ParticleWeaver()
        weaver.generate(ShapeRequest(kind="sphere-surface", count=50))
        assert weaver.connection_graph is None
        assert weaver.buffers()["segments"].size == 0

    def test_set_connection_distance_rebuilds(self):
        weaver = ParticleWeaver(WeaverConfig(connected=True))
        weaver.generate(ShapeRequest(kind="sphere-surface", count=30, radius=1.0))
        weaver.set_connection_distance(0.0)
        assert weaver.connection_graph.edge_count == 0
        with pytest.raises(InvalidRequest):
            weaver.set_connection_distance(-1.0)

    def test_update_positions_rebuilds_connections(self):
        weaver = ParticleWeaver(WeaverConfig(connected=True, connection_distance=0.5))
        weaver.generate(ShapeRequest(kind="plane", count=4, width=10.0, depth=10.0))
        assert weaver.connection_graph.edge_count == 0
        weaver.update_positions(np.zeros(12))
        assert weaver.connection_graph.edge_count == 6

    def test_connections_ignore_animation(self):
        weaver = ParticleWeaver(WeaverConfig(connected=True, animated=True, animation_radius=5.0))
        weaver.generate(ShapeRequest(kind="sphere-surface", count=40, radius=1.0))
        before = weaver.connection_graph.pairs.copy()
        weaver.tick(0.5)
        assert np.array_equal(weaver.connection_graph.pairs, before)

    def test_nan_distance_rejected_without_touching_config(self):
        with pytest.raises(InvalidRequest):
            WeaverConfig(connected=True, connection_distance=float("nan"))
        weaver = ParticleWeaver(WeaverConfig(connected=True, connection_distance=0.5))
        weaver.generate(ShapeRequest(kind="sphere-surface", count=30, radius=1.0))
        graph = weaver.connection_graph
        with pytest.raises(InvalidRequest):
            weaver.set_connection_distance(float("nan"))
        assert weaver.config.connection_distance == 0.5
        assert weaver.connection_graph is graph
        weaver.generate(ShapeRequest(kind="sphere-surface", count=40, radius=1.0))
        assert weaver.cloud.count == 40

    def test_infinite_distance_allowed(self):
        weaver = ParticleWeaver(WeaverConfig(connected=True))
        weaver.generate(ShapeRequest(kind="cube", count=6))
        weaver.set_connection_distance(float("inf"))
        assert weaver.connection_graph.edge_count == 15

    def test_failed_connection_build_keeps_previous_cloud(self):
        weaver = ParticleWeaver(WeaverConfig(connected=True, connection_distance=0.5))
        weaver.generate(ShapeRequest(kind="sphere-surface", count=10, radius=1.0))
        previous, graph = weaver.cloud, weaver.connection_graph
        weaver.config.connection_distance = float("nan")
        with pytest.raises(InvalidRequest):
            weaver.generate(ShapeRequest(kind="sphere-surface", count=30, radius=1.0))
        assert weaver.cloud is previous
        assert not previous.disposed
        assert previous.count == 10
        assert weaver.connection_graph is graph

    def test_tick_without_cloud(self):
        assert ParticleWeaver().tick(0.016) is None

    def test_tick_animates_working_positions(self):
        weaver = ParticleWeaver(WeaverConfig(animated=True))
        weaver.generate(ShapeRequest(kind="sphere-surface", count=20))
        weaver.tick(0.1)
        cloud = weaver.cloud
        assert not np.array_equal(cloud.working_positions, cloud.original_positions)

    def test_drift_config_allocates_velocities(self):
        weaver = ParticleWeaver(WeaverConfig(drift=True, seed=4))
        weaver.generate(ShapeRequest(kind="cube", count=10))
        assert weaver.cloud.velocities.shape == (30,)

    def test_new_cloud_resets_animation_clock(self):
        weaver = ParticleWeaver(WeaverConfig(animated=True))
        weaver.generate(ShapeRequest(kind="cube", count=10))
        weaver.tick(1.0)
        weaver.generate(ShapeRequest(kind="cube", count=10))
        assert weaver.engine.state.time == 0.0

    def test_dispose(self):
        weaver = ParticleWeaver(WeaverConfig(connected=True))
        weaver.generate(ShapeRequest(kind="cube", count=10))
        cloud = weaver.cloud
        weaver.dispose()
        assert cloud.disposed
        assert weaver.cloud is None
        assert all(buf.size == 0 for buf in weaver.buffers().values())
