"""Tests for Animation Engine - floating motion, drift, pointer push."""

import pytest
import numpy as np

from particle_weaver.modules.animation_engine import (
    AnimationEngine, AnimationSettings, floating_offsets, pointer_push,
)
from particle_weaver.modules.particle_cloud import ParticleCloud


def _cloud(points, with_velocities=False):
    return ParticleCloud.create(np.asarray(points, dtype=float), with_velocities=with_velocities,
                                rng=np.random.default_rng(0))


class TestFloatingOffsets:

    def test_formula_at_time_zero(self):
        offsets = floating_offsets(2, 0.0, 0.1)
        assert np.allclose(offsets[0], [0.0, 0.05, 0.0])
        assert np.allclose(offsets[1], [np.sin(0.1) * 0.1, np.cos(0.15) * 0.05, np.sin(0.2) * 0.03])

    def test_bounded_by_radius(self):
        offsets = floating_offsets(500, 3.7, 0.2)
        assert np.all(np.abs(offsets) <= np.array([0.2, 0.1, 0.06]) + 1e-12)


class TestPointerPush:

    def test_push_falls_off_linearly(self):
        points = np.array([[1.0, 0.0, 0.0]])
        push = pointer_push(points, np.zeros(3), radius=2.0, influence=1.0)
        assert np.allclose(push[0], [(1 - 0.5) * 0.1, 0.0, 0.0])

    def test_outside_radius_unaffected(self):
        push = pointer_push(np.array([[3.0, 0.0, 0.0]]), np.zeros(3), radius=2.0, influence=1.0)
        assert np.all(push == 0.0)

    def test_coincident_point_pushed_along_x(self):
        push = pointer_push(np.zeros((1, 3)), np.zeros(3), radius=2.0, influence=1.0)
        assert np.allclose(push[0], [0.1, 0.0, 0.0])

    def test_zero_radius_is_noop(self):
        assert np.all(pointer_push(np.zeros((2, 3)), np.zeros(3), radius=0.0, influence=1.0) == 0.0)


class TestAnimationEngine:

    def setup_method(self):
        self.points = [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 5.0, 0.0]]

    @pytest.mark.parametrize("dt", [0.0, 0.016, 10.0, -0.5])
    def test_disabled_tick_is_noop(self, dt):
        cloud = _cloud(self.points)
        engine = AnimationEngine(AnimationSettings(animation_speed=3.0, animation_radius=1.0))
        for _ in range(5):
            out = engine.tick(cloud, dt, pointer=[0.0, 0.0, 0.0])
            assert out is cloud.working_positions
            assert np.array_equal(out, cloud.original_positions)
        assert engine.state.time == 0.0

    def test_floating_adds_to_original(self):
        cloud = _cloud(self.points)
        engine = AnimationEngine(AnimationSettings(animated=True, animation_speed=2.0, animation_radius=0.1))
        engine.tick(cloud, 0.5)
        assert engine.state.time == pytest.approx(1.0)
        expected = np.asarray(self.points) + floating_offsets(3, 1.0, 0.1)
        assert np.allclose(cloud.working_positions.reshape(-1, 3), expected, atol=1e-6)

    def test_original_positions_untouched(self):
        cloud = _cloud(self.points)
        before = cloud.original_positions.copy()
        AnimationEngine(AnimationSettings(animated=True)).tick(cloud, 1.0)
        assert np.array_equal(cloud.original_positions, before)

    def test_no_accumulation_between_ticks(self):
        cloud = _cloud(self.points)
        engine = AnimationEngine(AnimationSettings(animated=True))
        engine.tick(cloud, 0.25)
        engine.tick(cloud, 0.25)
        expected = np.asarray(self.points) + floating_offsets(3, 0.5, 0.1)
        assert np.allclose(cloud.working_positions.reshape(-1, 3), expected, atol=1e-6)

    @pytest.mark.parametrize("dt", [-1.0, float("nan"), float("inf")])
    def test_bad_delta_time_clamped(self, dt):
        cloud = _cloud(self.points)
        engine = AnimationEngine(AnimationSettings(animated=True))
        engine.tick(cloud, dt)
        assert engine.state.time == 0.0

    def test_pointer_push_only_when_interactive(self):
        cloud = _cloud(self.points)
        engine = AnimationEngine(AnimationSettings(interactive=True, mouse_radius=2.0, mouse_influence=1.0))
        engine.tick(cloud, 0.016, pointer=[0.0, 0.0, 0.0])
        out = cloud.working_positions.reshape(-1, 3)
        assert np.allclose(out[0], [0.1, 0.0, 0.0])
        assert np.allclose(out[1], [1.05, 0.0, 0.0])
        assert np.allclose(out[2], [0.0, 5.0, 0.0])

    def test_pointer_persists_until_cleared(self):
        cloud = _cloud(self.points)
        engine = AnimationEngine(AnimationSettings(interactive=True))
        engine.set_pointer([0.0, 0.0, 0.0])
        engine.tick(cloud, 0.016)
        assert not np.array_equal(cloud.working_positions, cloud.original_positions)
        engine.clear_pointer()
        engine.tick(cloud, 0.016)
        assert np.array_equal(cloud.working_positions, cloud.original_positions)

    def test_invalid_pointer_ignored(self):
        engine = AnimationEngine(AnimationSettings(interactive=True))
        engine.set_pointer([float("nan"), 0.0, 0.0])
        assert engine.state.pointer is None
        engine.set_pointer([1.0])
        assert engine.state.pointer is None

    def test_drift_integrates_velocities(self):
        cloud = _cloud(self.points, with_velocities=True)
        engine = AnimationEngine(AnimationSettings(drift=True))
        engine.tick(cloud, 1.0)
        engine.tick(cloud, 1.0)
        expected = cloud.original_positions + 2.0 * cloud.velocities
        assert np.allclose(cloud.working_positions, expected, atol=1e-6)

    def test_reset_clears_state(self):
        cloud = _cloud(self.points, with_velocities=True)
        engine = AnimationEngine(AnimationSettings(animated=True, drift=True))
        engine.set_pointer([0.0, 0.0, 0.0])
        engine.tick(cloud, 1.0)
        engine.reset()
        assert engine.state.time == 0.0
        assert engine.state.pointer is None
        assert engine.state.drift_offsets is None
