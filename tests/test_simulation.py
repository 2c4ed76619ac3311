"""Unit tests for the per-frame pipeline and spawn policy."""

import unittest

import numpy as np
import pytest

from particle import Bounds, ParticleSystem
from simulation import FrameInput, Simulation, SpawnPolicy


class TestSpawnPolicy(unittest.TestCase):
    """Test SpawnPolicy."""

    def test_single_spawns_one_while_active(self) -> None:
        """Test single mode spawns exactly one particle per active frame."""
        policy = SpawnPolicy("single", 40, np.random.default_rng(0))

        assert policy.count(True) == 1
        assert policy.count(False) == 0

    def test_burst_range(self) -> None:
        """Test burst counts are drawn from [1, burst_max)."""
        policy = SpawnPolicy("burst", 40, np.random.default_rng(0))

        counts = [policy.count(True) for _ in range(500)]

        assert min(counts) >= 1
        assert max(counts) <= 39
        assert len(set(counts)) > 1

    def test_burst_inactive(self) -> None:
        """Test burst mode spawns nothing without the trigger."""
        policy = SpawnPolicy("burst", 40, np.random.default_rng(0))

        assert policy.count(False) == 0

    def test_unknown_mode(self) -> None:
        """Test an unknown mode is a configuration error."""
        with pytest.raises(ValueError, match="spawn_mode"):
            SpawnPolicy("fountain", 40, np.random.default_rng(0))

    def test_burst_max_too_small(self) -> None:
        """Test burst mode needs a non-empty count range."""
        with pytest.raises(ValueError, match="burst_max"):
            SpawnPolicy("burst", 1, np.random.default_rng(0))


class TestSimulationStep:
    """Test Simulation.step."""

    def test_trigger_spawns_at_position(self, empty_system, sim_params, bounds) -> None:
        """Test a held trigger adds a particle that then moves one frame."""
        sim = Simulation(empty_system, {**sim_params, "cull_enabled": False})

        sim.step(FrameInput(bounds, trigger_active=True, trigger_position=(20.0, 30.0)))

        assert len(empty_system) == 1
        assert sim.total_spawned == 1
        velocity = empty_system.velocities[0]
        np.testing.assert_allclose(empty_system.positions[0], np.array([20.0, 30.0]) + velocity)

    def test_burst_trigger(self, empty_system, sim_params, bounds) -> None:
        """Test burst mode spawns between 1 and burst_max - 1 particles."""
        sim = Simulation(empty_system, {**sim_params, "spawn_mode": "burst", "cull_enabled": False})

        sim.step(FrameInput(bounds, trigger_active=True))

        assert 1 <= len(empty_system) <= 39
        assert sim.total_spawned == len(empty_system)

    def test_no_trigger_no_growth(self, sim_params, bounds) -> None:
        """Test the collection never grows without the trigger."""
        system = ParticleSystem(sim_params, bounds)
        sim = Simulation(system, sim_params)

        sizes = []
        for _ in range(50):
            sim.step(FrameInput(bounds))
            sizes.append(len(system))

        assert all(later <= earlier for earlier, later in zip([500] + sizes, sizes))
        assert sim.total_spawned == 0
        assert sim.total_culled == 500 - len(system)

    def test_cull_disabled_keeps_everything(self, sim_params, bounds) -> None:
        """Test no particle is removed when culling is off."""
        system = ParticleSystem(sim_params, bounds)
        sim = Simulation(system, {**sim_params, "cull_enabled": False})

        for _ in range(200):
            sim.step(FrameInput(bounds))

        assert len(system) == 500

    def test_color_reactive_uses_reference_point(self, empty_system, sim_params, bounds) -> None:
        """Test colors follow the reference point when color reactivity is on."""
        sim = Simulation(empty_system, {**sim_params, "color_reactive": True})
        empty_system.spawn((0.0, 0.0), 1)
        empty_system.velocities[:] = 0.0

        sim.step(FrameInput(bounds, reference_point=(0.0, 0.1)))

        np.testing.assert_allclose(empty_system.colors[0, [0, 2, 3]], [1.0, 0.0, 1.0])
        assert empty_system.colors[0, 1] > 0.99

    def test_color_reactive_off_ignores_reference_point(self, empty_system, sim_params, bounds) -> None:
        """Test colors stay at the default when color reactivity is off."""
        sim = Simulation(empty_system, sim_params)
        empty_system.spawn((0.0, 0.0), 1)

        sim.step(FrameInput(bounds, reference_point=(0.0, 0.0)))

        np.testing.assert_array_equal(empty_system.colors[0], [0.0, 0.0, 0.0, 1.0])

    def test_spawned_outside_bounds_culled_same_frame(self, empty_system, sim_params, bounds) -> None:
        """Test a particle spawned out of bounds is removed by that frame's cull."""
        sim = Simulation(empty_system, sim_params)

        sim.step(FrameInput(bounds, trigger_active=True, trigger_position=(5000.0, 0.0)))

        assert len(empty_system) == 0
        assert sim.total_culled == 1

    def test_frame_counter(self, empty_system, sim_params, bounds) -> None:
        """Test every step counts as one frame."""
        sim = Simulation(empty_system, sim_params)

        for _ in range(7):
            sim.step(FrameInput(bounds))

        assert sim.frame_count == 7

    def test_rejects_bad_gravity(self, empty_system, sim_params) -> None:
        """Test gravity must be a 2D vector."""
        with pytest.raises(ValueError, match="gravity"):
            Simulation(empty_system, {**sim_params, "gravity": [0.0, -0.1, 0.0]})


class TestEndToEnd:
    """Run the full pipeline for many frames."""

    def test_particles_fall_and_leave(self, sim_params) -> None:
        """Test 1000 frames of gravity only: particles fall, nothing spawns, all leave."""
        bounds = Bounds(-100.0, 100.0, -100.0, 100.0)
        system = ParticleSystem(sim_params, bounds)
        sim = Simulation(system, sim_params)
        frame = FrameInput(bounds)

        for _ in range(1000):
            count = len(system)
            previous_y = system.positions[:, 1].copy()
            previous_vy = system.velocities[:, 1].copy()

            # Step and cull separately so positions can be compared before removal.
            system.step(sim.gravity)
            np.testing.assert_allclose(system.velocities[:, 1], previous_vy - 0.1)
            np.testing.assert_allclose(system.positions[:, 1], previous_y + (previous_vy - 0.1))
            falling = system.velocities[:, 1] < 0.0
            assert np.all(system.positions[falling, 1] < previous_y[falling])

            system.cull(frame.bounds)
            assert len(system) <= count
            assert len(system) <= 500

        assert len(system) == 0

    def test_pipeline_only_shrinks(self, sim_params) -> None:
        """Test the full Simulation.step loop never grows the collection."""
        bounds = Bounds(-100.0, 100.0, -100.0, 100.0)
        system = ParticleSystem(sim_params, bounds)
        sim = Simulation(system, sim_params)

        previous = len(system)
        for _ in range(1000):
            sim.step(FrameInput(bounds))
            assert len(system) <= previous
            previous = len(system)

        assert len(system) == 0
        assert sim.total_culled == 500
