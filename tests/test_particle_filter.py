"""
Unit tests for pdrnav/estimators/particle_filter.py.

Tests cover:
    - Particle propagation with uniform step/heading noise
    - Weight normalization and effective sample size
    - Systematic resampling (cardinality, uniform weights)
    - Full filter step and session-state helper
"""

import unittest
import warnings

import numpy as np
import pytest
from numpy.testing import assert_allclose

from pdrnav.config import PDRConfig
from pdrnav.estimators.particle_filter import (
    ParticleCloud,
    ParticleFilter,
    effective_sample_size,
    normalize_weights,
    particle_filter_update,
    propagate_particles,
    systematic_resample,
    weighted_mean_position,
)
from pdrnav.session.state import create_pdr_state


def skewed_cloud(n=150, heavy=0.9):
    """Cloud whose first particle carries most of the weight."""
    cloud = ParticleCloud(n)
    cloud.states[:, 0] = np.arange(n, dtype=float)
    cloud.weights[:] = (1.0 - heavy) / (n - 1)
    cloud.weights[0] = heavy
    return cloud


class TestParticleCloud(unittest.TestCase):

    def test_initial_population(self):
        cloud = ParticleCloud(150, x=2.0, y=-1.0)
        self.assertEqual(len(cloud), 150)
        assert_allclose(cloud.x, 2.0)
        assert_allclose(cloud.y, -1.0)
        assert_allclose(cloud.heading, 0.0)
        assert_allclose(cloud.weights, 1.0 / 150)

    def test_reset(self):
        cloud = skewed_cloud()
        cloud.reset(4.0, 5.0)
        assert_allclose(cloud.states[:, :2], np.tile([4.0, 5.0], (150, 1)))
        assert_allclose(cloud.weights, 1.0 / 150)

    def test_copy_is_independent(self):
        cloud = ParticleCloud(10)
        other = cloud.copy()
        other.states[0, 0] = 7.0
        self.assertEqual(cloud.states[0, 0], 0.0)

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            ParticleCloud(0)


class TestPropagation(unittest.TestCase):

    def setUp(self):
        self.rng = np.random.default_rng(0)

    def test_noise_free_step(self):
        cloud = ParticleCloud(20)
        propagate_particles(cloud, 1.0, 90.0, 0.0, 0.0, self.rng)
        assert_allclose(cloud.x, 1.0)
        assert_allclose(cloud.y, 0.0, atol=1e-12)
        assert_allclose(cloud.heading, 90.0)

    def test_noise_bounds(self):
        cloud = ParticleCloud(500)
        propagate_particles(cloud, 0.6, 0.0, 5.0, 0.1, self.rng)
        step = np.hypot(cloud.x, cloud.y)
        self.assertTrue(np.all(step >= 0.55 - 1e-12))
        self.assertTrue(np.all(step <= 0.65 + 1e-12))
        spread = np.abs(((cloud.heading + 180.0) % 360.0) - 180.0)
        self.assertTrue(np.all(spread <= 2.5 + 1e-9))

    def test_particle_headings_wrapped(self):
        cloud = ParticleCloud(200)
        propagate_particles(cloud, 0.6, 359.0, 10.0, 0.0, self.rng)
        self.assertTrue(np.all(cloud.heading >= 0.0))
        self.assertTrue(np.all(cloud.heading < 360.0))


class TestWeights(unittest.TestCase):

    def test_normalize(self):
        weights = np.random.default_rng(1).random(150)
        self.assertTrue(normalize_weights(weights))
        self.assertAlmostEqual(weights.sum(), 1.0)

    def test_normalize_zero_sum_warns(self):
        weights = np.zeros(10)
        with pytest.warns(RuntimeWarning):
            self.assertFalse(normalize_weights(weights))
        assert_allclose(weights, 0.0)

    def test_effective_sample_size(self):
        self.assertAlmostEqual(effective_sample_size(np.full(150, 1.0 / 150)), 150.0)
        self.assertAlmostEqual(effective_sample_size(np.eye(1, 150)[0]), 1.0)
        self.assertEqual(effective_sample_size(np.zeros(5)), float("inf"))


class TestSystematicResample(unittest.TestCase):

    def test_cardinality_and_uniform_weights(self):
        cloud = skewed_cloud()
        indices = systematic_resample(cloud, np.random.default_rng(3))
        self.assertEqual(indices.shape, (150,))
        self.assertEqual(len(cloud), 150)
        assert_allclose(cloud.weights, 1.0 / 150)
        # ~90% of the draws land on the heavy particle
        self.assertGreaterEqual(np.sum(indices == 0), 134)

    def test_selected_particles_copied(self):
        cloud = skewed_cloud()
        source = cloud.states.copy()
        indices = systematic_resample(cloud, np.random.default_rng(4))
        assert_allclose(cloud.states, source[indices])

    def test_indices_sorted_and_in_range(self):
        cloud = ParticleCloud(50)
        cloud.weights[:] = np.random.default_rng(5).random(50)
        indices = systematic_resample(cloud, np.random.default_rng(6))
        self.assertTrue(np.all(np.diff(indices) >= 0))
        self.assertTrue(np.all((indices >= 0) & (indices < 50)))


class TestParticleFilter(unittest.TestCase):

    def setUp(self):
        self.config = PDRConfig()
        self.rng = np.random.default_rng(42)

    def test_population_size_must_match(self):
        with pytest.raises(ValueError, match="particle_count"):
            ParticleFilter(ParticleCloud(10), self.config)

    def test_single_step_north(self):
        """Step 0.6 at heading 0 from the origin."""
        pf = ParticleFilter(ParticleCloud(150), self.config, self.rng)
        xy = pf.step(0.6, 0.0)
        self.assertAlmostEqual(xy[1], 0.6, delta=0.05)
        self.assertLess(abs(xy[0]), 0.65 * np.sin(np.deg2rad(2.5)) + 1e-9)
        self.assertAlmostEqual(pf.particles.weights.sum(), 1.0)
        self.assertEqual(len(pf.particles), 150)

    def test_uniform_weights_never_resample(self):
        pf = ParticleFilter(ParticleCloud(150), self.config, self.rng)
        for _ in range(20):
            pf.step(0.6, 45.0)
        self.assertEqual(pf.resample_count, 0)
        self.assertAlmostEqual(pf.n_eff, 150.0)

    def test_degenerate_weights_trigger_resampling(self):
        cloud = skewed_cloud()
        pf = ParticleFilter(cloud, self.config, self.rng)
        self.assertLess(pf.n_eff, self.config.resample_threshold)
        pf.step(0.6, 0.0)
        self.assertTrue(pf.resampled)
        self.assertEqual(pf.resample_count, 1)
        self.assertEqual(len(cloud), 150)
        assert_allclose(cloud.weights, 1.0 / 150)

    def test_zero_weights_do_not_crash(self):
        cloud = ParticleCloud(150)
        cloud.weights[:] = 0.0
        pf = ParticleFilter(cloud, self.config, self.rng)
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            xy = pf.step(0.6, 90.0)
        self.assertTrue(any(issubclass(w.category, RuntimeWarning) for w in caught))
        self.assertFalse(pf.resampled)
        self.assertTrue(np.all(np.isfinite(xy)))

    def test_observation_update_not_supported(self):
        pf = ParticleFilter(ParticleCloud(150), self.config, self.rng)
        with pytest.raises(NotImplementedError):
            pf.update(np.array([1.0, 2.0]))

    def test_estimate_available_after_construction(self):
        cloud = ParticleCloud(150)
        cloud.reset(2.0, -1.0)
        pf = ParticleFilter(cloud, self.config, self.rng)
        state, covariance = pf.get_state()
        assert_allclose(state, [2.0, -1.0])
        self.assertEqual(covariance.shape, (2, 2))

    def test_step_is_predict_then_update(self):
        a = ParticleFilter(ParticleCloud(150), self.config, np.random.default_rng(3))
        b = ParticleFilter(ParticleCloud(150), self.config, np.random.default_rng(3))
        xy = a.step(0.6, 30.0)
        b.predict(np.array([0.6, 30.0]))
        b.update()
        assert_allclose(xy, b.state)
        assert_allclose(a.particles.states, b.particles.states)

    def test_covariance_grows_with_steps(self):
        pf = ParticleFilter(ParticleCloud(150), self.config, self.rng)
        pf.step(5.0, 0.0)
        trace_one = np.trace(pf.covariance)
        for _ in range(9):
            pf.step(5.0, 0.0)
        self.assertGreater(np.trace(pf.covariance), trace_one)

    def test_sync_after_external_reset(self):
        cloud = ParticleCloud(150)
        pf = ParticleFilter(cloud, self.config, self.rng)
        pf.step(3.0, 90.0)
        cloud.reset(1.0, 2.0)
        pf.sync()
        state, covariance = pf.get_state()
        assert_allclose(state, [1.0, 2.0])
        assert_allclose(covariance, 0.0, atol=1e-12)

    def test_get_particles_returns_copies(self):
        pf = ParticleFilter(ParticleCloud(150), self.config, self.rng)
        states, weights = pf.get_particles()
        states[:] = 99.0
        self.assertEqual(pf.particles.states[0, 0], 0.0)
        self.assertEqual(weights.shape, (150,))


class TestSessionHelper(unittest.TestCase):

    def test_writes_xy_keeps_z(self):
        state = create_pdr_state()
        state.position[2] = 3.5
        xy = particle_filter_update(state, 0.6, 90.0, PDRConfig(), np.random.default_rng(0))
        assert_allclose(state.position[:2], xy)
        self.assertEqual(state.position[2], 3.5)
        self.assertAlmostEqual(xy[0], 0.6, delta=0.05)

    def test_uses_state_population_size(self):
        config = PDRConfig(particle_count=30, resample_threshold=15)
        state = create_pdr_state(config)
        xy = particle_filter_update(state, 0.6, 0.0, config, np.random.default_rng(0))
        self.assertEqual(len(state.particles), 30)
        self.assertAlmostEqual(xy[1], 0.6, delta=0.05)

    def test_mismatched_config_rejected(self):
        state = create_pdr_state(PDRConfig(particle_count=30, resample_threshold=15))
        with pytest.raises(ValueError, match="particle_count"):
            particle_filter_update(state, 0.6, 0.0, PDRConfig())

    def test_weighted_mean(self):
        cloud = ParticleCloud(2)
        cloud.states[:, 0] = [0.0, 10.0]
        cloud.weights[:] = [0.75, 0.25]
        assert_allclose(weighted_mean_position(cloud), [2.5, 0.0])


if __name__ == "__main__":
    unittest.main()
