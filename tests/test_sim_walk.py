"""
Unit tests for pdrnav/sim/walk.py and an end-to-end replay of a simulated
corridor walk through the tracker.
"""

import unittest

import numpy as np
import pytest
from numpy.testing import assert_allclose

from pdrnav.config import PDRConfig
from pdrnav.eval import compute_error_stats, compute_position_errors
from pdrnav.sensors import SensorSample, detect_steps_peak_detector
from pdrnav.session import PDRTracker
from pdrnav.sim import WalkDataset, generate_corridor_walk


class TestGenerateCorridorWalk(unittest.TestCase):

    def setUp(self):
        self.walk = generate_corridor_walk(num_legs=2, steps_per_leg=10, seed=3)

    def test_shapes(self):
        n = len(self.walk.t)
        self.assertEqual(self.walk.accel.shape, (n, 3))
        self.assertEqual(self.walk.gyro.shape, (n, 3))
        self.assertEqual(self.walk.orientation.shape, (n,))
        self.assertEqual(self.walk.pos_true.shape, (n, 2))
        self.assertEqual(len(self.walk.step_times), 20)

    def test_ground_truth_path(self):
        """North for 10 steps, then east for 10 steps."""
        assert_allclose(self.walk.pos_true[0], [0.0, 0.0])
        assert_allclose(self.walk.pos_true[-1], [7.0, 7.0], atol=1e-9)

    def test_headings_wrapped(self):
        for arr in (self.walk.heading_true, self.walk.orientation):
            self.assertTrue(np.all(arr >= 0.0))
            self.assertTrue(np.all(arr < 360.0))

    def test_footfalls_exceed_step_threshold(self):
        mags = np.linalg.norm(self.walk.accel, axis=1)
        k = np.searchsorted(self.walk.t, self.walk.step_times)
        self.assertTrue(np.all(mags[k + 2] > 1.2))

    def test_reproducible(self):
        other = generate_corridor_walk(num_legs=2, steps_per_leg=10, seed=3)
        assert_allclose(other.accel, self.walk.accel)

    def test_orientation_bias(self):
        biased = generate_corridor_walk(
            num_legs=1, steps_per_leg=5, orientation_noise=0.0, orientation_bias=8.0
        )
        assert_allclose(biased.orientation[:10], 8.0)

    def test_samples(self):
        samples = list(self.walk.samples())
        self.assertEqual(len(samples), len(self.walk.t))
        self.assertIsInstance(samples[0], SensorSample)
        self.assertEqual(samples[5].t, self.walk.t[5])

    def test_invalid_parameters(self):
        with pytest.raises(ValueError):
            generate_corridor_walk(num_legs=0)
        with pytest.raises(ValueError):
            generate_corridor_walk(step_freq=5.0, pulse_duration=0.3)

    def test_shape_validation(self):
        with pytest.raises(ValueError, match="accel"):
            WalkDataset(
                t=np.zeros(4), accel=np.zeros((3, 3)), gyro=np.zeros((4, 3)),
                orientation=np.zeros(4), pos_true=np.zeros((4, 2)),
                heading_true=np.zeros(4), step_times=np.zeros(0),
            )


def test_save_load(tmp_path):
    walk = generate_corridor_walk(num_legs=1, steps_per_leg=4)
    path = tmp_path / "samples.npz"
    walk.save(path)
    loaded = WalkDataset.load(path, meta={"seed": 42})
    assert_allclose(loaded.accel, walk.accel)
    assert_allclose(loaded.step_times, walk.step_times)
    assert loaded.meta == {"seed": 42}


class TestCorridorWalkReplay(unittest.TestCase):
    """Full pipeline on a clean simulated walk."""

    @classmethod
    def setUpClass(cls):
        cls.walk = generate_corridor_walk(seed=11)
        cls.config = PDRConfig()
        tracker = PDRTracker(cls.config, rng=np.random.default_rng(11))
        tracker.start_tracking()
        pos = np.zeros((len(cls.walk.t), 2))
        for k, sample in enumerate(cls.walk.samples()):
            tracker.process_sample(sample)
            pos[k] = tracker.state.position[:2] / cls.config.step_scale
        cls.tracker = tracker
        cls.pos_est = pos

    def test_every_footfall_detected_once(self):
        self.assertEqual(self.tracker.step_count, len(self.walk.step_times))

    def test_online_and_offline_detectors_agree(self):
        dt = self.walk.t[1] - self.walk.t[0]
        peaks, _ = detect_steps_peak_detector(self.walk.accel, dt, lowpass_cutoff=None)
        self.assertEqual(len(peaks), self.tracker.step_count)

    def test_trajectory_follows_corridor(self):
        errors = compute_position_errors(self.walk.pos_true, self.pos_est)
        stats = compute_error_stats(errors)
        self.assertLess(stats["rmse"], 2.0)


if __name__ == "__main__":
    unittest.main()
