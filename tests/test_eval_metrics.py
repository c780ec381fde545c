"""
Unit tests for pdrnav/eval (trajectory error metrics and plots).
"""

import unittest

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pytest

from pdrnav.eval import (
    compute_error_stats,
    compute_position_errors,
    compute_rmse,
    final_drift,
    path_length,
    plot_position_error_time,
    plot_trajectory_2d,
    save_figure,
)


class TestMetrics(unittest.TestCase):

    def setUp(self):
        self.truth = np.array([[0.0, 0.0], [0.0, 1.0], [0.0, 2.0], [1.0, 2.0]])
        self.est = self.truth + np.array([[0.0, 0.0], [0.3, 0.4], [0.0, 0.0], [0.6, 0.8]])

    def test_position_errors(self):
        errors = compute_position_errors(self.truth, self.est)
        np.testing.assert_allclose(errors[1], [0.3, 0.4])

    def test_shape_mismatch(self):
        with pytest.raises(ValueError, match="Shape mismatch"):
            compute_position_errors(self.truth, self.est[:2])

    def test_rmse(self):
        errors = compute_position_errors(self.truth, self.est)
        # magnitudes 0, 0.5, 0, 1.0
        self.assertAlmostEqual(compute_rmse(errors), np.sqrt(1.25 / 4))
        self.assertAlmostEqual(compute_rmse(np.array([3.0, -4.0])), np.sqrt(12.5))
        per_axis = compute_rmse(errors, axis=0)
        self.assertEqual(per_axis.shape, (2,))

    def test_error_stats(self):
        stats = compute_error_stats(compute_position_errors(self.truth, self.est))
        self.assertAlmostEqual(stats["mean"], 0.375)
        self.assertAlmostEqual(stats["max"], 1.0)
        self.assertAlmostEqual(stats["median"], 0.25)
        for key in ("std", "rmse", "p75", "p90", "p95"):
            self.assertIn(key, stats)

    def test_path_length(self):
        self.assertAlmostEqual(path_length(self.truth), 3.0)
        self.assertEqual(path_length(self.truth[:1]), 0.0)

    def test_final_drift(self):
        drift = final_drift(self.truth, self.est)
        self.assertAlmostEqual(drift["drift"], 1.0)
        self.assertAlmostEqual(drift["distance"], 3.0)
        self.assertAlmostEqual(drift["drift_percent"], 100.0 / 3.0)

    def test_final_drift_zero_length_walk(self):
        still = np.zeros((3, 2))
        drift = final_drift(still, still)
        self.assertTrue(np.isnan(drift["drift_percent"]))


def test_plots_saved(tmp_path):
    truth = np.cumsum(np.ones((20, 2)), axis=0)
    est = truth + 0.1
    fig = plot_trajectory_2d(truth, {"PDR": est}, particles_xy=est[-5:], steps_xy=est[::4])
    paths = save_figure(fig, tmp_path, "trajectory")
    assert [p.suffix for p in paths] == [".svg", ".png"]
    assert all(p.exists() for p in paths)
    plt.close(fig)

    fig = plot_position_error_time(np.arange(20) * 0.5, {"PDR": est - truth})
    paths = save_figure(fig, tmp_path / "nested", "error", formats=("png",))
    assert paths[0].exists()
    plt.close(fig)


if __name__ == "__main__":
    unittest.main()
