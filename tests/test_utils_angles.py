"""
Unit tests for pdrnav/utils/angles.py (compass heading helpers).

Run with: pytest tests/test_utils_angles.py -v
"""

import unittest

import numpy as np
from numpy.testing import assert_allclose

from pdrnav.utils.angles import (
    heading_diff_deg,
    heading_to_unit_vector,
    wrap_heading_deg,
    wrap_heading_deg_array,
)


class TestWrapHeading(unittest.TestCase):
    """Test wrapping into [0, 360)."""

    def test_wrap_in_range_unchanged(self):
        for angle in (0.0, 45.0, 180.0, 359.5):
            self.assertEqual(wrap_heading_deg(angle), angle)

    def test_wrap_above_and_below(self):
        self.assertAlmostEqual(wrap_heading_deg(370.0), 10.0)
        self.assertAlmostEqual(wrap_heading_deg(-90.0), 270.0)
        self.assertAlmostEqual(wrap_heading_deg(720.0), 0.0)
        self.assertAlmostEqual(wrap_heading_deg(-725.0), 355.0)

    def test_wrap_tiny_negative_never_returns_360(self):
        """-1e-14 % 360 rounds to 360.0; must fold back to 0."""
        wrapped = wrap_heading_deg(-1e-14)
        self.assertGreaterEqual(wrapped, 0.0)
        self.assertLess(wrapped, 360.0)

    def test_wrap_array_matches_scalar(self):
        angles = np.array([-1e-14, -450.0, -1.0, 0.0, 359.9, 360.0, 1000.0])
        wrapped = wrap_heading_deg_array(angles)
        self.assertTrue(np.all(wrapped >= 0.0))
        self.assertTrue(np.all(wrapped < 360.0))
        expected = [wrap_heading_deg(a) for a in angles]
        assert_allclose(wrapped, expected)


class TestHeadingDiff(unittest.TestCase):
    """Test shortest signed heading difference."""

    def test_diff_across_north(self):
        self.assertAlmostEqual(heading_diff_deg(359.0, 1.0), -2.0)
        self.assertAlmostEqual(heading_diff_deg(1.0, 359.0), 2.0)

    def test_diff_range(self):
        a = np.linspace(-720.0, 720.0, 97)
        diff = heading_diff_deg(a, 0.0)
        self.assertTrue(np.all(diff >= -180.0))
        self.assertTrue(np.all(diff < 180.0))


class TestHeadingToUnitVector(unittest.TestCase):
    """Test compass heading to floor-plan direction."""

    def test_cardinal_directions(self):
        assert_allclose(heading_to_unit_vector(0.0), [0.0, 1.0], atol=1e-12)
        assert_allclose(heading_to_unit_vector(90.0), [1.0, 0.0], atol=1e-12)
        assert_allclose(heading_to_unit_vector(180.0), [0.0, -1.0], atol=1e-12)
        assert_allclose(heading_to_unit_vector(270.0), [-1.0, 0.0], atol=1e-12)

    def test_vectorized_shape(self):
        vecs = heading_to_unit_vector(np.array([0.0, 30.0, 200.0]))
        self.assertEqual(vecs.shape, (3, 2))
        assert_allclose(np.linalg.norm(vecs, axis=1), 1.0)


if __name__ == "__main__":
    unittest.main()
