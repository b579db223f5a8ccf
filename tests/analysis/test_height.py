#!/usr/bin/env python3
"""Test suite for height selection and aggregation"""

import math
import unittest
import numpy as np
from numpy.testing import assert_array_equal
from pygnssir.analysis.height import iqr_filter, resolve_height, select_peak
from pygnssir.core.data_structures import Periodogram


class TestSelectPeak(unittest.TestCase):

    def test_max(self):
        p = Periodogram(1, np.array([5.0, 5.05, 5.1]), np.array([0.2, 0.1, 0.7]), 30)
        self.assertEqual(select_peak(p), (5.1, 0.7))

    def test_tie(self):
        p = Periodogram(1, np.array([5.0, 6.0, 7.0, 8.0]), np.array([1.0, 3.0, 3.0, 2.0]), 30)
        self.assertEqual(select_peak(p)[0], 6.0)

    def test_empty(self):
        self.assertIsNone(select_peak(Periodogram(1, np.array([]), np.array([]), 0)))


class TestIqrFilter(unittest.TestCase):
    """Positional quartile outlier rejection"""

    def test_outlier_rejected(self):
        retained = iqr_filter([1, 2, 3, 4, 5, 6, 7, 100])
        assert_array_equal(retained, [1, 2, 3, 4, 5, 6, 7])

    def test_small_samples_unfiltered(self):
        assert_array_equal(iqr_filter([1.0, 2.0, 500.0]), [1.0, 2.0, 500.0])

    def test_order_preserved(self):
        assert_array_equal(iqr_filter([7.0, 5.0, 6.0, 5.5]), [7.0, 5.0, 6.0, 5.5])


class TestResolveHeight(unittest.TestCase):
    """Session aggregation"""

    def test_outlier_example(self):
        estimate = resolve_height([1, 2, 3, 4, 5, 6, 7, 100])
        self.assertAlmostEqual(estimate.mean_height_m, 4.0)
        self.assertAlmostEqual(estimate.stddev_m, np.std([1, 2, 3, 4, 5, 6, 7], ddof=1))
        self.assertEqual(estimate.contributing_arcs, 7)

    def test_single_height(self):
        estimate = resolve_height([9.85])
        self.assertEqual(estimate.mean_height_m, 9.85)
        self.assertEqual(estimate.stddev_m, 0.0)
        self.assertEqual(estimate.contributing_arcs, 1)

    def test_empty(self):
        estimate = resolve_height([])
        self.assertTrue(math.isnan(estimate.mean_height_m))
        self.assertEqual(estimate.stddev_m, 0.0)
        self.assertEqual(estimate.contributing_arcs, 0)
        self.assertFalse(estimate.is_valid)

    def test_non_finite_ignored(self):
        estimate = resolve_height([10.0, float("nan"), 12.0])
        self.assertEqual(estimate.mean_height_m, 11.0)
        self.assertEqual(estimate.contributing_arcs, 2)


if __name__ == '__main__':
    unittest.main()
