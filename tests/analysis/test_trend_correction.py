#!/usr/bin/env python3
"""Test suite for trajectory smoothing and SNR detrending"""

import unittest
import numpy as np
from numpy.testing import assert_allclose
from pygnssir.analysis.arcs import find_arcs
from pygnssir.analysis.detrend import detrend_arc_snr
from pygnssir.analysis.smoothing import smooth_arc_trajectory
from pygnssir.core.config import GnssIrConfig
from pygnssir.core.data_structures import Arc, ArcIssue, Band, Constellation, Observation
from pygnssir.core.store import ObservationStore


def true_elevation(t):
    return 5.0 + 0.012 * t - 2e-6 * t**2


def true_azimuth(t):
    return 200.0 + 0.03 * t


def quantized_store(times, satellite=1):
    """Observations reported in whole degrees, as receivers do"""
    return ObservationStore(
        Observation.create(satellite, Constellation.GPS, Band.L1,
                           float(np.round(true_elevation(t))), float(np.round(true_azimuth(t))),
                           40.0 + 0.01 * t, int(t))
        for t in times)


class TestTrajectorySmoothing(unittest.TestCase):
    """Quantized angles become smooth"""

    def setUp(self):
        self.config = GnssIrConfig()
        self.times = np.arange(0, 1500, 15)
        self.store = quantized_store(self.times)
        self.arc = find_arcs(self.store)[0]

    def test_smoothed_close_to_truth(self):
        issues = smooth_arc_trajectory(self.arc, self.store, self.config)
        self.assertEqual(issues, [])
        elev = self.store.column("elevation_deg", self.arc.record_indices)
        az = self.store.column("azimuth_deg", self.arc.record_indices)
        t = self.store.times(self.arc.record_indices)
        self.assertLess(np.max(np.abs(elev - true_elevation(t))), 0.5)
        self.assertLess(np.max(np.abs(az - true_azimuth(t))), 0.5)

    def test_idempotent(self):
        smooth_arc_trajectory(self.arc, self.store, self.config)
        once = self.store.column("elevation_deg", self.arc.record_indices)
        smooth_arc_trajectory(self.arc, self.store, self.config)
        twice = self.store.column("elevation_deg", self.arc.record_indices)
        assert_allclose(twice, once, rtol=1e-9, atol=1e-9)

    def test_lstsq_backend_agrees(self):
        other = quantized_store(self.times)
        smooth_arc_trajectory(self.arc, self.store, self.config)
        smooth_arc_trajectory(self.arc, other, GnssIrConfig(fit_backend="lstsq"))
        assert_allclose(other.column("elevation_deg", self.arc.record_indices),
                        self.store.column("elevation_deg", self.arc.record_indices),
                        rtol=1e-8)

    def test_only_arc_records_change(self):
        self.store.extend(quantized_store([0, 15, 30], satellite=9))
        arcs = find_arcs(self.store)
        before = [obs.elevation_deg for obs in self.store][-3:]
        smooth_arc_trajectory(arcs[0], self.store, self.config)
        after = [obs.elevation_deg for obs in self.store][-3:]
        self.assertEqual(before, after)

    def test_non_finite_sample(self):
        self.store[3].elevation_deg = float("nan")
        issues = smooth_arc_trajectory(self.arc, self.store, self.config)
        self.assertIn(ArcIssue.NON_FINITE_SAMPLE, issues)
        self.assertTrue(np.isfinite(self.store[3].elevation_deg))

    def test_no_valid_samples_left_unchanged(self):
        store = ObservationStore(
            Observation.create(1, Constellation.GPS, Band.L1, float("nan"), 100.0, 40.0, t)
            for t in (0, 30, 60))
        arc = Arc(10001, 0, 60, [0, 1, 2])
        issues = smooth_arc_trajectory(arc, store, self.config)
        self.assertIn(ArcIssue.DEGENERATE_FIT, issues)
        self.assertTrue(np.all(np.isnan(store.column("elevation_deg", [0, 1, 2]))))
        assert_allclose(store.column("azimuth_deg", [0, 1, 2]), [100.0] * 3)

    def test_empty_arc(self):
        self.assertEqual(smooth_arc_trajectory(Arc(1, 0, 0, []), self.store, self.config), [])


class TestSnrDetrending(unittest.TestCase):
    """Residual SNR"""

    def test_polynomial_trend_removed(self):
        times = np.arange(0, 1200, 20)
        store = ObservationStore(
            Observation.create(4, Constellation.GPS, Band.L1, 10.0, 100.0,
                               35.0 + 0.01 * t - 5e-6 * t**2, int(t))
            for t in times)
        arc = find_arcs(store)[0]
        issues = detrend_arc_snr(arc, store, GnssIrConfig())
        self.assertEqual(issues, [])
        assert_allclose(store.column("snr", arc.record_indices), 0.0, atol=1e-8)

    def test_singular_trend_removes_mean(self):
        store = ObservationStore(
            Observation.create(4, Constellation.GPS, Band.L1, 10.0, 100.0, snr, 100)
            for snr in (30.0, 32.0, 34.0, 36.0))
        arc = Arc(10004, 100, 100, [0, 1, 2, 3])
        issues = detrend_arc_snr(arc, store, GnssIrConfig())
        self.assertEqual(issues, [ArcIssue.DEGENERATE_FIT])
        assert_allclose(store.column("snr", [0, 1, 2, 3]), [-3.0, -1.0, 1.0, 3.0])

    def test_non_finite_snr_stays_non_finite(self):
        store = ObservationStore(
            Observation.create(4, Constellation.GPS, Band.L1, 10.0, 100.0, snr, t)
            for t, snr in zip((0, 30, 60, 90, 120), (30.0, float("nan"), 34.0, 36.0, 38.0)))
        arc = find_arcs(store)[0]
        issues = detrend_arc_snr(arc, store, GnssIrConfig())
        self.assertIn(ArcIssue.NON_FINITE_SAMPLE, issues)
        residual = store.column("snr", arc.record_indices)
        self.assertTrue(np.isnan(residual[1]))
        assert_allclose(residual[[0, 2, 3, 4]], 0.0, atol=1e-9)


if __name__ == '__main__':
    unittest.main()
