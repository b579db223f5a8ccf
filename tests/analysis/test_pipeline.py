#!/usr/bin/env python3
"""End-to-end tests for the session processor"""

import math
import unittest
import numpy as np
from pygnssir.analysis.pipeline import GnssIrProcessor, estimate_reflector_height
from pygnssir.core.config import GnssIrConfig
from pygnssir.core.constants import HALF_WAVELENGTH_L1, TIME_UNSET
from pygnssir.core.data_structures import ArcIssue, Band, Constellation, Observation
from pygnssir.core.store import ObservationStore

TRUE_HEIGHT = 10.0


def rising_arc(satellite, t0=0, n=100, step=15, height=TRUE_HEIGHT):
    """Rising satellite with a multipath oscillation on a slow direct-signal trend"""
    observations = []
    for k in range(n):
        t = t0 + k * step
        elevation = 5.0 + 20.0 * k / (n - 1)
        x = math.sin(math.radians(elevation)) / HALF_WAVELENGTH_L1
        snr = 38.0 + 0.004 * (t - t0) + 1.0 * math.sin(2.0 * math.pi * height * x)
        observations.append(Observation.create(
            satellite, Constellation.GPS, Band.L1, elevation, 90.0 + satellite + 0.01 * k, snr, t))
    return observations


def synthetic_session():
    store = ObservationStore()
    for sat in (2, 5, 11, 17, 23):
        store.extend(rising_arc(sat, t0=100 * sat))
    # a second pass of satellite 5 after a long gap
    store.extend(rising_arc(5, t0=20000))
    # two stray records do not make an arc
    store.extend([
        Observation.create(30, Constellation.GALILEO, Band.L1, 12.0, 45.0, 40.0, 500),
        Observation.create(30, Constellation.GALILEO, Band.L1, 12.0, 45.0, 41.0, 515),
    ])
    return store


class TestSessionProcessing(unittest.TestCase):
    """Synthetic session with a known reflector height"""

    def setUp(self):
        self.config = GnssIrConfig()
        self.store = synthetic_session()
        self.result = estimate_reflector_height(self.store, self.config)

    def test_estimate(self):
        estimate = self.result.estimate
        self.assertLessEqual(abs(estimate.mean_height_m - TRUE_HEIGHT), 0.05 + 1e-9)
        self.assertLess(estimate.stddev_m, 0.05)
        self.assertEqual(estimate.contributing_arcs, 6)

    def test_arc_results(self):
        self.assertEqual(len(self.result.arcs), 7)
        self.assertEqual([r.arc_index for r in self.result.arcs], list(range(7)))
        with_height = [r for r in self.result.arcs if r.has_height]
        self.assertEqual(len(with_height), 6)
        for r in with_height:
            self.assertEqual(r.sample_count, 100)
            self.assertLessEqual(abs(r.peak_height - TRUE_HEIGHT), 0.05 + 1e-9)
            self.assertTrue(5.0 <= r.mean_elevation <= 25.0)

    def test_short_arc_is_skipped(self):
        skipped = [r for r in self.result.arcs if not r.has_height]
        self.assertEqual(len(skipped), 1)
        self.assertEqual(skipped[0].satellite_id, 20030)
        self.assertIn(ArcIssue.INSUFFICIENT_DATA, skipped[0].issues)
        self.assertIsNone(skipped[0].periodogram)

    def test_candidate_heights(self):
        self.assertEqual(len(self.result.candidate_heights), 6)

    def test_store_rewritten_in_place(self):
        """SNR holds residuals after processing"""
        snr = np.array([obs.snr for obs in self.store])
        self.assertLess(abs(np.mean(snr[:100])), 0.5)

    def test_reproducible(self):
        again = estimate_reflector_height(synthetic_session(), self.config)
        self.assertEqual(again.estimate, self.result.estimate)


class TestProcessorEdgeCases(unittest.TestCase):

    def test_empty_store(self):
        result = GnssIrProcessor(GnssIrConfig()).process(ObservationStore())
        self.assertEqual(result.arcs, [])
        self.assertFalse(result.estimate.is_valid)
        self.assertEqual(result.estimate.contributing_arcs, 0)

    def test_lstsq_backend_matches(self):
        gauss = estimate_reflector_height(synthetic_session(), GnssIrConfig())
        lstsq = estimate_reflector_height(synthetic_session(), GnssIrConfig(fit_backend="lstsq"))
        self.assertAlmostEqual(gauss.estimate.mean_height_m, lstsq.estimate.mean_height_m, places=6)

    def test_single_precision(self):
        result = estimate_reflector_height(synthetic_session(), GnssIrConfig(precision="single"))
        self.assertLessEqual(abs(result.estimate.mean_height_m - TRUE_HEIGHT), 0.05 + 1e-6)

    def test_untimed_arc_issues_listed_once(self):
        def untimed_store():
            store = ObservationStore()
            store.append(Observation.create(3, Constellation.GPS, Band.L1, 10.0, 100.0, 40.0, 10))
            store.extend([Observation.create(3, Constellation.GPS, Band.L1, 10.0 + 0.1 * k, 100.0,
                                             40.0 + k, TIME_UNSET) for k in range(10)])
            return store

        store = untimed_store()
        processor = GnssIrProcessor(GnssIrConfig())
        arcs = processor.segment(store)
        self.assertEqual(len(arcs), 1)
        issues = processor.correct(arcs, store)[0]
        self.assertEqual(issues, [ArcIssue.DEGENERATE_FIT, ArcIssue.DEGENERATE_SPAN])

        result = processor.process(untimed_store())
        found = result.arcs[0].issues
        self.assertEqual(len(found), len(set(found)))

    def test_segment_only(self):
        arcs = GnssIrProcessor(GnssIrConfig()).segment(synthetic_session())
        self.assertEqual(len(arcs), 7)


if __name__ == '__main__':
    unittest.main()
