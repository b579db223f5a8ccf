#!/usr/bin/env python3
"""Test suite for result export"""

import os
import tempfile
import unittest
import numpy as np
import pandas as pd
from pygnssir.analysis.pipeline import ArcResult
from pygnssir.core.data_structures import Arc, ArcIssue, Periodogram
from pygnssir.io.results import (
    PERIODOGRAM_COLUMNS, SUMMARY_COLUMNS, arc_summary_frame, periodogram_frame,
    write_arc_summary_csv, write_periodograms_csv
)


def sample_results():
    heights = np.array([5.0, 5.5, 6.0])
    analyzed = ArcResult(
        arc_index=0, arc=Arc(10001, 0, 1485, list(range(100))),
        periodogram=Periodogram(10001, heights, np.array([0.1, 0.8, 0.2]), 100),
        peak_height=5.5, peak_power=0.8, sample_count=100,
        mean_elevation=15.0, mean_azimuth=120.0, median_time=750)
    skipped = ArcResult(
        arc_index=1, arc=Arc(20030, 500, 515, [100, 101]),
        issues=[ArcIssue.INSUFFICIENT_DATA])
    return [analyzed, skipped]


class TestFrames(unittest.TestCase):

    def test_periodogram_frame(self):
        frame = periodogram_frame(sample_results())
        self.assertEqual(list(frame.columns), PERIODOGRAM_COLUMNS)
        self.assertEqual(len(frame), 3)
        self.assertTrue((frame["satellite_id"] == 10001).all())
        np.testing.assert_array_equal(frame["power"], [0.1, 0.8, 0.2])

    def test_empty_periodogram_frame(self):
        frame = periodogram_frame(sample_results()[1:])
        self.assertEqual(list(frame.columns), PERIODOGRAM_COLUMNS)
        self.assertEqual(len(frame), 0)

    def test_summary_frame(self):
        frame = arc_summary_frame(sample_results())
        self.assertEqual(list(frame.columns), SUMMARY_COLUMNS)
        self.assertEqual(len(frame), 2)
        self.assertEqual(frame["peak_height"].iloc[0], 5.5)
        self.assertTrue(np.isnan(frame["peak_height"].iloc[1]))
        self.assertEqual(frame["issues"].iloc[1], "insufficient_data")


class TestCsv(unittest.TestCase):

    def test_round_trip(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_periodograms_csv(sample_results(), os.path.join(tmpdir, "arc_freqs.csv"))
            self.assertTrue(path.exists())
            frame = pd.read_csv(path)
            self.assertEqual(list(frame.columns), PERIODOGRAM_COLUMNS)
            np.testing.assert_allclose(frame["height"], [5.0, 5.5, 6.0])

            summary = pd.read_csv(write_arc_summary_csv(sample_results(),
                                                        os.path.join(tmpdir, "arc_summary.csv")))
            self.assertEqual(list(summary["satellite_id"]), [10001, 20030])


if __name__ == '__main__':
    unittest.main()
