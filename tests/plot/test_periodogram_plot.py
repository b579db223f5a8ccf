#!/usr/bin/env python3
"""Test suite for periodogram plotting"""

import unittest
import matplotlib
matplotlib.use("Agg")
import numpy as np
from matplotlib.figure import Figure
from pygnssir.analysis.pipeline import ArcResult
from pygnssir.core.data_structures import Arc, HeightEstimate, Periodogram
from pygnssir.plot import plot_periodograms


def results():
    heights = np.linspace(5.0, 15.0, 201)
    out = []
    for k, center in enumerate((9.9, 10.1)):
        power = np.exp(-0.5 * ((heights - center) / 0.3) ** 2)
        i = int(np.argmax(power))
        out.append(ArcResult(
            arc_index=k, arc=Arc(10001 + k, 0, 1000, [0, 1, 2]),
            periodogram=Periodogram(10001 + k, heights, power, 80),
            peak_height=float(heights[i]), peak_power=float(power[i]), sample_count=80))
    out.append(ArcResult(arc_index=2, arc=Arc(10009, 0, 10, [3, 4])))
    return out


class TestPlotPeriodograms(unittest.TestCase):

    def test_new_axes(self):
        ax = plot_periodograms(results(), HeightEstimate(10.0, 0.1, 2))
        # one curve and one peak marker per analyzed arc, plus the estimate line
        self.assertEqual(len(ax.lines), 5)
        self.assertEqual(ax.get_xlabel(), "Reflector height (m)")
        self.assertIsNotNone(ax.get_legend())

    def test_existing_axes(self):
        ax = Figure().add_subplot(111)
        returned = plot_periodograms(results(), ax=ax)
        self.assertIs(returned, ax)
        self.assertEqual(len(ax.lines), 4)

    def test_nothing_to_draw(self):
        ax = plot_periodograms([], HeightEstimate(float("nan"), 0.0, 0))
        self.assertEqual(len(ax.lines), 0)
        self.assertIsNone(ax.get_legend())


if __name__ == '__main__':
    unittest.main()
