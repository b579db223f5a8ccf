# Copyright 2024 inuex35
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
GNSS-IR Session Processor
=========================

Runs one closed batch of observations through arc segmentation,
trajectory smoothing, SNR detrending, Lomb-Scargle estimation and height
resolution. Arc-level degeneracies are recovered locally and only reduce
the number of contributing arcs.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from ..core.config import GnssIrConfig
from ..core.data_structures import Arc, ArcIssue, HeightEstimate, Periodogram
from ..core.store import ObservationStore
from ..logger import log_duration
from .arcs import find_arcs
from .detrend import detrend_arc_snr
from .height import resolve_height, select_peak
from .lombscargle import estimate_arc_periodogram
from .smoothing import smooth_arc_trajectory

logger = logging.getLogger(__name__)


@dataclass
class ArcResult:
    """Outcome of one arc"""
    arc_index: int
    arc: Arc
    periodogram: Optional[Periodogram] = None
    peak_height: float = float("nan")
    peak_power: float = float("nan")
    sample_count: int = 0
    mean_elevation: float = float("nan")
    mean_azimuth: float = float("nan")
    median_time: Optional[int] = None
    issues: List[ArcIssue] = field(default_factory=list)

    @property
    def satellite_id(self) -> int:
        return self.arc.satellite_id

    @property
    def has_height(self) -> bool:
        return bool(np.isfinite(self.peak_height))


@dataclass
class SessionResult:
    """Session estimate with the per-arc results it was built from"""
    estimate: HeightEstimate
    arcs: List[ArcResult] = field(default_factory=list)

    @property
    def candidate_heights(self) -> np.ndarray:
        return np.array([r.peak_height for r in self.arcs if r.has_height])


class GnssIrProcessor:
    """Reflector height estimation over one observation session

    Parameters
    ----------
    config : GnssIrConfig
        Session configuration, shared by every stage
    """

    def __init__(self, config: GnssIrConfig):
        self.config = config
        self.heights = config.height_grid()

    def segment(self, store: ObservationStore) -> List[Arc]:
        with log_duration(logger, "Finding arcs"):
            return find_arcs(store)

    def correct(self, arcs: List[Arc], store: ObservationStore) -> List[List[ArcIssue]]:
        """Smooth trajectories then detrend SNR of every arc, in place"""
        issues: List[List[ArcIssue]] = [[] for _ in arcs]
        with log_duration(logger, "Smoothing arc elevation and azimuth"):
            for arc, found in zip(arcs, issues):
                found.extend(smooth_arc_trajectory(arc, store, self.config))
        with log_duration(logger, "Detrending arc SNR"):
            for arc, found in zip(arcs, issues):
                found.extend(detrend_arc_snr(arc, store, self.config))
        return [list(dict.fromkeys(found)) for found in issues]

    def analyze_arc(self, arc_index: int, arc: Arc, store: ObservationStore,
                    issues: Optional[List[ArcIssue]] = None) -> ArcResult:
        """Periodogram, peak and geometry summary of one corrected arc"""
        result = ArcResult(arc_index=arc_index, arc=arc, issues=list(issues or []))
        if arc.record_indices:
            result.mean_elevation = float(np.nanmean(store.column("elevation_deg", arc.record_indices)))
            result.mean_azimuth = float(np.nanmean(store.column("azimuth_deg", arc.record_indices)))
            times = np.sort(store.times(arc.record_indices))
            result.median_time = int(times[len(times) // 2])

        periodogram, issue = estimate_arc_periodogram(arc, store, self.heights, self.config)
        if issue is not None and issue not in result.issues:
            result.issues.append(issue)
        if periodogram is None:
            return result

        result.periodogram = periodogram
        result.sample_count = periodogram.sample_count
        peak = select_peak(periodogram)
        if peak is not None:
            result.peak_height, result.peak_power = peak
            logger.info(
                f"Arc {arc.satellite_id}: peak height {result.peak_height:.3f} m "
                f"(power {result.peak_power:.4f}) at mean elev {result.mean_elevation:.2f}, "
                f"azim {result.mean_azimuth:.2f}, median time {result.median_time}, "
                f"{result.sample_count} samples")
        return result

    def process(self, store: ObservationStore) -> SessionResult:
        """
        Estimate the reflector height of a session

        The store's elevation, azimuth and SNR values are rewritten in place.

        Returns:
        --------
        result : SessionResult
            Session estimate and one ArcResult per arc
        """
        arcs = self.segment(store)
        issues = self.correct(arcs, store)

        with log_duration(logger, "Frequency analysis"):
            results = [self.analyze_arc(i, arc, store, found)
                       for i, (arc, found) in enumerate(zip(arcs, issues))]

        heights = [r.peak_height for r in results if r.has_height]
        estimate = resolve_height(heights)
        skipped = len(results) - len(heights)
        logger.info(
            f"Reflector height {estimate.mean_height_m:.3f} +/- {estimate.stddev_m:.3f} m "
            f"from {estimate.contributing_arcs} arcs ({skipped} skipped)")
        return SessionResult(estimate, results)


def estimate_reflector_height(store: ObservationStore, config: GnssIrConfig) -> SessionResult:
    """Run a full session with a fresh :class:`GnssIrProcessor`"""
    return GnssIrProcessor(config).process(store)
