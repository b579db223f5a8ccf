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

"""Core data structures for GNSS-IR processing"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Tuple

import numpy as np

from .constants import TIME_UNSET


class Constellation(Enum):
    """Satellite constellations as numbered on the wire.

    The value is the 2-bit code used by the packed link-layer format;
    ``UNKNOWN`` never appears on the wire.
    """
    GPS = 0
    GALILEO = 1
    BEIDOU = 2
    GLONASS = 3
    UNKNOWN = 4

    @classmethod
    def from_code(cls, code: int) -> "Constellation":
        try:
            return cls(code)
        except ValueError:
            return cls.UNKNOWN

    @classmethod
    def from_talker(cls, talker: str) -> "Constellation":
        """Map an NMEA talker id (``GP``, ``GA``, ``GB``, ``GL``) to a constellation"""
        return _TALKERS.get(talker, cls.UNKNOWN)


_TALKERS = {
    "GP": Constellation.GPS,
    "GA": Constellation.GALILEO,
    "GB": Constellation.BEIDOU,
    "GL": Constellation.GLONASS,
}


class Band(Enum):
    """Signal band. The value is the code used in observation ids."""
    L1 = 0
    L5 = 1
    UNKNOWN = 2

    @classmethod
    def from_code(cls, code: int) -> "Band":
        try:
            return cls(code)
        except ValueError:
            return cls.UNKNOWN


class ArcIssue(Enum):
    """Recoverable degeneracies reported for a single arc.

    None of these abort a session; they only reduce the number of arcs
    contributing to the final estimate.
    """
    INSUFFICIENT_DATA = "insufficient_data"
    DEGENERATE_FIT = "degenerate_fit"
    NON_FINITE_SAMPLE = "non_finite_sample"
    DEGENERATE_SPAN = "degenerate_span"


def make_observation_id(constellation: Constellation, band: Band, satellite: int) -> int:
    """Composite identity of a tracked signal.

    ``(constellation + 1) * 10000 + band * 1000 + satellite`` so that e.g.
    GPS L1 PRN 1 becomes 10001 and Galileo L5 E12 becomes 21012.
    """
    return (constellation.value + 1) * 10000 + band.value * 1000 + int(satellite)


@dataclass
class Observation:
    """Elevation, azimuth and SNR of one satellite signal at one epoch.

    Attributes
    ----------
    id : int
        Composite signal id, see :func:`make_observation_id`
    satellite : int
        Satellite number within its constellation
    constellation : Constellation
        Satellite system
    band : Band
        Signal band
    elevation_deg : float
        Elevation angle in degrees
    azimuth_deg : float
        Azimuth angle in degrees
    snr : float
        Signal-to-noise ratio (dB-Hz); replaced by the detrended residual
        once the arc has been processed
    time_s : int
        Seconds of day of the most recent fix, ``TIME_UNSET`` before any fix

    Notes
    -----
    ``id``, ``satellite`` and ``time_s`` are fixed once created, the
    geometry and SNR are rewritten in place by the smoother and detrender.
    """
    id: int
    satellite: int
    constellation: Constellation
    band: Band
    elevation_deg: float
    azimuth_deg: float
    snr: float
    time_s: int = TIME_UNSET

    @classmethod
    def create(cls, satellite: int, constellation: Constellation, band: Band,
               elevation_deg: float, azimuth_deg: float, snr: float,
               time_s: int = TIME_UNSET) -> "Observation":
        """Build an observation and derive its composite id"""
        return cls(
            id=make_observation_id(constellation, band, satellite),
            satellite=int(satellite),
            constellation=constellation,
            band=band,
            elevation_deg=float(elevation_deg),
            azimuth_deg=float(azimuth_deg),
            snr=float(snr),
            time_s=int(time_s),
        )

    @property
    def has_time(self) -> bool:
        return self.time_s != TIME_UNSET


@dataclass
class Arc:
    """Contiguous run of observations of one signal.

    Holds indices into an :class:`~pygnssir.core.store.ObservationStore`,
    never copies, ordered by ascending time.
    """
    satellite_id: int
    time_start: int
    time_end: int
    record_indices: List[int] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.record_indices)

    @property
    def duration(self) -> int:
        return self.time_end - self.time_start


@dataclass
class Periodogram:
    """Lomb-Scargle power over candidate reflector heights for one arc"""
    satellite_id: int
    heights: np.ndarray
    power: np.ndarray
    sample_count: int

    def __len__(self) -> int:
        return len(self.heights)

    def __iter__(self) -> Iterator[Tuple[float, float]]:
        for height, power in zip(self.heights, self.power):
            yield float(height), float(power)

    def peak(self) -> Optional[Tuple[float, float]]:
        """Height and power of the strongest grid point.

        Among equal maxima the smallest height wins.
        """
        if len(self.power) == 0:
            return None
        power = np.asarray(self.power, dtype=np.float64)
        best = np.nanmax(power) if np.any(np.isfinite(power)) else np.nan
        if not np.isfinite(best):
            return None
        candidates = np.flatnonzero(power == best)
        heights = np.asarray(self.heights, dtype=np.float64)[candidates]
        k = candidates[np.argmin(heights)]
        return float(self.heights[k]), float(self.power[k])


@dataclass(frozen=True)
class HeightEstimate:
    """Session-level reflector height"""
    mean_height_m: float
    stddev_m: float
    contributing_arcs: int

    @property
    def is_valid(self) -> bool:
        return self.contributing_arcs > 0 and np.isfinite(self.mean_height_m)
