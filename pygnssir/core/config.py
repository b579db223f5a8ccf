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
GNSS-IR Session Configuration
=============================

Explicit configuration passed to every processing stage. Site bounds,
the candidate height grid, numeric precision and buffer policy all live
here; the algorithms themselves carry no site defaults.
"""

import logging
from dataclasses import asdict, dataclass, fields
from enum import Enum
from typing import Any, Dict, Mapping, Optional

import numpy as np

from .constants import DEFAULT_POLY_DEGREE, EPS_DC_DOUBLE, EPS_DC_SINGLE, PARALLEL_THRESHOLD

logger = logging.getLogger(__name__)

__all__ = ['ConfigurationError', 'Precision', 'FIT_BACKENDS', 'GnssIrConfig', 'PRESETS']


class ConfigurationError(ValueError):
    """Invalid session configuration. Fatal at startup."""


class Precision(Enum):
    """Numeric precision of the fitting and spectral kernels"""
    DOUBLE = "double"
    SINGLE = "single"

    @property
    def dtype(self) -> np.dtype:
        return np.dtype(np.float64) if self is Precision.DOUBLE else np.dtype(np.float32)

    @property
    def eps(self) -> float:
        """Frequencies below this magnitude have zero power"""
        return EPS_DC_DOUBLE if self is Precision.DOUBLE else EPS_DC_SINGLE


FIT_BACKENDS = ("gauss", "lstsq")


@dataclass
class GnssIrConfig:
    """Configuration of one GNSS-IR analysis session.

    Attributes
    ----------
    min_elevation, max_elevation : float
        Accepted elevation window (degrees)
    min_azimuth, max_azimuth : float
        Accepted azimuth window (degrees)
    min_height, max_height : float
        Candidate reflector height range (m)
    step_size : float
        Spacing of the candidate height grid (m)
    poly_degree : int
        Degree of the trajectory and SNR trend polynomials
    precision : Precision
        Float width used by the kernels
    fit_backend : str
        ``"gauss"`` (normal equations) or ``"lstsq"`` (scipy)
    store_capacity : Optional[int]
        None for a growable observation store, otherwise a fixed capacity
    parallel_threshold : int
        Grid length from which frequencies are evaluated in parallel
    """
    min_elevation: float = 1.0
    max_elevation: float = 10.0
    min_azimuth: float = 0.0
    max_azimuth: float = 360.0
    min_height: float = 5.0
    max_height: float = 30.0
    step_size: float = 0.05
    poly_degree: int = DEFAULT_POLY_DEGREE
    precision: Precision = Precision.DOUBLE
    fit_backend: str = "gauss"
    store_capacity: Optional[int] = None
    parallel_threshold: int = PARALLEL_THRESHOLD

    def __post_init__(self):
        if isinstance(self.precision, str):
            try:
                self.precision = Precision(self.precision.lower())
            except ValueError:
                raise ConfigurationError(f"Unknown precision: {self.precision}") from None
        self.validate()

    def validate(self) -> None:
        """Check bounds and raise ConfigurationError on the first problem"""
        values = (self.min_elevation, self.max_elevation, self.min_azimuth,
                  self.max_azimuth, self.min_height, self.max_height, self.step_size)
        if not all(np.isfinite(v) for v in values):
            raise ConfigurationError("Configuration bounds must be finite")
        if self.max_elevation <= self.min_elevation:
            raise ConfigurationError(
                f"max_elevation ({self.max_elevation}) must exceed min_elevation ({self.min_elevation})")
        if self.min_elevation < -90.0 or self.max_elevation > 90.0:
            raise ConfigurationError("Elevation bounds must lie within [-90, 90] degrees")
        if self.max_azimuth < self.min_azimuth:
            raise ConfigurationError(
                f"max_azimuth ({self.max_azimuth}) is below min_azimuth ({self.min_azimuth})")
        if self.max_height <= self.min_height:
            raise ConfigurationError(
                f"max_height ({self.max_height}) must exceed min_height ({self.min_height})")
        if self.step_size <= 0:
            raise ConfigurationError(f"step_size must be positive, got {self.step_size}")
        if self.poly_degree < 0:
            raise ConfigurationError(f"poly_degree must be non-negative, got {self.poly_degree}")
        if not isinstance(self.precision, Precision):
            raise ConfigurationError(f"Unknown precision: {self.precision}")
        if self.fit_backend not in FIT_BACKENDS:
            raise ConfigurationError(
                f"Unknown fit backend: {self.fit_backend}. Use one of {FIT_BACKENDS}")
        if self.store_capacity is not None and self.store_capacity <= 0:
            raise ConfigurationError(f"store_capacity must be positive, got {self.store_capacity}")
        if self.parallel_threshold < 1:
            raise ConfigurationError("parallel_threshold must be at least 1")

    def height_grid(self) -> np.ndarray:
        """Candidate reflector heights, ``min_height`` first.

        ``ceil((max - min) / step)`` points; each is computed from its index
        rather than by accumulation so the last point does not drift.
        """
        n_steps = int(np.ceil((self.max_height - self.min_height) / self.step_size))
        grid = self.min_height + self.step_size * np.arange(n_steps, dtype=np.float64)
        return grid.astype(self.precision.dtype)

    def elevation_allowed(self, elevation: float) -> bool:
        return self.min_elevation <= elevation <= self.max_elevation

    def azimuth_allowed(self, azimuth: float) -> bool:
        return self.min_azimuth <= azimuth <= self.max_azimuth

    def accepts(self, elevation: float, azimuth: float) -> bool:
        """True when a sample falls inside the elevation and azimuth windows"""
        return self.elevation_allowed(elevation) and self.azimuth_allowed(azimuth)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["precision"] = self.precision.value
        return data

    @classmethod
    def from_dict(cls, config: Mapping[str, Any]) -> "GnssIrConfig":
        """Build a configuration from a mapping, ignoring unknown keys"""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(config) - known)
        if unknown:
            logger.warning(f"Ignoring unknown configuration keys: {', '.join(unknown)}")
        return cls(**{k: v for k, v in config.items() if k in known})

    @classmethod
    def preset(cls, name: str, **overrides) -> "GnssIrConfig":
        """Configuration for a named deployment, optionally overridden"""
        try:
            base = PRESETS[name]
        except KeyError:
            raise ConfigurationError(
                f"Unknown preset: {name}. Available: {', '.join(sorted(PRESETS))}") from None
        data = dict(base)
        data.update(overrides)
        return cls.from_dict(data)


# Deployment presets
PRESETS: Dict[str, Dict[str, Any]] = {
    # Desktop batch analysis of a full NMEA log, all azimuths
    "batch": {
        "min_elevation": 1.0,
        "max_elevation": 10.0,
        "min_azimuth": 0.0,
        "max_azimuth": 360.0,
        "min_height": 5.0,
        "max_height": 30.0,
        "step_size": 0.05,
    },
    # Field site looking over open water to the west
    "sector": {
        "min_elevation": 5.0,
        "max_elevation": 30.0,
        "min_azimuth": 240.0,
        "max_azimuth": 320.0,
        "min_height": 5.0,
        "max_height": 18.0,
        "step_size": 0.05,
    },
    # Embedded compute node: single precision, fixed-size buffers
    "embedded": {
        "min_elevation": 5.0,
        "max_elevation": 30.0,
        "min_azimuth": 240.0,
        "max_azimuth": 320.0,
        "min_height": 5.0,
        "max_height": 18.0,
        "step_size": 0.05,
        "precision": "single",
        "store_capacity": 4096,
    },
}
