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

"""GNSS-IR analysis stages and the session processor"""

from .arcs import find_arcs, split_arcs
from .polyfit import PolynomialFit, fit_polynomial
from .smoothing import smooth_arc_trajectory
from .detrend import detrend_arc_snr
from .lombscargle import (
    arc_samples,
    elevation_to_x,
    estimate_arc_periodogram,
    lombscargle,
)
from .height import iqr_filter, resolve_height, select_peak
from .pipeline import (
    ArcResult,
    GnssIrProcessor,
    SessionResult,
    estimate_reflector_height,
)

__all__ = [
    'find_arcs', 'split_arcs',
    'PolynomialFit', 'fit_polynomial',
    'smooth_arc_trajectory', 'detrend_arc_snr',
    'arc_samples', 'elevation_to_x', 'estimate_arc_periodogram', 'lombscargle',
    'iqr_filter', 'resolve_height', 'select_peak',
    'ArcResult', 'GnssIrProcessor', 'SessionResult', 'estimate_reflector_height',
]
