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

"""GNSS-IR Constants and Processing Parameters"""

import numpy as np

# Physical Constants
CLIGHT = 299792458.0  # speed of light (m/s)

# GPS frequencies
FREQ_L1 = 1.57542E9   # L1 frequency (Hz)
FREQ_L5 = 1.17645E9   # L5 frequency (Hz)

# Carrier wavelengths
WAVELENGTH_L1 = CLIGHT / FREQ_L1  # ~0.1903 m
WAVELENGTH_L5 = CLIGHT / FREQ_L5  # ~0.2548 m

# sin(elevation) is divided by half a wavelength so that the oscillation
# frequency along x reads directly as reflector height in metres
HALF_WAVELENGTH_L1 = WAVELENGTH_L1 / 2.0

TWO_PI = 2.0 * np.pi

# ============================================================================
# ARC SEGMENTATION
# ============================================================================
ARC_GAP_SECONDS = 120  # max gap inside one satellite arc (s)
SECONDS_PER_DAY = 86400

# Time stamp of observations seen before the first fix sentence (i64 max)
TIME_UNSET = np.iinfo(np.int64).max

# ============================================================================
# NUMERICAL THRESHOLDS
# ============================================================================
EPS_DC_DOUBLE = 1e-15    # near-DC frequency cut-off, float64
EPS_DC_SINGLE = 1e-7     # near-DC frequency cut-off, float32
EPS_PIVOT = 1e-12        # singular pivot in the normal equations
EPS_SPAN = 1e-9          # minimum span of the sin(elevation) axis
MIN_ARC_POINTS = 3       # fewest usable samples for a periodogram
MIN_IQR_SAMPLES = 4      # fewest arc heights before outlier rejection
IQR_FACTOR = 1.5

DEFAULT_POLY_DEGREE = 3
PARALLEL_THRESHOLD = 256  # grid length from which frequencies are fanned out
