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

"""Reflector height selection and session aggregation"""

import logging
from typing import Optional, Sequence, Tuple

import numpy as np

from ..core.constants import IQR_FACTOR, MIN_IQR_SAMPLES
from ..core.data_structures import HeightEstimate, Periodogram

logger = logging.getLogger(__name__)


def select_peak(periodogram: Periodogram) -> Optional[Tuple[float, float]]:
    """Height and power of the maximum; the smallest height wins ties"""
    return periodogram.peak()


def iqr_filter(values: Sequence[float], factor: float = IQR_FACTOR) -> np.ndarray:
    """
    Drop outliers outside ``[Q1 - factor*IQR, Q3 + factor*IQR]``

    Quartiles are taken positionally from the sorted values without
    interpolation: ``Q1 = sorted[n // 4]``, ``Q3 = sorted[3n // 4]``.
    Fewer than four values are returned unfiltered.

    Returns:
    --------
    retained : np.ndarray
        Retained values in their original order
    """
    values = np.asarray(values, dtype=np.float64)
    n = len(values)
    if n < MIN_IQR_SAMPLES:
        return values

    ordered = np.sort(values)
    q1 = ordered[n // 4]
    q3 = ordered[(3 * n) // 4]
    iqr = q3 - q1
    lower = q1 - factor * iqr
    upper = q3 + factor * iqr
    keep = (values >= lower) & (values <= upper)
    if not np.all(keep):
        logger.info(f"Rejected {n - int(np.count_nonzero(keep))} outlier heights "
                    f"outside [{lower:.3f}, {upper:.3f}] m")
    return values[keep]


def resolve_height(heights: Sequence[float]) -> HeightEstimate:
    """
    Aggregate per-arc heights into the session estimate

    Mean of the IQR-retained heights with the sample standard deviation
    (``n - 1``; zero for a single value). Non-finite heights are ignored.
    """
    heights = np.asarray(heights, dtype=np.float64)
    heights = heights[np.isfinite(heights)]
    if len(heights) == 0:
        logger.warning("No arc produced a reflector height")
        return HeightEstimate(float("nan"), 0.0, 0)

    retained = iqr_filter(heights)
    n = len(retained)
    mean = float(np.mean(retained))
    std = float(np.std(retained, ddof=1)) if n >= 2 else 0.0
    return HeightEstimate(mean, std, n)
