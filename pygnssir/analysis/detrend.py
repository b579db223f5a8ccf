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

"""SNR detrending.

The direct signal's slow amplitude trend (antenna gain pattern, receiver
AGC) is removed so that only the multipath oscillation remains.
"""

import logging
from typing import List

import numpy as np

from ..core.config import GnssIrConfig
from ..core.data_structures import Arc, ArcIssue
from ..core.store import ObservationStore
from .polyfit import fit_polynomial

logger = logging.getLogger(__name__)


def detrend_arc_snr(arc: Arc, store: ObservationStore,
                    config: GnssIrConfig) -> List[ArcIssue]:
    """
    Replace each SNR of the arc by its residual from a polynomial trend in time

    On a singular fit the trend is the mean of the finite samples, so the
    residual is the raw value minus its mean. Non-finite samples stay
    non-finite and are dropped later by the estimator.

    Returns:
    --------
    issues : List[ArcIssue]
        Degeneracies met and recovered from
    """
    if not arc.record_indices:
        return []

    issues: List[ArcIssue] = []
    times = store.times(arc.record_indices).astype(np.float64)
    snr = store.column("snr", arc.record_indices)
    if not np.all(np.isfinite(snr)):
        logger.debug(f"Arc {arc.satellite_id}: dropping non-finite SNR samples from trend")
        issues.append(ArcIssue.NON_FINITE_SAMPLE)

    trend = fit_polynomial(times, snr, config.poly_degree,
                           backend=config.fit_backend, precision=config.precision)
    if trend is None:
        logger.warning(f"Arc {arc.satellite_id}: no finite SNR samples, left unchanged")
        issues.append(ArcIssue.DEGENERATE_FIT)
        return issues
    if trend.degenerate:
        logger.warning(f"Arc {arc.satellite_id}: singular SNR trend, removing mean only")
        issues.append(ArcIssue.DEGENERATE_FIT)

    store.set_column("snr", arc.record_indices, snr - trend(times))
    return issues
