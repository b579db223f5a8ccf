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

"""Trajectory smoothing of satellite elevation and azimuth along an arc.

Reported angles are quantized to whole degrees. Satellite geometry is
smooth over an arc, so each angle is replaced by a low-order polynomial
trend in time evaluated at the sample's own epoch.
"""

import logging
from typing import List

import numpy as np

from ..core.config import GnssIrConfig
from ..core.data_structures import Arc, ArcIssue
from ..core.store import ObservationStore
from .polyfit import fit_polynomial

logger = logging.getLogger(__name__)


def _smooth_column(arc: Arc, store: ObservationStore, column: str,
                   times: np.ndarray, config: GnssIrConfig) -> List[ArcIssue]:
    issues: List[ArcIssue] = []
    values = store.column(column, arc.record_indices)
    if not np.all(np.isfinite(values)):
        logger.debug(f"Arc {arc.satellite_id}: dropping non-finite {column} samples from fit")
        issues.append(ArcIssue.NON_FINITE_SAMPLE)

    fit = fit_polynomial(times, values, config.poly_degree,
                         backend=config.fit_backend, precision=config.precision)
    if fit is None:
        logger.warning(f"Arc {arc.satellite_id}: no finite {column} samples, left unchanged")
        issues.append(ArcIssue.DEGENERATE_FIT)
        return issues
    if fit.degenerate:
        logger.warning(f"Arc {arc.satellite_id}: singular {column} fit, using constant trend")
        issues.append(ArcIssue.DEGENERATE_FIT)

    store.set_column(column, arc.record_indices, fit(times))
    return issues


def smooth_arc_trajectory(arc: Arc, store: ObservationStore,
                          config: GnssIrConfig) -> List[ArcIssue]:
    """
    Replace elevation and azimuth of an arc's records by their polynomial trend

    Both angles are fitted independently against time with the configured
    degree and written back in place. Applying this twice leaves the values
    of the first pass unchanged.

    Parameters:
    -----------
    arc : Arc
        Arc whose records are smoothed
    store : ObservationStore
        Store owning the records
    config : GnssIrConfig
        Supplies degree, backend and precision

    Returns:
    --------
    issues : List[ArcIssue]
        Degeneracies met and recovered from
    """
    if not arc.record_indices:
        return []
    times = store.times(arc.record_indices).astype(np.float64)
    issues = _smooth_column(arc, store, "elevation_deg", times, config)
    issues += _smooth_column(arc, store, "azimuth_deg", times, config)
    return list(dict.fromkeys(issues))
