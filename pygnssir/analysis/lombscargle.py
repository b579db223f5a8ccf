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
Lomb-Scargle Spectral Estimator
===============================

Unweighted Lomb-Scargle periodogram (Scargle 1982 normalization) for
unevenly sampled SNR residuals, and the mapping from a satellite arc to
power over candidate reflector heights.

With ``x = sin(elevation) / (lambda / 2)`` the oscillation frequency along
``x`` equals the reflector height in metres, so the frequency grid is the
height grid.

References:
    Scargle, J. D. (1982). Studies in astronomical time series analysis. II.
    Statistical aspects of spectral analysis of unevenly spaced data.
    ApJ 263, 835-853.
"""

import logging
from typing import Optional, Tuple

import numpy as np
from numba import njit, prange

from ..core.config import GnssIrConfig, Precision
from ..core.constants import (
    EPS_SPAN,
    HALF_WAVELENGTH_L1,
    MIN_ARC_POINTS,
    PARALLEL_THRESHOLD,
    TWO_PI,
)
from ..core.data_structures import Arc, ArcIssue, Periodogram
from ..core.store import ObservationStore

logger = logging.getLogger(__name__)

# Kernels are compiled without fastmath: reassociation would cancel the
# compensation terms of the Kahan sums.


@njit(cache=True)
def _kahan_add(total, comp, value):
    y = value - comp
    t = total + y
    comp = (t - total) - y
    return t, comp


@njit(cache=True)
def _compensated_mean(y):
    total = 0.0
    comp = 0.0
    for i in range(y.shape[0]):
        total, comp = _kahan_add(total, comp, y[i])
    return total / y.shape[0]


@njit(cache=True)
def _power_at(x, y, f, eps):
    """Power of mean-centred ``y`` at a single frequency ``f``"""
    if abs(f) < eps:
        return 0.0
    omega = TWO_PI * f

    # Pass 1: tau from sums of sin(2wt), cos(2wt) via double-angle identities
    s2 = 0.0
    c2 = 0.0
    cs2 = 0.0
    cc2 = 0.0
    for i in range(x.shape[0]):
        a = omega * x[i]
        s = np.sin(a)
        c = np.cos(a)
        s2, cs2 = _kahan_add(s2, cs2, 2.0 * s * c)
        c2, cc2 = _kahan_add(c2, cc2, c * c - s * s)
    omega_tau = 0.5 * np.arctan2(s2, c2)
    s_tau = np.sin(omega_tau)
    c_tau = np.cos(omega_tau)

    # Pass 2: sums at t - tau, rotated with angle-subtraction identities
    yc = 0.0
    ys = 0.0
    cyc = 0.0
    cys = 0.0
    cc = 0.0
    ss = 0.0
    for i in range(x.shape[0]):
        a = omega * x[i]
        s = np.sin(a)
        c = np.cos(a)
        s_shift = s * c_tau - c * s_tau
        c_shift = c * c_tau + s * s_tau
        yc, cyc = _kahan_add(yc, cyc, y[i] * c_shift)
        ys, cys = _kahan_add(ys, cys, y[i] * s_shift)
        # non-negative terms, no compensation needed
        cc += c_shift * c_shift
        ss += s_shift * s_shift

    pc = yc * yc / cc if cc > eps else 0.0
    ps = ys * ys / ss if ss > eps else 0.0
    return 0.5 * (pc + ps)


@njit(cache=True)
def _periodogram_serial(x, y, frequencies, eps, out):
    for k in range(out.shape[0]):
        out[k] = _power_at(x, y, frequencies[k], eps)


@njit(cache=True, parallel=True)
def _periodogram_parallel(x, y, frequencies, eps, out):
    # each slot is written by exactly one iteration
    for k in prange(out.shape[0]):
        out[k] = _power_at(x, y, frequencies[k], eps)


def lombscargle(x, y, frequencies, precision: Precision = Precision.DOUBLE,
                out: Optional[np.ndarray] = None,
                parallel_threshold: int = PARALLEL_THRESHOLD) -> np.ndarray:
    """
    Lomb-Scargle power of ``y`` sampled at ``x``

    Parameters:
    -----------
    x : array_like
        Sample abscissae
    y : array_like
        Samples, same length as ``x``. Pairs with a non-finite member are
        dropped; the rest are mean-centred with a compensated sum.
    frequencies : array_like
        Frequencies in cycles per unit of ``x``
    precision : Precision
        Float width of the computation
    out : Optional[np.ndarray]
        Preallocated output; the first ``min(len(frequencies), len(out))``
        entries are written and ``out`` is returned
    parallel_threshold : int
        Grids at least this long are evaluated across threads. Results do
        not depend on the choice.

    Returns:
    --------
    power : np.ndarray
        Power aligned with ``frequencies``; zeros if no pair is usable
    """
    dtype = precision.dtype
    x = np.asarray(x, dtype=dtype)
    y = np.asarray(y, dtype=dtype)
    if x.shape != y.shape or x.ndim != 1:
        raise ValueError(f"x and y must be 1-D of equal length, got {x.shape} and {y.shape}")
    frequencies = np.ascontiguousarray(frequencies, dtype=dtype)

    if out is None:
        out = np.zeros(len(frequencies), dtype=dtype)
        target = out
    else:
        if out.ndim != 1:
            raise ValueError("out must be 1-D")
        target = out[:min(len(frequencies), len(out))]
    frequencies = frequencies[:len(target)]

    valid = np.isfinite(x) & np.isfinite(y)
    if not np.any(valid) or len(target) == 0:
        target[:] = 0.0
        return out

    xt = np.ascontiguousarray(x[valid])
    yt = np.ascontiguousarray(y[valid])
    yt = (yt - _compensated_mean(yt)).astype(dtype, copy=False)

    eps = dtype.type(precision.eps)
    result = np.empty(len(target), dtype=dtype)
    if len(target) < parallel_threshold:
        _periodogram_serial(xt, yt, frequencies, eps, result)
    else:
        _periodogram_parallel(xt, yt, frequencies, eps, result)
    target[:] = result
    return out


def elevation_to_x(elevation_deg) -> np.ndarray:
    """sin(elevation) in units of half an L1 wavelength"""
    return np.sin(np.radians(np.asarray(elevation_deg, dtype=np.float64))) / HALF_WAVELENGTH_L1


def arc_samples(arc: Arc, store: ObservationStore) -> Tuple[np.ndarray, np.ndarray]:
    """Finite ``(x, y)`` pairs of an arc, sorted by ``x``"""
    x = elevation_to_x(store.column("elevation_deg", arc.record_indices))
    y = store.column("snr", arc.record_indices)
    valid = np.isfinite(x) & np.isfinite(y)
    x = x[valid]
    y = y[valid]
    order = np.argsort(x, kind="stable")
    return x[order], y[order]


def estimate_arc_periodogram(arc: Arc, store: ObservationStore, heights: np.ndarray,
                             config: GnssIrConfig) -> Tuple[Optional[Periodogram], Optional[ArcIssue]]:
    """
    Periodogram of one arc over candidate reflector heights

    Returns:
    --------
    periodogram : Optional[Periodogram]
        None when the arc is skipped
    issue : Optional[ArcIssue]
        Why the arc was skipped, or NON_FINITE_SAMPLE if samples were
        dropped but the arc was still usable
    """
    n = len(arc.record_indices)
    if n < MIN_ARC_POINTS:
        logger.warning(f"Arc {arc.satellite_id}: too few points (n={n}), skipping")
        return None, ArcIssue.INSUFFICIENT_DATA

    x, y = arc_samples(arc, store)
    issue = None
    if len(x) < n:
        logger.debug(f"Arc {arc.satellite_id}: dropped {n - len(x)} non-finite samples")
        issue = ArcIssue.NON_FINITE_SAMPLE
    if len(x) < MIN_ARC_POINTS:
        logger.warning(f"Arc {arc.satellite_id}: insufficient valid points after filtering")
        return None, ArcIssue.INSUFFICIENT_DATA

    span = x[-1] - x[0]
    if not np.isfinite(span) or span <= EPS_SPAN:
        logger.warning(f"Arc {arc.satellite_id}: span too small ({span:.3e}), skipping")
        return None, ArcIssue.DEGENERATE_SPAN

    logger.trace(
        f"Arc {arc.satellite_id}: n={len(x)} x [{x[0]:.5f}, {x[-1]:.5f}] n_freq={len(heights)}")
    power = lombscargle(x, y, heights, precision=config.precision,
                        parallel_threshold=config.parallel_threshold)
    return Periodogram(arc.satellite_id, np.asarray(heights), power, len(x)), issue
