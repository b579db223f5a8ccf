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
Least-Squares Polynomial Fitting
================================

Bounded-degree polynomial fit of noisy, possibly non-finite samples with
an explicit fallback for degenerate input. Two interchangeable backends:

- ``gauss``: normal equations solved by Gaussian elimination with partial
  pivoting, compiled with numba (no temporaries beyond the small system)
- ``lstsq``: ``scipy.linalg.lstsq`` on the Vandermonde matrix

Times are mapped onto [-1, 1] before fitting; the returned
:class:`PolynomialFit` applies the same mapping when evaluated.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

import numpy as np
from numba import njit
from scipy import linalg

from ..core.config import Precision
from ..core.constants import EPS_PIVOT

logger = logging.getLogger(__name__)

# Relative pivot tolerance for single precision kernels
EPS_PIVOT_SINGLE = 1e-5


@dataclass(frozen=True)
class PolynomialFit:
    """Polynomial in normalized time ``u = (t - offset) / scale``.

    Attributes
    ----------
    coefficients : np.ndarray
        Coefficients in ascending powers of ``u``
    offset, scale : float
        Time normalization
    degenerate : bool
        True when the system was singular and a constant (mean) trend
        was substituted
    """
    coefficients: np.ndarray
    offset: float
    scale: float
    degenerate: bool = False

    @property
    def degree(self) -> int:
        return len(self.coefficients) - 1

    def __call__(self, t) -> np.ndarray:
        u = (np.asarray(t, dtype=np.float64) - self.offset) / self.scale
        return np.polynomial.polynomial.polyval(u, self.coefficients)


@njit(cache=True)
def _normal_equations(u, y, m):
    """Augmented normal matrix [V^T V | V^T y] for m coefficients"""
    a = np.zeros((m, m + 1), dtype=u.dtype)
    powers = np.empty(2 * m - 1, dtype=u.dtype)
    for k in range(u.shape[0]):
        p = 1.0
        for j in range(2 * m - 1):
            powers[j] = p
            p *= u[k]
        for r in range(m):
            for c in range(m):
                a[r, c] += powers[r + c]
            a[r, m] += powers[r] * y[k]
    return a


@njit(cache=True)
def _gauss_solve(a, eps):
    """Solve an augmented m x (m+1) system in place.

    Returns (solution, ok); ok is False when a pivot falls below
    ``eps`` times the largest diagonal entry.
    """
    m = a.shape[0]
    coeffs = np.zeros(m, dtype=a.dtype)

    ref = 0.0
    for r in range(m):
        ref = max(ref, float(abs(a[r, r])))
    tol = eps * max(ref, 1.0)

    for col in range(m):
        pivot = col
        best = abs(a[col, col])
        for r in range(col + 1, m):
            if abs(a[r, col]) > best:
                best = abs(a[r, col])
                pivot = r
        if best < tol:
            return coeffs, False
        if pivot != col:
            for c in range(m + 1):
                tmp = a[col, c]
                a[col, c] = a[pivot, c]
                a[pivot, c] = tmp
        for r in range(col + 1, m):
            factor = a[r, col] / a[col, col]
            for c in range(col, m + 1):
                a[r, c] -= factor * a[col, c]

    for r in range(m - 1, -1, -1):
        acc = a[r, m]
        for c in range(r + 1, m):
            acc -= a[r, c] * coeffs[c]
        coeffs[r] = acc / a[r, r]
    return coeffs, True


def _fit_gauss(u: np.ndarray, y: np.ndarray, degree: int,
               precision: Precision) -> Tuple[np.ndarray, bool]:
    eps = EPS_PIVOT if precision is Precision.DOUBLE else EPS_PIVOT_SINGLE
    a = _normal_equations(u, y, degree + 1)
    return _gauss_solve(a, precision.dtype.type(eps))


def _fit_lstsq(u: np.ndarray, y: np.ndarray, degree: int,
               precision: Precision) -> Tuple[np.ndarray, bool]:
    vander = np.vander(u, degree + 1, increasing=True)
    coeffs, _, rank, _ = linalg.lstsq(vander, y)
    return coeffs, rank == degree + 1


BACKENDS: Dict[str, Callable[..., Tuple[np.ndarray, bool]]] = {
    "gauss": _fit_gauss,
    "lstsq": _fit_lstsq,
}


def fit_polynomial(times, values, degree: int, backend: str = "gauss",
                   precision: Precision = Precision.DOUBLE) -> Optional[PolynomialFit]:
    """
    Least-squares polynomial fit of ``values`` over ``times``

    Parameters:
    -----------
    times : array_like
        Sample times
    values : array_like
        Samples; pairs where either value is non-finite are ignored
    degree : int
        Requested degree, lowered to ``valid_points - 1`` when fewer
        samples are available
    backend : str
        ``"gauss"`` or ``"lstsq"``
    precision : Precision
        Float width of the fit

    Returns:
    --------
    fit : Optional[PolynomialFit]
        None if there is no valid sample. A singular system yields a
        constant fit at the mean of the valid samples, flagged degenerate.
    """
    try:
        solve = BACKENDS[backend]
    except KeyError:
        raise ValueError(f"Unknown fit backend: {backend}") from None
    if degree < 0:
        raise ValueError(f"degree must be non-negative, got {degree}")

    t = np.asarray(times, dtype=np.float64)
    y = np.asarray(values, dtype=np.float64)
    if t.shape != y.shape:
        raise ValueError(f"times and values differ in shape: {t.shape} vs {y.shape}")

    valid = np.isfinite(t) & np.isfinite(y)
    n_valid = int(np.count_nonzero(valid))
    if n_valid == 0:
        return None
    t = t[valid]
    y = y[valid]

    degree = min(degree, n_valid - 1)
    t_min, t_max = t.min(), t.max()
    offset = 0.5 * (t_min + t_max)
    half_span = 0.5 * (t_max - t_min)
    scale = half_span if half_span > 0 else 1.0

    dtype = precision.dtype
    u = ((t - offset) / scale).astype(dtype)
    coeffs, ok = solve(u, y.astype(dtype), degree, precision)
    coeffs = np.asarray(coeffs, dtype=np.float64)

    if not ok or not np.all(np.isfinite(coeffs)):
        logger.debug(f"Singular degree-{degree} fit over {n_valid} samples, using mean")
        return PolynomialFit(np.array([y.mean()]), offset, scale, degenerate=True)

    return PolynomialFit(coeffs, offset, scale)
