# rtarima/utils/statistics.py
"""
Numeric primitives used by estimation and diagnostics.

Functions:
    mean: Arithmetic mean (0 for an empty series)
    variance: Sample variance with divisor n - 1
    standard_deviation: Square root of the sample variance
    autocorrelation: Memoized sample autocorrelation at one lag
    partial_autocorrelation: Memoized Yule-Walker partial autocorrelations
    solve_linear_system: Gaussian elimination with partial pivoting
    least_squares: Ordinary least squares through the normal equations
    akaike / bayesian: Information criteria
    get_z_score: Two-sided normal quantile from a confidence level
    compose / create_stats_pipeline: Function combinators
"""

import functools
import logging
import math
from typing import Any, Callable, List, Sequence

import numpy as np
from numba import jit

from rtarima.core.config import get_numerical_config
from rtarima.core.exceptions import InvalidSampleSizeError, SingularMatrixError, raise_data_error
from rtarima.core.types import Matrix, SeriesLike, Vector
from rtarima.core.validation import as_series, validate_confidence_level, validate_integer
from rtarima.utils.caching import memoize

logger = logging.getLogger("rtarima.utils.statistics")

# Coefficients of Acklam's rational approximation to the inverse normal CDF
_ACKLAM_A = (-3.969683028665376e+01, 2.209460984245205e+02, -2.759285104469687e+02,
             1.383577518672690e+02, -3.066479806614716e+01, 2.506628277459239e+00)
_ACKLAM_B = (-5.447609879822406e+01, 1.615858368580409e+02, -1.556989798598866e+02,
             6.680131188771972e+01, -1.328068155288572e+01)
_ACKLAM_C = (-7.784894002430293e-03, -3.223964580411365e-01, -2.400758277161838e+00,
             -2.549732539343734e+00, 4.374664141464968e+00, 2.938163982698783e+00)
_ACKLAM_D = (7.784695709041462e-03, 3.224671290700398e-01, 2.445134137142996e+00,
             3.754408661907416e+00)
_ACKLAM_PLOW = 0.02425


def mean(data: SeriesLike) -> float:
    """Arithmetic mean, 0.0 for an empty series."""
    values = as_series(data)
    if len(values) == 0:
        return 0.0
    return float(np.mean(values))


def variance(data: SeriesLike) -> float:
    """Sample variance (divisor n - 1); 0.0 when fewer than two points."""
    values = as_series(data)
    if len(values) <= 1:
        return 0.0
    return float(np.var(values, ddof=1))


def standard_deviation(data: SeriesLike) -> float:
    """Square root of :func:`variance`."""
    return math.sqrt(variance(data))


@jit(nopython=True, cache=True)
def _autocorrelation_numba(x: np.ndarray, lag: int) -> float:
    """
    Numba-accelerated sample autocorrelation at a single lag.

    The numerator sums the n - lag cross products of the centred series, the
    denominator the full sum of squares.
    """
    n = len(x)
    if lag >= n:
        return 0.0

    x_mean = 0.0
    for i in range(n):
        x_mean += x[i]
    x_mean /= n

    numerator = 0.0
    for i in range(n - lag):
        numerator += (x[i] - x_mean) * (x[i + lag] - x_mean)

    denominator = 0.0
    for i in range(n):
        denominator += (x[i] - x_mean) ** 2

    if denominator == 0.0:
        return 0.0
    return numerator / denominator


@memoize
def autocorrelation(data: SeriesLike, lag: int) -> float:
    """
    Sample autocorrelation of ``data`` at ``lag``.

    Args:
        data: Input series
        lag: Non-negative lag

    Returns:
        float: Autocorrelation, or 0.0 when ``lag >= len(data)`` or the
        series is constant

    Raises:
        ParameterError: If lag is negative or not an integer
    """
    lag = validate_integer(lag, "lag")
    values = as_series(data)
    return float(_autocorrelation_numba(values, lag))


def solve_linear_system(matrix: Matrix, rhs: Vector) -> np.ndarray:
    """
    Solve ``matrix @ x = rhs`` by Gaussian elimination with partial pivoting.

    Args:
        matrix: Square coefficient matrix
        rhs: Right-hand side vector

    Returns:
        np.ndarray: Solution vector (empty for an empty system)

    Raises:
        DataError: If the shapes are incompatible
        SingularMatrixError: If a selected pivot is smaller in magnitude than
            ``numerical.singular_tolerance``
    """
    a = np.array(matrix, dtype=np.float64)
    b = np.array(rhs, dtype=np.float64)
    n = b.shape[0] if b.ndim == 1 else -1
    if n == 0 and a.size == 0:
        return np.zeros(0)
    if a.ndim != 2 or a.shape != (n, n):
        raise_data_error(
            f"matrix must be square and match rhs, got {a.shape} and {b.shape}",
            data_name="matrix",
            issue="incompatible shapes"
        )

    tolerance = get_numerical_config().singular_tolerance
    augmented = np.column_stack((a, b))

    for i in range(n):
        max_row = i + int(np.argmax(np.abs(augmented[i:, i])))
        if max_row != i:
            augmented[[i, max_row]] = augmented[[max_row, i]]

        pivot = augmented[i, i]
        if abs(pivot) < tolerance:
            raise SingularMatrixError(
                "Matrix is singular or nearly singular",
                pivot=abs(pivot),
                column=i,
                tolerance=tolerance
            )

        factors = augmented[i + 1:, i] / pivot
        augmented[i + 1:, i:] -= np.outer(factors, augmented[i, i:])

    solution = np.zeros(n)
    for i in range(n - 1, -1, -1):
        solution[i] = (augmented[i, n] - augmented[i, i + 1:n] @ solution[i + 1:]) / augmented[i, i]
    return solution


def least_squares(X: Matrix, y: Vector) -> np.ndarray:
    """
    Ordinary least squares coefficients from the normal equations ``(X'X) b = X'y``.

    Raises:
        SingularMatrixError: If ``X'X`` is singular
    """
    X = np.atleast_2d(np.asarray(X, dtype=np.float64))
    y = np.asarray(y, dtype=np.float64)
    return solve_linear_system(X.T @ X, X.T @ y)


@memoize
def partial_autocorrelation(data: SeriesLike, max_lag: int) -> np.ndarray:
    """
    Partial autocorrelations at lags 0..max_lag from the Yule-Walker equations.

    For each k >= 2 the k x k Toeplitz system built from the autocorrelations
    is solved and the last coefficient kept. A singular system yields 0 for
    that lag.

    Returns:
        np.ndarray: Length ``max_lag + 1`` with ``[0] == 1``; empty when the
        series is empty or ``max_lag`` is negative
    """
    values = as_series(data)
    max_lag = int(max_lag)
    if len(values) == 0 or max_lag < 0:
        return np.zeros(0)

    pacf = np.zeros(max_lag + 1)
    pacf[0] = 1.0
    if max_lag == 0:
        return pacf

    acf = np.array([autocorrelation(values, lag) for lag in range(max_lag + 1)])
    pacf[1] = acf[1]

    for k in range(2, max_lag + 1):
        lags = np.abs(np.subtract.outer(np.arange(k), np.arange(k)))
        try:
            solution = solve_linear_system(acf[lags], acf[1:k + 1])
        except SingularMatrixError:
            logger.debug(f"Singular Yule-Walker system at lag {k}, partial autocorrelation set to 0")
            continue
        pacf[k] = solution[-1]

    return pacf


def akaike(log_likelihood: float, num_params: int, n: int) -> float:
    """Akaike information criterion ``2k - 2 ll``. ``n`` is accepted for symmetry."""
    return 2 * num_params - 2 * log_likelihood


def bayesian(log_likelihood: float, num_params: int, n: int) -> float:
    """
    Bayesian information criterion ``ln(n) k - 2 ll``.

    Raises:
        InvalidSampleSizeError: If ``n <= 0``
    """
    if n <= 0:
        raise InvalidSampleSizeError("Sample size must be positive", sample_size=n)
    return math.log(n) * num_params - 2 * log_likelihood


def _polyval(coefficients: Sequence[float], x: float) -> float:
    result = 0.0
    for c in coefficients:
        result = result * x + c
    return result


def inverse_normal_cdf(p: float) -> float:
    """
    Acklam's rational approximation to the standard normal quantile function.

    Relative error is below 1.15e-9 on (0, 1).
    """
    if not 0 < p < 1:
        raise ValueError(f"p must be in (0, 1), got {p}")

    if p < _ACKLAM_PLOW:
        q = math.sqrt(-2 * math.log(p))
        return _polyval(_ACKLAM_C, q) / (_polyval(_ACKLAM_D, q) * q + 1)
    if p <= 1 - _ACKLAM_PLOW:
        q = p - 0.5
        r = q * q
        return _polyval(_ACKLAM_A, r) * q / (_polyval(_ACKLAM_B, r) * r + 1)
    q = math.sqrt(-2 * math.log(1 - p))
    return -_polyval(_ACKLAM_C, q) / (_polyval(_ACKLAM_D, q) * q + 1)


def get_z_score(confidence_level: float) -> float:
    """
    Two-sided critical value of the standard normal for ``confidence_level``.

    Raises:
        ParameterError: Unless ``0 < confidence_level < 1``
    """
    confidence_level = validate_confidence_level(confidence_level)
    return inverse_normal_cdf(1 - (1 - confidence_level) / 2)


def compose(*fns: Callable[[Any], Any]) -> Callable[[Any], Any]:
    """Compose functions right to left: ``compose(f, g)(x) == f(g(x))``."""
    def composed(value: Any) -> Any:
        return functools.reduce(lambda acc, fn: fn(acc), reversed(fns), value)
    return composed


def create_stats_pipeline(*operations: Callable[[np.ndarray], Any]) -> Callable[[SeriesLike], List[Any]]:
    """Build a function applying every operation to the same series."""
    def pipeline(data: SeriesLike) -> List[Any]:
        values = as_series(data)
        return [operation(values) for operation in operations]
    return pipeline
