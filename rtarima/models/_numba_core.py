"""
Numba-accelerated recursions for ARIMA estimation and forecasting.

Both kernels operate on the differenced working series; differencing and
its inverse are handled by the caller.
"""

import logging

import numpy as np
from numba import jit

logger = logging.getLogger("rtarima.models._numba_core")


@jit(nopython=True, cache=True)
def conditional_residuals(data: np.ndarray,
                          ar_params: np.ndarray,
                          ma_params: np.ndarray) -> np.ndarray:
    """
    Compute conditional residuals of an ARMA recursion.

    The recursion starts at ``m = max(p, q)``. The prediction at ``t`` combines
    the ``p`` previous observations with the most recent residuals of the
    same pass; before ``q`` residuals exist only those available are used.

    Args:
        data: Differenced working series
        ar_params: Autoregressive coefficients
        ma_params: Moving-average coefficients

    Returns:
        np.ndarray: Residuals for indices ``m .. n - 1`` (length ``n - m``)
    """
    p = len(ar_params)
    q = len(ma_params)
    n = len(data)
    m = max(p, q)
    if n <= m:
        return np.zeros(0)

    residuals = np.zeros(n - m)
    for k in range(n - m):
        t = m + k
        prediction = 0.0
        for j in range(p):
            prediction += ar_params[j] * data[t - j - 1]
        for j in range(min(q, k)):
            prediction += ma_params[j] * residuals[k - 1 - j]
        residuals[k] = data[t] - prediction
    return residuals


@jit(nopython=True, cache=True)
def arima_forecast(data: np.ndarray,
                   residuals: np.ndarray,
                   ar_params: np.ndarray,
                   ma_params: np.ndarray,
                   steps: int) -> np.ndarray:
    """
    Multi-step forecasts on the differenced scale.

    AR terms read from the working series extended by the forecasts already
    produced. The MA term for lag ``j`` contributes only while ``j >= h`` and
    uses the in-sample residual ``j - h`` periods before the forecast origin;
    future residuals are taken as zero.

    Args:
        data: Differenced working series
        residuals: Residuals from fitting
        ar_params: Autoregressive coefficients
        ma_params: Moving-average coefficients
        steps: Number of steps to forecast

    Returns:
        np.ndarray: Forecasts for horizons 1..steps
    """
    p = len(ar_params)
    q = len(ma_params)
    n = len(data)
    n_resid = len(residuals)

    extended = np.zeros(n + steps)
    extended[:n] = data

    for h in range(1, steps + 1):
        t = n + h - 1
        prediction = 0.0
        for i in range(p):
            if t - i - 1 >= 0:
                prediction += ar_params[i] * extended[t - i - 1]
        for j in range(h, q + 1):
            offset = j - h + 1
            if offset <= n_resid:
                prediction += ma_params[j - 1] * residuals[n_resid - offset]
        extended[t] = prediction

    return extended[n:].copy()
