"""
ARIMA(p, d, q) estimation and forecasting.

Estimation is a fast heuristic rather than exact maximum likelihood:

1. The series is differenced ``d`` times.
2. AR coefficients come from least squares on the lagged working series.
3. MA coefficients start at a small constant and are refined for a fixed
   number of passes by setting each to the damped, negated residual
   autocorrelation at its lag.
4. Residuals follow the conditional ARMA recursion, and the Gaussian
   log-likelihood, AIC and BIC are computed from them.

Forecasts run the recursion forward on the differenced scale, integrate
back to levels, and use a constant predictive variance ``sigma2`` for every
horizon.
"""

import copy
import logging
import math
from typing import Mapping, Optional, Sequence, Union

import numpy as np

from rtarima.core.base import ModelBase
from rtarima.core.config import get_numerical_config
from rtarima.core.exceptions import DataError, NotFittedError
from rtarima.core.parameters import ARIMAParams
from rtarima.core.results import ForecastResult, ModelFitResult
from rtarima.core.types import SeriesLike
from rtarima.core.validation import validate_integer, validate_time_series
from rtarima.models._numba_core import arima_forecast, conditional_residuals
from rtarima.utils.preprocessing import difference, undifference
from rtarima.utils.statistics import (
    akaike, autocorrelation, bayesian, get_z_score, least_squares, variance
)

logger = logging.getLogger("rtarima.models.arima")

ParamsLike = Union[ARIMAParams, Mapping[str, int], Sequence[int]]


def gaussian_log_likelihood(residuals: np.ndarray, sigma2: float) -> float:
    """
    Gaussian log-likelihood ``-n/2 ln(2 pi) - n/2 ln(sigma2) - sum(r^2) / (2 sigma2)``.

    A zero ``sigma2`` yields a non-finite value without emitting warnings.
    """
    n = len(residuals)
    sum_squares = float(np.sum(np.square(residuals)))
    sigma2 = np.float64(sigma2)
    with np.errstate(divide='ignore', invalid='ignore'):
        value = (-n / 2 * math.log(2 * math.pi)
                 - n / 2 * np.log(sigma2)
                 - sum_squares / (2 * sigma2))
    return float(value)


class ARIMA(ModelBase[ModelFitResult, ForecastResult]):
    """ARIMA model with heuristic estimation.

    Attributes:
        params: Model orders (immutable)

    Examples:
        >>> import numpy as np
        >>> from rtarima import ARIMA
        >>> model = ARIMA({"p": 1, "d": 1, "q": 1})
        >>> result = model.fit(np.cumsum(np.random.default_rng(0).normal(size=200)))
        >>> model.forecast(5).forecast.shape
        (5,)
    """

    def __init__(self, params: ParamsLike, name: str = "ARIMA"):
        """Initialize the model.

        Args:
            params: Orders as ``ARIMAParams``, a mapping with ``p``, ``d``, ``q``
                or a ``(p, d, q)`` tuple
            name: A descriptive name for the model

        Raises:
            ParameterError: If any order is negative or not an integer
        """
        super().__init__(name=name)
        self._params = ARIMAParams.coerce(params)
        self._data = np.zeros(0)
        self._working = np.zeros(0)

    @property
    def params(self) -> ARIMAParams:
        return self._params

    @property
    def data(self) -> np.ndarray:
        """Copy of the series the model was last fitted on."""
        return self._data.copy()

    def get_params(self) -> ARIMAParams:
        """Return a copy of the model orders."""
        return self._params.copy()

    def get_fit_result(self) -> Optional[ModelFitResult]:
        """Return a copy of the last fit result, or None before fitting."""
        if self._results is None:
            return None
        return self._results.copy()

    def copy(self) -> 'ARIMA':
        """Independent deep copy of the model, fitted state included."""
        return copy.deepcopy(self)

    def _estimate_ar(self, working: np.ndarray, p: int) -> np.ndarray:
        if p == 0:
            return np.zeros(0)

        n = len(working)
        # Row for t holds working[t-1], ..., working[t-p]
        X = np.column_stack([working[p - j:n - j] for j in range(1, p + 1)])
        y = working[p:]
        return least_squares(X, y)

    def _estimate_ma(self, working: np.ndarray, ar_params: np.ndarray, q: int) -> np.ndarray:
        if q == 0:
            return np.zeros(0)

        config = get_numerical_config()
        ma_params = np.full(q, config.ma_initial_value, dtype=np.float64)

        for _ in range(config.ma_iterations):
            residuals = conditional_residuals(working, ar_params, ma_params)
            for i in range(q):
                if len(residuals) > i + 1:
                    ma_params[i] = -autocorrelation(residuals, i + 1) * config.ma_damping

        return ma_params

    def fit(self, data: SeriesLike) -> ModelFitResult:
        """Estimate the model from ``data``.

        On failure the previously fitted state, if any, is left untouched.

        Args:
            data: Observed series on the original scale

        Returns:
            ModelFitResult: Coefficients, residuals and fit statistics

        Raises:
            DataError: If the series is invalid or too short for the orders
            SingularMatrixError: If the AR normal equations are singular
        """
        values = validate_time_series(data, min_length=1)
        p, d, q = self._params.p, self._params.d, self._params.q
        m = self._params.max_lag

        if len(values) - d <= m:
            raise DataError(
                f"{self._params} needs more than {d + m} observations, got {len(values)}",
                data_name="data",
                issue=f"insufficient length: {len(values)} <= {d + m}"
            )

        working = difference(values, d)
        ar_params = self._estimate_ar(working, p)
        ma_params = self._estimate_ma(working, ar_params, q)

        residuals = conditional_residuals(working, ar_params, ma_params)
        fitted_values = working[m:] - residuals

        sigma2 = variance(residuals)
        log_likelihood = gaussian_log_likelihood(residuals, sigma2)
        num_params = self._params.num_params
        nobs = len(working)

        self._results = ModelFitResult(
            ar=ar_params,
            ma=ma_params,
            residuals=residuals,
            fitted_values=fitted_values,
            sigma2=sigma2,
            log_likelihood=log_likelihood,
            aic=akaike(log_likelihood, num_params, nobs),
            bic=bayesian(log_likelihood, num_params, nobs),
            nobs=nobs,
            num_params=num_params,
            model_name=f"{self._name} {self._params}"
        )
        self._data = values
        self._working = working
        self._fitted = True

        logger.debug(
            f"Fitted {self._params} on {len(values)} observations: "
            f"sigma2={sigma2:.6g}, aic={self._results.aic:.6g}"
        )
        return self._results

    def forecast(self, steps: int, confidence_level: float = 0.95) -> ForecastResult:
        """Forecast ``steps`` periods ahead.

        Args:
            steps: Forecast horizon (at least 1)
            confidence_level: Coverage of the prediction intervals

        Returns:
            ForecastResult: Level forecasts with ``forecast ± z sqrt(sigma2)`` bounds

        Raises:
            NotFittedError: If the model has not been fitted
            ParameterError: If steps < 1 or the confidence level is outside (0, 1)
        """
        if not self._fitted:
            raise NotFittedError(
                "Model must be fitted before forecasting. Call fit() first.",
                model_type=self._name,
                operation="forecast"
            )

        steps = validate_integer(steps, "steps", min_value=1)
        z_score = get_z_score(confidence_level)
        results = self._results
        d = self._params.d

        diff_forecast = arima_forecast(
            self._working, np.array(results.residuals), np.array(results.ar),
            np.array(results.ma), steps
        )
        levels = undifference(self._data[len(self._data) - d:], diff_forecast, d)

        margin = z_score * math.sqrt(results.sigma2)
        return ForecastResult(
            forecast=levels,
            lower_bound=levels - margin,
            upper_bound=levels + margin,
            residuals=results.residuals,
            aic=results.aic,
            bic=results.bic,
            log_likelihood=results.log_likelihood,
            confidence_level=float(confidence_level),
            model_name=results.model_name
        )

    def __repr__(self) -> str:
        return f"ARIMA(params={self._params!r}, name='{self._name}', fitted={self._fitted})"
