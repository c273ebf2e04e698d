# tests/test_arima.py
"""
Tests for ARIMA estimation and forecasting.

Covers parameter handling, the estimation heuristic (least-squares AR
coefficients, damped-autocorrelation MA refinement), fit statistics, the
forecast recursion on the differenced scale with integration back to levels,
and the error conditions of fit and forecast.
"""

import math
import warnings

import numpy as np
import pandas as pd
import pytest
from numpy.testing import assert_allclose
from hypothesis import given, strategies as st, settings
from scipy import stats

from rtarima.core.config import set_config
from rtarima.core.exceptions import DataError, NotFittedError, ParameterError
from rtarima.core.parameters import ARIMAParams, SARIMAParams, SARIMAXParams
from rtarima.core.results import ForecastResult, ModelFitResult
from rtarima.models._numba_core import conditional_residuals
from rtarima.models.arima import ARIMA, gaussian_log_likelihood
from rtarima.utils.preprocessing import difference
from rtarima.utils.statistics import variance


# ---- Parameters ----

class TestARIMAParams:
    """Tests for the ARIMA parameter containers."""

    def test_coerce_forms(self):
        expected = ARIMAParams(1, 2, 3)
        assert ARIMAParams.coerce({"p": 1, "d": 2, "q": 3}) == expected
        assert ARIMAParams.coerce((1, 2, 3)) == expected
        assert ARIMAParams.coerce(expected) == expected
        assert ARIMAParams(np.int64(1), 2, 3) == expected

    def test_properties(self):
        params = ARIMAParams(2, 1, 3)
        assert params.max_lag == 3
        assert params.num_params == 6
        assert str(params) == "ARIMA(2,1,3)"
        assert params.to_dict() == {"p": 2, "d": 1, "q": 3}
        assert params.copy() == params

    @pytest.mark.parametrize("value", [
        {"p": -1, "d": 0, "q": 0},
        {"p": 1, "d": 0},
        (1, 1.5, 0),
        (True, 0, 0),
        "arima",
    ])
    def test_invalid(self, value):
        with pytest.raises(ParameterError):
            ARIMAParams.coerce(value)

    def test_frozen(self):
        params = ARIMAParams(1, 0, 0)
        with pytest.raises(AttributeError):
            params.p = 2

    def test_seasonal(self):
        params = SARIMAParams(1, 1, 1, P=1, D=1, Q=0, s=12)
        assert str(params) == "SARIMA(1,1,1)(1,1,0)12"
        assert list(params.to_array()) == [1, 1, 1, 1, 1, 0, 12]
        with pytest.raises(ParameterError):
            SARIMAParams(1, 0, 0, s=0)

    def test_exogenous(self):
        params = SARIMAXParams(1, 0, 0, exogenous=np.arange(5.0))
        assert params.exogenous.shape == (5, 1)
        assert params.num_exogenous == 1
        assert not params.exogenous.flags.writeable
        with pytest.raises(ParameterError):
            SARIMAXParams(1, 0, 0, exogenous=np.zeros((2, 2, 2)))


# ---- Estimation ----

class TestARIMAFit:
    """Tests for ARIMA.fit."""

    def test_ar1_coefficient(self, ar1_series):
        result = ARIMA((1, 0, 0)).fit(ar1_series)
        assert result.ar[0] == pytest.approx(0.7, abs=0.15)
        assert len(result.ma) == 0

    def test_ar_matches_least_squares(self, ar1_series):
        result = ARIMA((2, 0, 0)).fit(ar1_series)
        X = np.column_stack([ar1_series[1:-1], ar1_series[:-2]])
        expected = np.linalg.lstsq(X, ar1_series[2:], rcond=None)[0]
        assert_allclose(result.ar, expected, rtol=1e-8)

    def test_result_shapes(self, random_walk):
        model = ARIMA((2, 1, 1))
        result = model.fit(random_walk)
        working = difference(random_walk, 1)
        assert isinstance(result, ModelFitResult)
        assert len(result.residuals) == len(random_walk) - 1 - 2
        assert result.nobs == len(working)
        assert result.num_params == 4
        assert_allclose(result.fitted_values + result.residuals, working[2:])

    def test_fit_statistics(self, ar1_series):
        result = ARIMA((1, 0, 1)).fit(ar1_series)
        n, k = result.nobs, result.num_params
        assert result.sigma2 == pytest.approx(variance(result.residuals))
        assert result.log_likelihood == pytest.approx(
            gaussian_log_likelihood(result.residuals, result.sigma2))
        assert result.aic == pytest.approx(2 * k - 2 * result.log_likelihood)
        assert result.bic == pytest.approx(math.log(n) * k - 2 * result.log_likelihood)

    def test_residual_recursion(self, ar1_series):
        result = ARIMA((1, 0, 1)).fit(ar1_series)
        phi, theta = result.ar[0], result.ma[0]
        expected = np.zeros(len(ar1_series) - 1)
        for k in range(len(expected)):
            t = k + 1
            prediction = phi * ar1_series[t - 1]
            if k > 0:
                prediction += theta * expected[k - 1]
            expected[k] = ar1_series[t] - prediction
        assert_allclose(result.residuals, expected)

    def test_ma_heuristic_bounded(self, white_noise):
        result = ARIMA((0, 0, 3)).fit(white_noise)
        assert len(result.ma) == 3
        # Each coefficient is a damped autocorrelation
        assert np.all(np.abs(result.ma) <= 0.8)

    def test_ma_iterations_from_config(self, white_noise):
        set_config("numerical", "ma_iterations", 0)
        result = ARIMA((0, 0, 2)).fit(white_noise)
        assert_allclose(result.ma, [0.1, 0.1])

    def test_ma_damping_from_config(self, ar1_series):
        set_config("numerical", "ma_iterations", 1)
        set_config("numerical", "ma_damping", 0.5)
        result = ARIMA((0, 0, 1)).fit(ar1_series)
        initial = conditional_residuals(ar1_series, np.zeros(0), np.array([0.1]))
        x = initial - initial.mean()
        acf1 = np.sum(x[:-1] * x[1:]) / np.sum(x ** 2)
        assert result.ma[0] == pytest.approx(-0.5 * acf1)

    def test_minimal_series(self):
        model = ARIMA({"p": 1, "d": 0, "q": 1})
        result = model.fit([1.0, 2.0, 3.0])
        assert len(result.residuals) == 2
        assert model.fitted

    def test_too_short(self):
        with pytest.raises(DataError):
            ARIMA((2, 0, 0)).fit([1.0, 2.0])
        with pytest.raises(DataError):
            ARIMA((1, 2, 0)).fit([1.0, 2.0, 3.0])

    def test_failed_fit_keeps_state(self, ar1_series):
        model = ARIMA((1, 0, 0))
        first = model.fit(ar1_series)
        with pytest.raises(DataError):
            model.fit([1.0])
        assert model.fitted
        assert_allclose(model.get_fit_result().ar, first.ar)
        assert len(model.data) == len(ar1_series)

    def test_invalid_data(self, ar1_series):
        bad = ar1_series.copy()
        bad[10] = np.nan
        with pytest.raises(DataError):
            ARIMA((1, 0, 0)).fit(bad)
        with pytest.raises(DataError):
            ARIMA((1, 0, 0)).fit(np.ones((10, 2)))
        with pytest.raises(TypeError):
            ARIMA((1, 0, 0)).fit(None)

    def test_pandas_input(self, ar1_series, ar1_pandas_series):
        from_numpy = ARIMA((1, 0, 0)).fit(ar1_series)
        from_pandas = ARIMA((1, 0, 0)).fit(ar1_pandas_series)
        assert_allclose(from_numpy.ar, from_pandas.ar)

    def test_constant_series_nan_likelihood(self):
        # Compile the kernels before turning warnings into errors
        ARIMA((0, 0, 0)).fit(np.arange(10.0))
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            result = ARIMA((0, 0, 0)).fit(np.full(10, 5.0))
        assert result.sigma2 == 0.0
        assert np.isnan(result.log_likelihood)

    def test_results_are_read_only(self, ar1_series):
        model = ARIMA((1, 0, 0))
        result = model.fit(ar1_series)
        with pytest.raises(ValueError):
            result.ar[0] = 10.0
        copy = model.get_fit_result()
        assert copy is not result
        assert_allclose(copy.residuals, result.residuals)

    def test_data_is_copied(self, ar1_series):
        model = ARIMA((1, 0, 0))
        model.fit(ar1_series)
        data = model.data
        data[0] = 1e6
        assert model.data[0] == ar1_series[0]

    def test_summary(self, ar1_series):
        model = ARIMA((1, 0, 1), name="Demand")
        assert "not fitted" in model.summary()
        model.fit(ar1_series)
        summary = model.summary()
        assert "Demand ARIMA(1,0,1)" in summary
        assert "ar.L1" in summary and "ma.L1" in summary
        assert "AIC" in summary

    def test_gaussian_log_likelihood_matches_scipy(self, white_noise):
        sigma2 = variance(white_noise)
        expected = stats.norm.logpdf(white_noise, scale=math.sqrt(sigma2)).sum()
        assert gaussian_log_likelihood(white_noise, sigma2) == pytest.approx(expected)


# ---- Forecasting ----

class TestARIMAForecast:
    """Tests for ARIMA.forecast."""

    def test_not_fitted(self):
        with pytest.raises(NotFittedError):
            ARIMA((1, 0, 0)).forecast(5)

    @pytest.mark.parametrize("steps", [0, -1, 1.5])
    def test_invalid_steps(self, ar1_series, steps):
        model = ARIMA((1, 0, 0))
        model.fit(ar1_series)
        with pytest.raises(ParameterError):
            model.forecast(steps)

    def test_invalid_confidence_level(self, ar1_series):
        model = ARIMA((1, 0, 0))
        model.fit(ar1_series)
        with pytest.raises(ParameterError):
            model.forecast(5, confidence_level=1.0)

    def test_long_horizon(self, btc_prices):
        model = ARIMA((1, 1, 1))
        model.fit(btc_prices)
        result = model.forecast(50)
        assert isinstance(result, ForecastResult)
        assert result.horizon == 50
        assert np.all(np.isfinite(result.forecast))

    def test_ar1_recursion(self, ar1_series):
        model = ARIMA((1, 0, 0))
        fit = model.fit(ar1_series)
        phi = fit.ar[0]
        expected = ar1_series[-1] * phi ** np.arange(1, 6)
        assert_allclose(model.forecast(5).forecast, expected)

    def test_random_walk_forecast_is_flat(self, random_walk):
        model = ARIMA((0, 1, 0))
        model.fit(random_walk)
        assert_allclose(model.forecast(10).forecast, random_walk[-1])

    def test_differenced_ar(self, random_walk):
        model = ARIMA((1, 1, 0))
        fit = model.fit(random_walk)
        phi = fit.ar[0]
        last_diff = random_walk[-1] - random_walk[-2]
        first = random_walk[-1] + phi * last_diff
        second = first + phi ** 2 * last_diff
        assert_allclose(model.forecast(2).forecast, [first, second])

    def test_twice_differenced(self, random_walk):
        series = np.cumsum(random_walk)
        model = ARIMA((0, 2, 0))
        model.fit(series)
        # Zero second differences extend the last first difference linearly
        slope = series[-1] - series[-2]
        expected = series[-1] + slope * np.arange(1, 4)
        assert_allclose(model.forecast(3).forecast, expected)

    def test_ma_uses_last_residual(self, white_noise):
        model = ARIMA((0, 0, 1))
        fit = model.fit(white_noise)
        forecast = model.forecast(3).forecast
        assert forecast[0] == pytest.approx(fit.ma[0] * fit.residuals[-1])
        assert_allclose(forecast[1:], 0.0)

    def test_ma2_horizons(self, white_noise):
        model = ARIMA((0, 0, 2))
        fit = model.fit(white_noise)
        forecast = model.forecast(3).forecast
        res = fit.residuals
        assert forecast[0] == pytest.approx(fit.ma[0] * res[-1] + fit.ma[1] * res[-2])
        assert forecast[1] == pytest.approx(fit.ma[1] * res[-1])
        assert forecast[2] == pytest.approx(0.0)

    def test_interval_width(self, ar1_series):
        model = ARIMA((1, 0, 1))
        fit = model.fit(ar1_series)
        result = model.forecast(10)
        half_width = stats.norm.ppf(0.975) * math.sqrt(fit.sigma2)
        assert_allclose(result.upper_bound - result.forecast, half_width, rtol=1e-8)
        assert_allclose(result.forecast - result.lower_bound, half_width, rtol=1e-8)

    def test_confidence_level_narrows(self, ar1_series):
        model = ARIMA((1, 0, 0))
        model.fit(ar1_series)
        wide = model.forecast(3, confidence_level=0.99)
        narrow = model.forecast(3, confidence_level=0.80)
        assert np.all(wide.upper_bound - wide.lower_bound > narrow.upper_bound - narrow.lower_bound)
        assert narrow.confidence_level == 0.80

    def test_forecast_carries_fit_statistics(self, ar1_series):
        model = ARIMA((1, 0, 0))
        fit = model.fit(ar1_series)
        result = model.forecast(2)
        assert result.aic == fit.aic
        assert result.bic == fit.bic
        assert_allclose(result.residuals, fit.residuals)

    def test_to_dataframe(self, ar1_series):
        model = ARIMA((1, 0, 0))
        model.fit(ar1_series)
        frame = model.forecast(4).to_dataframe()
        assert isinstance(frame, pd.DataFrame)
        assert list(frame.columns) == ["forecast", "lower", "upper"]
        assert list(frame.index) == [1, 2, 3, 4]
        assert "Forecast Horizon: 4" in str(model.forecast(4))

    def test_copy_is_independent(self, ar1_series, white_noise):
        model = ARIMA((1, 0, 0))
        model.fit(ar1_series)
        clone = model.copy()
        clone.fit(white_noise)
        assert len(model.data) == len(ar1_series)
        assert_allclose(model.data, ar1_series)

    @given(st.integers(min_value=1, max_value=60))
    @settings(max_examples=20)
    def test_horizon_length(self, steps):
        model = ARIMA((1, 1, 1))
        model.fit(np.linspace(1.0, 30.0, 30) + np.sin(np.arange(30.0)))
        result = model.forecast(steps)
        assert len(result.forecast) == steps
        assert len(result.lower_bound) == steps
        assert len(result.upper_bound) == steps
