# tests/test_statistics.py
"""
Tests for the numeric primitives in rtarima.utils.statistics and the
memoization helper they rely on.
"""

import math

import numpy as np
import pandas as pd
import pytest
from numpy.testing import assert_allclose
from hypothesis import given, strategies as st, settings
from hypothesis.extra.numpy import arrays
from scipy import stats

from rtarima.core.config import set_config
from rtarima.core.exceptions import (
    DataError, InvalidSampleSizeError, ParameterError, SingularMatrixError
)
from rtarima.utils.caching import LRUCache, fingerprint, memoize
from rtarima.utils.statistics import (
    akaike, autocorrelation, bayesian, compose, create_stats_pipeline,
    get_z_score, inverse_normal_cdf, least_squares, mean,
    partial_autocorrelation, solve_linear_system, standard_deviation, variance
)

finite_floats = st.floats(min_value=-1e6, max_value=1e6, allow_nan=False, allow_infinity=False)


# ---- Moments ----

class TestMoments:
    """Tests for mean, variance and standard deviation."""

    def test_mean(self):
        assert mean([1.0, 2.0, 3.0, 4.0]) == pytest.approx(2.5)
        assert mean([]) == 0.0

    def test_variance_matches_numpy(self, white_noise):
        assert variance(white_noise) == pytest.approx(np.var(white_noise, ddof=1))
        assert standard_deviation(white_noise) == pytest.approx(np.std(white_noise, ddof=1))

    def test_variance_short_series(self):
        assert variance([]) == 0.0
        assert variance([5.0]) == 0.0

    def test_pandas_input(self, ar1_pandas_series):
        assert mean(ar1_pandas_series) == pytest.approx(ar1_pandas_series.mean())
        assert variance(ar1_pandas_series) == pytest.approx(ar1_pandas_series.var())

    @given(arrays(np.float64, st.integers(min_value=0, max_value=50), elements=finite_floats))
    @settings(max_examples=50, deadline=None)
    def test_variance_non_negative(self, data):
        assert variance(data) >= 0


# ---- Autocorrelation ----

class TestAutocorrelation:
    """Tests for autocorrelation and partial autocorrelation."""

    def test_lag_zero_is_one(self, white_noise):
        assert autocorrelation(white_noise, 0) == pytest.approx(1.0)

    def test_matches_definition(self, ar1_series):
        x = ar1_series - ar1_series.mean()
        expected = np.sum(x[:-3] * x[3:]) / np.sum(x ** 2)
        assert autocorrelation(ar1_series, 3) == pytest.approx(expected)

    def test_ar1_lag_one(self, ar1_series):
        assert 0.5 < autocorrelation(ar1_series, 1) < 0.9

    def test_lag_beyond_length(self):
        assert autocorrelation([1.0, 2.0, 3.0], 3) == 0.0
        assert autocorrelation([1.0, 2.0, 3.0], 10) == 0.0

    def test_constant_series(self):
        assert autocorrelation(np.full(10, 3.0), 1) == 0.0

    def test_negative_lag(self, white_noise):
        with pytest.raises(ParameterError):
            autocorrelation(white_noise, -1)

    def test_white_noise_decays(self, white_noise):
        n = len(white_noise)
        assert abs(autocorrelation(white_noise, n - 1)) < 0.05
        assert autocorrelation(white_noise, n) == 0.0

    def test_memoized_by_value(self, white_noise):
        autocorrelation.cache_clear()
        first = autocorrelation(white_noise, 2)
        second = autocorrelation(white_noise.copy(), 2)
        info = autocorrelation.cache_info()
        assert first == second
        assert info.hits == 1
        assert info.misses == 1

    def test_memo_distinguishes_extended_series(self, white_noise):
        short = autocorrelation(white_noise, 1)
        extended = autocorrelation(np.append(white_noise, 10.0), 1)
        assert short != extended

    def test_partial_autocorrelation_ar1(self, ar1_series):
        pacf = partial_autocorrelation(ar1_series, 5)
        assert len(pacf) == 6
        assert pacf[0] == 1.0
        assert pacf[1] == pytest.approx(autocorrelation(ar1_series, 1))
        # An AR(1) process has no partial autocorrelation beyond lag 1
        assert np.all(np.abs(pacf[2:]) < 0.25)

    def test_partial_autocorrelation_edge_cases(self):
        assert len(partial_autocorrelation([], 3)) == 0
        assert len(partial_autocorrelation([1.0, 2.0], -1)) == 0
        assert_allclose(partial_autocorrelation([1.0, 2.0, 4.0], 0), [1.0])

    def test_partial_autocorrelation_returns_copy(self, ar1_series):
        first = partial_autocorrelation(ar1_series, 3)
        first[1] = 99.0
        assert partial_autocorrelation(ar1_series, 3)[1] != 99.0


# ---- Linear Algebra ----

class TestLinearAlgebra:
    """Tests for the elimination solver and least squares."""

    def test_solve_matches_numpy(self, rng):
        a = rng.standard_normal((4, 4)) + 4 * np.eye(4)
        b = rng.standard_normal(4)
        assert_allclose(solve_linear_system(a, b), np.linalg.solve(a, b))

    def test_solve_requires_pivoting(self):
        a = np.array([[0.0, 1.0], [1.0, 0.0]])
        assert_allclose(solve_linear_system(a, [2.0, 3.0]), [3.0, 2.0])

    def test_solve_empty_system(self):
        assert len(solve_linear_system(np.zeros((0, 0)), np.zeros(0))) == 0

    def test_singular_matrix(self):
        with pytest.raises(SingularMatrixError) as exc_info:
            solve_linear_system([[1.0, 2.0], [2.0, 4.0]], [1.0, 2.0])
        assert exc_info.value.column == 1

    def test_tolerance_from_config(self):
        set_config("numerical", "singular_tolerance", 10.0)
        with pytest.raises(SingularMatrixError):
            solve_linear_system([[2.0, 0.0], [0.0, 2.0]], [1.0, 1.0])

    def test_shape_mismatch(self):
        with pytest.raises(DataError):
            solve_linear_system(np.eye(3), np.ones(2))

    def test_least_squares_matches_lstsq(self, rng):
        X = rng.standard_normal((50, 3))
        y = X @ np.array([1.0, -2.0, 0.5]) + 0.01 * rng.standard_normal(50)
        expected = np.linalg.lstsq(X, y, rcond=None)[0]
        assert_allclose(least_squares(X, y), expected, rtol=1e-8)

    def test_least_squares_collinear(self):
        X = np.column_stack([np.arange(5.0), 2 * np.arange(5.0)])
        with pytest.raises(SingularMatrixError):
            least_squares(X, np.arange(5.0))


# ---- Information Criteria ----

class TestInformationCriteria:
    """Tests for AIC and BIC."""

    def test_values(self):
        assert akaike(-100.0, 3, 50) == pytest.approx(206.0)
        assert bayesian(-100.0, 3, 50) == pytest.approx(3 * math.log(50) + 200.0)

    def test_bic_invalid_sample_size(self):
        with pytest.raises(InvalidSampleSizeError):
            bayesian(-10.0, 2, 0)

    @given(ll=st.floats(min_value=-1e6, max_value=1e6, allow_nan=False),
           k=st.integers(min_value=1, max_value=20),
           n=st.integers(min_value=2, max_value=10000))
    @settings(max_examples=50)
    def test_more_parameters_penalized(self, ll, k, n):
        assert akaike(ll, k + 1, n) > akaike(ll, k, n)
        assert bayesian(ll, k + 1, n) > bayesian(ll, k, n)


# ---- Normal Quantiles ----

class TestNormalQuantiles:
    """Tests for the inverse normal CDF against scipy."""

    @pytest.mark.parametrize("confidence_level, expected", [
        (0.80, 1.2815515655446004),
        (0.90, 1.6448536269514722),
        (0.95, 1.959963984540054),
        (0.99, 2.5758293035489004),
    ])
    def test_z_scores(self, confidence_level, expected):
        assert get_z_score(confidence_level) == pytest.approx(expected, rel=1e-8)

    @given(st.floats(min_value=1e-8, max_value=1 - 1e-8))
    @settings(max_examples=100)
    def test_matches_scipy(self, p):
        assert inverse_normal_cdf(p) == pytest.approx(stats.norm.ppf(p), rel=1e-8, abs=1e-8)

    def test_symmetry(self):
        for p in (0.001, 0.01, 0.2, 0.4):
            assert inverse_normal_cdf(p) == pytest.approx(-inverse_normal_cdf(1 - p), rel=1e-8)

    @pytest.mark.parametrize("confidence_level", [0.0, 1.0, -0.5, 1.5])
    def test_invalid_confidence_level(self, confidence_level):
        with pytest.raises(ParameterError):
            get_z_score(confidence_level)

    def test_inverse_normal_domain(self):
        with pytest.raises(ValueError):
            inverse_normal_cdf(0.0)


# ---- Combinators ----

class TestCombinators:
    """Tests for compose and create_stats_pipeline."""

    def test_compose_right_to_left(self):
        add_one = lambda x: x + 1
        double = lambda x: x * 2
        assert compose(add_one, double)(3) == 7
        assert compose(double, add_one)(3) == 8
        assert compose()(3) == 3

    def test_stats_pipeline(self):
        pipeline = create_stats_pipeline(mean, variance, len)
        assert pipeline([1.0, 2.0, 3.0]) == [pytest.approx(2.0), pytest.approx(1.0), 3]


# ---- Caching ----

class TestCaching:
    """Tests for the LRU cache and fingerprinting."""

    def test_lru_eviction(self):
        cache = LRUCache(maxsize=2)
        cache.set("a", 1)
        cache.set("b", 2)
        assert cache.get("a") == 1
        cache.set("c", 3)
        assert cache.get("b") is None
        assert cache.get("a") == 1
        assert cache.get("c") == 3
        assert len(cache) == 2

    def test_size_from_config(self):
        set_config("performance", "cache_size", 3)
        cache = LRUCache()
        for i in range(10):
            cache.set(i, i)
        assert len(cache) == 3
        assert cache.info().maxsize == 3

    def test_fingerprint_by_content(self):
        a = np.array([1.0, 2.0, 3.0])
        assert fingerprint(a) == fingerprint(a.copy())
        assert fingerprint(a) == fingerprint([1.0, 2.0, 3.0])
        assert fingerprint(a) == fingerprint(pd.Series(a))
        assert fingerprint(a) != fingerprint(np.array([1.0, 2.0, 3.5]))

    def test_memoize_returns_copies(self):
        calls = []

        @memoize
        def cumulative(data):
            calls.append(1)
            return np.cumsum(data)

        result = cumulative(np.array([1.0, 2.0]))
        result[0] = 100.0
        assert_allclose(cumulative(np.array([1.0, 2.0])), [1.0, 3.0])
        assert len(calls) == 1
        cumulative.cache_clear()
        assert cumulative.cache_info().size == 0
