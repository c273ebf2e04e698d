'''
Pytest configuration and fixtures for the rtarima test suite.

Provides seeded data generators (white noise, AR(1), random walk, trending
series), a sample of daily BTC closing prices, and fixtures that keep the
process-wide configuration and memo caches isolated between tests.
'''

from typing import Iterator

import numpy as np
import pandas as pd
import pytest
from hypothesis import HealthCheck, settings

from rtarima.core.config import reset_config
from rtarima.utils.preprocessing import check_stationarity
from rtarima.utils.statistics import autocorrelation, partial_autocorrelation


# Fixtures below reset shared state per test, not per example; JIT compilation
# makes first calls slow
settings.register_profile(
    "rtarima",
    suppress_health_check=[HealthCheck.function_scoped_fixture],
    deadline=None
)
settings.load_profile("rtarima")


# Daily BTC/USD closing prices
BTC_PRICES = [
    67766.85, 67765.63, 68809.9, 70537.84, 71108.0, 70799.06,
    69355.6, 69310.46, 69648.14, 69540.0, 67314.24, 68263.99,
    66773.01, 66043.99, 66228.25, 66676.87, 66504.33, 65175.32,
    64974.37, 64869.99, 64143.56, 64262.01, 63210.01, 60293.3,
    61806.01, 60864.99, 61706.47, 60427.84, 60986.68, 62772.01,
    62899.99, 62135.47, 60208.58, 57050.01, 56628.79, 58230.13,
    55857.81, 56714.62, 58050.0, 57725.85, 57339.89, 57889.1,
    59204.02, 60797.91, 64724.14, 65043.99, 64087.99, 63987.92,
    66660.0, 67139.96, 68165.34, 67532.01, 65936.01, 65376.0,
    65799.95, 67907.99, 67896.5, 68249.88, 66784.69, 66188.0,
]


# ---- Isolation Fixtures ----

@pytest.fixture(autouse=True)
def clean_state() -> Iterator[None]:
    """Restore default configuration and empty the memo caches around every test."""
    reset_config()
    for memoized in (autocorrelation, partial_autocorrelation, check_stationarity):
        memoized.cache_clear()
    yield
    reset_config()


# ---- Basic Data Generation Fixtures ----

@pytest.fixture
def rng() -> np.random.Generator:
    """Provide a seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def sample_size() -> int:
    """Default sample size for test data."""
    return 200


@pytest.fixture
def white_noise(rng: np.random.Generator, sample_size: int) -> np.ndarray:
    """Standard normal white noise."""
    return rng.standard_normal(sample_size)


@pytest.fixture
def ar1_series(rng: np.random.Generator, sample_size: int) -> np.ndarray:
    """AR(1) process y_t = 0.7 y_{t-1} + e_t."""
    phi = 0.7
    y = np.zeros(sample_size)
    e = rng.standard_normal(sample_size)
    for t in range(1, sample_size):
        y[t] = phi * y[t - 1] + e[t]
    return y


@pytest.fixture
def random_walk(rng: np.random.Generator, sample_size: int) -> np.ndarray:
    """Random walk with drift 0.5 starting at 100."""
    return 100 + np.cumsum(0.5 + rng.standard_normal(sample_size))


@pytest.fixture
def trending_series(rng: np.random.Generator, sample_size: int) -> np.ndarray:
    """Linear trend with a 12-period seasonal component and noise."""
    t = np.arange(sample_size)
    return 100 + 0.5 * t + 10 * np.sin(2 * np.pi * t / 12) + rng.standard_normal(sample_size)


@pytest.fixture
def btc_prices() -> np.ndarray:
    """Sample of daily BTC closing prices."""
    return np.array(BTC_PRICES)


@pytest.fixture
def btc_split(btc_prices: np.ndarray):
    """Training segment (first 48 prices) and the 12 prices that follow."""
    return btc_prices[:48], btc_prices[48:]


@pytest.fixture
def ar1_pandas_series(ar1_series: np.ndarray) -> pd.Series:
    """AR(1) data as a pandas Series with a DatetimeIndex."""
    dates = pd.date_range(start='2020-01-01', periods=len(ar1_series), freq='D')
    return pd.Series(ar1_series, index=dates)
