# rtarima/utils/preprocessing.py
"""
Series transforms: differencing, its inverse, and stationarity heuristics.

Every transform takes and returns one-dimensional float arrays and never
modifies its input. The pipeline helpers return plain callables so transforms
can be chained with :func:`apply_preprocessing` or :func:`compose`.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

import numpy as np

from rtarima.core.exceptions import NonStationaryError, ParameterError
from rtarima.core.types import SeriesLike, Transform
from rtarima.core.validation import as_series
from rtarima.utils.caching import memoize
from rtarima.utils.statistics import autocorrelation, compose

logger = logging.getLogger("rtarima.utils.preprocessing")

__all__ = [
    'difference',
    'seasonal_difference',
    'undifference',
    'check_stationarity',
    'create_differencing_pipeline',
    'create_seasonal_differencing_pipeline',
    'apply_preprocessing',
    'compose',
    'find_optimal_differencing_order',
    'find_optimal_seasonal_period',
    'PreprocessingConfig',
    'create_preprocessor',
]


def difference(data: SeriesLike, order: int = 1) -> np.ndarray:
    """
    Apply the first-difference operator ``order`` times.

    Differencing stops early once one value or fewer remains.

    Args:
        data: Input series
        order: Number of times to difference

    Returns:
        np.ndarray: Differenced series; empty for empty input or a negative
        order, a copy of the input when ``order == 0``
    """
    values = as_series(data)
    if len(values) == 0 or order < 0:
        return np.zeros(0)

    for _ in range(order):
        if len(values) <= 1:
            break
        values = np.diff(values)
    return values


def seasonal_difference(data: SeriesLike, period: int, order: int = 1) -> np.ndarray:
    """
    Apply ``x[t] - x[t - period]`` ``order`` times.

    Stops early once the remaining series is no longer than ``period``.

    Returns:
        np.ndarray: Seasonally differenced series; empty for empty input, a
        negative order or a non-positive period
    """
    values = as_series(data)
    if len(values) == 0 or order < 0 or period <= 0:
        return np.zeros(0)

    for _ in range(order):
        if len(values) <= period:
            break
        values = values[period:] - values[:-period]
    return values


def undifference(original_data: SeriesLike, diff_data: SeriesLike, order: int = 1) -> np.ndarray:
    """
    Invert :func:`difference`.

    The first ``order`` values of ``original_data`` are taken as the
    observations immediately preceding the differenced segment. To continue
    a series ``y`` with differenced forecasts, pass ``y[-order:]``; to rebuild
    a series from its own differences, pass the series itself, in which case
    ``undifference(s, difference(s, d), d)`` equals ``s[d:]``.

    Args:
        original_data: Seed observations on the original scale
        diff_data: Values on the ``order``-times differenced scale
        order: Differencing order to invert

    Returns:
        np.ndarray: Series on the original scale with ``len(diff_data)``
        values; empty for empty ``diff_data``, a negative order or fewer than
        ``order`` seeds
    """
    diffs = as_series(diff_data, "diff_data")
    if len(diffs) == 0 or order < 0:
        return np.zeros(0)
    if order == 0:
        return diffs

    seeds = as_series(original_data, "original_data")
    if len(seeds) < order:
        return np.zeros(0)
    seeds = seeds[:order]

    # Last value of each intermediate difference level of the seeds
    anchors = [difference(seeds, level)[-1] for level in range(order)]

    result = diffs
    for anchor in reversed(anchors):
        result = anchor + np.cumsum(result)
    return result


@memoize
def check_stationarity(data: SeriesLike, threshold: float = 0.95) -> bool:
    """
    Heuristic stationarity check: ``|ACF(data, 1)| < threshold``.

    Series with fewer than two points are considered stationary.
    """
    values = as_series(data)
    if len(values) < 2:
        return True
    return bool(abs(autocorrelation(values, 1)) < threshold)


def create_differencing_pipeline(orders: Sequence[int]) -> Transform:
    """Return a transform applying :func:`difference` once per order, in sequence."""
    orders = list(orders)

    def pipeline(data: SeriesLike) -> np.ndarray:
        result = as_series(data)
        for order in orders:
            result = difference(result, order)
        return result
    return pipeline


def create_seasonal_differencing_pipeline(periods: Sequence[int],
                                          orders: Sequence[int] = ()) -> Transform:
    """
    Return a transform applying :func:`seasonal_difference` for each period.

    ``orders[i]`` is the order used with ``periods[i]``; periods without a
    matching order are differenced once.
    """
    periods = list(periods)
    orders = list(orders)

    def pipeline(data: SeriesLike) -> np.ndarray:
        result = as_series(data)
        for index, period in enumerate(periods):
            order = orders[index] if index < len(orders) else 1
            result = seasonal_difference(result, period, order)
        return result
    return pipeline


def apply_preprocessing(*steps: Transform) -> Transform:
    """Chain transforms left to right."""
    def pipeline(data: SeriesLike) -> np.ndarray:
        result = as_series(data)
        for step in steps:
            result = step(result)
        return result
    return pipeline


def find_optimal_differencing_order(data: SeriesLike,
                                    max_order: int = 3,
                                    threshold: float = 0.95) -> int:
    """
    Smallest differencing order in ``[0, max_order]`` whose result passes
    :func:`check_stationarity`; ``max_order`` when none does.
    """
    values = as_series(data)
    for order in range(max_order + 1):
        if check_stationarity(difference(values, order), threshold):
            logger.debug(f"Differencing order {order} passes the stationarity check")
            return order
    return max_order


def find_optimal_seasonal_period(data: SeriesLike,
                                 candidate_periods: Sequence[int],
                                 threshold: float = 0.95) -> Optional[int]:
    """
    First candidate period whose seasonal difference passes
    :func:`check_stationarity`, or None.
    """
    values = as_series(data)
    for period in candidate_periods:
        if check_stationarity(seasonal_difference(values, period), threshold):
            return period
    return None


@dataclass(frozen=True)
class PreprocessingConfig:
    """
    Options for :func:`create_preprocessor`.

    Attributes:
        difference_order: Number of first differences to take
        seasonal_period: Season length for seasonal differencing, None to skip
        seasonal_order: Number of seasonal differences to take
        stationarity_threshold: Bound on the absolute lag-1 autocorrelation
    """
    difference_order: int = 0
    seasonal_period: Optional[int] = None
    seasonal_order: int = 1
    stationarity_threshold: float = 0.95

    def __post_init__(self) -> None:
        if self.difference_order < 0:
            raise ParameterError("difference_order must be non-negative",
                                 param_name="difference_order",
                                 param_value=self.difference_order)
        if self.seasonal_order < 0:
            raise ParameterError("seasonal_order must be non-negative",
                                 param_name="seasonal_order",
                                 param_value=self.seasonal_order)
        if not 0 < self.stationarity_threshold <= 1:
            raise ParameterError("stationarity_threshold must be in (0, 1]",
                                 param_name="stationarity_threshold",
                                 param_value=self.stationarity_threshold)


def create_preprocessor(config: Optional[PreprocessingConfig] = None,
                        **options) -> Callable[[SeriesLike], np.ndarray]:
    """
    Build a transform that differences, seasonally differences and then
    verifies stationarity.

    Args:
        config: Preprocessing options; keyword arguments override its fields

    Returns:
        Callable raising :class:`NonStationaryError` when the processed
        series fails the stationarity check
    """
    if config is None:
        config = PreprocessingConfig(**options)
    elif options:
        config = PreprocessingConfig(**{**config.__dict__, **options})

    def preprocess(data: SeriesLike) -> np.ndarray:
        result = as_series(data)
        if config.difference_order > 0:
            result = difference(result, config.difference_order)
        if config.seasonal_period:
            result = seasonal_difference(result, config.seasonal_period, config.seasonal_order)

        if not check_stationarity(result, config.stationarity_threshold):
            raise NonStationaryError(
                "Processed data may not be stationary",
                autocorrelation=autocorrelation(result, 1),
                threshold=config.stationarity_threshold
            )
        return result
    return preprocess
