# rtarima/core/validation.py

"""
Validation utilities for rtarima.

These helpers normalise user input (lists, NumPy arrays, pandas Series) into
one-dimensional float arrays and enforce the integer and probability
constraints used by models and strategies, raising the package's exception
types with a consistent message format.
"""

import numbers
from typing import Any, Optional

import numpy as np
import pandas as pd

from rtarima.core.exceptions import raise_data_error, raise_parameter_error
from rtarima.core.types import SeriesLike


def as_series(data: SeriesLike, data_name: str = "data") -> np.ndarray:
    """Coerce ``data`` into a one-dimensional float64 array (always a copy).

    Args:
        data: Sequence, NumPy array or pandas Series
        data_name: Name of the data for error messages

    Returns:
        np.ndarray: A fresh float64 array

    Raises:
        TypeError: If data is None or cannot be interpreted as numbers
        DataError: If data is not one-dimensional
    """
    if data is None:
        raise TypeError(f"{data_name} cannot be None")

    if isinstance(data, pd.DataFrame):
        if data.shape[1] != 1:
            raise_data_error(
                f"{data_name} must be one-dimensional, got a DataFrame with {data.shape[1]} columns",
                data_name=data_name,
                issue="multiple columns"
            )
        data = data.iloc[:, 0]

    if isinstance(data, pd.Series):
        values = data.to_numpy(dtype=np.float64, copy=True)
    else:
        try:
            values = np.array(data, dtype=np.float64)
        except (TypeError, ValueError) as e:
            raise TypeError(f"{data_name} must contain numeric values: {e}") from e

    if values.ndim == 0:
        values = values.reshape(1)
    if values.ndim != 1:
        raise_data_error(
            f"{data_name} must be one-dimensional, got shape {values.shape}",
            data_name=data_name,
            issue=f"invalid shape {values.shape}"
        )
    return values


def validate_time_series(
    data: SeriesLike,
    min_length: int = 1,
    data_name: str = "data"
) -> np.ndarray:
    """Validate that data is a finite, one-dimensional time series.

    Args:
        data: Time series data to validate
        min_length: Minimum required length
        data_name: Name of the data for error messages

    Returns:
        np.ndarray: The validated series as a float64 copy

    Raises:
        TypeError: If data is None or not numeric
        DataError: If data is too short or contains invalid values
    """
    values = as_series(data, data_name)

    if len(values) < min_length:
        raise_data_error(
            f"{data_name} is too short (length {len(values)}), minimum required length is {min_length}",
            data_name=data_name,
            issue=f"insufficient length: {len(values)} < {min_length}"
        )

    if np.isnan(values).any():
        raise_data_error(
            f"{data_name} contains NaN values",
            data_name=data_name,
            issue="contains NaN values",
            index=int(np.flatnonzero(np.isnan(values))[0])
        )
    if np.isinf(values).any():
        raise_data_error(
            f"{data_name} contains infinite values",
            data_name=data_name,
            issue="contains infinite values",
            index=int(np.flatnonzero(np.isinf(values))[0])
        )

    return values


def validate_observation(value: Any, name: str = "observation") -> float:
    """Validate a single finite real observation and return it as float."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise_parameter_error(
            f"{name} must be a real number, got {type(value).__name__}",
            param_name=name,
            param_value=value
        )
    value = float(value)
    if not np.isfinite(value):
        raise_data_error(
            f"{name} must be finite, got {value}",
            data_name=name,
            issue="non-finite value"
        )
    return value


def validate_integer(value: Any,
                     name: str,
                     min_value: Optional[int] = 0) -> int:
    """Validate that ``value`` is an integer no smaller than ``min_value``.

    Booleans are rejected even though they subclass int.

    Raises:
        ParameterError: If the constraint is violated
    """
    if isinstance(value, (bool, np.bool_)) or not isinstance(value, (numbers.Integral,)):
        raise_parameter_error(
            f"{name} must be an integer, got {type(value).__name__}",
            param_name=name,
            param_value=value,
            constraint="integer"
        )
    value = int(value)
    if min_value is not None and value < min_value:
        raise_parameter_error(
            f"{name} must be >= {min_value}, got {value}",
            param_name=name,
            param_value=value,
            constraint=f">= {min_value}"
        )
    return value


def validate_confidence_level(confidence_level: Any,
                              name: str = "confidence_level") -> float:
    """Validate a confidence level strictly inside (0, 1).

    Raises:
        ParameterError: If the level is not a real number in (0, 1)
    """
    if isinstance(confidence_level, bool) or not isinstance(confidence_level, numbers.Real):
        raise_parameter_error(
            f"{name} must be a real number, got {type(confidence_level).__name__}",
            param_name=name,
            param_value=confidence_level
        )
    if not 0 < confidence_level < 1:
        raise_parameter_error(
            f"{name} must be between 0 and 1 (exclusive), got {confidence_level}",
            param_name=name,
            param_value=confidence_level,
            constraint="0 < value < 1"
        )
    return float(confidence_level)


def validate_non_negative(value: Any, name: str) -> float:
    """Validate a finite real number ``>= 0``."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real) or not np.isfinite(value):
        raise_parameter_error(
            f"{name} must be a finite real number, got {value!r}",
            param_name=name,
            param_value=value
        )
    if value < 0:
        raise_parameter_error(
            f"{name} must be non-negative, got {value}",
            param_name=name,
            param_value=value,
            constraint=">= 0"
        )
    return float(value)
