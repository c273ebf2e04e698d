# rtarima/core/types.py

"""
Type aliases shared across rtarima.
"""

from typing import Callable, List, Literal, Sequence, Union

import numpy as np
import pandas as pd

Vector = np.ndarray  # 1D float array
Matrix = np.ndarray  # 2D float array

# Anything that can be coerced into a one-dimensional float series
SeriesLike = Union[np.ndarray, pd.Series, Sequence[float], List[float]]

# A step of a preprocessing pipeline
Transform = Callable[[np.ndarray], np.ndarray]

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
Criterion = Literal["aic", "bic"]
StrategyName = Literal["stepwise", "rolling"]
