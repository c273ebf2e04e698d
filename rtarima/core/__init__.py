"""
rtarima core module

Exception hierarchy, configuration, parameter containers, result objects and
input validation shared by the models and strategies.
"""

import logging

logger = logging.getLogger("rtarima.core")

from .exceptions import (
    RTArimaError,
    ParameterError,
    DataError,
    InvalidSampleSizeError,
    NumericError,
    SingularMatrixError,
    NonStationaryError,
    NotFittedError,
    ConfigurationError,
    RTArimaWarning,
    NumericWarning,
)

from .config import (
    ConfigManager,
    get_config,
    set_config,
    reset_config,
    get_numerical_config,
    get_performance_config,
    get_strategies_config,
    get_logging_config,
)

from .parameters import ARIMAParams, SARIMAParams, SARIMAXParams

from .results import ModelFitResult, ForecastResult

from .validation import validate_time_series

__all__ = [
    'RTArimaError',
    'ParameterError',
    'DataError',
    'InvalidSampleSizeError',
    'NumericError',
    'SingularMatrixError',
    'NonStationaryError',
    'NotFittedError',
    'ConfigurationError',
    'RTArimaWarning',
    'NumericWarning',
    'ConfigManager',
    'get_config',
    'set_config',
    'reset_config',
    'get_numerical_config',
    'get_performance_config',
    'get_strategies_config',
    'get_logging_config',
    'ARIMAParams',
    'SARIMAParams',
    'SARIMAXParams',
    'ModelFitResult',
    'ForecastResult',
    'validate_time_series',
]
