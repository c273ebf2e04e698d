# rtarima/__init__.py
"""
rtarima - ARIMA estimation and real-time forecasting

The package provides:
- ARIMA(p, d, q) estimation with a fast least-squares/autocorrelation heuristic
- Multi-step forecasts with constant-variance prediction intervals
- Order selection by AIC or BIC over a grid of orders
- Residual diagnostics (Ljung-Box, Jarque-Bera, residual summaries)
- Real-time forecasting strategies: Stepwise, RollingWindow and Adaptive

Configuration is read on import from defaults, an optional JSON file named by
``RTARIMA_CONFIG_FILE`` and ``RTARIMA_<SECTION>_<OPTION>`` environment
variables; the package logger ``rtarima`` is set up from it.
"""

import logging

from .version import __version__

logger = logging.getLogger("rtarima")

from .core.config import initialize_config

initialize_config()

from .core import (
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
    get_config,
    set_config,
    reset_config,
    ARIMAParams,
    SARIMAParams,
    SARIMAXParams,
    ModelFitResult,
    ForecastResult,
)

from .utils import (
    mean,
    variance,
    standard_deviation,
    autocorrelation,
    partial_autocorrelation,
    solve_linear_system,
    least_squares,
    akaike,
    bayesian,
    get_z_score,
    inverse_normal_cdf,
    compose,
    create_stats_pipeline,
    difference,
    seasonal_difference,
    undifference,
    check_stationarity,
    create_differencing_pipeline,
    create_seasonal_differencing_pipeline,
    apply_preprocessing,
    find_optimal_differencing_order,
    find_optimal_seasonal_period,
    create_preprocessor,
)

from .models import (
    ARIMA,
    AutoARIMA,
    ModelSelection,
    find_best_arima,
    ljung_box,
    jarque_bera,
    plot_residuals,
    StrategyConfig,
    Stepwise,
    RollingWindow,
    Adaptive,
)

__all__ = [
    '__version__',
    # Exceptions
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
    # Configuration
    'get_config',
    'set_config',
    'reset_config',
    # Parameters and results
    'ARIMAParams',
    'SARIMAParams',
    'SARIMAXParams',
    'ModelFitResult',
    'ForecastResult',
    # Statistics
    'mean',
    'variance',
    'standard_deviation',
    'autocorrelation',
    'partial_autocorrelation',
    'solve_linear_system',
    'least_squares',
    'akaike',
    'bayesian',
    'get_z_score',
    'inverse_normal_cdf',
    'compose',
    'create_stats_pipeline',
    # Preprocessing
    'difference',
    'seasonal_difference',
    'undifference',
    'check_stationarity',
    'create_differencing_pipeline',
    'create_seasonal_differencing_pipeline',
    'apply_preprocessing',
    'find_optimal_differencing_order',
    'find_optimal_seasonal_period',
    'create_preprocessor',
    # Models
    'ARIMA',
    'AutoARIMA',
    'ModelSelection',
    'find_best_arima',
    'ljung_box',
    'jarque_bera',
    'plot_residuals',
    # Strategies
    'StrategyConfig',
    'Stepwise',
    'RollingWindow',
    'Adaptive',
]
