"""
rtarima models

ARIMA estimation and forecasting, order selection, residual diagnostics and
the real-time forecasting strategies built on top of them.
"""

import logging

logger = logging.getLogger("rtarima.models")

from .arima import ARIMA, gaussian_log_likelihood

from .selection import AutoARIMA, CandidateScore, ModelSelection, find_best_arima

from .diagnostics import (
    TestResult,
    LjungBoxResult,
    JarqueBeraResult,
    ResidualSummary,
    ljung_box,
    jarque_bera,
    plot_residuals,
    chi_square_p_value,
    log_gamma,
    upper_incomplete_gamma,
)

from .strategies import (
    StrategyConfig,
    StrategyForecast,
    RealTimeForecastResult,
    StepwiseForecastResult,
    ObservationForecast,
    ForecastStrategy,
    Stepwise,
    RollingWindow,
    Adaptive,
)

__all__ = [
    'ARIMA',
    'gaussian_log_likelihood',
    'AutoARIMA',
    'CandidateScore',
    'ModelSelection',
    'find_best_arima',
    'TestResult',
    'LjungBoxResult',
    'JarqueBeraResult',
    'ResidualSummary',
    'ljung_box',
    'jarque_bera',
    'plot_residuals',
    'chi_square_p_value',
    'log_gamma',
    'upper_incomplete_gamma',
    'StrategyConfig',
    'StrategyForecast',
    'RealTimeForecastResult',
    'StepwiseForecastResult',
    'ObservationForecast',
    'ForecastStrategy',
    'Stepwise',
    'RollingWindow',
    'Adaptive',
]
