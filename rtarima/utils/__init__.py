"""
rtarima utilities

Numeric primitives, series transforms and the memoization helper used by
the models.
"""

import logging

logger = logging.getLogger("rtarima.utils")

from .caching import LRUCache, memoize, fingerprint

from .statistics import (
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
)

from .preprocessing import (
    difference,
    seasonal_difference,
    undifference,
    check_stationarity,
    create_differencing_pipeline,
    create_seasonal_differencing_pipeline,
    apply_preprocessing,
    find_optimal_differencing_order,
    find_optimal_seasonal_period,
    PreprocessingConfig,
    create_preprocessor,
)

__all__ = [
    'LRUCache',
    'memoize',
    'fingerprint',
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
    'difference',
    'seasonal_difference',
    'undifference',
    'check_stationarity',
    'create_differencing_pipeline',
    'create_seasonal_differencing_pipeline',
    'apply_preprocessing',
    'find_optimal_differencing_order',
    'find_optimal_seasonal_period',
    'PreprocessingConfig',
    'create_preprocessor',
]
