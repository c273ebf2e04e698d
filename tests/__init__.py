"""
rtarima test suite

Tests for the numeric primitives, series transforms, ARIMA estimation and
forecasting, order selection, residual diagnostics, configuration and the
real-time forecasting strategies.
"""
