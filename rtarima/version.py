# rtarima/version.py
"""
rtarima version information

Version metadata, accessible programmatically via ``rtarima.__version__``.
The package follows semantic versioning (MAJOR.MINOR.PATCH). Runtime
dependencies are declared only in pyproject.toml.
"""

VERSION_MAJOR = 0
VERSION_MINOR = 1
VERSION_PATCH = 0

__version__ = f"{VERSION_MAJOR}.{VERSION_MINOR}.{VERSION_PATCH}"

__title__ = "rtarima"
__description__ = "ARIMA estimation, forecasting and real-time forecasting strategies"
__license__ = "MIT"
