'''
Configuration management for rtarima.

Settings are grouped into sections backed by dataclasses and resolved in
layers:

1. Defaults built into the package
2. An optional JSON file named by the ``RTARIMA_CONFIG_FILE`` environment variable
3. Environment variables of the form ``RTARIMA_<SECTION>_<OPTION>``
4. Runtime modifications through :func:`set_config`

The numerical section holds the constants of the estimation heuristics
(pivot tolerance, MA iteration count, damping), the strategies section the
defaults every forecasting strategy starts from.
'''

import os
import json
import logging
from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from .exceptions import ConfigurationError
from .types import LogLevel

logger = logging.getLogger("rtarima.core.config")

CONFIG_ENV_PREFIX = "RTARIMA_"
CONFIG_FILE_ENV = "RTARIMA_CONFIG_FILE"


class ConfigSection(Enum):
    """Enumeration of configuration sections."""
    NUMERICAL = "numerical"
    PERFORMANCE = "performance"
    STRATEGIES = "strategies"
    LOGGING = "logging"


@dataclass
class NumericalConfig:
    """
    Numerical settings used during estimation.

    Attributes:
        singular_tolerance: Pivot magnitude below which a linear system is singular
        ma_iterations: Number of passes of the moving-average heuristic
        ma_initial_value: Starting value for every MA coefficient
        ma_damping: Factor applied to the residual autocorrelation at each pass
    """
    singular_tolerance: float = 1e-10
    ma_iterations: int = 10
    ma_initial_value: float = 0.1
    ma_damping: float = 0.8


@dataclass
class PerformanceConfig:
    """
    Performance settings.

    Attributes:
        cache_size: Maximum number of entries held by each memoized statistic
    """
    cache_size: int = 1024


@dataclass
class StrategiesConfig:
    """
    Defaults for the real-time forecasting strategies.

    Attributes:
        refit_model: Whether Stepwise refits after every observation
        adaptation_threshold: Mean error above which Adaptive switches strategy
        max_error_window_size: Number of recent errors Adaptive keeps
        switch_lookback: Number of trailing errors averaged for the switch decision
    """
    refit_model: bool = True
    adaptation_threshold: float = 2.0
    max_error_window_size: int = 10
    switch_lookback: int = 5


@dataclass
class LoggingConfig:
    """
    Logging settings applied to the ``rtarima`` package logger.

    Attributes:
        log_level: Default logging level
        log_format: Format string for log messages
        log_date_format: Format string for log message timestamps
        console_logging: Whether to log to the console
    """
    log_level: LogLevel = "WARNING"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_date_format: str = "%Y-%m-%d %H:%M:%S"
    console_logging: bool = True


@dataclass
class RTArimaConfig:
    """Complete configuration, one attribute per section."""
    numerical: NumericalConfig = field(default_factory=NumericalConfig)
    performance: PerformanceConfig = field(default_factory=PerformanceConfig)
    strategies: StrategiesConfig = field(default_factory=StrategiesConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# Values that violate a constraint fall back to the default when loaded
_OPTION_CONSTRAINTS = {
    "singular_tolerance": (lambda v: v > 0, "must be positive"),
    "ma_iterations": (lambda v: v >= 0, "must be non-negative"),
    "cache_size": (lambda v: v > 0, "must be positive"),
    "adaptation_threshold": (lambda v: v >= 0, "must be non-negative"),
    "max_error_window_size": (lambda v: v > 0, "must be positive"),
    "switch_lookback": (lambda v: v > 0, "must be positive"),
}

_VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _convert(value: Any, value_type: type) -> Any:
    if value_type is bool and isinstance(value, str):
        return value.lower() in ('true', 'yes', '1', 'y')
    if value_type is not type(value):
        return value_type(value)
    return value


_SECTION_NAMES = frozenset(section.value for section in ConfigSection)


class ConfigManager:
    """
    Holds the active configuration and applies the override layers.

    Attributes:
        _config: Active settings
        _initialized: Whether the file and environment layers have been applied
        _config_file: JSON file the settings were read from, if any
        _modified_keys: ``section.option`` keys changed through :meth:`set`
    """

    def __init__(self):
        self._config = RTArimaConfig()
        self._initialized = False
        self._config_file: Optional[Path] = None
        self._modified_keys = set()

    def initialize(self) -> None:
        """
        Apply the file and environment layers, validate, and configure the
        package logger. Only the first call has an effect.
        """
        if self._initialized:
            return

        self._load_config_file()
        self._apply_env_overrides()
        self._validate_config()
        self._setup_logging()

        self._initialized = True
        logger.debug("Configuration manager initialized")

    def _override(self, section: str, option: str, value: Any, source: str) -> None:
        section_obj = getattr(self._config, section)
        if not hasattr(section_obj, option):
            logger.warning(f"Ignoring unknown option {section}.{option} from {source}")
            return
        try:
            setattr(section_obj, option, _convert(value, type(getattr(section_obj, option))))
        except (TypeError, ValueError) as e:
            logger.warning(f"Ignoring {section}.{option}={value!r} from {source}: {e}")
        else:
            logger.debug(f"{section}.{option}={value!r} from {source}")

    def _load_config_file(self) -> None:
        path = os.environ.get(CONFIG_FILE_ENV)
        if not path:
            return

        self._config_file = Path(path)
        try:
            user_config = json.loads(self._config_file.read_text())
        except FileNotFoundError:
            logger.warning(f"Configuration file not found: {self._config_file}")
            return
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read configuration file {self._config_file}: {e}")
            return

        for section, options in user_config.items():
            if section not in _SECTION_NAMES or not isinstance(options, dict):
                logger.warning(f"Ignoring section {section!r} in {self._config_file}")
                continue
            for option, value in options.items():
                self._override(section, option, value, self._config_file.name)

    def _apply_env_overrides(self) -> None:
        for env_var, value in os.environ.items():
            if not env_var.startswith(CONFIG_ENV_PREFIX) or env_var == CONFIG_FILE_ENV:
                continue
            section, _, option = env_var[len(CONFIG_ENV_PREFIX):].lower().partition('_')
            if section in _SECTION_NAMES and option:
                self._override(section, option, value, env_var)

    def _setup_logging(self) -> None:
        settings = self._config.logging
        package_logger = logging.getLogger("rtarima")

        for handler in package_logger.handlers[:]:
            package_logger.removeHandler(handler)
        package_logger.setLevel(getattr(logging, settings.log_level))

        if settings.console_logging:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(fmt=settings.log_format,
                                                   datefmt=settings.log_date_format))
        else:
            handler = logging.NullHandler()
        package_logger.addHandler(handler)

    def _validate_config(self) -> None:
        defaults = RTArimaConfig()
        for section in _SECTION_NAMES:
            current, default = getattr(self._config, section), getattr(defaults, section)
            for option, (check, reason) in _OPTION_CONSTRAINTS.items():
                if hasattr(current, option) and not check(getattr(current, option)):
                    logger.warning(
                        f"{section}.{option}={getattr(current, option)!r} {reason}, "
                        f"using {getattr(default, option)!r}"
                    )
                    setattr(current, option, getattr(default, option))

        level = str(self._config.logging.log_level).upper()
        if level not in _VALID_LOG_LEVELS:
            logger.warning(f"Invalid log_level: {level}, using WARNING")
            level = "WARNING"
        self._config.logging.log_level = level

    def to_dict(self) -> Dict[str, Any]:
        """Nested ``{section: {option: value}}`` snapshot of the configuration."""
        return {
            section.value: {
                f.name: getattr(getattr(self._config, section.value), f.name)
                for f in fields(getattr(self._config, section.value))
            }
            for section in ConfigSection
        }

    def _lookup(self, section: str, option: Optional[str] = None) -> Any:
        if section not in _SECTION_NAMES:
            raise ConfigurationError(
                f"Unknown configuration section: {section}",
                setting=section if option is None else f"{section}.{option}",
                issue="Section not found"
            )
        section_obj = getattr(self._config, section)
        if option is not None and not hasattr(section_obj, option):
            raise ConfigurationError(
                f"Unknown configuration option: {section}.{option}",
                setting=f"{section}.{option}",
                issue="Option not found"
            )
        return section_obj

    def get(self, section: str, option: str, default: Any = None) -> Any:
        """Value of ``section.option``, or ``default`` when no such option exists."""
        if section not in _SECTION_NAMES:
            return default
        return getattr(getattr(self._config, section), option, default)

    def set(self, section: str, option: str, value: Any) -> None:
        """
        Change ``section.option`` at runtime.

        The value is converted to the option's type and checked against the
        option's constraint. Changing a logging option reconfigures the
        package logger immediately.

        Raises:
            ConfigurationError: If the option does not exist, the value cannot
                be converted, or it violates the option's constraint
        """
        section_obj = self._lookup(section, option)
        key = f"{section}.{option}"

        try:
            typed_value = _convert(value, type(getattr(section_obj, option)))
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                f"Cannot convert value for {key}", setting=key, value=value, issue=str(e)
            ) from e

        if option == "log_level":
            typed_value = typed_value.upper()
            if typed_value not in _VALID_LOG_LEVELS:
                raise ConfigurationError(
                    f"Invalid value for configuration option: {key}", setting=key, value=value,
                    issue=f"must be one of {', '.join(_VALID_LOG_LEVELS)}"
                )
        constraint = _OPTION_CONSTRAINTS.get(option)
        if constraint is not None and not constraint[0](typed_value):
            raise ConfigurationError(
                f"Invalid value for configuration option: {key}", setting=key, value=value,
                issue=constraint[1]
            )

        setattr(section_obj, option, typed_value)
        self._modified_keys.add(key)
        logger.debug(f"Set {key}={typed_value!r}")

        if section == ConfigSection.LOGGING.value:
            self._setup_logging()

    def reset(self, section: Optional[str] = None, option: Optional[str] = None) -> None:
        """
        Restore built-in defaults.

        Args:
            section: Section to reset, or None for everything
            option: Single option within ``section`` to reset

        Raises:
            ConfigurationError: If the section or option does not exist
        """
        defaults = RTArimaConfig()
        if section is None:
            self._config = defaults
            self._modified_keys.clear()
            self._setup_logging()
            return

        section_obj = self._lookup(section, option)
        if option is None:
            setattr(self._config, section, getattr(defaults, section))
            self._modified_keys = {k for k in self._modified_keys if not k.startswith(f"{section}.")}
        else:
            setattr(section_obj, option, getattr(getattr(defaults, section), option))
            self._modified_keys.discard(f"{section}.{option}")

        if section == ConfigSection.LOGGING.value:
            self._setup_logging()

    def get_modified_options(self) -> List[str]:
        """Return the ``section.option`` keys changed at runtime."""
        return sorted(self._modified_keys)

    def get_section(self, section: str) -> Any:
        """
        Live section object, for example :class:`NumericalConfig`.

        Raises:
            ConfigurationError: If the section does not exist
        """
        return self._lookup(section)


_config_manager = ConfigManager()


def initialize_config() -> None:
    """Apply file and environment overrides to the shared configuration."""
    _config_manager.initialize()


def get_config_manager() -> ConfigManager:
    """Return the process-wide configuration manager, initializing it on first use."""
    if not _config_manager._initialized:
        initialize_config()
    return _config_manager


def get_config(section: str, option: str, default: Any = None) -> Any:
    """
    Read one setting.

    Args:
        section: Section name, e.g. ``"strategies"``
        option: Option name within the section
        default: Returned when the option does not exist

    Returns:
        The current value or ``default``
    """
    return get_config_manager().get(section, option, default)


def set_config(section: str, option: str, value: Any) -> None:
    """Change one setting at runtime; see :meth:`ConfigManager.set`."""
    get_config_manager().set(section, option, value)


def reset_config(section: Optional[str] = None, option: Optional[str] = None) -> None:
    """Restore defaults for everything, one section, or one option."""
    get_config_manager().reset(section, option)


def get_numerical_config() -> NumericalConfig:
    return get_config_manager().get_section("numerical")


def get_performance_config() -> PerformanceConfig:
    return get_config_manager().get_section("performance")


def get_strategies_config() -> StrategiesConfig:
    return get_config_manager().get_section("strategies")


def get_logging_config() -> LoggingConfig:
    return get_config_manager().get_section("logging")


def to_dict() -> Dict[str, Any]:
    """Snapshot of the shared configuration as a nested dictionary."""
    return get_config_manager().to_dict()
