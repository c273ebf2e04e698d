# rtarima/models/strategies.py

"""
Real-time forecasting strategies.

A strategy wraps an ARIMA model and a growing series of observations. Each
exposes the same four operations:

- ``forecast(steps)``: multi-step forecast from the current state
- ``forecast_with_real_time_data(actuals)``: walk through a batch of actual
  observations, forecasting one step ahead before each is revealed
- ``add_observation_and_forecast(observation)``: absorb one observation and
  forecast the next
- ``reset(new_data)``: start over from a new initial series

``Stepwise`` refits on the whole history, ``RollingWindow`` refits on the
most recent ``window_size`` points, and ``Adaptive`` delegates to one of the
two and switches when its recent absolute errors grow too large.
"""

import abc
import logging
from collections import deque
from dataclasses import dataclass, field, fields, replace
from typing import Any, Deque, Dict, Iterable, List, Optional, Tuple

import numpy as np
import pandas as pd

from rtarima.core.config import get_strategies_config
from rtarima.core.exceptions import ParameterError, raise_parameter_error
from rtarima.core.parameters import ParameterBase
from rtarima.core.results import ModelResult
from rtarima.core.types import SeriesLike, StrategyName
from rtarima.core.validation import (
    validate_integer, validate_non_negative, validate_observation, validate_time_series
)
from rtarima.models.arima import ARIMA

logger = logging.getLogger("rtarima.models.strategies")


@dataclass
class StrategyConfig(ParameterBase):
    """Options shared by the forecasting strategies.

    Defaults for ``refit_model``, ``adaptation_threshold`` and
    ``max_error_window_size`` come from the ``strategies`` configuration
    section.

    Attributes:
        refit_model: Whether Stepwise refits after every observation
        window_size: Rolling window length, None for the initial data length
        adaptation_threshold: Mean absolute error above which Adaptive switches
        max_error_window_size: Number of recent errors Adaptive keeps
        verbose: Narrate every step at INFO level
    """

    refit_model: bool = field(default_factory=lambda: get_strategies_config().refit_model)
    window_size: Optional[int] = None
    adaptation_threshold: float = field(
        default_factory=lambda: get_strategies_config().adaptation_threshold)
    max_error_window_size: int = field(
        default_factory=lambda: get_strategies_config().max_error_window_size)
    verbose: bool = False

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Validate option values.

        Raises:
            ParameterError: If an option is out of range or of the wrong type
        """
        for name in ("refit_model", "verbose"):
            if not isinstance(getattr(self, name), (bool, np.bool_)):
                raise_parameter_error(
                    f"{name} must be a boolean, got {getattr(self, name)!r}",
                    param_name=name,
                    param_value=getattr(self, name)
                )
        if self.window_size is not None:
            self.window_size = validate_integer(self.window_size, "window_size", min_value=1)
        self.adaptation_threshold = validate_non_negative(
            self.adaptation_threshold, "adaptation_threshold")
        self.max_error_window_size = validate_integer(
            self.max_error_window_size, "max_error_window_size", min_value=1)

    @classmethod
    def from_options(cls, config: Optional['StrategyConfig'] = None,
                     **options: Any) -> 'StrategyConfig':
        """Merge keyword options over ``config`` (or the defaults).

        Raises:
            ParameterError: If an option name is unknown or a value is invalid
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(options) - known)
        if unknown:
            raise ParameterError(
                f"Unknown strategy option(s): {', '.join(unknown)}",
                param_name=unknown[0],
                constraint=f"one of {', '.join(sorted(known))}"
            )
        if config is None:
            return cls(**options)
        if not isinstance(config, StrategyConfig):
            raise ParameterError(
                f"config must be a StrategyConfig, got {type(config).__name__}",
                param_name="config"
            )
        return replace(config, **options)


@dataclass(frozen=True, repr=False, eq=False)
class StrategyForecast(ModelResult):
    """Point forecasts with prediction interval bounds.

    Attributes:
        forecasts: Point forecasts
        lower_bound: Lower interval bounds
        upper_bound: Upper interval bounds
    """

    forecasts: np.ndarray
    lower_bound: np.ndarray
    upper_bound: np.ndarray

    def __post_init__(self) -> None:
        self._freeze_arrays("forecasts", "lower_bound", "upper_bound")

    @property
    def confidence_intervals(self) -> Dict[str, np.ndarray]:
        """Interval bounds keyed ``lower`` and ``upper``."""
        return {"lower": self.lower_bound, "upper": self.upper_bound}

    @property
    def horizon(self) -> int:
        return len(self.forecasts)

    def to_dataframe(self) -> pd.DataFrame:
        """Convert the result to a DataFrame with one row per step."""
        data = {"forecast": self.forecasts, "lower": self.lower_bound, "upper": self.upper_bound}
        data.update(self._extra_columns())
        return pd.DataFrame(data, index=pd.RangeIndex(1, self.horizon + 1, name="step"))

    def _extra_columns(self) -> Dict[str, np.ndarray]:
        return {}

    def summary(self) -> str:
        summary = self._header(f"{type(self).__name__} ({self.horizon} steps)")
        if self.horizon:
            summary += self.to_dataframe().to_string(float_format=lambda x: f"{x:.6f}")
        return summary + "\n"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(horizon={self.horizon})"


@dataclass(frozen=True, repr=False, eq=False)
class RealTimeForecastResult(StrategyForecast):
    """One-step-ahead forecasts made while a batch of actuals was revealed.

    Attributes:
        errors: Absolute forecast errors
        actual_values: The actual observations
    """

    errors: np.ndarray
    actual_values: np.ndarray

    def __post_init__(self) -> None:
        super().__post_init__()
        self._freeze_arrays("errors", "actual_values")

    @property
    def mean_absolute_error(self) -> float:
        """Mean of ``errors``; NaN for an empty batch."""
        return float(np.mean(self.errors)) if len(self.errors) else float("nan")

    def _extra_columns(self) -> Dict[str, np.ndarray]:
        return {"actual": self.actual_values, "error": self.errors}


@dataclass(frozen=True, repr=False, eq=False)
class StepwiseForecastResult(RealTimeForecastResult):
    """Real-time forecasts together with the models refitted after each step.

    Attributes:
        updated_models: Refitted models in step order, empty when refitting is off
    """

    updated_models: Tuple[ARIMA, ...] = ()

    def __post_init__(self) -> None:
        super().__post_init__()
        object.__setattr__(self, "updated_models", tuple(self.updated_models))


@dataclass(frozen=True)
class ObservationForecast:
    """Next-step forecast after absorbing one observation.

    Attributes:
        forecast: Point forecast for the next observation
        lower_bound: Lower interval bound
        upper_bound: Upper interval bound
        error: Absolute error of the previous forecast against the new
            observation, None if there was no previous forecast
    """

    forecast: float
    lower_bound: float
    upper_bound: float
    error: Optional[float] = None


class ForecastStrategy(abc.ABC):
    """Abstract base class for real-time forecasting strategies.

    Args:
        base_model: Model whose orders the strategy forecasts with
        initial_data: Initial observations (copied)
        config: Strategy options
        **options: Individual ``StrategyConfig`` fields, overriding ``config``

    Raises:
        ParameterError: If base_model is not an ARIMA model or an option is invalid
        DataError: If initial_data is not a finite one-dimensional series
    """

    def __init__(self,
                 base_model: ARIMA,
                 initial_data: SeriesLike,
                 config: Optional[StrategyConfig] = None,
                 **options: Any):
        if not isinstance(base_model, ARIMA):
            raise ParameterError(
                f"base_model must be an ARIMA model, got {type(base_model).__name__}",
                param_name="base_model"
            )
        self._base_model = base_model
        self._initial_data = validate_time_series(initial_data, min_length=1,
                                                  data_name="initial_data")
        self._config = StrategyConfig.from_options(config, **options)

    @property
    def config(self) -> StrategyConfig:
        """Copy of the strategy options."""
        return self._config.copy()

    def _narrate(self, message: str) -> None:
        if self._config.verbose:
            logger.info(message)

    def _new_model(self) -> ARIMA:
        return ARIMA(self._base_model.get_params(), name=self._base_model.name)

    @staticmethod
    def _validate_actuals(actual_observations: SeriesLike) -> np.ndarray:
        return validate_time_series(actual_observations, min_length=0,
                                    data_name="actual_observations")

    @abc.abstractmethod
    def forecast(self, steps: int) -> StrategyForecast:
        """Forecast ``steps`` periods ahead from the current state."""

    @abc.abstractmethod
    def forecast_with_real_time_data(self, actual_observations: SeriesLike) -> RealTimeForecastResult:
        """Forecast one step ahead before each actual observation is revealed."""

    @abc.abstractmethod
    def add_observation_and_forecast(self, observation: float) -> ObservationForecast:
        """Absorb one observation and forecast the next."""

    @abc.abstractmethod
    def reset(self, new_data: SeriesLike) -> None:
        """Restart from a new initial series."""

    @abc.abstractmethod
    def get_current_data(self) -> np.ndarray:
        """Copy of all observations seen so far."""

    @abc.abstractmethod
    def get_current_model(self) -> Optional[ARIMA]:
        """The model the next forecast will come from."""

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(params={self._base_model.params}, "
                f"observations={len(self.get_current_data())})")


class _SingleModelStrategy(ForecastStrategy):
    """Shared state of strategies that track one series and one model."""

    def __init__(self,
                 base_model: ARIMA,
                 initial_data: SeriesLike,
                 config: Optional[StrategyConfig] = None,
                 **options: Any):
        super().__init__(base_model, initial_data, config, **options)
        self._current_data = self._initial_data.copy()
        self._current_model: Optional[ARIMA] = None
        self._last_forecast: Optional[ObservationForecast] = None

    @staticmethod
    def _one_step(model: ARIMA) -> ObservationForecast:
        result = model.forecast(1)
        return ObservationForecast(
            forecast=float(result.forecast[0]),
            lower_bound=float(result.lower_bound[0]),
            upper_bound=float(result.upper_bound[0])
        )

    def _error_against_last(self, observation: float) -> Optional[float]:
        if self._last_forecast is None:
            return None
        error = abs(self._last_forecast.forecast - observation)
        self._narrate(
            f"Previous forecast: {self._last_forecast.forecast:.3f}, "
            f"Actual observation: {observation:.3f}, Error: {error:.3f}"
        )
        return error

    def get_current_data(self) -> np.ndarray:
        return self._current_data.copy()

    def get_current_model(self) -> Optional[ARIMA]:
        return self._current_model


class Stepwise(_SingleModelStrategy):
    """Refit on the entire history after every observation.

    The strategy owns its model: a copy of ``base_model`` when that model is
    already fitted on exactly ``initial_data``, otherwise a fresh model with
    the same orders fitted on ``initial_data``. With ``refit_model=False``
    the model is never refitted and forecasts keep coming from the same fit.

    Examples:
        >>> import numpy as np
        >>> from rtarima import ARIMA, Stepwise
        >>> data = np.cumsum(np.random.default_rng(1).normal(size=100))
        >>> strategy = Stepwise(ARIMA((1, 1, 0)), data[:80])
        >>> result = strategy.forecast_with_real_time_data(data[80:])
        >>> len(result.updated_models)
        20
    """

    def __init__(self,
                 base_model: ARIMA,
                 initial_data: SeriesLike,
                 config: Optional[StrategyConfig] = None,
                 **options: Any):
        super().__init__(base_model, initial_data, config, **options)
        self._current_model = self._own_model(self._current_data)

    def _own_model(self, data: np.ndarray) -> ARIMA:
        if self._base_model.fitted and np.array_equal(self._base_model.data, data):
            return self._base_model.copy()
        model = self._new_model()
        model.fit(data)
        return model

    def _refit(self, data: np.ndarray) -> ARIMA:
        model = self._new_model()
        model.fit(data)
        return model

    def forecast(self, steps: int) -> StrategyForecast:
        result = self._current_model.forecast(steps)
        return StrategyForecast(result.forecast, result.lower_bound, result.upper_bound)

    def forecast_with_real_time_data(self, actual_observations: SeriesLike) -> StepwiseForecastResult:
        """Walk through ``actual_observations`` one step at a time.

        Before each actual is appended the current model forecasts it; with
        refitting on, a new model is then fitted on the extended history.
        State is committed only after the whole batch succeeds.
        """
        actuals = self._validate_actuals(actual_observations)
        working_data = self._current_data
        working_model = self._current_model
        forecasts: List[ObservationForecast] = []
        updated_models: List[ARIMA] = []

        for step, actual in enumerate(actuals, start=1):
            one_step = self._one_step(working_model)
            forecasts.append(one_step)
            working_data = np.append(working_data, actual)

            if self._config.refit_model:
                working_model = self._refit(working_data)
                updated_models.append(working_model)

            self._narrate(
                f"Step {step}: Forecast={one_step.forecast:.3f}, Actual={actual:.3f}, "
                f"Error={abs(one_step.forecast - actual):.3f}"
            )

        self._current_data = working_data
        self._current_model = working_model
        if len(actuals):
            # A pending single-step forecast no longer refers to the next observation
            self._last_forecast = None

        return StepwiseForecastResult(
            forecasts=np.array([f.forecast for f in forecasts]),
            lower_bound=np.array([f.lower_bound for f in forecasts]),
            upper_bound=np.array([f.upper_bound for f in forecasts]),
            errors=np.abs(np.array([f.forecast for f in forecasts]) - actuals),
            actual_values=actuals,
            updated_models=updated_models
        )

    def add_observation_and_forecast(self, observation: float) -> ObservationForecast:
        observation = validate_observation(observation)
        error = self._error_against_last(observation)
        data = np.append(self._current_data, observation)
        model = self._refit(data) if self._config.refit_model else self._current_model

        next_forecast = self._one_step(model)
        self._current_data = data
        self._current_model = model
        self._last_forecast = next_forecast
        self._narrate(f"Next forecast: {next_forecast.forecast:.3f}")

        return replace(next_forecast, error=error)

    def reset(self, new_data: SeriesLike) -> None:
        data = validate_time_series(new_data, min_length=1, data_name="new_data")
        model = self._refit(data)
        self._current_data = data
        self._current_model = model
        self._last_forecast = None


class RollingWindow(_SingleModelStrategy):
    """Refit a fresh model on the most recent ``window_size`` observations.

    The full history is kept, but every fit only sees the trailing window.
    ``window_size`` defaults to the length of the initial data.
    """

    def __init__(self,
                 base_model: ARIMA,
                 initial_data: SeriesLike,
                 config: Optional[StrategyConfig] = None,
                 **options: Any):
        super().__init__(base_model, initial_data, config, **options)
        if self._config.window_size is None:
            self._window_size = len(self._initial_data)
        else:
            self._window_size = self._config.window_size

    @property
    def window_size(self) -> int:
        return self._window_size

    @window_size.setter
    def window_size(self, value: int) -> None:
        self._window_size = validate_integer(value, "window_size", min_value=1)

    def set_window_size(self, window_size: int) -> None:
        """Change the window length used by subsequent fits."""
        self.window_size = window_size

    def get_window_size(self) -> int:
        return self._window_size

    def _fit_window(self, data: np.ndarray) -> ARIMA:
        model = self._new_model()
        model.fit(data[-self._window_size:])
        return model

    def forecast(self, steps: int) -> StrategyForecast:
        model = self._fit_window(self._current_data)
        result = model.forecast(steps)
        self._current_model = model
        return StrategyForecast(result.forecast, result.lower_bound, result.upper_bound)

    def forecast_with_real_time_data(self, actual_observations: SeriesLike) -> RealTimeForecastResult:
        """Walk through ``actual_observations`` refitting on the window before each.

        The window used for the forecast of an actual never includes that
        actual. State is committed only after the whole batch succeeds.
        """
        actuals = self._validate_actuals(actual_observations)
        working_data = self._current_data
        model = self._current_model
        forecasts: List[ObservationForecast] = []

        for step, actual in enumerate(actuals, start=1):
            model = self._fit_window(working_data)
            one_step = self._one_step(model)
            forecasts.append(one_step)
            working_data = np.append(working_data, actual)

            self._narrate(
                f"Rolling Step {step}: Forecast={one_step.forecast:.3f}, Actual={actual:.3f}, "
                f"Error={abs(one_step.forecast - actual):.3f}, "
                f"Window Size={min(self._window_size, len(working_data) - 1)}"
            )

        self._current_data = working_data
        self._current_model = model
        if len(actuals):
            self._last_forecast = None

        point = np.array([f.forecast for f in forecasts])
        return RealTimeForecastResult(
            forecasts=point,
            lower_bound=np.array([f.lower_bound for f in forecasts]),
            upper_bound=np.array([f.upper_bound for f in forecasts]),
            errors=np.abs(point - actuals),
            actual_values=actuals
        )

    def add_observation_and_forecast(self, observation: float) -> ObservationForecast:
        observation = validate_observation(observation)
        error = self._error_against_last(observation)
        data = np.append(self._current_data, observation)
        model = self._fit_window(data)

        next_forecast = self._one_step(model)
        self._current_data = data
        self._current_model = model
        self._last_forecast = next_forecast
        self._narrate(
            f"Next forecast: {next_forecast.forecast:.3f}, "
            f"Window Size: {min(self._window_size, len(data))}"
        )

        return replace(next_forecast, error=error)

    def reset(self, new_data: SeriesLike) -> None:
        self._current_data = validate_time_series(new_data, min_length=1, data_name="new_data")
        self._current_model = None
        self._last_forecast = None


class Adaptive(ForecastStrategy):
    """Switch between Stepwise and RollingWindow based on recent errors.

    Both inner strategies are built from the same base model and initial
    data; only the active one receives observations. Absolute errors are
    collected in a window of ``max_error_window_size``. Once the window is
    full, the sum of its most recent ``switch_lookback`` errors is divided
    by ``switch_lookback``; if that exceeds ``adaptation_threshold`` the
    other strategy becomes active and the window is cleared.
    """

    def __init__(self,
                 base_model: ARIMA,
                 initial_data: SeriesLike,
                 config: Optional[StrategyConfig] = None,
                 **options: Any):
        super().__init__(base_model, initial_data, config, **options)
        self._stepwise = Stepwise(base_model, self._initial_data,
                                  replace(self._config, refit_model=True))
        self._rolling = RollingWindow(base_model, self._initial_data, self._config)
        self._error_window: Deque[float] = deque(maxlen=self._config.max_error_window_size)
        self._switch_lookback = get_strategies_config().switch_lookback
        self._current_strategy: StrategyName = "stepwise"

    @property
    def _active(self) -> _SingleModelStrategy:
        return self._stepwise if self._current_strategy == "stepwise" else self._rolling

    @property
    def error_window(self) -> Tuple[float, ...]:
        """Errors collected since the last switch, oldest first."""
        return tuple(self._error_window)

    def get_current_strategy(self) -> StrategyName:
        """Name of the active strategy, ``"stepwise"`` or ``"rolling"``."""
        return self._current_strategy

    def _record_errors(self, errors: Iterable[float]) -> None:
        self._error_window.extend(float(e) for e in errors)
        if self._should_switch():
            self._switch_strategy()

    def _should_switch(self) -> bool:
        if len(self._error_window) < self._error_window.maxlen:
            return False
        # Averaged over the full lookback even when fewer errors are held
        recent = list(self._error_window)[-self._switch_lookback:]
        return sum(recent) / self._switch_lookback > self._config.adaptation_threshold

    def _switch_strategy(self) -> None:
        previous = self._current_strategy
        self._current_strategy = "rolling" if previous == "stepwise" else "stepwise"
        self._error_window.clear()
        logger.debug(f"Adaptive strategy switched from {previous} to {self._current_strategy}")
        self._narrate(f"Switching strategy from {previous} to {self._current_strategy}")

    def forecast(self, steps: int) -> StrategyForecast:
        return self._active.forecast(steps)

    def forecast_with_real_time_data(self, actual_observations: SeriesLike) -> RealTimeForecastResult:
        """Delegate the batch, then record its errors and evaluate a switch once."""
        result = self._active.forecast_with_real_time_data(actual_observations)
        self._record_errors(result.errors)
        return result

    def add_observation_and_forecast(self, observation: float) -> ObservationForecast:
        result = self._active.add_observation_and_forecast(observation)
        if result.error is not None:
            self._record_errors([result.error])

        error_text = f", Error: {result.error:.3f}" if result.error is not None else ""
        self._narrate(
            f"Adaptive strategy ({self._current_strategy}): New observation: "
            f"{float(observation):.3f}, Next forecast: {result.forecast:.3f}{error_text}"
        )
        return result

    def reset(self, new_data: SeriesLike) -> None:
        data = validate_time_series(new_data, min_length=1, data_name="new_data")
        self._stepwise.reset(data)
        self._rolling.reset(data)
        self._error_window.clear()
        self._current_strategy = "stepwise"

    def get_current_data(self) -> np.ndarray:
        return self._active.get_current_data()

    def get_current_model(self) -> Optional[ARIMA]:
        return self._active.get_current_model()
