'''
Result containers for rtarima.

Fit and forecast outputs are frozen dataclasses whose arrays are read-only
copies, so a result handed to a caller is a snapshot that later refits
cannot disturb. Every container supports dictionary export and a
human-readable ``summary()``.
'''

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, TypeVar

import numpy as np
import pandas as pd

R = TypeVar('R', bound='ModelResult')


def frozen_array(values: Any) -> np.ndarray:
    """Return a read-only float64 copy of ``values``."""
    array = np.array(values, dtype=np.float64)
    array.setflags(write=False)
    return array


class ModelResult:
    """Mixin with serialization and display helpers shared by result dataclasses."""

    def _freeze_arrays(self, *names: str) -> None:
        for name in names:
            object.__setattr__(self, name, frozen_array(getattr(self, name)))

    def to_dict(self) -> Dict[str, Any]:
        """Convert the result object to a dictionary.

        Returns:
            Dict[str, Any]: Dictionary with arrays converted to lists
        """
        result_dict = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, np.ndarray):
                value = value.tolist()
            elif isinstance(value, ModelResult):
                value = value.to_dict()
            result_dict[f.name] = value
        return result_dict

    def copy(self: R) -> R:
        """Return an independent copy of the result."""
        return replace(self)

    def _header(self, title: str) -> str:
        header = f"{title}\n"
        return header + "=" * (len(header) - 1) + "\n\n"

    def __str__(self) -> str:
        return self.summary()

    def summary(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True, repr=False, eq=False)
class ModelFitResult(ModelResult):
    """Estimated coefficients and goodness-of-fit statistics of an ARIMA model.

    Attributes:
        ar: Autoregressive coefficients (length p)
        ma: Moving-average coefficients (length q)
        residuals: Conditional residuals on the differenced scale
        fitted_values: Differenced working data minus residuals
        sigma2: Sample variance of the residuals
        log_likelihood: Gaussian log-likelihood of the residuals
        aic: Akaike information criterion
        bic: Bayesian information criterion
        nobs: Length of the differenced working data
        num_params: Number of estimated parameters (p + q + 1)
        model_name: Name of the model that produced the fit
    """

    ar: np.ndarray
    ma: np.ndarray
    residuals: np.ndarray
    fitted_values: np.ndarray
    sigma2: float
    log_likelihood: float
    aic: float
    bic: float
    nobs: int = 0
    num_params: int = 0
    model_name: str = "ARIMA"

    def __post_init__(self) -> None:
        self._freeze_arrays("ar", "ma", "residuals", "fitted_values")

    @property
    def coefficients(self) -> Dict[str, np.ndarray]:
        """AR and MA coefficients keyed by component."""
        return {"ar": self.ar, "ma": self.ma}

    def __repr__(self) -> str:
        return (f"ModelFitResult(model_name={self.model_name!r}, ar={self.ar.tolist()}, "
                f"ma={self.ma.tolist()}, sigma2={self.sigma2:.6g}, aic={self.aic:.6g}, "
                f"bic={self.bic:.6g})")

    def summary(self) -> str:
        """Generate a text summary of the fitted model.

        Returns:
            str: A formatted string containing coefficients and fit statistics
        """
        summary = self._header(f"Model: {self.model_name}")

        summary += "Coefficients:\n"
        for i, value in enumerate(self.ar):
            summary += f"  ar.L{i + 1}: {value:.6f}\n"
        for i, value in enumerate(self.ma):
            summary += f"  ma.L{i + 1}: {value:.6f}\n"
        if len(self.ar) == 0 and len(self.ma) == 0:
            summary += "  (none)\n"
        summary += "\n"

        summary += "Model Fit Statistics:\n"
        summary += f"  Observations: {self.nobs}\n"
        summary += f"  Residual variance: {self.sigma2:.6f}\n"
        summary += f"  Log-likelihood: {self.log_likelihood:.6f}\n"
        summary += f"  AIC: {self.aic:.6f}\n"
        summary += f"  BIC: {self.bic:.6f}\n"
        return summary


@dataclass(frozen=True, repr=False, eq=False)
class ForecastResult(ModelResult):
    """Point forecasts and prediction intervals of an ARIMA model.

    Attributes:
        forecast: Point forecasts on the original scale
        lower_bound: Lower bounds of the prediction intervals
        upper_bound: Upper bounds of the prediction intervals
        residuals: Residuals of the fit the forecast was produced from
        aic: Akaike information criterion of that fit
        bic: Bayesian information criterion of that fit
        log_likelihood: Log-likelihood of that fit
        confidence_level: Coverage of the prediction intervals
        model_name: Name of the model that produced the forecast
    """

    forecast: np.ndarray
    lower_bound: np.ndarray
    upper_bound: np.ndarray
    residuals: np.ndarray
    aic: float
    bic: float
    log_likelihood: float
    confidence_level: float = 0.95
    model_name: str = "ARIMA"

    def __post_init__(self) -> None:
        self._freeze_arrays("forecast", "lower_bound", "upper_bound", "residuals")

    @property
    def horizon(self) -> int:
        """Number of steps forecast."""
        return len(self.forecast)

    def __repr__(self) -> str:
        return (f"ForecastResult(model_name={self.model_name!r}, horizon={self.horizon}, "
                f"confidence_level={self.confidence_level})")

    def summary(self) -> str:
        """Generate a text summary of the forecast.

        Returns:
            str: A formatted string containing the forecast table
        """
        summary = self._header(f"Forecast: {self.model_name}")
        summary += f"Forecast Horizon: {self.horizon}\n"
        summary += f"Confidence Level: {self.confidence_level:.2f}\n\n"
        summary += self.to_dataframe().to_string(float_format=lambda x: f"{x:.6f}")
        return summary + "\n"

    def to_dataframe(self, start: int = 1) -> pd.DataFrame:
        """Convert the forecast to a pandas DataFrame.

        Args:
            start: First horizon label of the index

        Returns:
            pd.DataFrame: Columns ``forecast``, ``lower`` and ``upper`` indexed by horizon
        """
        index = pd.RangeIndex(start, start + self.horizon, name="horizon")
        return pd.DataFrame(
            {
                "forecast": self.forecast,
                "lower": self.lower_bound,
                "upper": self.upper_bound,
            },
            index=index
        )
