"""
Abstract base class shared by rtarima models.
"""

import abc
from typing import Any, Generic, Optional, TypeVar

from rtarima.core.results import ModelFitResult, ForecastResult

R = TypeVar('R', bound=ModelFitResult)
F = TypeVar('F', bound=ForecastResult)


class ModelBase(abc.ABC, Generic[R, F]):
    """Abstract base class for forecasting models.

    Type Parameters:
        R: The fit result type for this model
        F: The forecast result type for this model
    """

    def __init__(self, name: str = "Model"):
        """Initialize the model with a name.

        Args:
            name: A descriptive name for the model
        """
        self._name = name
        self._fitted = False
        self._results: Optional[R] = None

    @property
    def name(self) -> str:
        """The model name."""
        return self._name

    @property
    def fitted(self) -> bool:
        """True once :meth:`fit` has succeeded."""
        return self._fitted

    @abc.abstractmethod
    def fit(self, data: Any) -> R:
        """Estimate the model from ``data`` and return the fit result."""

    @abc.abstractmethod
    def forecast(self, steps: int, confidence_level: float = 0.95) -> F:
        """Forecast ``steps`` periods ahead from the fitted model."""

    def summary(self) -> str:
        """Text summary of the model, including fit statistics once fitted."""
        if not self._fitted or self._results is None:
            return f"{self._name} Model (not fitted)"
        return self._results.summary()

    def __str__(self) -> str:
        return self.summary()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self._name}', fitted={self._fitted})"
