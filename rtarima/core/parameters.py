# rtarima/core/parameters.py

"""
Parameter containers for ARIMA-family models.

The containers are frozen dataclasses: once a model is configured its orders
cannot change, and every accessor hands out copies. Seasonal and exogenous
variants are provided for describing models, but only the non-seasonal
orders ``p``, ``d`` and ``q`` take part in estimation.
"""

from dataclasses import dataclass, field, asdict, fields, is_dataclass
from typing import Any, Dict, Mapping, Optional, Sequence, Type, TypeVar, Union

import numpy as np

from rtarima.core.exceptions import ParameterError
from rtarima.core.validation import validate_integer

P = TypeVar('P', bound='ParameterBase')


class ParameterBase:
    """Base class for all parameter containers.

    Provides validation, serialization and copying shared across parameter
    types.
    """

    def validate(self) -> None:
        """Validate parameter constraints.

        Raises:
            ParameterError: If parameter constraints are violated
        """

    def to_dict(self) -> Dict[str, Any]:
        """Convert parameters to a dictionary.

        Returns:
            Dict[str, Any]: Dictionary representation of parameters
        """
        if is_dataclass(self):
            return asdict(self)
        return {k: v for k, v in self.__dict__.items() if not k.startswith('_')}

    def to_array(self) -> np.ndarray:
        """Convert parameters to a NumPy array.

        Raises:
            NotImplementedError: If not implemented by subclass
        """
        raise NotImplementedError("to_array must be implemented by subclass")

    def copy(self: P) -> P:
        """Create a copy of the parameter object.

        Returns:
            P: Copy of the parameter object
        """
        return type(self)(**self.to_dict())


@dataclass(frozen=True)
class ARIMAParams(ParameterBase):
    """Orders of an ARIMA(p, d, q) model.

    Attributes:
        p: Autoregressive order
        d: Differencing order
        q: Moving-average order
    """

    p: int
    d: int
    q: int

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Validate that all orders are non-negative integers.

        Raises:
            ParameterError: If any order is negative or not an integer
        """
        for f in fields(ARIMAParams):
            # Normalise NumPy integers so equality and hashing behave
            object.__setattr__(self, f.name, validate_integer(getattr(self, f.name), f.name))

    @property
    def max_lag(self) -> int:
        """Number of leading observations the residual recursion skips."""
        return max(self.p, self.q)

    @property
    def num_params(self) -> int:
        """Parameter count used by the information criteria (AR + MA + variance)."""
        return self.p + self.q + 1

    def to_array(self) -> np.ndarray:
        return np.array([self.p, self.d, self.q], dtype=np.int64)

    def __str__(self) -> str:
        return f"ARIMA({self.p},{self.d},{self.q})"

    @classmethod
    def coerce(cls: Type['ARIMAParams'],
               value: Union['ARIMAParams', Mapping[str, int], Sequence[int]]) -> 'ARIMAParams':
        """Build an ``ARIMAParams`` from an instance, a mapping or a ``(p, d, q)`` tuple.

        Raises:
            ParameterError: If the value cannot be interpreted as model orders
        """
        if isinstance(value, ARIMAParams):
            return ARIMAParams(value.p, value.d, value.q)
        if isinstance(value, Mapping):
            missing = [k for k in ("p", "d", "q") if k not in value]
            if missing:
                raise ParameterError(
                    f"ARIMA parameters are missing keys: {', '.join(missing)}",
                    param_name="params",
                    param_value=dict(value)
                )
            return cls(value["p"], value["d"], value["q"])
        if isinstance(value, Sequence) and not isinstance(value, str) and len(value) == 3:
            return cls(*value)
        raise ParameterError(
            f"Cannot interpret {value!r} as ARIMA parameters",
            param_name="params",
            param_value=value,
            constraint="ARIMAParams, mapping with p/d/q, or (p, d, q)"
        )


@dataclass(frozen=True)
class SARIMAParams(ARIMAParams):
    """Orders of a seasonal ARIMA(p, d, q)(P, D, Q)s model.

    Attributes:
        P: Seasonal autoregressive order
        D: Seasonal differencing order
        Q: Seasonal moving-average order
        s: Season length in observations
    """

    P: int = 0
    D: int = 0
    Q: int = 0
    s: int = 1

    def validate(self) -> None:
        super().validate()
        for name in ("P", "D", "Q"):
            object.__setattr__(self, name, validate_integer(getattr(self, name), name))
        object.__setattr__(self, "s", validate_integer(self.s, "s", min_value=1))

    def to_array(self) -> np.ndarray:
        return np.array([self.p, self.d, self.q, self.P, self.D, self.Q, self.s], dtype=np.int64)

    def __str__(self) -> str:
        return f"SARIMA({self.p},{self.d},{self.q})({self.P},{self.D},{self.Q}){self.s}"


@dataclass(frozen=True)
class SARIMAXParams(SARIMAParams):
    """Seasonal ARIMA orders together with an exogenous regressor matrix.

    Attributes:
        exogenous: Regressors with one row per observation, or None
    """

    exogenous: Optional[np.ndarray] = field(default=None, compare=False)

    def validate(self) -> None:
        super().validate()
        if self.exogenous is not None:
            exog = np.array(self.exogenous, dtype=np.float64)
            if exog.ndim == 1:
                exog = exog.reshape(-1, 1)
            if exog.ndim != 2:
                raise ParameterError(
                    f"exogenous must be a 2D matrix, got {exog.ndim} dimensions",
                    param_name="exogenous",
                    constraint="2D array"
                )
            exog.setflags(write=False)
            object.__setattr__(self, "exogenous", exog)

    @property
    def num_exogenous(self) -> int:
        """Number of exogenous regressors."""
        return 0 if self.exogenous is None else self.exogenous.shape[1]
