"""
Exhaustive ARIMA order selection by information criterion.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional

import pandas as pd

from rtarima.core.exceptions import RTArimaError, raise_parameter_error
from rtarima.core.parameters import ARIMAParams
from rtarima.core.types import Criterion, SeriesLike
from rtarima.core.validation import validate_integer, validate_time_series
from rtarima.models.arima import ARIMA

logger = logging.getLogger("rtarima.models.selection")

_CRITERIA = ("aic", "bic")


class CandidateScore(NamedTuple):
    """Orders of a successfully fitted candidate and its criterion value."""
    params: ARIMAParams
    score: float


@dataclass(frozen=True)
class ModelSelection:
    """Outcome of an order search.

    Attributes:
        best_params: Orders with the lowest score, None if no candidate fitted
        best_score: Lowest score, ``inf`` if no candidate fitted
        all_results: Every fitted candidate sorted by ascending score, NaN last
        criterion: Criterion used for scoring
    """
    best_params: Optional[ARIMAParams]
    best_score: float
    all_results: List[CandidateScore] = field(default_factory=list)
    criterion: str = "aic"

    def to_dataframe(self) -> pd.DataFrame:
        """Candidates as a DataFrame with columns ``p``, ``d``, ``q`` and ``score``."""
        return pd.DataFrame(
            [(c.params.p, c.params.d, c.params.q, c.score) for c in self.all_results],
            columns=["p", "d", "q", "score"]
        )

    def __str__(self) -> str:
        best = self.best_params if self.best_params is not None else "none"
        return (f"Model selection ({self.criterion.upper()}): best {best}, "
                f"score {self.best_score:.6f}, {len(self.all_results)} candidates fitted")


def _sort_key(candidate: CandidateScore):
    return (math.isnan(candidate.score), candidate.score)


class AutoARIMA:
    """Grid search over ARIMA orders."""

    @staticmethod
    def find_best_arima(data: SeriesLike,
                        max_p: int = 5,
                        max_d: int = 2,
                        max_q: int = 5,
                        criterion: Criterion = "aic") -> ModelSelection:
        """Fit every order up to the bounds and keep the lowest criterion.

        Orders are visited ``p`` outermost, then ``d``, then ``q``; on ties
        the first visited order wins. Candidates that cannot be fitted, for
        example because the series is too short or the AR system is
        singular, are skipped.

        Args:
            data: Observed series
            max_p: Largest AR order tried
            max_d: Largest differencing order tried
            max_q: Largest MA order tried
            criterion: ``"aic"`` or ``"bic"``

        Returns:
            ModelSelection: Best orders, best score and all scored candidates

        Raises:
            ParameterError: If a bound is negative or the criterion is unknown
            DataError: If the series itself is invalid
        """
        if criterion not in _CRITERIA:
            raise_parameter_error(
                f"criterion must be one of {_CRITERIA}, got {criterion!r}",
                param_name="criterion",
                param_value=criterion,
                constraint="aic or bic"
            )
        max_p = validate_integer(max_p, "max_p")
        max_d = validate_integer(max_d, "max_d")
        max_q = validate_integer(max_q, "max_q")
        values = validate_time_series(data, min_length=1)

        results: List[CandidateScore] = []
        best_params: Optional[ARIMAParams] = None
        best_score = math.inf

        for p in range(max_p + 1):
            for d in range(max_d + 1):
                for q in range(max_q + 1):
                    params = ARIMAParams(p, d, q)
                    try:
                        fit_result = ARIMA(params).fit(values)
                    except RTArimaError as e:
                        logger.debug(f"Skipping {params}: {e.message}")
                        continue

                    score = fit_result.aic if criterion == "aic" else fit_result.bic
                    results.append(CandidateScore(params, score))
                    if score < best_score:
                        best_score = score
                        best_params = params

        results.sort(key=_sort_key)
        logger.debug(
            f"Order search fitted {len(results)} candidates, best {best_params} "
            f"with {criterion}={best_score:.6g}"
        )
        return ModelSelection(
            best_params=best_params,
            best_score=best_score,
            all_results=results,
            criterion=criterion
        )


def find_best_arima(data: SeriesLike,
                    max_p: int = 5,
                    max_d: int = 2,
                    max_q: int = 5,
                    criterion: Criterion = "aic") -> ModelSelection:
    """Module-level shortcut for :meth:`AutoARIMA.find_best_arima`."""
    return AutoARIMA.find_best_arima(data, max_p, max_d, max_q, criterion)
