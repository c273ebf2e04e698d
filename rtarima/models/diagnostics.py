# rtarima/models/diagnostics.py

"""
Residual diagnostics.

Functions:
    ljung_box: Ljung-Box portmanteau test for residual autocorrelation
    jarque_bera: Jarque-Bera test for residual normality
    plot_residuals: Numeric residual summary (moments, ACF, both tests)
    chi_square_p_value: Upper-tail probability of the chi-square distribution
    log_gamma: Lanczos approximation to the log-gamma function
"""
import logging
import math
from dataclasses import dataclass, field, asdict
from typing import Any, ClassVar, Dict, List, Optional

import numpy as np
from scipy import stats

from rtarima.core.exceptions import warn_numeric
from rtarima.core.types import SeriesLike
from rtarima.core.validation import validate_integer, validate_time_series
from rtarima.utils.statistics import autocorrelation, mean, standard_deviation, variance

logger = logging.getLogger("rtarima.models.diagnostics")

_LANCZOS_G = 7
_LANCZOS_COEFFICIENTS = (
    0.99999999999980993, 676.5203681218851, -1259.1392167224028,
    771.32342877765313, -176.61502916214059, 12.507343278686905,
    -0.13857109526572012, 9.9843695780195716e-6, 1.5056327351493116e-7
)
_GAMMA_MAX_ITERATIONS = 1000
_GAMMA_EPSILON = 1e-14
_GAMMA_TINY = 1e-300


@dataclass
class TestResult:
    """Outcome of a hypothesis test on residuals.

    Subclasses set ``default_null`` and ``default_alternative``; the
    ``conclusion`` is derived from ``p_value`` when not given.

    Attributes:
        test_name: Name of the test
        test_statistic: Test statistic value
        p_value: Upper-tail probability of the statistic
        critical_values: Critical values keyed by significance level
        null_hypothesis: Null hypothesis in words
        alternative_hypothesis: Alternative hypothesis in words
        conclusion: Verdict at ``significance_level``
        significance_level: Level the verdict is drawn at
    """
    __test__ = False
    default_null: ClassVar[str] = ""
    default_alternative: ClassVar[str] = ""

    test_name: str
    test_statistic: float
    p_value: float
    critical_values: Dict[str, float] = field(default_factory=dict)
    null_hypothesis: str = ""
    alternative_hypothesis: str = ""
    conclusion: Optional[str] = None
    significance_level: float = 0.05

    def __post_init__(self) -> None:
        self.null_hypothesis = self.null_hypothesis or self.default_null
        self.alternative_hypothesis = self.alternative_hypothesis or self.default_alternative
        if self.conclusion is None:
            verdict = "Reject" if self.reject_null else "Fail to reject"
            self.conclusion = (f"{verdict} null hypothesis at "
                               f"{self.significance_level:.2f} significance level")

    @property
    def statistic(self) -> float:
        """Alias of ``test_statistic``."""
        return self.test_statistic

    @property
    def reject_null(self) -> bool:
        return self.p_value < self.significance_level

    def __str__(self) -> str:
        lines = [f"{self.test_name} Test Results:",
                 f"  Statistic: {self.test_statistic:.6f} (p-value {self.p_value:.6f})"]
        lines.extend(f"  Critical value {level}: {value:.6f}"
                     for level, value in self.critical_values.items())
        for label, text in (("H0", self.null_hypothesis), ("H1", self.alternative_hypothesis)):
            if text:
                lines.append(f"  {label}: {text}")
        lines.append(f"  {self.conclusion}")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class LjungBoxResult(TestResult):
    """Ljung-Box test result.

    Attributes:
        lags: Number of lags actually used
        df: Degrees of freedom of the reference chi-square distribution
        autocorrelations: Residual autocorrelations at lags 1..lags
    """
    default_null: ClassVar[str] = "No autocorrelation in residuals"
    default_alternative: ClassVar[str] = "Residuals are autocorrelated up to the tested lag"

    lags: int = 0
    df: int = 0
    autocorrelations: List[float] = field(default_factory=list)


@dataclass
class JarqueBeraResult(TestResult):
    """Jarque-Bera test result with the moments it was computed from."""
    default_null: ClassVar[str] = "Residuals have normal skewness and kurtosis"
    default_alternative: ClassVar[str] = "Residual skewness or kurtosis departs from normal"

    skewness: float = 0.0
    kurtosis: float = 0.0


@dataclass
class ResidualSummary:
    """Numeric residual summary.

    Attributes:
        mean: Residual mean
        variance: Residual sample variance
        autocorrelations: Autocorrelations at lags 1..min(20, n // 4)
        ljung_box: Ljung-Box test with the default 10 lags
        jarque_bera: Jarque-Bera test
    """

    mean: float
    variance: float
    autocorrelations: List[float]
    ljung_box: LjungBoxResult
    jarque_bera: JarqueBeraResult

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def __str__(self) -> str:
        lines = [
            "Residual Summary:",
            f"  Mean: {self.mean:.6f}",
            f"  Variance: {self.variance:.6f}",
            "  Autocorrelations: " + ", ".join(f"{a:.4f}" for a in self.autocorrelations),
            str(self.ljung_box),
            str(self.jarque_bera),
        ]
        return "\n".join(lines)


def log_gamma(z: float) -> float:
    """Lanczos approximation (g = 7, 9 coefficients) to ``ln Gamma(z)`` for ``z > 0``."""
    if z < 0.5:
        # Reflection formula
        return math.log(math.pi) - math.log(abs(math.sin(math.pi * z))) - log_gamma(1 - z)

    z -= 1
    x = _LANCZOS_COEFFICIENTS[0]
    for i in range(1, _LANCZOS_G + 2):
        x += _LANCZOS_COEFFICIENTS[i] / (z + i)
    t = z + _LANCZOS_G + 0.5
    return 0.5 * math.log(2 * math.pi) + (z + 0.5) * math.log(t) - t + math.log(x)


def _lower_gamma_series(s: float, x: float) -> float:
    """Regularized lower incomplete gamma ``P(s, x)`` by its power series."""
    term = 1.0 / s
    total = term
    for k in range(1, _GAMMA_MAX_ITERATIONS):
        term *= x / (s + k)
        total += term
        if abs(term) < abs(total) * _GAMMA_EPSILON:
            break
    return math.exp(-x + s * math.log(x) - log_gamma(s)) * total


def _upper_gamma_continued_fraction(s: float, x: float) -> float:
    """Regularized upper incomplete gamma ``Q(s, x)`` by Lentz's continued fraction."""
    b = x + 1 - s
    c = 1 / _GAMMA_TINY
    d = 1 / b
    h = d
    for i in range(1, _GAMMA_MAX_ITERATIONS):
        an = -i * (i - s)
        b += 2
        d = an * d + b
        if abs(d) < _GAMMA_TINY:
            d = _GAMMA_TINY
        c = b + an / c
        if abs(c) < _GAMMA_TINY:
            c = _GAMMA_TINY
        d = 1 / d
        delta = d * c
        h *= delta
        if abs(delta - 1) < _GAMMA_EPSILON:
            break
    return math.exp(-x + s * math.log(x) - log_gamma(s)) * h


def upper_incomplete_gamma(s: float, x: float) -> float:
    """
    Regularized upper incomplete gamma function ``Q(s, x) = 1 - P(s, x)``.

    The power series is used below ``x = s + 1``, the continued fraction
    above, so the result stays accurate for large arguments. The value is
    clipped to [0, 1].
    """
    if s <= 0:
        raise ValueError(f"s must be positive, got {s}")
    if x <= 0:
        return 1.0
    if x < s + 1:
        q = 1.0 - _lower_gamma_series(s, x)
    else:
        q = _upper_gamma_continued_fraction(s, x)
    return min(1.0, max(0.0, q))


def chi_square_p_value(statistic: float, df: int) -> float:
    """Upper-tail probability of a chi-square variable with ``df`` degrees of freedom."""
    return upper_incomplete_gamma(df / 2, statistic / 2)


def _critical_values(df: int) -> Dict[str, float]:
    return {
        "1%": float(stats.chi2.ppf(0.99, df)),
        "5%": float(stats.chi2.ppf(0.95, df)),
        "10%": float(stats.chi2.ppf(0.90, df)),
    }


def ljung_box(residuals: SeriesLike,
              lags: int = 10,
              significance_level: float = 0.05) -> LjungBoxResult:
    """Perform the Ljung-Box test for autocorrelation in residuals.

    ``Q = n (n + 2) sum_{k=1..L} acf(k)^2 / (n - k)`` is compared against a
    chi-square distribution with ``L`` degrees of freedom.

    Args:
        residuals: Residuals to test
        lags: Number of lags L; capped at ``n - 1`` with a NumericWarning
        significance_level: Significance level for the conclusion

    Returns:
        LjungBoxResult: Statistic, p-value and the autocorrelations used

    Raises:
        DataError: If fewer than two residuals are given or they are not finite
        ParameterError: If lags is not a positive integer

    Examples:
        >>> import numpy as np
        >>> from rtarima.models.diagnostics import ljung_box
        >>> result = ljung_box(np.random.default_rng(42).normal(size=200), lags=10)
        >>> 0 <= result.p_value <= 1
        True
    """
    values = validate_time_series(residuals, min_length=2, data_name="residuals")
    lags = validate_integer(lags, "lags", min_value=1)
    n = len(values)

    if lags > n - 1:
        warn_numeric(
            f"Ljung-Box lags reduced from {lags} to {n - 1}",
            operation="ljung_box",
            issue="lags exceed the number of residuals",
            value=lags
        )
        lags = n - 1

    autocorrs = [autocorrelation(values, lag) for lag in range(1, lags + 1)]
    statistic = n * (n + 2) * sum(r ** 2 / (n - k) for k, r in enumerate(autocorrs, start=1))
    p_value = chi_square_p_value(statistic, lags)

    logger.debug(f"Ljung-Box: Q={statistic:.6g}, lags={lags}, p={p_value:.6g}")

    return LjungBoxResult(
        test_name="Ljung-Box",
        test_statistic=float(statistic),
        p_value=p_value,
        critical_values=_critical_values(lags),
        significance_level=significance_level,
        lags=lags,
        df=lags,
        autocorrelations=[float(r) for r in autocorrs]
    )


def jarque_bera(residuals: SeriesLike,
                significance_level: float = 0.05) -> JarqueBeraResult:
    """Perform the Jarque-Bera test for normality of residuals.

    Skewness ``S`` and excess kurtosis ``K`` are computed from residuals
    standardized by the sample standard deviation, and
    ``JB = n / 6 (S^2 + K^2 / 4)`` is compared against chi-square(2).

    Args:
        residuals: Residuals to test
        significance_level: Significance level for the conclusion

    Returns:
        JarqueBeraResult: Statistic, p-value, skewness and excess kurtosis

    Raises:
        DataError: If fewer than two residuals are given or they are not finite
    """
    values = validate_time_series(residuals, min_length=2, data_name="residuals")
    n = len(values)
    std = standard_deviation(values)

    if std == 0:
        warn_numeric(
            "Residuals have zero variance; Jarque-Bera statistic set to 0",
            operation="jarque_bera",
            issue="zero variance"
        )
        skewness = kurtosis = statistic = 0.0
        p_value = 1.0
    else:
        standardized = (values - mean(values)) / std
        skewness = float(np.mean(standardized ** 3))
        kurtosis = float(np.mean(standardized ** 4) - 3)
        statistic = n / 6 * (skewness ** 2 + kurtosis ** 2 / 4)
        p_value = chi_square_p_value(statistic, 2)

    return JarqueBeraResult(
        test_name="Jarque-Bera",
        test_statistic=float(statistic),
        p_value=p_value,
        critical_values=_critical_values(2),
        significance_level=significance_level,
        skewness=skewness,
        kurtosis=kurtosis
    )


def plot_residuals(residuals: SeriesLike) -> ResidualSummary:
    """Summarize residuals numerically.

    Despite the name no figure is produced: the summary holds what a residual
    plot would show.

    Returns:
        ResidualSummary: Mean, variance, autocorrelations at lags
        1..min(20, n // 4), and both residual tests
    """
    values = validate_time_series(residuals, min_length=2, data_name="residuals")
    max_lag = min(20, len(values) // 4)

    return ResidualSummary(
        mean=mean(values),
        variance=variance(values),
        autocorrelations=[autocorrelation(values, lag) for lag in range(1, max_lag + 1)],
        ljung_box=ljung_box(values),
        jarque_bera=jarque_bera(values)
    )
