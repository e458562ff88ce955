"""
Single-pass moment accumulation (the statistics-query contract and its
plain implementation).

``SummaryStatistics`` is the read-only query surface shared by every
accumulator in the toolkit: the plain ``MomentAccumulator`` defined here and
``BatchMeansEngine`` in batch_means.py.  Reporting collaborators depend only
on this surface and on the ``StatisticSnapshot`` it produces.

Missing-data policy: a NaN or infinite observation is counted in
``missing_count`` and otherwise ignored.  No missing value ever enters the
moment recurrence, so every derived statistic is computed over the finite
observations only.

Undefined statistics (variance with one observation, skewness with two, …)
are returned as NaN rather than raised, so aggregate computations can detect
them downstream.
"""

from __future__ import annotations

import copy
import math
from abc import ABC, abstractmethod
from collections.abc import Iterable

import numpy as np

from .config import DEFAULT_CONFIDENCE_LEVEL
from .distributions import (
    std_normal_complementary_cdf,
    std_normal_inv_cdf,
    student_t_inv_cdf,
)
from .interval import Interval, validate_level
from .snapshot import StatisticSnapshot


# ---------------------------------------------------------------------------
# Query contract
# ---------------------------------------------------------------------------

class SummaryStatistics(ABC):
    """
    Read-only statistical query surface plus the ``collect`` entry point.

    Subclasses implement the primitive quantities; interval arithmetic,
    relative measures, the Von Neumann p-value and snapshotting are shared.
    """

    def __init__(
        self,
        name: str = "Statistic",
        confidence_level: float = DEFAULT_CONFIDENCE_LEVEL,
    ) -> None:
        self.name = name
        self._confidence_level = validate_level(confidence_level)

    # -- collection ---------------------------------------------------------

    def collect(self, obs: float | Iterable[float]) -> None:
        """
        Collect one observation, or every element of an iterable in order.

        Booleans and integers are collected as floats.  A 0-d numpy array
        is a single observation.
        """
        if isinstance(obs, np.ndarray) and obs.ndim == 0:
            self._collect_value(float(obs))
        elif isinstance(obs, Iterable):
            for x in obs:
                self._collect_value(float(x))
        else:
            self._collect_value(float(obs))

    @abstractmethod
    def _collect_value(self, x: float) -> None: ...

    @abstractmethod
    def reset(self) -> None: ...

    # -- primitives ---------------------------------------------------------

    @property
    @abstractmethod
    def count(self) -> float: ...

    @property
    @abstractmethod
    def average(self) -> float: ...

    @property
    @abstractmethod
    def sum(self) -> float: ...

    @property
    @abstractmethod
    def deviation_sum_of_squares(self) -> float: ...

    @property
    @abstractmethod
    def variance(self) -> float: ...

    @property
    @abstractmethod
    def min(self) -> float: ...

    @property
    @abstractmethod
    def max(self) -> float: ...

    @property
    @abstractmethod
    def skewness(self) -> float: ...

    @property
    @abstractmethod
    def kurtosis(self) -> float: ...

    @property
    @abstractmethod
    def standard_error(self) -> float: ...

    @property
    @abstractmethod
    def lag1_covariance(self) -> float: ...

    @property
    @abstractmethod
    def lag1_correlation(self) -> float: ...

    @property
    @abstractmethod
    def von_neumann_lag1_statistic(self) -> float: ...

    @property
    @abstractmethod
    def last_value(self) -> float: ...

    @property
    @abstractmethod
    def missing_count(self) -> float: ...

    @property
    @abstractmethod
    def negative_count(self) -> float: ...

    @property
    @abstractmethod
    def zero_count(self) -> float: ...

    @abstractmethod
    def half_width(self, level: float | None = None) -> float: ...

    # -- shared derived quantities -----------------------------------------

    @property
    def confidence_level(self) -> float:
        """Default level used when a method is called without ``level``."""
        return self._confidence_level

    @confidence_level.setter
    def confidence_level(self, level: float) -> None:
        self._confidence_level = validate_level(level)

    @property
    def standard_deviation(self) -> float:
        return math.sqrt(self.variance)

    def width(self, level: float | None = None) -> float:
        return 2.0 * self.half_width(level)

    def confidence_interval(self, level: float | None = None) -> Interval:
        """
        Student-t confidence interval for the mean.

        Returns the infinite interval when there are no observations or the
        half-width is undefined (count ≤ 1).
        """
        hw = self.half_width(level)
        if self.count < 1.0 or math.isnan(hw):
            return Interval()
        avg = self.average
        return Interval(avg - hw, avg + hw)

    @property
    def relative_error(self) -> float:
        avg = self.average
        if avg == 0.0:
            return math.inf
        return self.standard_error / avg

    def relative_width(self, level: float | None = None) -> float:
        avg = self.average
        if avg == 0.0:
            return math.inf
        return 2.0 * self.half_width(level) / avg

    @property
    def von_neumann_lag1_p_value(self) -> float:
        return std_normal_complementary_cdf(self.von_neumann_lag1_statistic)

    def leading_digit_rule(self, multiplier: float = 1.0) -> float:
        """
        ``floor(log10(multiplier * standard_error))``, the decimal place of
        the last significant digit worth reporting.  NaN when the standard
        error is zero or undefined.
        """
        x = multiplier * self.standard_error
        if not (math.isfinite(x) and x > 0.0):
            return math.nan
        return math.floor(math.log10(x))

    def check_mean(self, mean: float, level: float | None = None) -> bool:
        """True if ``mean`` lies inside the confidence interval."""
        return self.confidence_interval(level).contains(mean)

    def snapshot(self, level: float | None = None) -> StatisticSnapshot:
        """Immutable record of every query value, for export collaborators."""
        return StatisticSnapshot.from_statistic(self, level)

    def summary_text(self) -> str:
        sep = "-" * 54
        lines = [
            sep,
            f"Name {self.name}",
            f"Number {self.count}",
            f"Average {self.average}",
            f"Standard Deviation {self.standard_deviation}",
            f"Standard Error {self.standard_error}",
            f"Half-width {self.half_width()}",
            f"Confidence Level {self.confidence_level}",
            f"Confidence Interval {self.confidence_interval()}",
            f"Minimum {self.min}",
            f"Maximum {self.max}",
            f"Sum {self.sum}",
            f"Variance {self.variance}",
            f"Deviation Sum of Squares {self.deviation_sum_of_squares}",
            f"Last value collected {self.last_value}",
            f"Kurtosis {self.kurtosis}",
            f"Skewness {self.skewness}",
            f"Lag 1 Covariance {self.lag1_covariance}",
            f"Lag 1 Correlation {self.lag1_correlation}",
            f"Von Neumann Lag 1 Test Statistic {self.von_neumann_lag1_statistic}",
            f"Number of missing observations {self.missing_count}",
            sep,
        ]
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.summary_text()


# ---------------------------------------------------------------------------
# Plain accumulator
# ---------------------------------------------------------------------------

class MomentAccumulator(SummaryStatistics):
    """
    Online accumulator of count, mean and central moments 2–4.

    Central moments are stored population-style (divided by the count) and
    updated with a one-pass recurrence, so arbitrarily long streams are
    summarised without storing them and without re-summing.

    Args:
        name: Label carried into snapshots and summaries.
        values: Optional initial observations, collected in order.
        confidence_level: Default level for interval methods.
    """

    def __init__(
        self,
        name: str = "Statistic",
        values: Iterable[float] | None = None,
        confidence_level: float = DEFAULT_CONFIDENCE_LEVEL,
    ) -> None:
        super().__init__(name, confidence_level)
        self._reset_state()
        if values is not None:
            self.collect(values)

    def _reset_state(self) -> None:
        self._count = 0.0
        self._mean = 0.0
        self._m2 = 0.0
        self._m3 = 0.0
        self._m4 = 0.0
        self._min = math.inf
        self._max = -math.inf
        self._first_value = math.nan
        self._last_value = math.nan
        self._sum_cross_lag1 = 0.0
        self._negative_count = 0.0
        self._zero_count = 0.0
        self._missing_count = 0.0

    def reset(self) -> None:
        """Return to the empty-accumulator state; name and level are kept."""
        self._reset_state()

    def instance(self) -> MomentAccumulator:
        """Independent copy with identical state."""
        return copy.deepcopy(self)

    def _collect_value(self, x: float) -> None:
        if not math.isfinite(x):
            self._missing_count += 1.0
            return
        if x < 0.0:
            self._negative_count += 1.0
        if x == 0.0:
            self._zero_count += 1.0

        n = self._count
        n1 = n + 1.0
        n2 = n * n
        delta = (self._mean - x) / n1
        d2 = delta * delta
        d3 = delta * d2
        r1 = n / n1
        # order matters: each higher moment uses the lower moments before update
        self._m4 = r1 * (
            (1.0 + n * n2) * d2 * d2
            + 6.0 * self._m2 * d2
            + 4.0 * self._m3 * delta
            + self._m4
        )
        self._m3 = r1 * ((1.0 - n2) * d3 + 3.0 * self._m2 * delta + self._m3)
        self._m2 = r1 * ((1.0 + n) * d2 + self._m2)
        self._mean -= delta
        self._count = n1

        if n1 == 1.0:
            self._first_value = x
        else:
            self._sum_cross_lag1 += x * self._last_value

        if x > self._max:
            self._max = x
        if x < self._min:
            self._min = x
        self._last_value = x

    # -- stored quantities --------------------------------------------------

    @property
    def count(self) -> float:
        return self._count

    @property
    def average(self) -> float:
        if self._count < 1.0:
            return math.nan
        return self._mean

    @property
    def sum(self) -> float:
        return self._mean * self._count

    @property
    def min(self) -> float:
        return self._min

    @property
    def max(self) -> float:
        return self._max

    @property
    def first_value(self) -> float:
        return self._first_value

    @property
    def last_value(self) -> float:
        return self._last_value

    @property
    def sum_cross_lag1(self) -> float:
        return self._sum_cross_lag1

    @property
    def negative_count(self) -> float:
        return self._negative_count

    @property
    def zero_count(self) -> float:
        return self._zero_count

    @property
    def missing_count(self) -> float:
        return self._missing_count

    @property
    def central_moment_2(self) -> float:
        return self._m2

    @property
    def central_moment_3(self) -> float:
        return self._m3

    @property
    def central_moment_4(self) -> float:
        return self._m4

    @property
    def central_moments(self) -> tuple[float, float, float, float, float]:
        """``(count, mean, m2, m3, m4)``"""
        return (self._count, self._mean, self._m2, self._m3, self._m4)

    # -- derived quantities -------------------------------------------------

    @property
    def raw_moment_2(self) -> float:
        mu = self.average
        return self._m2 + mu * mu

    @property
    def raw_moment_3(self) -> float:
        mu = self.average
        return self._m3 + 3.0 * mu * self.raw_moment_2 - 2.0 * mu ** 3

    @property
    def raw_moment_4(self) -> float:
        mu = self.average
        return (
            self._m4
            + 4.0 * mu * self.raw_moment_3
            - 6.0 * mu * mu * self.raw_moment_2
            + 3.0 * mu ** 4
        )

    @property
    def deviation_sum_of_squares(self) -> float:
        return self._m2 * self._count

    @property
    def variance(self) -> float:
        if self._count < 2.0:
            return math.nan
        return self.deviation_sum_of_squares / (self._count - 1.0)

    @property
    def skewness(self) -> float:
        n = self._count
        if n < 3.0:
            return math.nan
        v = self.variance
        d = (n - 1.0) * (n - 2.0) * v * math.sqrt(v)
        if d == 0.0:
            return math.nan
        return n * n * self._m3 / d

    @property
    def kurtosis(self) -> float:
        n = self._count
        if n < 4.0:
            return math.nan
        n1 = n - 1.0
        v = self.variance
        d = n1 * (n - 2.0) * (n - 3.0) * v * v
        if d == 0.0:
            return math.nan
        t = n * (n + 1.0) * n * self._m4 - 3.0 * n1 * n1 * n1 * v * v
        return t / d

    @property
    def standard_error(self) -> float:
        if self._count < 1.0:
            return math.nan
        return self.standard_deviation / math.sqrt(self._count)

    @property
    def lag1_covariance(self) -> float:
        n = self._count
        if n <= 2.0:
            return math.nan
        mu = self._mean
        c1 = (
            self._sum_cross_lag1
            - (n + 1.0) * mu * mu
            + mu * (self._first_value + self._last_value)
        )
        return c1 / n

    @property
    def lag1_correlation(self) -> float:
        if self._count <= 2.0 or self._m2 == 0.0:
            return math.nan
        return self.lag1_covariance / self._m2

    @property
    def von_neumann_lag1_statistic(self) -> float:
        """
        Von Neumann lag-1 test statistic for independence of the sequence.

        Approximately standard normal for an uncorrelated sequence; large
        positive values indicate positive lag-1 correlation.
        """
        n = self._count
        if n <= 2.0 or self._m2 == 0.0:
            return math.nan
        mu = self._mean
        r1 = self.lag1_correlation
        t = (self._first_value - mu) ** 2 + (self._last_value - mu) ** 2
        b = 2.0 * n * self._m2
        return math.sqrt((n * n - 1.0) / (n - 2.0)) * (r1 + t / b)

    def half_width(self, level: float | None = None) -> float:
        """
        Student-t half-width ``t(n-1, 1-alpha/2) * standard_error``.

        Raises:
            ValueError: If ``level`` is outside (0, 1).
        """
        level = self.confidence_level if level is None else validate_level(level)
        if self._count <= 1.0:
            return math.nan
        p = 1.0 - (1.0 - level) / 2.0
        return student_t_inv_cdf(self._count - 1.0, p) * self.standard_error

    def estimate_sample_size(
        self,
        desired_half_width: float,
        level: float | None = None,
    ) -> int:
        """
        Normal-approximation sample size needed to reach ``desired_half_width``
        using the current standard deviation as the pilot estimate.
        """
        return estimate_sample_size(
            desired_half_width,
            self.standard_deviation,
            self.confidence_level if level is None else level,
        )


# ---------------------------------------------------------------------------
# Sample-size helper
# ---------------------------------------------------------------------------

def estimate_sample_size(
    desired_half_width: float,
    std_dev: float,
    level: float = DEFAULT_CONFIDENCE_LEVEL,
) -> int:
    """
    Smallest ``n`` with ``z(1-alpha/2) * std_dev / sqrt(n) <= desired_half_width``.

    Raises:
        ValueError: If the half-width is not positive, the standard deviation
            is negative, or ``level`` is outside (0, 1).
    """
    if not desired_half_width > 0.0:
        raise ValueError("The desired half-width must be > 0")
    if not std_dev >= 0.0:
        raise ValueError("The standard deviation must be >= 0")
    validate_level(level)
    z = std_normal_inv_cdf(1.0 - (1.0 - level) / 2.0)
    m = (z * std_dev / desired_half_width) ** 2
    return int(math.ceil(m))
