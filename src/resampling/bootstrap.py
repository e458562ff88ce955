"""
Bootstrap resampling and bootstrap confidence intervals.

``ResamplingEngine`` draws replicate samples (same size as the original,
uniformly with replacement) from a fixed original dataset through a
controllable random stream, applies an estimator to each replicate and
accumulates the replicate estimates.  ``BootstrapEstimate`` is the immutable
record of one such run for one estimated quantity; the multivariate engine
produces one per output dimension.

Interval methods (``alpha = 1 - level``; quantiles are type 7):

    normal      estimate ± z(1 - alpha/2) · sd(replicates)
    percentile  [q(alpha/2), q(1 - alpha/2)]
    basic       [2·estimate - q(1 - alpha/2), 2·estimate - q(alpha/2)]
    BCa         percentile interval at bias- and acceleration-adjusted
                probabilities
    bootstrap-t estimate - t*(1 - alpha/2)·se, estimate - t*(alpha/2)·se

The normal interval is the least preferred of these.

Before ``generate_samples`` has run there are no replicates: the replicate
statistics are NaN and every interval has NaN limits.  This is not guarded
against; check ``num_bootstrap_samples`` first.

An estimator that returns NaN for some replicate (for example a skewness on
a constant resample) leaves that value in ``bootstrap_estimates`` but not in
``across_bootstrap_statistics``, whose ``count`` then falls below
``num_bootstrap_samples``.  NaN sorts last, so the upper percentile limit
and the lower basic limit become NaN; the normal interval uses only the
finite replicates.
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from collections.abc import Sequence

import numpy as np

from src.statistic.accumulator import MomentAccumulator
from src.statistic.distributions import std_normal_cdf, std_normal_inv_cdf
from src.statistic.interval import Interval, validate_level
from src.statistic.quantiles import quantile_from_sorted

from .config import (
    DEFAULT_CONFIDENCE_LEVEL,
    DEFAULT_NUM_BOOTSTRAP_SAMPLES,
    MIN_ORIGINAL_SAMPLE_SIZE,
)
from .estimators import Estimator, average
from .jackknife import JackknifeEstimator
from .population import DPopulation
from .streams import RandomStream, RNStreamProvider, StreamControls

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Shared estimate behaviour
# ---------------------------------------------------------------------------

class BootstrapEstimateBase(ABC):
    """
    Statistics and intervals derived from a set of replicate estimates.

    Subclasses supply the name, the original-data estimate, the replicate
    estimates and an accumulator over them.
    """

    label: str | None = None

    @property
    @abstractmethod
    def name(self) -> str: ...

    @property
    @abstractmethod
    def original_data_sample_size(self) -> int: ...

    @property
    @abstractmethod
    def original_data_estimate(self) -> float: ...

    @property
    @abstractmethod
    def bootstrap_estimates(self) -> np.ndarray: ...

    @property
    @abstractmethod
    def across_bootstrap_statistics(self) -> MomentAccumulator: ...

    @property
    def default_ci_level(self) -> float:
        return getattr(self, "_default_ci_level", DEFAULT_CONFIDENCE_LEVEL)

    @default_ci_level.setter
    def default_ci_level(self, level: float) -> None:
        self._default_ci_level = validate_level(level)

    def _level(self, level: float | None) -> float:
        return self.default_ci_level if level is None else validate_level(level)

    # -- replicate summaries -----------------------------------------------

    @property
    def num_bootstrap_samples(self) -> int:
        return int(self.bootstrap_estimates.size)

    @property
    def bootstrap_differences(self) -> np.ndarray:
        """Replicate estimates minus the original-data estimate."""
        return self.bootstrap_estimates - self.original_data_estimate

    @property
    def standardized_bootstrap_differences(self) -> np.ndarray:
        return self.bootstrap_differences / self.bootstrap_std_err_estimate

    @property
    def across_bootstrap_average(self) -> float:
        return self.across_bootstrap_statistics.average

    @property
    def bootstrap_bias_estimate(self) -> float:
        return self.across_bootstrap_average - self.original_data_estimate

    @property
    def bootstrap_mse_estimate(self) -> float:
        bias = self.bootstrap_bias_estimate
        return bias * bias + self.across_bootstrap_statistics.variance

    @property
    def bootstrap_std_err_estimate(self) -> float:
        """Standard deviation of the replicate estimates."""
        return self.across_bootstrap_statistics.standard_deviation

    def _replicate_quantiles(self, p_lower: float, p_upper: float) -> tuple[float, float]:
        estimates = self.bootstrap_estimates
        if estimates.size == 0:
            return (math.nan, math.nan)
        ordered = np.sort(estimates)
        return (quantile_from_sorted(ordered, p_lower), quantile_from_sorted(ordered, p_upper))

    # -- intervals ----------------------------------------------------------

    def std_normal_bootstrap_ci(self, level: float | None = None) -> Interval:
        """
        Normal-theory interval using the replicate standard deviation.

        Raises:
            ValueError: If ``level`` is outside (0, 1).
        """
        alpha = 1.0 - self._level(level)
        z = std_normal_inv_cdf(1.0 - alpha / 2.0)
        se = self.bootstrap_std_err_estimate
        est = self.original_data_estimate
        return Interval(est - z * se, est + z * se)

    def percentile_bootstrap_ci(self, level: float | None = None) -> Interval:
        """
        Empirical quantiles of the replicate estimates.

        Raises:
            ValueError: If ``level`` is outside (0, 1).
        """
        alpha = 1.0 - self._level(level)
        lower, upper = self._replicate_quantiles(alpha / 2.0, 1.0 - alpha / 2.0)
        return Interval(lower, upper)

    def basic_bootstrap_ci(self, level: float | None = None) -> Interval:
        """
        Replicate quantiles reflected around the original-data estimate.

        The upper quantile sets the lower limit and vice versa.

        Raises:
            ValueError: If ``level`` is outside (0, 1).
        """
        alpha = 1.0 - self._level(level)
        lower_q, upper_q = self._replicate_quantiles(alpha / 2.0, 1.0 - alpha / 2.0)
        est = self.original_data_estimate
        return Interval(2.0 * est - upper_q, 2.0 * est - lower_q)

    def summary_text(self) -> str:
        sep = "-" * 54
        lines = [sep, "Bootstrap statistical results:"]
        if self.label is not None:
            lines.append(f"label = {self.label}")
        lines += [
            sep,
            f"statistic name = {self.name}",
            f"number of bootstrap samples = {self.num_bootstrap_samples}",
            f"size of original sample = {self.original_data_sample_size}",
            f"original estimate = {self.original_data_estimate}",
            f"bias estimate = {self.bootstrap_bias_estimate}",
            f"across bootstrap average = {self.across_bootstrap_average}",
            f"bootstrap std. err. estimate = {self.bootstrap_std_err_estimate}",
            f"default c.i. level = {self.default_ci_level}",
            f"norm c.i. = {self.std_normal_bootstrap_ci()}",
            f"basic c.i. = {self.basic_bootstrap_ci()}",
            f"percentile c.i. = {self.percentile_bootstrap_ci()}",
        ]
        return "\n".join(lines)

    def print_summary(self) -> None:
        print(self.summary_text())

    def __str__(self) -> str:
        return self.summary_text()


# ---------------------------------------------------------------------------
# Immutable per-quantity record
# ---------------------------------------------------------------------------

class BootstrapEstimate(BootstrapEstimateBase):
    """
    Result of bootstrapping one quantity.

    Args:
        name: Name of the estimated quantity.
        original_data_sample_size: Size of the original sample.
        original_data_estimate: Estimator applied to the original sample.
        bootstrap_estimates: One estimate per replicate (copied).
    """

    def __init__(
        self,
        name: str,
        original_data_sample_size: int,
        original_data_estimate: float,
        bootstrap_estimates: Sequence[float],
    ) -> None:
        self._name = name
        self._sample_size = int(original_data_sample_size)
        self._estimate = float(original_data_estimate)
        self._estimates = np.array(bootstrap_estimates, dtype=float)
        self._estimates.setflags(write=False)
        self._stat = MomentAccumulator(name=name, values=self._estimates)
        self.label = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def original_data_sample_size(self) -> int:
        return self._sample_size

    @property
    def original_data_estimate(self) -> float:
        return self._estimate

    @property
    def bootstrap_estimates(self) -> np.ndarray:
        return self._estimates.copy()

    @property
    def across_bootstrap_statistics(self) -> MomentAccumulator:
        return self._stat.instance()


# ---------------------------------------------------------------------------
# Univariate engine
# ---------------------------------------------------------------------------

class ResamplingEngine(StreamControls, BootstrapEstimateBase):
    """
    Bootstrap engine over a fixed original dataset.

    The stream is held by reference: passing the same stream to several
    engines makes them consume one shared sequence.  Results are
    reproducible only if the stream is reset (or freshly created) before
    ``generate_samples``.

    Args:
        original_data: At least two observations (copied).
        estimator: Univariate estimator (default: average).
        stream: Random stream; a fresh ``RNStream`` scoped to this engine
            when omitted.
        name: Name reported for the estimated quantity.

    Raises:
        ValueError: If fewer than two observations are supplied.
    """

    def __init__(
        self,
        original_data: Sequence[float],
        estimator: Estimator = average,
        stream: RandomStream | None = None,
        name: str = "Bootstrap",
    ) -> None:
        data = np.array(original_data, dtype=float)
        if data.size < MIN_ORIGINAL_SAMPLE_SIZE:
            raise ValueError("The original data must contain at least 2 observations")
        self._name = name
        self.label = None
        self.estimator = estimator
        self._data = data
        self._population = DPopulation(data, stream)
        self._original_stat = MomentAccumulator(name="Original data", values=data)
        self._across = MomentAccumulator(name="Across Bootstrap Statistics")
        self._estimates: list[float] = []
        self._saved_samples: list[np.ndarray] = []
        self._t_values: list[float] = []
        self._original_estimate = math.nan

    # -- stream -------------------------------------------------------------

    @property
    def stream(self) -> RandomStream:
        return self._population.stream

    @stream.setter
    def stream(self, stream: RandomStream) -> None:
        self._population.stream = stream

    # -- estimate contract --------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def original_data(self) -> np.ndarray:
        return self._data.copy()

    @property
    def original_data_sample_size(self) -> int:
        return int(self._data.size)

    @property
    def original_data_average(self) -> float:
        return self._original_stat.average

    @property
    def original_data_estimate(self) -> float:
        """NaN until ``generate_samples`` has run."""
        return self._original_estimate

    @property
    def bootstrap_estimates(self) -> np.ndarray:
        return np.array(self._estimates, dtype=float)

    @property
    def across_bootstrap_statistics(self) -> MomentAccumulator:
        return self._across

    # -- generation ---------------------------------------------------------

    def generate_samples(
        self,
        num_bootstrap_samples: int = DEFAULT_NUM_BOOTSTRAP_SAMPLES,
        estimator: Estimator | None = None,
        save_replicate_data: bool = False,
        num_bootstrap_t_samples: int = 0,
    ) -> None:
        """
        Regenerate all replicates from scratch.

        Args:
            num_bootstrap_samples: Number of replicates (> 1).
            estimator: Replaces the engine's estimator when given.
            save_replicate_data: Keep a copy of every resample.
            num_bootstrap_t_samples: When > 1, studentize each replicate
                for the bootstrap-t interval, using a nested bootstrap of
                this size for the replicate standard error (the sample
                standard error is used directly for the average).

        Raises:
            ValueError: If ``num_bootstrap_samples`` ≤ 1, or
                ``num_bootstrap_t_samples`` is exactly 1 or negative.
        """
        if num_bootstrap_samples <= 1:
            raise ValueError("The number of bootstrap samples must be greater than 1")
        if num_bootstrap_t_samples < 0 or num_bootstrap_t_samples == 1:
            raise ValueError("The number of bootstrap-t samples must be 0 or greater than 1")
        if estimator is not None:
            self.estimator = estimator

        self._across.reset()
        self._estimates = []
        self._saved_samples = []
        self._t_values = []

        logger.debug("%s: generating %d bootstrap samples", self._name, num_bootstrap_samples)
        self._original_estimate = float(self.estimator(self._data.copy()))
        for _ in range(num_bootstrap_samples):
            sample = self._population.sample()
            x = float(self.estimator(sample))
            self._across.collect(x)
            self._estimates.append(x)
            if save_replicate_data:
                self._saved_samples.append(sample.copy())
            if num_bootstrap_t_samples > 1:
                self._studentize(num_bootstrap_t_samples, x, sample)
        logger.debug(
            "%s: done, across-replicate average %.6g", self._name, self._across.average
        )

    def _studentize(self, num_samples: int, estimate: float, sample: np.ndarray) -> None:
        if self.estimator is average:
            se = MomentAccumulator(values=sample).standard_error
        else:
            inner = ResamplingEngine(sample, self.estimator, stream=self.stream)
            inner.generate_samples(num_samples)
            se = inner.bootstrap_std_err_estimate
        # a degenerate replicate (constant sample) has no t-value
        if se > 0.0:
            self._t_values.append((estimate - self._original_estimate) / se)

    # -- saved replicate data ----------------------------------------------

    @property
    def data_for_each_bootstrap_sample(self) -> list[np.ndarray]:
        """Copies of the saved resamples; empty unless saving was requested."""
        return [s.copy() for s in self._saved_samples]

    def data_for_bootstrap_sample(self, b: int) -> np.ndarray:
        """
        Saved resample ``b``; an empty array if nothing was saved.

        Raises:
            ValueError: If ``b`` is out of range.
        """
        if not self._saved_samples:
            return np.empty(0)
        if not 0 <= b < len(self._saved_samples):
            raise ValueError(f"The bootstrap sample index {b} was out of range")
        return self._saved_samples[b].copy()

    @property
    def statistic_for_each_bootstrap_sample(self) -> list[MomentAccumulator]:
        return [
            MomentAccumulator(name=f"{self._name} sample {i}", values=s)
            for i, s in enumerate(self._saved_samples)
        ]

    @property
    def bootstrap_sample_averages(self) -> np.ndarray:
        return np.array([s.average for s in self.statistic_for_each_bootstrap_sample])

    @property
    def bootstrap_sample_variances(self) -> np.ndarray:
        return np.array([s.variance for s in self.statistic_for_each_bootstrap_sample])

    def population_for_each_bootstrap_sample(
        self,
        provider: RNStreamProvider | None = None,
        use_crn: bool = True,
    ) -> list[DPopulation]:
        """
        An empirical sampler over each saved resample.

        With ``use_crn`` every sampler shares a single stream (common random
        numbers across the resamples); otherwise each gets its own stream.
        Streams come from ``provider``, or a new provider when omitted.
        """
        provider = provider if provider is not None else RNStreamProvider()
        shared = provider.next_stream() if use_crn else None
        return [
            DPopulation(s, shared if use_crn else provider.next_stream())
            for s in self._saved_samples
        ]

    # -- additional intervals ----------------------------------------------

    def bias_correction_factor(self) -> float:
        return bias_correction_factor(self.bootstrap_estimates, self.original_data_estimate)

    def acceleration_factor(self) -> float:
        return acceleration_factor(self._data, self.estimator)

    def bca_bootstrap_ci(self, level: float | None = None) -> Interval:
        """
        Bias-corrected and accelerated percentile interval.

        Raises:
            ValueError: If ``level`` is outside (0, 1).
        """
        alpha = 1.0 - self._level(level)
        if self.num_bootstrap_samples == 0:
            return Interval(math.nan, math.nan)
        z0 = self.bias_correction_factor()
        a = self.acceleration_factor()
        z_lo = std_normal_inv_cdf(alpha / 2.0)
        z_hi = std_normal_inv_cdf(1.0 - alpha / 2.0)
        p_lo = std_normal_cdf(z0 + (z0 + z_lo) / (1.0 - a * (z0 + z_lo)))
        p_hi = std_normal_cdf(z0 + (z0 + z_hi) / (1.0 - a * (z0 + z_hi)))
        if math.isnan(p_lo) or math.isnan(p_hi):
            return Interval(math.nan, math.nan)
        lower, upper = self._replicate_quantiles(p_lo, p_hi)
        return Interval(lower, upper)

    def bootstrap_t_ci(self, level: float | None = None) -> Interval:
        """
        Studentized (bootstrap-t) interval.

        Infinite unless ``generate_samples`` ran with
        ``num_bootstrap_t_samples`` > 1.

        Raises:
            ValueError: If ``level`` is outside (0, 1).
        """
        alpha = 1.0 - self._level(level)
        if not self._t_values:
            return Interval()
        ordered = np.sort(np.array(self._t_values))
        t_hi = quantile_from_sorted(ordered, 1.0 - alpha / 2.0)
        t_lo = quantile_from_sorted(ordered, alpha / 2.0)
        se = self.bootstrap_std_err_estimate
        est = self.original_data_estimate
        return Interval(est - t_hi * se, est - t_lo * se)

    @property
    def studentized_t_values(self) -> np.ndarray:
        return np.array(self._t_values, dtype=float)

    def summary_text(self) -> str:
        sep = "-" * 54
        lines = [super().summary_text(), f"BCa c.i. = {self.bca_bootstrap_ci()}"]
        btci = self.bootstrap_t_ci()
        if btci.is_finite:
            lines.append(f"bootstrap-t c.i. = {btci}")
        lines.append(sep)
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# BCa helpers
# ---------------------------------------------------------------------------

def bias_correction_factor(
    bootstrap_estimates: Sequence[float],
    original_data_estimate: float,
) -> float:
    """
    ``z0 = Phi^-1(fraction of replicate estimates below the original
    estimate)``; infinite when the fraction is 0 or 1, NaN with no replicates.
    """
    estimates = np.asarray(bootstrap_estimates, dtype=float)
    if estimates.size == 0:
        return math.nan
    p = float(np.mean(estimates < original_data_estimate))
    return std_normal_inv_cdf(p)


def acceleration_factor(original_data: Sequence[float], estimator: Estimator) -> float:
    """
    Jackknife acceleration constant
    ``sum(d^3) / (6 * sum(d^2)^1.5)`` with ``d = mean(theta_(.)) - theta_(i)``.
    NaN when every jackknife replicate is equal.
    """
    jk = JackknifeEstimator(original_data, estimator)
    d = jk.jackknife_estimate - jk.jackknife_replicates
    denom = 6.0 * float(np.sum(d * d)) ** 1.5
    if denom == 0.0:
        return math.nan
    return float(np.sum(d ** 3)) / denom
