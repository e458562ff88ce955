"""
Leave-one-out (jackknife) estimation.

For a sample of size ``n`` the estimator is applied to each of the ``n``
samples that omit one observation.  The replicates give a standard-error
estimate, a bias estimate and pseudo-values, and they supply the
acceleration constant of the BCa bootstrap interval.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

from src.statistic.accumulator import MomentAccumulator
from src.statistic.distributions import student_t_inv_cdf
from src.statistic.interval import Interval, validate_level

from .config import DEFAULT_CONFIDENCE_LEVEL, MIN_ORIGINAL_SAMPLE_SIZE
from .estimators import Estimator, average


class JackknifeEstimator:
    """
    Jackknife replicates of ``estimator`` over ``original_data``.

    All replicates are computed at construction.

    Args:
        original_data: At least two observations (copied).
        estimator: Univariate estimator (default: average).
        default_ci_level: Level used when ``jackknife_confidence_interval``
            is called without one.

    Raises:
        ValueError: If fewer than two observations are supplied.
    """

    def __init__(
        self,
        original_data: Sequence[float],
        estimator: Estimator = average,
        default_ci_level: float = DEFAULT_CONFIDENCE_LEVEL,
    ) -> None:
        data = np.array(original_data, dtype=float)
        if data.size < MIN_ORIGINAL_SAMPLE_SIZE:
            raise ValueError("The jackknife requires at least 2 observations")
        self._data = data
        self.estimator = estimator
        self.default_ci_level = validate_level(default_ci_level)
        self._original_stat = MomentAccumulator(name="Original data", values=data)
        self.original_data_estimate = float(estimator(data.copy()))

        self._replicates = np.array(
            [estimator(np.delete(data, i)) for i in range(data.size)],
            dtype=float,
        )
        self._replicate_stat = MomentAccumulator(name="Jackknife replicates", values=self._replicates)

        jne = self.jackknife_estimate
        n = float(data.size)
        self.jackknife_std_err = math.sqrt(
            (n - 1.0) * float(np.mean((self._replicates - jne) ** 2))
        )

    @property
    def original_data(self) -> np.ndarray:
        return self._data.copy()

    @property
    def sample_size(self) -> int:
        return int(self._data.size)

    @property
    def original_data_average(self) -> float:
        return self._original_stat.average

    @property
    def jackknife_replicates(self) -> np.ndarray:
        return self._replicates.copy()

    @property
    def jackknife_estimate(self) -> float:
        """Average of the leave-one-out replicates."""
        return self._replicate_stat.average

    @property
    def jackknife_bias_estimate(self) -> float:
        return (self.sample_size - 1.0) * (self.jackknife_estimate - self.original_data_estimate)

    @property
    def bias_corrected_jackknife_estimate(self) -> float:
        return self.original_data_estimate - self.jackknife_bias_estimate

    @property
    def pseudo_values(self) -> np.ndarray:
        """``n * theta_hat - (n - 1) * theta_(i)`` for each left-out ``i``."""
        n = float(self.sample_size)
        return n * self.original_data_estimate - (n - 1.0) * self._replicates

    def jackknife_confidence_interval(self, level: float | None = None) -> Interval:
        """Student-t interval around the jackknife estimate."""
        level = self.default_ci_level if level is None else validate_level(level)
        p = 1.0 - (1.0 - level) / 2.0
        t = student_t_inv_cdf(self.sample_size - 1.0, p)
        hw = t * self.jackknife_std_err
        jne = self.jackknife_estimate
        return Interval(jne - hw, jne + hw)

    def summary_text(self) -> str:
        sep = "-" * 54
        return "\n".join([
            sep,
            "Jackknife statistical results:",
            sep,
            f"size of original = {self.sample_size}",
            f"original estimate = {self.original_data_estimate}",
            f"jackknife estimate = {self.jackknife_estimate}",
            f"jackknife bias estimate = {self.jackknife_bias_estimate}",
            f"bias corrected jackknife estimate = {self.bias_corrected_jackknife_estimate}",
            f"std. err. of jackknife estimate = {self.jackknife_std_err}",
            f"default c.i. level = {self.default_ci_level}",
            f"jackknife c.i. = {self.jackknife_confidence_interval()}",
            sep,
        ])

    def __str__(self) -> str:
        return self.summary_text()
