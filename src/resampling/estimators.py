"""
Estimator functions and the multivariate estimator contract.

A univariate estimator is any pure callable ``f(sample) -> float``; it is
invoked once on the original data and once per bootstrap replicate, so it
must not depend on call order or keep state between calls.

A multivariate estimator declares its output ``names`` and maps a sample
to one value per name.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Protocol, runtime_checkable

import numpy as np

from src.statistic.accumulator import MomentAccumulator
from src.statistic.quantiles import quantile

from .config import BASIC_STATISTICS_NAMES

Estimator = Callable[[np.ndarray], float]


# ---------------------------------------------------------------------------
# Univariate estimators
# ---------------------------------------------------------------------------

def average(data: np.ndarray) -> float:
    return MomentAccumulator(values=data).average


def variance(data: np.ndarray) -> float:
    return MomentAccumulator(values=data).variance


def standard_deviation(data: np.ndarray) -> float:
    return MomentAccumulator(values=data).standard_deviation


def minimum(data: np.ndarray) -> float:
    return float(np.min(data))


def maximum(data: np.ndarray) -> float:
    return float(np.max(data))


def median(data: np.ndarray) -> float:
    return quantile(data, 0.5)


def quantile_estimator(p: float) -> Estimator:
    """Estimator returning the type-7 ``p`` quantile of a sample."""
    if not 0.0 <= p <= 1.0:
        raise ValueError(f"Probability must be in [0,1], got {p}")

    def _estimate(data: np.ndarray) -> float:
        return quantile(data, p)

    _estimate.__name__ = f"quantile_{p}"
    return _estimate


# ---------------------------------------------------------------------------
# Multivariate estimators
# ---------------------------------------------------------------------------

@runtime_checkable
class MultivariateEstimator(Protocol):
    """Maps a sample to one value per entry of ``names``."""

    names: Sequence[str]

    def estimate(self, data: np.ndarray) -> Sequence[float]: ...


class BasicStatistics:
    """
    Eight summary statistics of a sample, in ``BASIC_STATISTICS_NAMES``
    order: average, variance, min, max, skewness, kurtosis, lag-1
    correlation, lag-1 covariance.
    """

    def __init__(self) -> None:
        self.names: list[str] = list(BASIC_STATISTICS_NAMES)

    def estimate(self, data: np.ndarray) -> list[float]:
        stat = MomentAccumulator(values=data)
        return [
            stat.average,
            stat.variance,
            stat.min,
            stat.max,
            stat.skewness,
            stat.kurtosis,
            stat.lag1_correlation,
            stat.lag1_covariance,
        ]


class FunctionsEstimator:
    """
    Multivariate estimator assembled from named univariate estimators.

    Args:
        estimators: Mapping of dimension name → univariate estimator; output
            order follows the mapping's order.
    """

    def __init__(self, estimators: dict[str, Estimator]) -> None:
        self._estimators = dict(estimators)
        self.names: list[str] = list(self._estimators)

    def estimate(self, data: np.ndarray) -> list[float]:
        return [fn(data) for fn in self._estimators.values()]
