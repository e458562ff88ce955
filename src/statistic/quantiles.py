"""
Order-statistic helpers: type-7 quantiles, median, empirical CDF and
sample autocorrelation.

Quantiles use the R "type 7" definition: for sorted data ``x(1..n)`` and
probability ``p`` the position is ``h = 1 + (n-1)p`` and the result
interpolates linearly between ``x(floor h)`` and ``x(ceil h)``.  This is the
definition every bootstrap percentile interval in src/resampling relies on.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from .accumulator import MomentAccumulator
from .config import DEFAULT_QUANTILE_PROBS


def _check_probability(p: float) -> None:
    if not 0.0 <= p <= 1.0:
        raise ValueError(f"Probability must be in [0,1], got {p}")


def quantile_from_sorted(sorted_data: Sequence[float], p: float) -> float:
    """
    Type-7 quantile of already-sorted data.

    Args:
        sorted_data: Non-empty data in ascending order.
        p: Probability in [0, 1].

    Returns:
        The interpolated quantile.

    Raises:
        ValueError: If the data is empty or ``p`` is outside [0, 1].
    """
    n = len(sorted_data)
    if n == 0:
        raise ValueError("There were no observations in the provided data")
    _check_probability(p)
    if n == 1:
        return float(sorted_data[0])

    index = 1.0 + (n - 1) * p
    if index >= n:
        return float(sorted_data[n - 1])
    lo = int(np.floor(index))
    h = index - lo
    # positions are 1-based; convert to 0-based indices
    lower = float(sorted_data[lo - 1])
    upper = float(sorted_data[lo])
    return (1.0 - h) * lower + h * upper


def quantile(data: Sequence[float], p: float) -> float:
    """Type-7 quantile of unsorted data.  The input is not modified."""
    return quantile_from_sorted(np.sort(np.asarray(data, dtype=float)), p)


def quantiles(
    data: Sequence[float],
    probs: Sequence[float] = DEFAULT_QUANTILE_PROBS,
) -> list[float]:
    """Type-7 quantiles of unsorted data at each probability in ``probs``."""
    if len(probs) == 0:
        raise ValueError("The list of requested probabilities was empty")
    sorted_data = np.sort(np.asarray(data, dtype=float))
    return [quantile_from_sorted(sorted_data, p) for p in probs]


def median(data: Sequence[float]) -> float:
    return quantile(data, 0.5)


def empirical_cdf(data: Sequence[float], x: float) -> float:
    """Fraction of observations ``<= x``; 0.0 for empty data."""
    arr = np.asarray(data, dtype=float)
    if arr.size == 0:
        return 0.0
    return float(np.count_nonzero(arr <= x) / arr.size)


# ---------------------------------------------------------------------------
# Autocorrelation
# ---------------------------------------------------------------------------

def _lagged_product_sum(x: np.ndarray, avg: float, lag: int) -> float:
    dev = x - avg
    return float(np.dot(dev[: x.size - lag], dev[lag:]))


def autocorrelation(data: Sequence[float], lag: int) -> float:
    """
    Sample autocorrelation at ``lag``.

    Lag 1 uses the accumulator's single-pass lag-1 correlation; larger lags
    use the lagged deviation product sum over the deviation sum of squares.

    Raises:
        ValueError: If there are fewer than 2 values or ``lag`` is not in
            ``[0, len(data))``.
    """
    x = np.asarray(data, dtype=float)
    if x.size < 2:
        raise ValueError("There must be 2 or more elements in the data")
    if not 0 <= lag < x.size:
        raise ValueError(f"The lag must be in [0, {x.size}), got {lag}")
    if lag == 0:
        return 1.0
    stat = MomentAccumulator(values=x)
    if lag == 1:
        return stat.lag1_correlation
    return _lagged_product_sum(x, stat.average, lag) / stat.deviation_sum_of_squares


def autocorrelations(data: Sequence[float], max_lag: int) -> list[float]:
    """Autocorrelations at lags ``1..max_lag`` (lag 0 is omitted)."""
    x = np.asarray(data, dtype=float)
    if x.size < 2:
        raise ValueError("There must be 2 or more elements in the data")
    if not 1 <= max_lag < x.size:
        raise ValueError(f"The maximum lag must be in [1, {x.size}), got {max_lag}")
    stat = MomentAccumulator(values=x)
    avg = stat.average
    dssq = stat.deviation_sum_of_squares
    result = [stat.lag1_correlation]
    for k in range(2, max_lag + 1):
        result.append(_lagged_product_sum(x, avg, k) / dssq)
    return result
