"""
Distribution functions consumed by the confidence-interval routines.

Thin, stateless wrappers over scipy.stats so that callers depend on one
small surface: Student-t inverse CDF and the standard-normal CDF family.
"""

from __future__ import annotations

import math

from scipy import stats


def student_t_inv_cdf(dof: float, p: float) -> float:
    """
    Inverse CDF of the Student-t distribution.

    Args:
        dof: Degrees of freedom (> 0).
        p: Probability in (0, 1).

    Returns:
        The ``p`` quantile, or NaN when ``dof`` is not positive.
    """
    if not dof > 0.0:
        return math.nan
    return float(stats.t.ppf(p, dof))


def std_normal_inv_cdf(p: float) -> float:
    """Standard-normal quantile function."""
    return float(stats.norm.ppf(p))


def std_normal_cdf(x: float) -> float:
    return float(stats.norm.cdf(x))


def std_normal_complementary_cdf(x: float) -> float:
    """Upper-tail probability ``P(Z > x)``; NaN propagates."""
    if math.isnan(x):
        return math.nan
    return float(stats.norm.sf(x))
