"""Closed numeric interval returned by every confidence-interval method."""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Interval:
    """
    Closed interval ``[lower_limit, upper_limit]``.

    An interval with infinite limits is what a confidence-interval method
    returns when the statistic it needs is undefined (e.g. fewer than two
    observations).
    """

    lower_limit: float = -math.inf
    upper_limit: float = math.inf

    @property
    def width(self) -> float:
        return self.upper_limit - self.lower_limit

    @property
    def half_width(self) -> float:
        return self.width / 2.0

    @property
    def midpoint(self) -> float:
        return (self.lower_limit + self.upper_limit) / 2.0

    @property
    def is_finite(self) -> bool:
        return math.isfinite(self.lower_limit) and math.isfinite(self.upper_limit)

    def contains(self, x: float) -> bool:
        return self.lower_limit <= x <= self.upper_limit

    def __contains__(self, x: float) -> bool:
        return self.contains(x)

    def as_tuple(self) -> tuple[float, float]:
        return (self.lower_limit, self.upper_limit)

    def __str__(self) -> str:
        return f"[{self.lower_limit}, {self.upper_limit}]"


def validate_level(level: float) -> float:
    """
    Return ``level`` unchanged if it lies strictly inside (0, 1).

    Raises:
        ValueError: For any other value, NaN included.
    """
    if not 0.0 < level < 1.0:
        raise ValueError(f"Confidence level must be in (0,1), got {level}")
    return level
