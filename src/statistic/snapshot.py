"""
Immutable statistic snapshots: the export channel to reporting and
persistence collaborators.

A snapshot captures every value of the statistics-query contract at one
moment, plus the name, the confidence level and the interval bounds.  It is
the only form in which accumulator results leave the toolkit: collaborators
serialise ``to_dict()`` records or tabulate them with
:func:`snapshots_to_frame`.
"""

from __future__ import annotations

import json
import math
from collections.abc import Iterable
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING

import pandas as pd

from .config import SNAPSHOT_COLUMNS

if TYPE_CHECKING:
    from .accumulator import SummaryStatistics


@dataclass(frozen=True)
class StatisticSnapshot:
    """
    Point-in-time copy of a statistic's query values.

    Field order matches ``SNAPSHOT_COLUMNS`` in src/statistic/config.py.
    Undefined statistics are stored as NaN; interval bounds are infinite
    when the interval is undefined.
    """

    name: str
    count: float
    average: float
    standard_deviation: float
    standard_error: float
    half_width: float
    confidence_level: float
    lower_limit: float
    upper_limit: float
    min: float
    max: float
    sum: float
    variance: float
    deviation_sum_of_squares: float
    last_value: float
    kurtosis: float
    skewness: float
    lag1_covariance: float
    lag1_correlation: float
    von_neumann_lag1_statistic: float
    missing_count: float

    @classmethod
    def from_statistic(
        cls,
        stat: SummaryStatistics,
        level: float | None = None,
    ) -> StatisticSnapshot:
        """
        Capture ``stat`` at ``level`` (the statistic's own default if None).

        Raises:
            ValueError: If ``level`` is outside (0, 1).
        """
        level = stat.confidence_level if level is None else level
        ci = stat.confidence_interval(level)
        return cls(
            name=stat.name,
            count=stat.count,
            average=stat.average,
            standard_deviation=stat.standard_deviation,
            standard_error=stat.standard_error,
            half_width=stat.half_width(level),
            confidence_level=level,
            lower_limit=ci.lower_limit,
            upper_limit=ci.upper_limit,
            min=stat.min,
            max=stat.max,
            sum=stat.sum,
            variance=stat.variance,
            deviation_sum_of_squares=stat.deviation_sum_of_squares,
            last_value=stat.last_value,
            kurtosis=stat.kurtosis,
            skewness=stat.skewness,
            lag1_covariance=stat.lag1_covariance,
            lag1_correlation=stat.lag1_correlation,
            von_neumann_lag1_statistic=stat.von_neumann_lag1_statistic,
            missing_count=stat.missing_count,
        )

    def to_dict(self) -> dict:
        """Field → value mapping in export column order."""
        return asdict(self)

    def to_json(self, indent: int | None = 2) -> str:
        """
        JSON text with NaN and infinite values written as ``null``
        (strict JSON has no representation for them).
        """
        record = {
            key: (None if isinstance(val, float) and not math.isfinite(val) else val)
            for key, val in self.to_dict().items()
        }
        return json.dumps(record, indent=indent)


def snapshots_to_frame(snapshots: Iterable[StatisticSnapshot]) -> pd.DataFrame:
    """
    Tabulate snapshots one row per statistic, columns in ``SNAPSHOT_COLUMNS``
    order.  An empty input yields an empty frame with those columns.
    """
    records = [s.to_dict() for s in snapshots]
    return pd.DataFrame(records, columns=SNAPSHOT_COLUMNS)
