"""
src/statistic — Streaming summary statistics and batch means.

Module layout
-------------
config.py         — Defaults re-exported from config/stat_params.py,
                    snapshot column order
interval.py       — Interval record, confidence-level validation
distributions.py  — Student-t / standard-normal CDF and inverse CDF (scipy)
accumulator.py    — SummaryStatistics query contract, MomentAccumulator
snapshot.py       — StatisticSnapshot export record, DataFrame tabulation
quantiles.py      — Type-7 quantiles, median, empirical CDF, autocorrelation
batch_means.py    — BatchMeansEngine with automatic rebatching

Public interface
----------------
Accumulate a stream:
    stat = MomentAccumulator(name="wait time")
    stat.collect(x)
    stat.confidence_interval(0.95)

Batch a correlated stream:
    bm = BatchMeansEngine(min_num_batches=20, min_batch_size=16)
    bm.collect(x)
    bm.reform_batches(10)

Export:
    snapshots_to_frame([stat.snapshot(), bm.snapshot()])
"""

from .accumulator import MomentAccumulator, SummaryStatistics, estimate_sample_size
from .batch_means import BatchMeansEngine, batch_means
from .distributions import (
    std_normal_cdf,
    std_normal_complementary_cdf,
    std_normal_inv_cdf,
    student_t_inv_cdf,
)
from .interval import Interval, validate_level
from .quantiles import (
    autocorrelation,
    autocorrelations,
    empirical_cdf,
    median,
    quantile,
    quantile_from_sorted,
    quantiles,
)
from .snapshot import StatisticSnapshot, snapshots_to_frame

__all__ = [
    # Accumulators
    "SummaryStatistics",
    "MomentAccumulator",
    "BatchMeansEngine",
    "batch_means",
    "estimate_sample_size",
    # Intervals & distributions
    "Interval",
    "validate_level",
    "student_t_inv_cdf",
    "std_normal_inv_cdf",
    "std_normal_cdf",
    "std_normal_complementary_cdf",
    # Quantiles
    "quantile_from_sorted",
    "quantile",
    "quantiles",
    "median",
    "empirical_cdf",
    "autocorrelation",
    "autocorrelations",
    # Export
    "StatisticSnapshot",
    "snapshots_to_frame",
]
