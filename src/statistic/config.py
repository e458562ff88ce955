"""
Statistic-layer configuration: confidence level and batch-means defaults.

Values are re-exported from config/stat_params.py, the authoritative
source; only the names used by src/statistic modules appear here.
"""

from config.stat_params import (
    DEFAULT_CONFIDENCE_LEVEL,
    DEFAULT_QUANTILE_PROBS,
    MAX_BATCH_MULTIPLE,
    MIN_NUM_BATCHES,
    MIN_NUM_OBS_PER_BATCH,
)

# Names of the columns produced by StatisticSnapshot.to_dict(), in export order.
SNAPSHOT_COLUMNS: list[str] = [
    "name",
    "count",
    "average",
    "standard_deviation",
    "standard_error",
    "half_width",
    "confidence_level",
    "lower_limit",
    "upper_limit",
    "min",
    "max",
    "sum",
    "variance",
    "deviation_sum_of_squares",
    "last_value",
    "kurtosis",
    "skewness",
    "lag1_covariance",
    "lag1_correlation",
    "von_neumann_lag1_statistic",
    "missing_count",
]

__all__ = [
    "DEFAULT_CONFIDENCE_LEVEL",
    "DEFAULT_QUANTILE_PROBS",
    "MAX_BATCH_MULTIPLE",
    "MIN_NUM_BATCHES",
    "MIN_NUM_OBS_PER_BATCH",
    "SNAPSHOT_COLUMNS",
]
