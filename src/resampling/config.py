"""
Resampling-layer configuration: bootstrap sizes, stream seeds, CI level.

Values are re-exported from config/stat_params.py, the authoritative
source; only the names used by src/resampling modules appear here.
"""

from config.stat_params import (
    DEFAULT_CONFIDENCE_LEVEL,
    DEFAULT_NUM_BOOTSTRAP_SAMPLES,
    DEFAULT_STREAM_SEED,
    MIN_ORIGINAL_SAMPLE_SIZE,
)

# Dimension names produced by estimators.BasicStatistics, in output order.
BASIC_STATISTICS_NAMES: list[str] = [
    "average",
    "variance",
    "min",
    "max",
    "skewness",
    "kurtosis",
    "lag1Correlation",
    "lag1Covariance",
]

__all__ = [
    "BASIC_STATISTICS_NAMES",
    "DEFAULT_CONFIDENCE_LEVEL",
    "DEFAULT_NUM_BOOTSTRAP_SAMPLES",
    "DEFAULT_STREAM_SEED",
    "MIN_ORIGINAL_SAMPLE_SIZE",
]
