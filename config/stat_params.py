"""
Statistical parameters and execution defaults for the toolkit.

This is the AUTHORITATIVE source for all numeric defaults.
src/statistic/config.py and src/resampling/config.py import from here —
do not maintain parallel copies.

Design rationale:
- 95% is the conventional confidence level for simulation output analysis;
  every interval method takes an explicit ``level`` to override it.
- The batch-means defaults (20 batches of at least 16 observations,
  rebatching by a factor of 2) bound storage to 40 batch means while the
  batch size keeps growing with the run length.
- Streams are seeded explicitly. There is no process-wide default stream;
  ``DEFAULT_STREAM_SEED`` only fixes the starting point of engines that
  build their own stream.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Confidence intervals
# ---------------------------------------------------------------------------

DEFAULT_CONFIDENCE_LEVEL: float = 0.95

# ---------------------------------------------------------------------------
# Batch means
# ---------------------------------------------------------------------------

MIN_NUM_BATCHES: int = 20          # never fewer batches than this after a rebatch
MIN_NUM_OBS_PER_BATCH: int = 16    # starting batch size
MAX_BATCH_MULTIPLE: int = 2        # max batches = MIN_NUM_BATCHES * multiple

# ---------------------------------------------------------------------------
# Bootstrap
# ---------------------------------------------------------------------------

DEFAULT_NUM_BOOTSTRAP_SAMPLES: int = 1000
MIN_ORIGINAL_SAMPLE_SIZE: int = 2

# ---------------------------------------------------------------------------
# Random streams
# ---------------------------------------------------------------------------

DEFAULT_STREAM_SEED: int = 12345

# ---------------------------------------------------------------------------
# Quantiles
# ---------------------------------------------------------------------------

DEFAULT_QUANTILE_PROBS: tuple[float, ...] = (
    0.05, 0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 0.95,
)
