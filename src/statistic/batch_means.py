"""
Batch-means accumulation with automatic rebatching.

Raw observations from a correlated stream (e.g. waiting times in a single
simulation run) are averaged in contiguous batches.  Batch means are much
closer to independent than adjacent raw observations, so the classic
independent-sample formulas (variance, Student-t half-width, lag-1
correlation, Von Neumann statistic) are applied to the batch means.

Storage is bounded: once ``max_num_batches = min_num_batches *
rebatch_multiple`` batches exist, the stored means are averaged in groups of
``rebatch_multiple`` down to ``min_num_batches`` coarser means and the batch
size is multiplied by ``rebatch_multiple``.  Collection can therefore
continue indefinitely.

State machine (one event per ``collect``):

    within-batch count == current_batch_size   → batch close
    batch close leaves num_batches == max       → rebatch
"""

from __future__ import annotations

import copy
import logging
import math
from collections.abc import Iterable, Sequence

from .accumulator import MomentAccumulator, SummaryStatistics
from .config import (
    DEFAULT_CONFIDENCE_LEVEL,
    MAX_BATCH_MULTIPLE,
    MIN_NUM_BATCHES,
    MIN_NUM_OBS_PER_BATCH,
)

logger = logging.getLogger(__name__)


class BatchMeansEngine(SummaryStatistics):
    """
    Batch-means statistic over a raw observation stream.

    Every summary statistic is answered by the across-batch accumulator,
    i.e. it describes the batch means, not the raw observations.

    Args:
        min_num_batches: Number of batches kept after a rebatch (> 1).
        min_batch_size: Starting batch size (> 1).
        rebatch_multiple: Factor applied to the batch size at each rebatch,
            and the multiple of ``min_num_batches`` that triggers it (> 1).
        name: Label carried into snapshots and summaries.
        values: Optional initial observations, collected in order.
        confidence_level: Default level for interval methods.

    Raises:
        ValueError: If any of the three size parameters is ≤ 1.
    """

    def __init__(
        self,
        min_num_batches: int = MIN_NUM_BATCHES,
        min_batch_size: int = MIN_NUM_OBS_PER_BATCH,
        rebatch_multiple: int = MAX_BATCH_MULTIPLE,
        name: str = "BatchStatistic",
        values: Iterable[float] | None = None,
        confidence_level: float = DEFAULT_CONFIDENCE_LEVEL,
    ) -> None:
        if min_num_batches <= 1:
            raise ValueError("Number of batches must be >= 2")
        if min_batch_size <= 1:
            raise ValueError("Batch size must be >= 2")
        if rebatch_multiple <= 1:
            raise ValueError("Rebatch multiple must be >= 2")
        super().__init__(name, confidence_level)

        self._min_num_batches = int(min_num_batches)
        self._min_batch_size = int(min_batch_size)
        self._rebatch_multiple = int(rebatch_multiple)
        self._max_num_batches = self._min_num_batches * self._rebatch_multiple

        self._within = MomentAccumulator(name=f"{name} (within batch)")
        self._across = MomentAccumulator(name=name, confidence_level=confidence_level)
        self._reset_state()

        if values is not None:
            self.collect(values)

    def _reset_state(self) -> None:
        self._batch_means: list[float] = []
        self._num_rebatches = 0
        self._current_batch_size = self._min_batch_size
        self._total_obs = 0.0
        self._missing_count = 0.0
        self._last_value = math.nan
        self._within.reset()
        self._across.reset()

    def reset(self) -> None:
        """Return to the construction-time state."""
        self._reset_state()

    def instance(self) -> BatchMeansEngine:
        """Independent copy; buffers and accumulators are not shared."""
        return copy.deepcopy(self)

    # -- configuration ------------------------------------------------------

    @property
    def min_num_batches(self) -> int:
        return self._min_num_batches

    @property
    def min_batch_size(self) -> int:
        return self._min_batch_size

    @property
    def rebatch_multiple(self) -> int:
        return self._rebatch_multiple

    @property
    def max_num_batches(self) -> int:
        return self._max_num_batches

    # -- state --------------------------------------------------------------

    @property
    def num_batches(self) -> int:
        return len(self._batch_means)

    @property
    def num_rebatches(self) -> int:
        return self._num_rebatches

    @property
    def current_batch_size(self) -> int:
        return self._current_batch_size

    @property
    def batch_means(self) -> list[float]:
        """Copy of the completed batch means, oldest first."""
        return list(self._batch_means)

    @property
    def amount_left_unbatched(self) -> float:
        return self._within.count

    @property
    def total_number_of_observations(self) -> float:
        """Every value passed to ``collect``, missing values included."""
        return self._total_obs

    @property
    def current_batch_statistic(self) -> MomentAccumulator:
        """Copy of the partially filled batch."""
        return self._within.instance()

    @property
    def across_batch_statistic(self) -> MomentAccumulator:
        """Copy of the accumulator over the completed batch means."""
        return self._across.instance()

    # -- collection ---------------------------------------------------------

    def _collect_value(self, x: float) -> None:
        self._total_obs += 1.0
        if not math.isfinite(x):
            self._missing_count += 1.0
        self._within.collect(x)
        self._last_value = x
        if self._within.count == self._current_batch_size:
            self._close_batch()

    def _close_batch(self) -> None:
        bm = self._within.average
        self._batch_means.append(bm)
        self._across.collect(bm)
        self._within.reset()
        if len(self._batch_means) == self._max_num_batches:
            self._rebatch()

    def _rebatch(self) -> None:
        self._num_rebatches += 1
        self._current_batch_size *= self._rebatch_multiple
        self._across.reset()

        grouper = MomentAccumulator()
        coarse: list[float] = []
        for bm in self._batch_means:
            grouper.collect(bm)
            if grouper.count == self._rebatch_multiple:
                coarse.append(grouper.average)
                self._across.collect(grouper.average)
                grouper.reset()
        self._batch_means = coarse

        logger.debug(
            "%s: rebatch %d -> %d batches of size %d",
            self.name,
            self._num_rebatches,
            len(coarse),
            self._current_batch_size,
        )

    def reform_batches(self, num_batches: int) -> list[float]:
        """
        Regroup the current batch means into ``num_batches`` coarser means.

        A pure query: the engine's batches, batch size and accumulators are
        not touched.  Uses batch size ``self.num_batches // num_batches``;
        trailing means that do not fill a group are dropped.

        Raises:
            ValueError: If ``num_batches`` is not in ``[1, self.num_batches]``.
        """
        if num_batches < 1:
            raise ValueError("Number of requested batches must be >= 1")
        if num_batches > self.num_batches:
            raise ValueError(
                "Number of requested batches must be <= the current number "
                f"of batches ({self.num_batches})"
            )
        return batch_means(self._batch_means, num_batches)

    # -- query contract: delegated to the across-batch accumulator ----------

    @SummaryStatistics.confidence_level.setter
    def confidence_level(self, level: float) -> None:
        SummaryStatistics.confidence_level.fset(self, level)
        self._across.confidence_level = level

    @property
    def count(self) -> float:
        return self._across.count

    @property
    def average(self) -> float:
        return self._across.average

    @property
    def sum(self) -> float:
        return self._across.sum

    @property
    def deviation_sum_of_squares(self) -> float:
        return self._across.deviation_sum_of_squares

    @property
    def variance(self) -> float:
        return self._across.variance

    @property
    def min(self) -> float:
        return self._across.min

    @property
    def max(self) -> float:
        return self._across.max

    @property
    def skewness(self) -> float:
        return self._across.skewness

    @property
    def kurtosis(self) -> float:
        return self._across.kurtosis

    @property
    def standard_error(self) -> float:
        return self._across.standard_error

    @property
    def lag1_covariance(self) -> float:
        return self._across.lag1_covariance

    @property
    def lag1_correlation(self) -> float:
        return self._across.lag1_correlation

    @property
    def von_neumann_lag1_statistic(self) -> float:
        return self._across.von_neumann_lag1_statistic

    @property
    def last_value(self) -> float:
        """Last raw observation collected (not the last batch mean)."""
        return self._last_value

    @property
    def missing_count(self) -> float:
        """Missing raw observations."""
        return self._missing_count

    @property
    def negative_count(self) -> float:
        return self._across.negative_count

    @property
    def zero_count(self) -> float:
        return self._across.zero_count

    def half_width(self, level: float | None = None) -> float:
        return self._across.half_width(self.confidence_level if level is None else level)

    def summary_text(self) -> str:
        lines = [
            super().summary_text(),
            f"Minimum batch size = {self._min_batch_size}",
            f"Minimum number of batches = {self._min_num_batches}",
            f"Rebatch multiple = {self._rebatch_multiple}",
            f"Maximum number of batches = {self._max_num_batches}",
            f"Number of rebatches = {self._num_rebatches}",
            f"Current batch size = {self._current_batch_size}",
            f"Amount left unbatched = {self.amount_left_unbatched}",
            f"Total number observed = {self._total_obs}",
        ]
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Stand-alone batching
# ---------------------------------------------------------------------------

def batch_means(data: Sequence[float], num_batches: int) -> list[float]:
    """
    Average ``data`` in ``num_batches`` contiguous groups of size
    ``len(data) // num_batches``; leftover trailing values are ignored.

    Raises:
        ValueError: If ``num_batches`` is not in ``[1, len(data)]``.
    """
    if num_batches < 1:
        raise ValueError("The number of batches must be > 0")
    if num_batches > len(data):
        raise ValueError("The number of batches must be <= the number of data values")
    if num_batches == len(data):
        return [float(x) for x in data]

    batch_size = len(data) // num_batches
    result: list[float] = []
    stat = MomentAccumulator()
    for x in data:
        stat.collect(x)
        if stat.count == batch_size:
            result.append(stat.average)
            stat.reset()
            if len(result) == num_batches:
                break
    return result
