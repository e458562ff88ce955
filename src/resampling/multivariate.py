"""
Bootstrap of vector-valued estimators.

The replicate loop is the univariate one; the estimator returns one value per
declared dimension name.  A replicate whose output length does not match the
name list is dropped from every accumulator and from the replicate matrix.
The drop is counted in ``num_skipped_replicates`` and logged at WARNING, but
no error is raised.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

import numpy as np

from src.statistic.accumulator import MomentAccumulator

from .bootstrap import BootstrapEstimate
from .config import DEFAULT_NUM_BOOTSTRAP_SAMPLES, MIN_ORIGINAL_SAMPLE_SIZE
from .estimators import MultivariateEstimator
from .population import DPopulation
from .streams import RandomStream, StreamControls

logger = logging.getLogger(__name__)


class MultivariateResamplingEngine(StreamControls):
    """
    Bootstrap engine producing one ``BootstrapEstimate`` per named dimension.

    Args:
        original_data: At least two observations (copied).
        estimator: Object with ``names`` and ``estimate(sample)``.
        stream: Random stream; a fresh ``RNStream`` scoped to this engine
            when omitted.
        name: Label for log records and summaries.

    Raises:
        ValueError: If fewer than two observations are supplied or the
            estimator declares no names.
    """

    def __init__(
        self,
        original_data: Sequence[float],
        estimator: MultivariateEstimator,
        stream: RandomStream | None = None,
        name: str = "MultivariateBootstrap",
    ) -> None:
        data = np.array(original_data, dtype=float)
        if data.size < MIN_ORIGINAL_SAMPLE_SIZE:
            raise ValueError("The original data must contain at least 2 observations")
        names = list(estimator.names)
        if not names:
            raise ValueError("The estimator must declare at least one dimension name")
        self.name = name
        self.estimator = estimator
        self._names = names
        self._data = data
        self._population = DPopulation(data, stream)
        self._dim_stats = [MomentAccumulator(name=n) for n in names]
        self._rows: list[list[float]] = []
        self._saved_samples: list[np.ndarray] = []
        self._original_estimate = np.full(len(names), math.nan)
        self._estimates: list[BootstrapEstimate] = []
        self._num_skipped = 0

    @property
    def stream(self) -> RandomStream:
        return self._population.stream

    @stream.setter
    def stream(self, stream: RandomStream) -> None:
        self._population.stream = stream

    @property
    def names(self) -> list[str]:
        return list(self._names)

    @property
    def dimension(self) -> int:
        return len(self._names)

    @property
    def original_data(self) -> np.ndarray:
        return self._data.copy()

    @property
    def original_data_sample_size(self) -> int:
        return int(self._data.size)

    @property
    def original_data_estimate(self) -> np.ndarray:
        """Estimator output on the original data; NaN before generation."""
        return self._original_estimate.copy()

    def generate_samples(
        self,
        num_bootstrap_samples: int = DEFAULT_NUM_BOOTSTRAP_SAMPLES,
        save_replicate_data: bool = False,
    ) -> list[BootstrapEstimate]:
        """
        Regenerate all replicates and return one estimate per dimension.

        Raises:
            ValueError: If ``num_bootstrap_samples`` ≤ 1, or the estimator's
                output on the original data does not match its names.
        """
        if num_bootstrap_samples <= 1:
            raise ValueError("The number of bootstrap samples must be greater than 1")
        for stat in self._dim_stats:
            stat.reset()
        self._rows = []
        self._saved_samples = []
        self._num_skipped = 0

        original = np.asarray(self.estimator.estimate(self._data.copy()), dtype=float)
        if original.size != self.dimension:
            raise ValueError(
                f"Estimator returned {original.size} values for {self.dimension} names"
            )
        self._original_estimate = original

        logger.debug(
            "%s: generating %d bootstrap samples over %d dimensions",
            self.name, num_bootstrap_samples, self.dimension,
        )
        for _ in range(num_bootstrap_samples):
            sample = self._population.sample()
            values = list(self.estimator.estimate(sample))
            if len(values) != self.dimension:
                self._num_skipped += 1
                continue
            row = [float(v) for v in values]
            for stat, v in zip(self._dim_stats, row):
                stat.collect(v)
            self._rows.append(row)
            if save_replicate_data:
                self._saved_samples.append(sample.copy())

        if self._num_skipped:
            logger.warning(
                "%s: skipped %d of %d replicates with output length != %d",
                self.name, self._num_skipped, num_bootstrap_samples, self.dimension,
            )

        columns = self.bootstrap_data.T
        n = self.original_data_sample_size
        self._estimates = [
            BootstrapEstimate(dim_name, n, original[j], columns[j])
            for j, dim_name in enumerate(self._names)
        ]
        return list(self._estimates)

    @property
    def bootstrap_estimates(self) -> list[BootstrapEstimate]:
        """Estimates from the last generation; empty before it."""
        return list(self._estimates)

    @property
    def num_skipped_replicates(self) -> int:
        return self._num_skipped

    @property
    def num_bootstrap_samples(self) -> int:
        """Replicates kept by the last generation."""
        return len(self._rows)

    @property
    def dimension_statistics(self) -> dict[str, MomentAccumulator]:
        return {n: s.instance() for n, s in zip(self._names, self._dim_stats)}

    @property
    def bootstrap_data(self) -> np.ndarray:
        """Kept replicate estimates, shape (replicates, dimensions)."""
        return np.array(self._rows, dtype=float).reshape(len(self._rows), self.dimension)

    @property
    def data_for_each_bootstrap_sample(self) -> list[np.ndarray]:
        return [s.copy() for s in self._saved_samples]

    def summary_text(self) -> str:
        sep = "-" * 54
        lines = [
            sep,
            "Multivariate bootstrap results:",
            sep,
            f"name = {self.name}",
            f"dimensions = {', '.join(self._names)}",
            f"size of original sample = {self.original_data_sample_size}",
            f"number of kept bootstrap samples = {self.num_bootstrap_samples}",
            f"number of skipped bootstrap samples = {self._num_skipped}",
        ]
        for est in self._estimates:
            lines += [
                f"{est.name}: estimate = {est.original_data_estimate}, "
                f"std. err. = {est.bootstrap_std_err_estimate}, "
                f"percentile c.i. = {est.percentile_bootstrap_ci()}",
            ]
        lines.append(sep)
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.summary_text()
