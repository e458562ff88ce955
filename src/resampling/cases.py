"""
Case (row) bootstrap over a data matrix.

Each replicate draws as many row indices as the matrix has rows, uniformly
with replacement, and applies a matrix estimator to the selected rows.  The
estimator returns one value per name, for example a correlation between
columns of the resampled cases.  Replicates whose output length does not
match the names are skipped, counted and logged at WARNING, as in the
multivariate engine.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

import numpy as np

from src.statistic.accumulator import MomentAccumulator

from .bootstrap import BootstrapEstimate
from .config import DEFAULT_NUM_BOOTSTRAP_SAMPLES, MIN_ORIGINAL_SAMPLE_SIZE
from .streams import RandomStream, RNStream, StreamControls

logger = logging.getLogger(__name__)

MatrixEstimator = Callable[[np.ndarray], Sequence[float]]


class CaseBootstrap(StreamControls):
    """
    Bootstrap that resamples whole rows of a matrix.

    Args:
        matrix: Rectangular data with at least two rows (copied).
        estimator: Function of a matrix returning one value per name.
        names: Names of the estimator's outputs; ``b0``, ``b1``, ... when
            omitted.
        stream: Random stream; a fresh ``RNStream`` when omitted.
        name: Label for log records and summaries.

    Raises:
        ValueError: If the matrix is not two-dimensional, has fewer than two
            rows, the estimator returns nothing on it, or the names do not
            match its output.
    """

    def __init__(
        self,
        matrix: Sequence[Sequence[float]] | np.ndarray,
        estimator: MatrixEstimator,
        names: Sequence[str] | None = None,
        stream: RandomStream | None = None,
        name: str = "CaseBootstrap",
    ) -> None:
        m = np.array(matrix, dtype=float)
        if m.ndim != 2:
            raise ValueError("The data must be a rectangular matrix")
        if m.shape[0] < MIN_ORIGINAL_SAMPLE_SIZE:
            raise ValueError("There must be at least 2 rows in the matrix")
        original = np.asarray(estimator(m.copy()), dtype=float).ravel()
        if original.size == 0:
            raise ValueError("The estimator provided no original estimates")
        if names is None:
            names = [f"b{i}" for i in range(original.size)]
        names = list(names)
        if len(names) != original.size:
            raise ValueError("There must be a name for each estimate")
        if len(set(names)) != len(names):
            raise ValueError("The supplied names were not unique")

        self.name = name
        self.estimator = estimator
        self.stream = stream if stream is not None else RNStream()
        self._matrix = m
        self._names = names
        self._original_estimate = original
        self._dim_stats = [MomentAccumulator(name=n) for n in names]
        self._rows: list[np.ndarray] = []
        self._case_indices: list[np.ndarray] = []
        self._estimates: list[BootstrapEstimate] = []
        self._num_skipped = 0

    @property
    def names(self) -> list[str]:
        return list(self._names)

    @property
    def num_cases(self) -> int:
        return int(self._matrix.shape[0])

    @property
    def matrix(self) -> np.ndarray:
        return self._matrix.copy()

    @property
    def original_data_estimate(self) -> np.ndarray:
        return self._original_estimate.copy()

    def generate_samples(
        self,
        num_bootstrap_samples: int = DEFAULT_NUM_BOOTSTRAP_SAMPLES,
        save_case_indices: bool = False,
    ) -> list[BootstrapEstimate]:
        """
        Regenerate all replicates and return one estimate per name.

        Raises:
            ValueError: If ``num_bootstrap_samples`` ≤ 1.
        """
        if num_bootstrap_samples <= 1:
            raise ValueError("The number of bootstrap samples must be greater than 1")
        for stat in self._dim_stats:
            stat.reset()
        self._rows = []
        self._case_indices = []
        self._num_skipped = 0

        n = self.num_cases
        logger.debug(
            "%s: generating %d case resamples of %d rows", self.name, num_bootstrap_samples, n
        )
        for _ in range(num_bootstrap_samples):
            indices = self.stream.rand_indices(n, n)
            values = np.asarray(self.estimator(self._matrix[indices]), dtype=float).ravel()
            if values.size != len(self._names):
                self._num_skipped += 1
                continue
            for stat, v in zip(self._dim_stats, values):
                stat.collect(float(v))
            self._rows.append(values)
            if save_case_indices:
                self._case_indices.append(np.array(indices, dtype=np.int64))

        if self._num_skipped:
            logger.warning(
                "%s: skipped %d of %d replicates with output length != %d",
                self.name, self._num_skipped, num_bootstrap_samples, len(self._names),
            )

        columns = self.bootstrap_data.T
        self._estimates = [
            BootstrapEstimate(dim_name, n, self._original_estimate[j], columns[j])
            for j, dim_name in enumerate(self._names)
        ]
        return list(self._estimates)

    @property
    def bootstrap_estimates(self) -> list[BootstrapEstimate]:
        return list(self._estimates)

    @property
    def num_bootstrap_samples(self) -> int:
        return len(self._rows)

    @property
    def num_skipped_replicates(self) -> int:
        return self._num_skipped

    @property
    def bootstrap_data(self) -> np.ndarray:
        """Kept replicate estimates, shape (replicates, names)."""
        if not self._rows:
            return np.empty((0, len(self._names)))
        return np.vstack(self._rows)

    @property
    def dimension_statistics(self) -> dict[str, MomentAccumulator]:
        return {n: s.instance() for n, s in zip(self._names, self._dim_stats)}

    @property
    def case_indices(self) -> list[np.ndarray]:
        """Row indices of each kept replicate; empty unless saving was requested."""
        return [idx.copy() for idx in self._case_indices]

    @property
    def case_frequencies(self) -> np.ndarray:
        """How often each row was drawn, shape (saved replicates, rows)."""
        if not self._case_indices:
            return np.empty((0, self.num_cases), dtype=np.int64)
        return np.vstack(
            [np.bincount(idx, minlength=self.num_cases) for idx in self._case_indices]
        )

    def summary_text(self) -> str:
        sep = "-" * 54
        lines = [
            sep,
            "Case bootstrap results:",
            sep,
            f"name = {self.name}",
            f"estimates = {', '.join(self._names)}",
            f"number of cases = {self.num_cases}",
            f"number of kept bootstrap samples = {self.num_bootstrap_samples}",
            f"number of skipped bootstrap samples = {self._num_skipped}",
        ]
        for est in self._estimates:
            lines.append(
                f"{est.name}: estimate = {est.original_data_estimate}, "
                f"std. err. = {est.bootstrap_std_err_estimate}, "
                f"percentile c.i. = {est.percentile_bootstrap_ci()}"
            )
        lines.append(sep)
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.summary_text()
