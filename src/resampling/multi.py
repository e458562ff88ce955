"""
Bootstrap of several named samples side by side.

``MultiBootstrap`` keeps one ``ResamplingEngine`` per name, each on its own
stream from a single ``RNStreamProvider``, so the samples are resampled
independently but reproducibly.  The stream controls act on every engine at
once; per-name results come back as dictionaries keyed by name, in the order
the samples were given.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

import numpy as np

from .bootstrap import BootstrapEstimate, ResamplingEngine
from .config import DEFAULT_NUM_BOOTSTRAP_SAMPLES
from .estimators import Estimator, average
from .population import DPopulation
from .streams import RNStreamProvider

logger = logging.getLogger(__name__)


class MultiBootstrap:
    """
    One bootstrap engine per named sample.

    Args:
        data_map: Sample name to original data; each needs at least two
            observations.
        estimator: Univariate estimator given to every engine.
        provider: Source of the engines' streams; a new provider when
            omitted.
        name: Label for log records and summaries.

    Raises:
        ValueError: If ``data_map`` is empty or any sample has fewer than
            two observations.
    """

    def __init__(
        self,
        data_map: Mapping[str, Sequence[float]],
        estimator: Estimator = average,
        provider: RNStreamProvider | None = None,
        name: str = "MultiBootstrap",
    ) -> None:
        if not data_map:
            raise ValueError("At least one named sample is required")
        self.name = name
        self._provider = provider if provider is not None else RNStreamProvider()
        self._engines: dict[str, ResamplingEngine] = {
            key: ResamplingEngine(
                values, estimator, stream=self._provider.next_stream(), name=key
            )
            for key, values in data_map.items()
        }

    # -- members ------------------------------------------------------------

    @property
    def names(self) -> list[str]:
        return list(self._engines)

    @property
    def num_names(self) -> int:
        return len(self._engines)

    def bootstrap(self, name: str) -> ResamplingEngine:
        """
        The engine for ``name``.

        Raises:
            KeyError: If no sample has that name.
        """
        return self._engines[name]

    @property
    def bootstraps(self) -> list[ResamplingEngine]:
        return list(self._engines.values())

    # -- stream controls ----------------------------------------------------

    def reset_start_stream(self) -> None:
        for engine in self._engines.values():
            engine.reset_start_stream()

    def reset_start_substream(self) -> None:
        for engine in self._engines.values():
            engine.reset_start_substream()

    def advance_to_next_substream(self) -> None:
        for engine in self._engines.values():
            engine.advance_to_next_substream()

    @property
    def antithetic(self) -> bool:
        """True only if every engine's stream is antithetic."""
        return all(e.antithetic for e in self._engines.values())

    @antithetic.setter
    def antithetic(self, flag: bool) -> None:
        for engine in self._engines.values():
            engine.antithetic = flag

    @property
    def reset_start_stream_option(self) -> bool:
        return all(e.reset_start_stream_option for e in self._engines.values())

    @reset_start_stream_option.setter
    def reset_start_stream_option(self, flag: bool) -> None:
        for engine in self._engines.values():
            engine.reset_start_stream_option = flag

    @property
    def advance_to_next_substream_option(self) -> bool:
        return all(e.advance_to_next_substream_option for e in self._engines.values())

    @advance_to_next_substream_option.setter
    def advance_to_next_substream_option(self, flag: bool) -> None:
        for engine in self._engines.values():
            engine.advance_to_next_substream_option = flag

    # -- generation ---------------------------------------------------------

    def generate_samples(
        self,
        num_bootstrap_samples: Mapping[str, int] | int = DEFAULT_NUM_BOOTSTRAP_SAMPLES,
        estimator: Estimator | None = None,
        save_replicate_data: bool = False,
    ) -> None:
        """
        Regenerate the replicates of the named engines.

        Args:
            num_bootstrap_samples: Replicate count for every engine, or a
                per-name mapping.  Names left out of the mapping, and names
                mapped to a count of 1 or less, keep their previous results.
            estimator: Replaces each generated engine's estimator when given.
            save_replicate_data: Keep a copy of every resample.

        Raises:
            KeyError: If the mapping names an unknown sample.
        """
        if isinstance(num_bootstrap_samples, Mapping):
            counts = dict(num_bootstrap_samples)
            unknown = [k for k in counts if k not in self._engines]
            if unknown:
                raise KeyError(f"Unknown sample names: {unknown}")
        else:
            counts = {k: num_bootstrap_samples for k in self._engines}

        for key, n in counts.items():
            if n <= 1:
                logger.warning(
                    "%s: %s not generated, %d bootstrap samples requested", self.name, key, n
                )
                continue
            self._engines[key].generate_samples(
                n, estimator=estimator, save_replicate_data=save_replicate_data
            )

    # -- per-name results ---------------------------------------------------

    @property
    def original_data_estimates(self) -> dict[str, float]:
        return {k: e.original_data_estimate for k, e in self._engines.items()}

    @property
    def bootstrap_estimates(self) -> dict[str, BootstrapEstimate]:
        """Immutable record per engine that has replicates."""
        return {
            k: BootstrapEstimate(
                k, e.original_data_sample_size, e.original_data_estimate, e.bootstrap_estimates
            )
            for k, e in self._engines.items()
            if e.num_bootstrap_samples > 0
        }

    @property
    def bootstrap_sample_averages(self) -> dict[str, np.ndarray]:
        return {k: e.bootstrap_sample_averages for k, e in self._engines.items()}

    @property
    def bootstrap_sample_variances(self) -> dict[str, np.ndarray]:
        return {k: e.bootstrap_sample_variances for k, e in self._engines.items()}

    @property
    def bootstrap_sample_data(self) -> dict[str, list[np.ndarray]]:
        """Saved resamples by name; empty lists unless saving was requested."""
        return {k: e.data_for_each_bootstrap_sample for k, e in self._engines.items()}

    def data_for_bootstrap_sample(self, b: int) -> dict[str, np.ndarray]:
        """Saved resample ``b`` of every engine."""
        return {k: e.data_for_bootstrap_sample(b) for k, e in self._engines.items()}

    def bootstrap_random_variables(
        self,
        use_crn: bool = True,
        provider: RNStreamProvider | None = None,
    ) -> dict[str, list[DPopulation]]:
        """
        An empirical sampler over each saved resample, by name.

        All samplers draw their streams from one provider (a new one when
        omitted).  With ``use_crn`` the samplers of one name share a stream.
        """
        provider = provider if provider is not None else RNStreamProvider()
        return {
            k: e.population_for_each_bootstrap_sample(provider, use_crn)
            for k, e in self._engines.items()
        }

    def summary_text(self) -> str:
        lines = [f"MultiBootstrap results for : {self.name}"]
        lines += [e.summary_text() for e in self._engines.values()]
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.summary_text()
