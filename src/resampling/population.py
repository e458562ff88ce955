"""
Finite population of values sampled uniformly with replacement.

This is the sampling primitive behind every bootstrap replicate: a resample
of size ``n`` is ``n`` independent uniform index draws from the held stream.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from .streams import RandomStream, RNStream, StreamControls


class DPopulation(StreamControls):
    """
    Discrete uniform population over a fixed array of values.

    Args:
        elements: Population values (copied; at least one).
        stream: Random stream; a fresh ``RNStream`` when omitted.
    """

    def __init__(
        self,
        elements: Sequence[float],
        stream: RandomStream | None = None,
    ) -> None:
        data = np.array(elements, dtype=float)
        if data.size == 0:
            raise ValueError("The population must contain at least one element")
        self._elements = data
        self.stream = stream if stream is not None else RNStream()

    @property
    def size(self) -> int:
        return int(self._elements.size)

    @property
    def elements(self) -> np.ndarray:
        return self._elements.copy()

    def sample(self, size: int | None = None) -> np.ndarray:
        """
        Draw ``size`` values with replacement (population size by default).
        """
        size = self.size if size is None else size
        if size < 1:
            raise ValueError("The sample size must be >= 1")
        return self._elements[self.stream.rand_indices(self.size, size)]

    def sample_one(self) -> float:
        return float(self.sample(1)[0])
