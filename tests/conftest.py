"""
Shared pytest fixtures for statistic and resampling tests.

The ten-value dataset is the reference sample used throughout the bootstrap
tests; its arithmetic mean is 50.036.  ``RecordedStream`` replaces the numpy
stream wherever a test needs to know exactly which indices are drawn.
"""

from __future__ import annotations

import numpy as np
import pytest

from src.resampling.streams import RNStream, RNStreamProvider


# ---------------------------------------------------------------------------
# Reference data
# ---------------------------------------------------------------------------

SAMPLE_DATA = [63.72, 32.24, 40.28, 36.94, 36.29, 56.94, 34.10, 63.36, 49.29, 87.20]
SAMPLE_MEAN = 50.036

TEST_SEED = 20240607


# ---------------------------------------------------------------------------
# Recorded stream
# ---------------------------------------------------------------------------

class RecordedStream:
    """
    Stream that replays a fixed cycle of uniforms.

    ``rand_indices(n, size)`` maps each replayed ``u`` to ``min(int(u*n), n-1)``,
    matching RNStream, so ``RecordedStream.from_indices`` can script exact
    resamples.  Reset controls rewind the cycle; advancing moves to the next
    substream and also rewinds.
    """

    def __init__(self, uniforms, antithetic: bool = False):
        self._uniforms = [float(u) for u in uniforms]
        self._pos = 0
        self.antithetic = antithetic
        self.reset_start_stream_option = True
        self.advance_to_next_substream_option = True
        self.substream = 0
        self.draws = 0

    @classmethod
    def from_indices(cls, indices, n: int) -> RecordedStream:
        """Uniforms chosen so each draw lands on the given index."""
        return cls([(i + 0.5) / n for i in indices])

    def _next(self) -> float:
        u = self._uniforms[self._pos % len(self._uniforms)]
        self._pos += 1
        self.draws += 1
        return 1.0 - u if self.antithetic else u

    def rand_u01(self) -> float:
        return self._next()

    def rand_indices(self, n: int, size: int) -> np.ndarray:
        return np.array([min(int(self._next() * n), n - 1) for _ in range(size)], dtype=np.int64)

    def reset_start_stream(self) -> None:
        self._pos = 0
        self.substream = 0

    def reset_start_substream(self) -> None:
        self._pos = 0

    def advance_to_next_substream(self) -> None:
        self._pos = 0
        self.substream += 1


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_data():
    """The ten-value reference sample (fresh list per test)."""
    return list(SAMPLE_DATA)


@pytest.fixture
def seeded_stream():
    """numpy-backed stream with a fixed seed."""
    return RNStream(seed=TEST_SEED)


@pytest.fixture
def provider():
    """Stream provider with a fixed seed."""
    return RNStreamProvider(seed=TEST_SEED)


@pytest.fixture
def identity_stream():
    """Recorded stream whose resamples of size 10 reproduce the input order."""
    return RecordedStream.from_indices(range(10), 10)


@pytest.fixture
def autocorrelated_series():
    """AR(1) series (phi = 0.8) of 4,000 values; strongly lag-1 correlated."""
    rng = np.random.default_rng(TEST_SEED)
    x = np.empty(4000)
    x[0] = 0.0
    noise = rng.normal(size=4000)
    for i in range(1, 4000):
        x[i] = 0.8 * x[i - 1] + noise[i]
    return x
