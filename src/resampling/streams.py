"""
Controllable random-number streams for resampling.

A stream is a shared, mutable capability object.  The same ``RNStream`` may
be handed to several engines on purpose (common random numbers); every draw
by any holder advances it for all holders.  There is no process-wide default
stream: engines constructed without one build their own, and callers that
need numbered, reproducible streams use an explicit ``RNStreamProvider``.

Each stream is divided into substreams.  Substream ``k`` of stream ``s`` is
an independent numpy ``Generator`` (PCG64) seeded from
``SeedSequence(seed, spawn_key=(s, k))``, so the control operations are
exact:

    reset_start_stream()         → substream 0, first draw
    reset_start_substream()      → current substream, first draw
    advance_to_next_substream()  → substream k+1, first draw

With ``antithetic`` set, every uniform ``u`` is returned as ``1 - u``.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

import numpy as np

from .config import DEFAULT_STREAM_SEED

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Stream contract
# ---------------------------------------------------------------------------

@runtime_checkable
class RandomStream(Protocol):
    """What the resampling engines need from a stream."""

    antithetic: bool
    reset_start_stream_option: bool
    advance_to_next_substream_option: bool

    def rand_u01(self) -> float: ...

    def rand_indices(self, n: int, size: int) -> np.ndarray: ...

    def reset_start_stream(self) -> None: ...

    def reset_start_substream(self) -> None: ...

    def advance_to_next_substream(self) -> None: ...


# ---------------------------------------------------------------------------
# numpy-backed stream
# ---------------------------------------------------------------------------

class RNStream:
    """
    Uniform random stream with substream control.

    Args:
        seed: Root entropy shared by every stream of a provider.
        stream_number: Index distinguishing this stream from its siblings.
        antithetic: Return ``1 - u`` instead of ``u``.
    """

    def __init__(
        self,
        seed: int = DEFAULT_STREAM_SEED,
        stream_number: int = 0,
        antithetic: bool = False,
    ) -> None:
        self._seed = int(seed)
        self._stream_number = int(stream_number)
        self._substream = 0
        self.antithetic = antithetic
        # Whether a driver of repeated runs should reset or advance this stream
        # between runs; the stream itself never reads them.
        self.reset_start_stream_option = True
        self.advance_to_next_substream_option = True
        self._rng = self._make_generator()

    def _make_generator(self) -> np.random.Generator:
        ss = np.random.SeedSequence(
            self._seed,
            spawn_key=(self._stream_number, self._substream),
        )
        return np.random.Generator(np.random.PCG64(ss))

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def stream_number(self) -> int:
        return self._stream_number

    @property
    def substream_number(self) -> int:
        return self._substream

    # -- control ------------------------------------------------------------

    def reset_start_stream(self) -> None:
        self._substream = 0
        self._rng = self._make_generator()

    def reset_start_substream(self) -> None:
        self._rng = self._make_generator()

    def advance_to_next_substream(self) -> None:
        self._substream += 1
        self._rng = self._make_generator()

    # -- draws --------------------------------------------------------------

    def rand_u01(self) -> float:
        u = float(self._rng.random())
        return 1.0 - u if self.antithetic else u

    def rand_int(self, lo: int, hi: int) -> int:
        """Uniform integer in the closed range ``[lo, hi]``."""
        if lo > hi:
            raise ValueError("The lower limit must be <= the upper limit")
        span = hi - lo + 1
        return lo + min(int(self.rand_u01() * span), span - 1)

    def rand_index(self, n: int) -> int:
        """Uniform index in ``[0, n)``."""
        return self.rand_int(0, n - 1)

    def rand_indices(self, n: int, size: int) -> np.ndarray:
        """
        ``size`` uniform indices in ``[0, n)``; equivalent to ``size``
        successive calls of :meth:`rand_index`.
        """
        if n < 1:
            raise ValueError("The population size must be >= 1")
        u = self._rng.random(size)
        if self.antithetic:
            u = 1.0 - u
        return np.minimum((u * n).astype(np.int64), n - 1)

    def antithetic_instance(self) -> RNStream:
        """
        New stream at the start of the same sequence with the antithetic
        flag inverted.
        """
        return RNStream(self._seed, self._stream_number, not self.antithetic)

    def __repr__(self) -> str:
        return (
            f"RNStream(seed={self._seed}, stream_number={self._stream_number}, "
            f"substream={self._substream}, antithetic={self.antithetic})"
        )


# ---------------------------------------------------------------------------
# Provider
# ---------------------------------------------------------------------------

class RNStreamProvider:
    """
    Hands out numbered streams that share a root seed.

    Stream numbers start at 1 and follow creation order, so two providers
    with the same seed produce identical stream sequences.
    """

    def __init__(self, seed: int = DEFAULT_STREAM_SEED) -> None:
        self._seed = int(seed)
        self._streams: list[RNStream] = []

    @property
    def seed(self) -> int:
        return self._seed

    def next_stream(self) -> RNStream:
        stream = RNStream(self._seed, stream_number=len(self._streams) + 1)
        self._streams.append(stream)
        logger.debug("Provider(seed=%d) created stream %d", self._seed, stream.stream_number)
        return stream

    def stream(self, i: int) -> RNStream:
        """Stream number ``i``, creating intervening streams as needed."""
        if i < 1:
            raise ValueError("Stream numbers start at 1")
        while len(self._streams) < i:
            self.next_stream()
        return self._streams[i - 1]

    def stream_number(self, stream: RNStream) -> int | None:
        """Number of ``stream`` if this provider created it, else None."""
        for i, s in enumerate(self._streams, start=1):
            if s is stream:
                return i
        return None

    @property
    def last_stream_number(self) -> int:
        return len(self._streams)

    def reset_stream_sequence(self) -> None:
        """Reset every stream created so far to its start."""
        for s in self._streams:
            s.reset_start_stream()


# ---------------------------------------------------------------------------
# Pass-through controls
# ---------------------------------------------------------------------------

class StreamControls:
    """
    Mixin exposing a held stream's control surface on its holder.

    The holder must provide a ``stream`` attribute or property.
    """

    stream: RandomStream

    @property
    def antithetic(self) -> bool:
        return self.stream.antithetic

    @antithetic.setter
    def antithetic(self, flag: bool) -> None:
        self.stream.antithetic = flag

    @property
    def reset_start_stream_option(self) -> bool:
        return self.stream.reset_start_stream_option

    @reset_start_stream_option.setter
    def reset_start_stream_option(self, flag: bool) -> None:
        self.stream.reset_start_stream_option = flag

    @property
    def advance_to_next_substream_option(self) -> bool:
        return self.stream.advance_to_next_substream_option

    @advance_to_next_substream_option.setter
    def advance_to_next_substream_option(self, flag: bool) -> None:
        self.stream.advance_to_next_substream_option = flag

    def reset_start_stream(self) -> None:
        self.stream.reset_start_stream()

    def reset_start_substream(self) -> None:
        self.stream.reset_start_substream()

    def advance_to_next_substream(self) -> None:
        self.stream.advance_to_next_substream()
