"""
Unit tests for src/resampling/streams.py and src/resampling/population.py.

Covers:
- RNStream control surface: reset to stream start, reset to substream
  start, advance to next substream, antithetic variates.
- Draw ranges for rand_u01 / rand_int / rand_indices.
- RNStreamProvider numbering and reproducibility.
- DPopulation sampling and stream pass-through controls, including the
  run options.
"""

from __future__ import annotations

import numpy as np
import pytest

from src.resampling.population import DPopulation
from src.resampling.streams import RandomStream, RNStream, RNStreamProvider

from .conftest import TEST_SEED, RecordedStream


def _draws(stream, k: int = 5) -> list[float]:
    return [stream.rand_u01() for _ in range(k)]


# ---------------------------------------------------------------------------
# Class: stream control
# ---------------------------------------------------------------------------

class TestStreamControl:

    def test_reset_start_stream_reproduces_draws(self, seeded_stream):
        first = _draws(seeded_stream)
        seeded_stream.advance_to_next_substream()
        _draws(seeded_stream)
        seeded_stream.reset_start_stream()
        assert _draws(seeded_stream) == first
        assert seeded_stream.substream_number == 0

    def test_reset_start_substream_reproduces_substream(self, seeded_stream):
        seeded_stream.advance_to_next_substream()
        first = _draws(seeded_stream)
        seeded_stream.reset_start_substream()
        assert _draws(seeded_stream) == first
        assert seeded_stream.substream_number == 1

    def test_advance_changes_draws(self, seeded_stream):
        first = _draws(seeded_stream)
        seeded_stream.advance_to_next_substream()
        assert _draws(seeded_stream) != first

    def test_antithetic_returns_complement(self):
        plain = RNStream(seed=TEST_SEED)
        anti = RNStream(seed=TEST_SEED, antithetic=True)
        for u, v in zip(_draws(plain, 20), _draws(anti, 20)):
            assert u + v == pytest.approx(1.0)

    def test_antithetic_instance_starts_over_inverted(self, seeded_stream):
        _draws(seeded_stream)
        anti = seeded_stream.antithetic_instance()
        assert anti.antithetic is True
        assert anti.stream_number == seeded_stream.stream_number
        seeded_stream.reset_start_stream()
        assert _draws(anti, 1)[0] == pytest.approx(1.0 - _draws(seeded_stream, 1)[0])

    def test_different_stream_numbers_differ(self):
        a = RNStream(seed=TEST_SEED, stream_number=1)
        b = RNStream(seed=TEST_SEED, stream_number=2)
        assert _draws(a) != _draws(b)

    def test_satisfies_stream_protocol(self, seeded_stream):
        assert isinstance(seeded_stream, RandomStream)
        assert isinstance(RecordedStream([0.5]), RandomStream)


# ---------------------------------------------------------------------------
# Class: draw ranges
# ---------------------------------------------------------------------------

class TestDraws:

    def test_uniforms_in_unit_interval(self, seeded_stream):
        u = _draws(seeded_stream, 1000)
        assert all(0.0 <= x < 1.0 for x in u)

    def test_rand_int_is_inclusive(self, seeded_stream):
        values = {seeded_stream.rand_int(3, 5) for _ in range(500)}
        assert values == {3, 4, 5}

    def test_rand_int_rejects_empty_range(self, seeded_stream):
        with pytest.raises(ValueError):
            seeded_stream.rand_int(5, 3)

    def test_rand_indices_range_and_coverage(self, seeded_stream):
        idx = seeded_stream.rand_indices(7, 2000)
        assert idx.shape == (2000,)
        assert idx.min() == 0
        assert idx.max() == 6

    def test_antithetic_indices_stay_in_range(self):
        idx = RNStream(seed=TEST_SEED, antithetic=True).rand_indices(4, 1000)
        assert set(np.unique(idx)) <= {0, 1, 2, 3}

    def test_rand_indices_rejects_empty_population(self, seeded_stream):
        with pytest.raises(ValueError):
            seeded_stream.rand_indices(0, 3)


# ---------------------------------------------------------------------------
# Class: provider
# ---------------------------------------------------------------------------

class TestProvider:

    def test_numbering_starts_at_one(self, provider):
        s1 = provider.next_stream()
        s2 = provider.next_stream()
        assert (s1.stream_number, s2.stream_number) == (1, 2)
        assert provider.last_stream_number == 2
        assert provider.stream_number(s2) == 2
        assert provider.stream_number(RNStream()) is None

    def test_stream_creates_intervening_streams(self, provider):
        s3 = provider.stream(3)
        assert s3.stream_number == 3
        assert provider.last_stream_number == 3
        assert provider.stream(3) is s3

    def test_invalid_stream_number_raises(self, provider):
        with pytest.raises(ValueError):
            provider.stream(0)

    def test_same_seed_same_sequence(self):
        a = RNStreamProvider(seed=99).next_stream()
        b = RNStreamProvider(seed=99).next_stream()
        assert _draws(a) == _draws(b)

    def test_reset_stream_sequence(self, provider):
        s = provider.next_stream()
        first = _draws(s)
        s.advance_to_next_substream()
        provider.reset_stream_sequence()
        assert _draws(s) == first


# ---------------------------------------------------------------------------
# Class: DPopulation
# ---------------------------------------------------------------------------

class TestPopulation:

    def test_sample_draws_from_elements(self, sample_data, seeded_stream):
        pop = DPopulation(sample_data, seeded_stream)
        sample = pop.sample()
        assert sample.size == len(sample_data)
        assert set(sample) <= set(sample_data)

    def test_recorded_stream_scripts_the_sample(self):
        pop = DPopulation([10.0, 20.0, 30.0], RecordedStream.from_indices([2, 0, 0], 3))
        assert list(pop.sample()) == [30.0, 10.0, 10.0]
        assert pop.sample_one() == 30.0

    def test_empty_population_raises(self):
        with pytest.raises(ValueError):
            DPopulation([])

    def test_invalid_sample_size_raises(self, sample_data):
        with pytest.raises(ValueError):
            DPopulation(sample_data).sample(0)

    def test_controls_pass_through(self, sample_data):
        stream = RecordedStream([0.1, 0.9])
        pop = DPopulation(sample_data, stream)
        pop.antithetic = True
        assert stream.antithetic is True
        pop.advance_to_next_substream()
        assert stream.substream == 1
        pop.reset_start_stream()
        assert stream.substream == 0

    def test_run_options_pass_through(self, sample_data, seeded_stream):
        pop = DPopulation(sample_data, seeded_stream)
        assert pop.reset_start_stream_option is True
        assert pop.advance_to_next_substream_option is True
        pop.reset_start_stream_option = False
        pop.advance_to_next_substream_option = False
        assert seeded_stream.reset_start_stream_option is False
        assert seeded_stream.advance_to_next_substream_option is False
        seeded_stream.advance_to_next_substream_option = True
        assert pop.advance_to_next_substream_option is True

    def test_elements_are_copied(self, sample_data):
        pop = DPopulation(sample_data)
        sample_data[0] = -1.0
        assert pop.elements[0] == 63.72
