"""
Unit tests for src/resampling/multivariate.py and the multivariate
estimators in src/resampling/estimators.py.

Covers:
- One BootstrapEstimate per dimension, in name order, built from the
  replicate columns.
- Replicates whose output length does not match the names: skipped,
  counted, logged at WARNING.
- Argument validation and regeneration.
"""

from __future__ import annotations

import logging
import math

import numpy as np
import pytest

from src.resampling.config import BASIC_STATISTICS_NAMES, DEFAULT_NUM_BOOTSTRAP_SAMPLES
from src.resampling.estimators import (
    BasicStatistics,
    FunctionsEstimator,
    average,
    maximum,
    minimum,
    quantile_estimator,
)
from src.resampling.multivariate import MultivariateResamplingEngine
from src.resampling.streams import RNStream

from .conftest import SAMPLE_MEAN, TEST_SEED


class ShortEveryThird:
    """
    Two-dimensional estimator that drops its second value on every third
    call after the first (the first call is the original data).
    """

    names = ["mean", "max"]

    def __init__(self, always_short: bool = False):
        self.calls = 0
        self.always_short = always_short

    def estimate(self, data):
        call = self.calls
        self.calls += 1
        if call > 0 and (self.always_short or call % 3 == 0):
            return [float(np.mean(data))]
        return [float(np.mean(data)), float(np.max(data))]


def _engine(sample_data, estimator=None) -> MultivariateResamplingEngine:
    return MultivariateResamplingEngine(
        sample_data,
        estimator if estimator is not None else BasicStatistics(),
        stream=RNStream(seed=TEST_SEED),
    )


# ---------------------------------------------------------------------------
# Class: per-dimension estimates
# ---------------------------------------------------------------------------

class TestEstimates:

    def test_one_estimate_per_name(self, sample_data):
        estimates = _engine(sample_data).generate_samples(200)
        assert [e.name for e in estimates] == BASIC_STATISTICS_NAMES
        assert all(e.num_bootstrap_samples == 200 for e in estimates)
        assert all(e.original_data_sample_size == 10 for e in estimates)

    def test_default_replicate_count(self, sample_data):
        estimates = _engine(sample_data).generate_samples()
        assert estimates[0].num_bootstrap_samples == DEFAULT_NUM_BOOTSTRAP_SAMPLES

    def test_original_estimates(self, sample_data):
        engine = _engine(sample_data)
        estimates = engine.generate_samples(50)
        by_name = {e.name: e for e in estimates}
        assert by_name["average"].original_data_estimate == pytest.approx(SAMPLE_MEAN)
        assert by_name["min"].original_data_estimate == 32.24
        assert by_name["max"].original_data_estimate == 87.20
        assert engine.original_data_estimate[1] == pytest.approx(np.var(sample_data, ddof=1))

    def test_columns_match_replicate_matrix(self, sample_data):
        engine = _engine(sample_data)
        estimates = engine.generate_samples(100)
        data = engine.bootstrap_data
        assert data.shape == (100, 8)
        for j, est in enumerate(estimates):
            assert np.array_equal(est.bootstrap_estimates, data[:, j])

    def test_dimension_statistics(self, sample_data):
        engine = _engine(sample_data)
        engine.generate_samples(100)
        stats = engine.dimension_statistics
        assert list(stats) == BASIC_STATISTICS_NAMES
        assert stats["average"].count == 100
        assert stats["average"].average == pytest.approx(engine.bootstrap_data[:, 0].mean())

    def test_average_dimension_matches_univariate_interval(self, sample_data):
        estimates = _engine(sample_data).generate_samples(1000)
        ci = estimates[0].percentile_bootstrap_ci(0.95)
        assert ci.is_finite
        assert SAMPLE_MEAN in ci

    def test_functions_estimator(self, sample_data):
        fe = FunctionsEstimator({"min": minimum, "max": maximum, "q90": quantile_estimator(0.9)})
        estimates = _engine(sample_data, fe).generate_samples(30)
        assert [e.name for e in estimates] == ["min", "max", "q90"]
        assert all(e.bootstrap_estimates.min() >= 32.24 for e in estimates)

    def test_saved_data(self, sample_data):
        engine = _engine(sample_data)
        engine.generate_samples(12, save_replicate_data=True)
        assert len(engine.data_for_each_bootstrap_sample) == 12

    def test_regeneration_discards_prior_state(self, sample_data):
        engine = _engine(sample_data)
        engine.generate_samples(100)
        estimates = engine.generate_samples(20)
        assert engine.num_bootstrap_samples == 20
        assert estimates[0].num_bootstrap_samples == 20
        assert engine.dimension_statistics["average"].count == 20
        assert len(engine.bootstrap_estimates) == 8


# ---------------------------------------------------------------------------
# Class: mismatched replicate output
# ---------------------------------------------------------------------------

class TestSkippedReplicates:

    def test_mismatched_replicates_are_skipped_and_counted(self, sample_data):
        engine = _engine(sample_data, ShortEveryThird())
        estimates = engine.generate_samples(30)
        # replicate calls 1..30; every third (10 of them) is short
        assert engine.num_skipped_replicates == 10
        assert engine.num_bootstrap_samples == 20
        assert all(e.num_bootstrap_samples == 20 for e in estimates)
        assert engine.dimension_statistics["max"].count == 20

    def test_skip_is_logged_as_warning(self, sample_data, caplog):
        engine = _engine(sample_data, ShortEveryThird())
        with caplog.at_level(logging.WARNING, logger="src.resampling.multivariate"):
            engine.generate_samples(30)
        records = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(records) == 1
        assert "skipped 10 of 30" in records[0].getMessage()

    def test_no_warning_without_skips(self, sample_data, caplog):
        with caplog.at_level(logging.WARNING, logger="src.resampling.multivariate"):
            _engine(sample_data).generate_samples(20)
        assert not [r for r in caplog.records if r.levelno == logging.WARNING]

    def test_all_replicates_skipped(self, sample_data):
        engine = _engine(sample_data, ShortEveryThird(always_short=True))
        estimates = engine.generate_samples(10)
        assert engine.num_skipped_replicates == 10
        assert engine.bootstrap_data.shape == (0, 2)
        assert [e.num_bootstrap_samples for e in estimates] == [0, 0]
        assert math.isnan(estimates[0].percentile_bootstrap_ci().lower_limit)

    def test_mismatched_original_output_raises(self, sample_data):
        class WrongLength:
            names = ["a", "b"]

            def estimate(self, data):
                return [average(data)]

        with pytest.raises(ValueError, match="1 values for 2 names"):
            _engine(sample_data, WrongLength()).generate_samples(10)


# ---------------------------------------------------------------------------
# Class: validation
# ---------------------------------------------------------------------------

class TestValidation:

    def test_too_little_data_raises(self):
        with pytest.raises(ValueError):
            MultivariateResamplingEngine([1.0], BasicStatistics())

    def test_empty_names_raise(self, sample_data):
        with pytest.raises(ValueError, match="dimension name"):
            MultivariateResamplingEngine(sample_data, FunctionsEstimator({}))

    def test_too_few_samples_raises(self, sample_data):
        with pytest.raises(ValueError):
            _engine(sample_data).generate_samples(1)

    def test_before_generation(self, sample_data):
        engine = _engine(sample_data)
        assert engine.bootstrap_estimates == []
        assert np.all(np.isnan(engine.original_data_estimate))
        assert engine.bootstrap_data.shape == (0, 8)

    def test_stream_controls(self, sample_data):
        engine = _engine(sample_data)
        first = [e.bootstrap_estimates for e in engine.generate_samples(20)]
        engine.reset_start_stream()
        second = [e.bootstrap_estimates for e in engine.generate_samples(20)]
        for a, b in zip(first, second):
            assert np.array_equal(a, b, equal_nan=True)

    def test_summary_text(self, sample_data):
        engine = _engine(sample_data, ShortEveryThird())
        engine.generate_samples(9)
        text = engine.summary_text()
        assert "number of skipped bootstrap samples = 3" in text
        assert "mean:" in text
