"""
Unit tests for src/statistic/snapshot.py and src/statistic/interval.py.

Covers:
- StatisticSnapshot.from_statistic: every query value captured, level
  handling, immutability.
- to_dict / to_json: column order, non-finite values as null.
- snapshots_to_frame: one row per statistic, fixed columns.
- Interval helpers.
"""

from __future__ import annotations

import dataclasses
import json
import math

import pytest

from src.statistic.accumulator import MomentAccumulator
from src.statistic.config import SNAPSHOT_COLUMNS
from src.statistic.interval import Interval, validate_level
from src.statistic.snapshot import StatisticSnapshot, snapshots_to_frame


# ---------------------------------------------------------------------------
# Class: snapshot capture
# ---------------------------------------------------------------------------

class TestSnapshot:

    def test_captures_query_values(self, sample_data):
        stat = MomentAccumulator(name="cycle time", values=sample_data)
        snap = stat.snapshot(0.90)
        ci = stat.confidence_interval(0.90)
        assert snap.name == "cycle time"
        assert snap.count == 10
        assert snap.average == pytest.approx(stat.average)
        assert snap.confidence_level == 0.90
        assert snap.half_width == pytest.approx(stat.half_width(0.90))
        assert (snap.lower_limit, snap.upper_limit) == ci.as_tuple()
        assert snap.lag1_correlation == stat.lag1_correlation

    def test_default_level_is_statistic_level(self, sample_data):
        stat = MomentAccumulator(values=sample_data, confidence_level=0.99)
        assert stat.snapshot().confidence_level == 0.99

    def test_snapshot_is_immutable_and_detached(self, sample_data):
        stat = MomentAccumulator(values=sample_data)
        snap = stat.snapshot()
        with pytest.raises(dataclasses.FrozenInstanceError):
            snap.count = 0
        stat.collect(1.0e6)
        assert snap.count == 10

    def test_invalid_level_raises(self, sample_data):
        with pytest.raises(ValueError):
            MomentAccumulator(values=sample_data).snapshot(1.5)

    def test_dict_keys_follow_column_order(self, sample_data):
        record = MomentAccumulator(values=sample_data).snapshot().to_dict()
        assert list(record) == SNAPSHOT_COLUMNS

    def test_json_writes_undefined_values_as_null(self):
        snap = MomentAccumulator(name="one", values=[2.0]).snapshot()
        record = json.loads(snap.to_json())
        assert record["count"] == 1.0
        assert record["variance"] is None
        assert record["lower_limit"] is None
        assert record["upper_limit"] is None


# ---------------------------------------------------------------------------
# Class: tabulation
# ---------------------------------------------------------------------------

class TestSnapshotsToFrame:

    def test_one_row_per_snapshot(self, sample_data):
        a = MomentAccumulator(name="a", values=sample_data)
        b = MomentAccumulator(name="b", values=[1.0, 2.0, 3.0])
        df = snapshots_to_frame([a.snapshot(), b.snapshot()])
        assert list(df.columns) == SNAPSHOT_COLUMNS
        assert list(df["name"]) == ["a", "b"]
        assert df.loc[1, "average"] == pytest.approx(2.0)

    def test_empty_input(self):
        df = snapshots_to_frame([])
        assert df.empty
        assert list(df.columns) == SNAPSHOT_COLUMNS


# ---------------------------------------------------------------------------
# Class: Interval
# ---------------------------------------------------------------------------

class TestInterval:

    def test_default_is_infinite(self):
        ci = Interval()
        assert not ci.is_finite
        assert ci.lower_limit == -math.inf

    def test_geometry(self):
        ci = Interval(2.0, 6.0)
        assert ci.width == 4.0
        assert ci.half_width == 2.0
        assert ci.midpoint == 4.0
        assert 3.0 in ci
        assert not ci.contains(7.0)
        assert str(ci) == "[2.0, 6.0]"

    def test_validate_level(self):
        assert validate_level(0.95) == 0.95
        with pytest.raises(ValueError):
            validate_level(1.0)
