"""Tests for PriceLevelAggregator."""

import pytest

from orderflow_monitor.book.levels import PriceLevelAggregator
from orderflow_monitor.events import Side


@pytest.fixture
def levels():
    return PriceLevelAggregator(name="TEST")


def test_apply_delta_accumulates(levels):
    assert levels.apply_delta(Side.BID, 100, 5) == 5
    assert levels.apply_delta(Side.BID, 100, 3) == 8
    assert levels.size_at(Side.BID, 100) == 8


def test_zero_level_is_removed(levels):
    levels.apply_delta(Side.ASK, 100, 5)
    assert levels.apply_delta(Side.ASK, 100, -5) == 0

    assert levels.level_count(Side.ASK) == 0
    assert levels.size_at(Side.ASK, 100) == 0
    assert list(levels.top_levels(Side.ASK, 5)) == []


def test_negative_level_is_clamped_and_counted(levels):
    levels.apply_delta(Side.BID, 100, 2)

    assert levels.apply_delta(Side.BID, 100, -5) == 0

    assert levels.invariant_violations == 1
    assert levels.level_count(Side.BID) == 0


def test_negative_delta_on_missing_level_is_a_violation(levels):
    levels.apply_delta(Side.ASK, 50, -1)

    assert levels.invariant_violations == 1
    assert levels.level_count(Side.ASK) == 0


def test_top_levels_orders_best_first(levels):
    for price in (101, 99, 103, 100):
        levels.apply_delta(Side.BID, price, 1)
        levels.apply_delta(Side.ASK, price + 10, 2)

    assert [p for p, _ in levels.top_levels(Side.BID, 10)] == [103, 101, 100, 99]
    assert [p for p, _ in levels.top_levels(Side.ASK, 10)] == [109, 110, 111, 113]


def test_top_levels_is_bounded(levels):
    for price in range(100, 120):
        levels.apply_delta(Side.ASK, price, 1)

    snap = levels.top_levels(Side.ASK, 3)

    assert len(snap) == 3
    assert snap.best == (100, 1)
    assert levels.top_levels(Side.ASK, 0).levels == ()


def test_top_levels_is_restartable_snapshot(levels):
    levels.apply_delta(Side.BID, 100, 5)
    snap = levels.top_levels(Side.BID, 5)

    levels.apply_delta(Side.BID, 100, 10)
    levels.apply_delta(Side.BID, 101, 1)

    assert list(snap) == [(100, 5)]
    assert list(snap) == [(100, 5)]


def test_top_levels_rejects_negative_n(levels):
    with pytest.raises(ValueError):
        levels.top_levels(Side.BID, -1)


def test_apply_deltas_applies_all(levels):
    levels.apply_delta(Side.BID, 100, 5)

    result = levels.apply_deltas([(Side.BID, 100, -5), (Side.BID, 101, 5)])

    assert result == (0, 5)
    assert list(levels.top_levels(Side.BID, 5)) == [(101, 5)]


def test_best_and_totals(levels):
    assert levels.best_bid() is None
    levels.apply_delta(Side.BID, 99, 4)
    levels.apply_delta(Side.BID, 98, 6)
    levels.apply_delta(Side.ASK, 101, 7)

    assert levels.best_bid() == (99, 4)
    assert levels.best_ask() == (101, 7)
    assert levels.total_size(Side.BID) == 10


def test_clear(levels):
    levels.apply_delta(Side.BID, 99, 4)
    levels.apply_delta(Side.ASK, 101, 7)
    levels.clear()

    assert levels.level_count(Side.BID) == 0
    assert levels.level_count(Side.ASK) == 0
