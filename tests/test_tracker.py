"""Tests for OrderLifecycleTracker."""

import pytest

from orderflow_monitor.book.tracker import OrderLifecycleTracker
from orderflow_monitor.core.errors import InvalidOrder, OrderAlreadyExists, UnknownOrder
from orderflow_monitor.events import Side


@pytest.fixture
def tracker():
    return OrderLifecycleTracker()


def test_record_new_inserts_order(tracker):
    snap = tracker.record_new("A", Side.BID, 100, 5)

    assert snap.order_id == "A"
    assert snap.side is Side.BID
    assert "A" in tracker
    assert len(tracker) == 1
    assert tracker.get("A") == snap


def test_duplicate_new_raises_and_keeps_original(tracker):
    tracker.record_new("A", Side.BID, 100, 5)

    with pytest.raises(OrderAlreadyExists) as exc:
        tracker.record_new("A", Side.ASK, 200, 9)

    assert exc.value.order_id == "A"
    assert tracker.get("A").price == 100
    assert tracker.get("A").size == 5


def test_modify_returns_prior_snapshot(tracker):
    tracker.record_new("A", Side.ASK, 100, 5)

    prior = tracker.record_modify("A", 101, 7)

    assert (prior.side, prior.price, prior.size) == (Side.ASK, 100, 5)
    current = tracker.get("A")
    assert (current.side, current.price, current.size) == (Side.ASK, 101, 7)


def test_modify_unknown_raises(tracker):
    with pytest.raises(UnknownOrder):
        tracker.record_modify("missing", 100, 1)
    assert len(tracker) == 0


def test_cancel_returns_last_snapshot_and_removes(tracker):
    tracker.record_new("A", Side.BID, 100, 5)
    tracker.record_modify("A", 99, 3)

    last = tracker.record_cancel("A")

    assert (last.price, last.size) == (99, 3)
    assert "A" not in tracker
    assert tracker.get("A") is None


def test_cancel_unknown_raises(tracker):
    with pytest.raises(UnknownOrder):
        tracker.record_cancel("missing")


def test_cancel_twice_second_is_unknown(tracker):
    tracker.record_new("A", Side.BID, 100, 5)
    tracker.record_cancel("A")

    with pytest.raises(UnknownOrder):
        tracker.record_cancel("A")


@pytest.mark.parametrize("price,size", [(100.5, 1), (100, -1), (100, 1.5), (True, 1), (100, None)])
def test_invalid_values_rejected_without_mutation(tracker, price, size):
    with pytest.raises(InvalidOrder):
        tracker.record_new("A", Side.BID, price, size)
    assert "A" not in tracker


def test_invalid_modify_leaves_order_untouched(tracker):
    tracker.record_new("A", Side.BID, 100, 5)

    with pytest.raises(InvalidOrder):
        tracker.record_modify("A", 101, -2)

    assert tracker.get("A").price == 100
    assert tracker.get("A").size == 5


def test_snapshots_are_independent_of_later_changes(tracker):
    snap = tracker.record_new("A", Side.BID, 100, 5)
    tracker.record_modify("A", 105, 1)

    assert snap.price == 100
    assert snap.size == 5
