"""Tests for OrderBook: event to delta protocol, rejection and consistency."""

import random
import threading

from orderflow_monitor.book import OrderBook
from orderflow_monitor.core.coalescer import UpdateCoalescer
from orderflow_monitor.core.errors import InvalidOrder, OrderAlreadyExists, UnknownOrder
from orderflow_monitor.events import CancelOrder, ModifyOrder, NewOrder, Side, TimeEvent


def expected_levels(orders, side):
    """Recompute a side's levels from scratch out of {id: (side, price, size)}."""
    totals = {}
    for s, price, size in orders.values():
        if s is side and size > 0:
            totals[price] = totals.get(price, 0) + size
    reverse = side is Side.BID
    return sorted(totals.items(), reverse=reverse)


def test_new_then_cancel_restores_empty_book():
    book = OrderBook("ESZ5")

    assert book.apply(NewOrder("A", Side.BID, 100, 5)).ok
    assert list(book.top_levels(Side.BID, 5)) == [(100, 5)]

    assert book.apply(CancelOrder("A")).ok
    assert list(book.top_levels(Side.BID, 5)) == []
    assert book.live_orders() == 0


def test_modify_moves_size_between_levels():
    book = OrderBook("ESZ5")
    book.apply(NewOrder("A", Side.ASK, 101, 5))
    book.apply(NewOrder("B", Side.ASK, 101, 2))

    result = book.apply(ModifyOrder("A", 103, 7))

    assert result.accepted
    assert result.deltas == ((Side.ASK, 101, -5), (Side.ASK, 103, 7))
    assert list(book.top_levels(Side.ASK, 5)) == [(101, 2), (103, 7)]


def test_modify_to_same_price_updates_size():
    book = OrderBook("ESZ5")
    book.apply(NewOrder("A", Side.BID, 100, 5))

    book.apply(ModifyOrder("A", 100, 9))

    assert list(book.top_levels(Side.BID, 5)) == [(100, 9)]


def test_zero_size_order_leaves_no_level():
    book = OrderBook("ESZ5")

    assert book.apply(NewOrder("A", Side.BID, 100, 0)).ok

    assert book.live_orders() == 1
    assert list(book.top_levels(Side.BID, 5)) == []


def test_duplicate_new_is_rejected_without_changes():
    book = OrderBook("ESZ5")
    book.apply(NewOrder("A", Side.BID, 100, 5))

    result = book.apply(NewOrder("A", Side.BID, 100, 5))

    assert not result.accepted
    assert isinstance(result.error, OrderAlreadyExists)
    assert list(book.top_levels(Side.BID, 5)) == [(100, 5)]
    assert book.rejected_count == 1


def test_unknown_modify_and_cancel_are_rejected():
    book = OrderBook("ESZ5")

    modify = book.apply(ModifyOrder("X", 100, 1))
    cancel = book.apply(CancelOrder("X"))

    assert isinstance(modify.error, UnknownOrder)
    assert isinstance(cancel.error, UnknownOrder)
    assert book.get_statistics()["rejected"] == 2
    assert book.get_statistics()["bid_levels"] == 0


def test_non_order_event_is_rejected():
    book = OrderBook("ESZ5")

    result = book.apply(TimeEvent(1))

    assert not result.ok


def test_random_sequence_matches_recomputed_levels():
    rng = random.Random(7)
    book = OrderBook("ESZ5")
    live = {}
    next_id = 0

    for _ in range(2000):
        action = rng.random()
        if action < 0.45 or not live:
            oid = f"o{next_id}"
            next_id += 1
            side = rng.choice([Side.BID, Side.ASK])
            price = rng.randint(90, 110)
            size = rng.randint(0, 20)
            assert book.apply(NewOrder(oid, side, price, size)).ok
            live[oid] = (side, price, size)
        elif action < 0.75:
            oid = rng.choice(sorted(live))
            side = live[oid][0]
            price = rng.randint(90, 110)
            size = rng.randint(0, 20)
            assert book.apply(ModifyOrder(oid, price, size)).ok
            live[oid] = (side, price, size)
        else:
            oid = rng.choice(sorted(live))
            assert book.apply(CancelOrder(oid)).ok
            del live[oid]

    assert list(book.top_levels(Side.BID, 100)) == expected_levels(live, Side.BID)
    assert list(book.top_levels(Side.ASK, 100)) == expected_levels(live, Side.ASK)
    assert book.levels.invariant_violations == 0


def test_reader_never_sees_half_applied_modify():
    book = OrderBook("ESZ5")
    book.apply(NewOrder("A", Side.BID, 100, 10))
    stop = threading.Event()
    bad = []

    def reader():
        while not stop.is_set():
            total = sum(size for _, size in book.top_levels(Side.BID, 10))
            if total != 10:
                bad.append(total)

    thread = threading.Thread(target=reader)
    thread.start()
    try:
        for i in range(3000):
            book.apply(ModifyOrder("A", 100 + (i % 2), 10))
    finally:
        stop.set()
        thread.join()

    assert bad == []


def test_accepted_events_request_refresh(scheduler):
    refreshed = []
    coalescer = UpdateCoalescer(refresh=lambda: refreshed.append(1), schedule=scheduler)
    book = OrderBook("ESZ5", coalescer=coalescer)

    book.apply(NewOrder("A", Side.BID, 100, 5))
    book.apply(NewOrder("B", Side.BID, 101, 5))
    book.apply(CancelOrder("missing"))

    assert len(scheduler.jobs) == 1
    scheduler.run_all()
    assert refreshed == [1]


def test_rejected_event_does_not_request_refresh(scheduler):
    coalescer = UpdateCoalescer(refresh=lambda: None, schedule=scheduler)
    book = OrderBook("ESZ5", coalescer=coalescer)

    book.apply(CancelOrder("missing"))

    assert scheduler.jobs == []


def test_snapshot_returns_both_sides():
    book = OrderBook("ESZ5")
    book.apply(NewOrder("A", Side.BID, 99, 1))
    book.apply(NewOrder("B", Side.ASK, 101, 2))

    snap = book.snapshot(5)

    assert list(snap["bids"]) == [(99, 1)]
    assert list(snap["asks"]) == [(101, 2)]


def test_unhashable_order_id_is_rejected_not_raised():
    book = OrderBook("ESZ5")
    book.apply(NewOrder("A", Side.BID, 100, 5))

    results = [
        book.apply(NewOrder({"a": 1}, Side.BID, 100, 5)),
        book.apply(ModifyOrder([1], 101, 1)),
        book.apply(CancelOrder({"a": 1})),
    ]

    assert all(isinstance(r.error, InvalidOrder) for r in results)
    assert list(book.top_levels(Side.BID, 5)) == [(100, 5)]
    assert book.rejected_count == 3
