"""Tests for wire event decoding."""

import json

import pytest

from orderflow_monitor.core.errors import EventParseError
from orderflow_monitor.events import (
    CancelOrder,
    ModifyOrder,
    NewOrder,
    Side,
    TimeEvent,
    TradeEvent,
    parse_event,
)


def test_parse_new_order():
    event = parse_event({"type": "new", "id": "A1", "side": "buy", "price": 101, "size": 5})

    assert event == NewOrder("A1", Side.BID, 101, 5)


def test_parse_modify_accepts_aliases():
    event = parse_event({"type": "modify", "order_id": 7, "new_price": 102.0, "new_size": "3"})

    assert event == ModifyOrder(7, 102, 3)


def test_parse_cancel():
    assert parse_event({"type": "CANCEL", "id": "A1"}) == CancelOrder("A1")


def test_parse_trade_defaults_open_close_to_price():
    event = parse_event({"type": "trade", "price": 101.25, "volume": 40, "time": 1700000000000})

    assert isinstance(event, TradeEvent)
    assert event.open_price == event.close_price == 101.25
    assert event.time == 1700000000000


def test_parse_trade_with_open_close():
    event = parse_event({"type": "trade", "price": 100, "size": 2, "ts": 5, "open": 101, "close": 100})

    assert event.volume == 2
    assert event.open_price == 101.0
    assert event.close_price == 100.0


def test_parse_time():
    assert parse_event({"type": "time", "time": 42}) == TimeEvent(42)


@pytest.mark.parametrize(
    "msg",
    [
        {"type": "unknown"},
        {"type": "new", "id": "A", "side": "bid", "price": 1},
        {"type": "new", "id": "A", "side": "sideways", "price": 1, "size": 1},
        {"type": "new", "id": "A", "side": "bid", "price": 1.5, "size": 1},
        {"type": "new", "id": "A", "side": "bid", "price": True, "size": 1},
        {"type": "trade", "price": "abc", "volume": 1, "time": 1},
        {"type": "cancel"},
        ["not", "a", "dict"],
    ],
)
def test_malformed_messages_raise(msg):
    with pytest.raises(EventParseError):
        parse_event(msg)


@pytest.mark.parametrize(
    "raw,side",
    [("bid", Side.BID), ("B", Side.BID), ("offer", Side.ASK), ("sell", Side.ASK), (Side.ASK, Side.ASK)],
)
def test_side_parse(raw, side):
    assert Side.parse(raw) is side


@pytest.mark.parametrize("token", ["NaN", "Infinity", "-Infinity"])
def test_non_finite_trade_numbers_rejected(token):
    # json.loads accepts these bare tokens, so they reach the decoder
    msg = json.loads('{"type": "trade", "price": %s, "volume": 1, "time": 1}' % token)

    with pytest.raises(EventParseError, match="finite"):
        parse_event(msg)


def test_non_finite_open_close_rejected():
    msg = {"type": "trade", "price": 100, "volume": 1, "time": 1, "open": float("nan")}

    with pytest.raises(EventParseError):
        parse_event(msg)


@pytest.mark.parametrize("order_id", [{"a": 1}, [1, 2], True, 1.5])
@pytest.mark.parametrize("kind", ["new", "modify", "cancel"])
def test_order_id_must_be_string_or_integer(kind, order_id):
    msg = {"type": kind, "id": order_id, "side": "bid", "price": 100, "size": 1}

    with pytest.raises(EventParseError, match="order id"):
        parse_event(msg)
