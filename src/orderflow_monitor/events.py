"""
Input events for the monitor.

Order lifecycle events feed the order book, trade events feed the volume
box detector, time events are accepted as heartbeats. All events are
immutable; `parse_event` decodes the JSON wire format:

    {"type": "new",    "id": "A1", "side": "bid", "price": 101, "size": 5}
    {"type": "modify", "id": "A1", "price": 102, "size": 3}
    {"type": "cancel", "id": "A1"}
    {"type": "trade",  "price": 101.25, "volume": 40, "time": 1700000000000,
                       "open": 101.0, "close": 101.25}
    {"type": "time",   "time": 1700000000000}
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union

from orderflow_monitor.core.errors import EventParseError


class Side(Enum):
    """Book side."""
    BID = "bid"
    ASK = "ask"

    @classmethod
    def parse(cls, value: Any) -> "Side":
        if isinstance(value, Side):
            return value
        if isinstance(value, bool):
            return cls.BID if value else cls.ASK
        if isinstance(value, str):
            key = value.strip().lower()
            if key in ("bid", "buy", "b"):
                return cls.BID
            if key in ("ask", "sell", "offer", "a", "s"):
                return cls.ASK
        raise EventParseError(f"Unknown side: {value!r}")


OrderId = Union[str, int]


@dataclass(frozen=True)
class NewOrder:
    """A resting order was placed."""
    order_id: OrderId
    side: Side
    price: int
    size: int


@dataclass(frozen=True)
class ModifyOrder:
    """A resting order changed price and/or size."""
    order_id: OrderId
    new_price: int
    new_size: int


@dataclass(frozen=True)
class CancelOrder:
    """A resting order left the book."""
    order_id: OrderId


OrderEvent = Union[NewOrder, ModifyOrder, CancelOrder]


@dataclass(frozen=True)
class TradeEvent:
    """
    A single print on the tape.

    `open_price`/`close_price` come from the feed's aggregated print; when the
    feed omits them they collapse to `price`.
    """
    price: float
    volume: float
    time: int
    open_price: Optional[float] = None
    close_price: Optional[float] = None

    def __post_init__(self):
        if self.open_price is None:
            object.__setattr__(self, "open_price", self.price)
        if self.close_price is None:
            object.__setattr__(self, "close_price", self.price)


@dataclass(frozen=True)
class TimeEvent:
    """Clock heartbeat from the feed."""
    time: int


Event = Union[NewOrder, ModifyOrder, CancelOrder, TradeEvent, TimeEvent]


# ============================================================================
# WIRE DECODING
# ============================================================================

def _require(msg: Dict[str, Any], key: str, *aliases: str) -> Any:
    for k in (key,) + aliases:
        if k in msg and msg[k] is not None:
            return msg[k]
    raise EventParseError(f"{msg.get('type', '?')} event missing field {key!r}")


def _as_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise EventParseError(f"{name} must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            pass
    raise EventParseError(f"{name} must be an integer, got {value!r}")


def _as_number(value: Any, name: str) -> float:
    if isinstance(value, bool):
        raise EventParseError(f"{name} must be a number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise EventParseError(f"{name} must be a number, got {value!r}") from None
    # json.loads accepts bare NaN/Infinity tokens
    if not math.isfinite(number):
        raise EventParseError(f"{name} must be finite, got {value!r}")
    return number


def _order_id(msg: Dict[str, Any]) -> OrderId:
    order_id = _require(msg, "id", "order_id")
    if isinstance(order_id, bool) or not isinstance(order_id, (str, int)):
        raise EventParseError(f"order id must be a string or integer, got {order_id!r}")
    return order_id


def _optional_number(msg: Dict[str, Any], name: str, *aliases: str) -> Optional[float]:
    for k in (name,) + aliases:
        if msg.get(k) is not None:
            return _as_number(msg[k], k)
    return None


def parse_event(msg: Dict[str, Any]) -> Event:
    """
    Decode one wire message into an event.

    Args:
        msg: Decoded JSON object

    Returns:
        The matching event dataclass

    Raises:
        EventParseError: On unknown type, missing fields or bad values
    """
    if not isinstance(msg, dict):
        raise EventParseError(f"Event must be an object, got {type(msg).__name__}")

    kind = str(msg.get("type", "")).lower()

    if kind == "new":
        return NewOrder(
            order_id=_order_id(msg),
            side=Side.parse(_require(msg, "side")),
            price=_as_int(_require(msg, "price"), "price"),
            size=_as_int(_require(msg, "size"), "size"),
        )

    if kind == "modify":
        return ModifyOrder(
            order_id=_order_id(msg),
            new_price=_as_int(_require(msg, "price", "new_price"), "price"),
            new_size=_as_int(_require(msg, "size", "new_size"), "size"),
        )

    if kind == "cancel":
        return CancelOrder(order_id=_order_id(msg))

    if kind == "trade":
        return TradeEvent(
            price=_as_number(_require(msg, "price"), "price"),
            volume=_as_number(_require(msg, "volume", "size"), "volume"),
            time=_as_int(_require(msg, "time", "ts"), "time"),
            open_price=_optional_number(msg, "open", "open_price"),
            close_price=_optional_number(msg, "close", "close_price"),
        )

    if kind == "time":
        return TimeEvent(time=_as_int(_require(msg, "time", "ts"), "time"))

    raise EventParseError(f"Unknown event type: {msg.get('type')!r}")


__all__ = [
    "Side",
    "OrderId",
    "NewOrder",
    "ModifyOrder",
    "CancelOrder",
    "OrderEvent",
    "TradeEvent",
    "TimeEvent",
    "Event",
    "parse_event",
]
