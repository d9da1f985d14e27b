"""
Order Lifecycle Tracker - live orders keyed by id, the book's source of truth.
"""

from __future__ import annotations

from typing import Dict, Optional

from orderflow_monitor.core.errors import InvalidOrder, OrderAlreadyExists, UnknownOrder
from orderflow_monitor.events import OrderId, Side

from .models import Order, OrderSnapshot


class OrderLifecycleTracker:
    """
    Canonical store of live orders keyed by order id.

    Responsibilities:
    -----------------
    • Reject duplicate New and unknown Modify/Cancel ids
    • Hand back the prior snapshot so callers can derive level deltas
    • Never touch price levels itself

    Every failing call raises before mutating anything.
    """

    def __init__(self):
        self._orders: Dict[OrderId, Order] = {}

    # ------------------------------------------------------------------
    # INTROSPECTION
    # ------------------------------------------------------------------
    def __len__(self) -> int:
        return len(self._orders)

    def __contains__(self, order_id: OrderId) -> bool:
        return order_id in self._orders

    def get(self, order_id: OrderId) -> Optional[OrderSnapshot]:
        order = self._orders.get(order_id)
        return order.snapshot() if order else None

    # ------------------------------------------------------------------
    # LIFECYCLE
    # ------------------------------------------------------------------
    def record_new(self, order_id: OrderId, side: Side, price: int, size: int) -> OrderSnapshot:
        self._check_id(order_id)
        if order_id in self._orders:
            raise OrderAlreadyExists(f"Order {order_id!r} is already live", order_id)
        if not isinstance(side, Side):
            raise InvalidOrder(f"Order {order_id!r}: side must be a Side, got {side!r}", order_id)
        self._check_price_size(order_id, price, size)

        order = Order(order_id=order_id, side=side, price=price, size=size)
        self._orders[order_id] = order
        return order.snapshot()

    def record_modify(self, order_id: OrderId, new_price: int, new_size: int) -> OrderSnapshot:
        """Update price/size and return the snapshot from before the change."""
        self._check_id(order_id)
        order = self._orders.get(order_id)
        if order is None:
            raise UnknownOrder(f"Modify for unknown order {order_id!r}", order_id)
        self._check_price_size(order_id, new_price, new_size)

        prior = order.snapshot()
        order.price = new_price
        order.size = new_size
        return prior

    def record_cancel(self, order_id: OrderId) -> OrderSnapshot:
        """Remove the order and return its last snapshot."""
        self._check_id(order_id)
        order = self._orders.pop(order_id, None)
        if order is None:
            raise UnknownOrder(f"Cancel for unknown order {order_id!r}", order_id)
        return order.snapshot()

    def clear(self) -> None:
        self._orders.clear()

    # ------------------------------------------------------------------
    # VALIDATION
    # ------------------------------------------------------------------
    @staticmethod
    def _check_id(order_id: OrderId) -> None:
        if isinstance(order_id, bool) or not isinstance(order_id, (str, int)):
            raise InvalidOrder(f"Order id must be a string or integer, got {order_id!r}", order_id)

    @staticmethod
    def _check_price_size(order_id: OrderId, price: int, size: int) -> None:
        if isinstance(price, bool) or not isinstance(price, int):
            raise InvalidOrder(f"Order {order_id!r}: price must be an integer tick, got {price!r}", order_id)
        if isinstance(size, bool) or not isinstance(size, int) or size < 0:
            raise InvalidOrder(f"Order {order_id!r}: size must be a non-negative integer, got {size!r}", order_id)


__all__ = ["OrderLifecycleTracker"]
