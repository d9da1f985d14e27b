"""
OrderBook - turns order lifecycle events into price level deltas.

Architecture:
- OrderLifecycleTracker: source of truth for side/price/size per order id
- PriceLevelAggregator: ordered level maps, answers top-N queries
- UpdateCoalescer (optional): notified after every accepted event
"""

from __future__ import annotations

from typing import Dict, List, Optional

from orderflow_monitor.core.coalescer import UpdateCoalescer
from orderflow_monitor.core.errors import BookError, InvalidOrder
from orderflow_monitor.core.logger import get_logger
from orderflow_monitor.events import CancelOrder, ModifyOrder, NewOrder, OrderEvent, Side

from .levels import PriceLevelAggregator
from .models import BookUpdateResult, LevelDelta, LevelSnapshot
from .tracker import OrderLifecycleTracker


class OrderBook:
    """
    Per-instrument aggregated order book.

    Event → delta protocol:
    - New    → +size at (side, price)
    - Modify → -old_size at the old level, then +new_size at the new level,
               applied together as one atomic unit
    - Cancel → -size at (side, price)

    Tracker update and level update for an event share one critical section
    (the aggregator's lock), so readers never see an order whose delta is
    missing. Protocol errors never escape `apply`: they come back as a
    rejected BookUpdateResult and leave all state untouched.

    Usage:
        book = OrderBook("ESZ5")
        book.apply(NewOrder("A", Side.BID, 100, 5))
        bids = book.top_levels(Side.BID, 10)
    """

    def __init__(
        self,
        instrument: str,
        coalescer: Optional[UpdateCoalescer] = None,
        logger=None,
    ):
        self.instrument = instrument
        self.logger = logger or get_logger(__name__)
        self.tracker = OrderLifecycleTracker()
        self.levels = PriceLevelAggregator(name=instrument)
        self.coalescer = coalescer

        self.accepted_count = 0
        self.rejected_count = 0

    # =========================================================================
    # INGESTION
    # =========================================================================

    def apply(self, event: OrderEvent) -> BookUpdateResult:
        """Apply one order lifecycle event and report the outcome."""
        try:
            with self.levels.lock:
                deltas = self._track(event)
                self.levels.apply_deltas(deltas)
        except BookError as e:
            self.rejected_count += 1
            self.logger.warning(f"[OrderBook {self.instrument}] Dropped {type(event).__name__}: {e}")
            return BookUpdateResult(event=event, accepted=False, error=e)

        self.accepted_count += 1
        if self.coalescer is not None:
            self.coalescer.request_update()
        return BookUpdateResult(event=event, accepted=True, deltas=tuple(deltas))

    def _track(self, event: OrderEvent) -> List[LevelDelta]:
        """Update the tracker and derive the level deltas for `event`."""
        if isinstance(event, NewOrder):
            order = self.tracker.record_new(event.order_id, event.side, event.price, event.size)
            return [(order.side, order.price, order.size)]

        if isinstance(event, ModifyOrder):
            prior = self.tracker.record_modify(event.order_id, event.new_price, event.new_size)
            # side never changes on modify; carried from the prior snapshot
            return [
                (prior.side, prior.price, -prior.size),
                (prior.side, event.new_price, event.new_size),
            ]

        if isinstance(event, CancelOrder):
            prior = self.tracker.record_cancel(event.order_id)
            return [(prior.side, prior.price, -prior.size)]

        raise InvalidOrder(f"Not an order event: {event!r}")

    # =========================================================================
    # QUERIES
    # =========================================================================

    def top_levels(self, side: Side, n: int) -> LevelSnapshot:
        return self.levels.top_levels(side, n)

    def snapshot(self, depth: int) -> Dict[str, LevelSnapshot]:
        """Both sides, taken under one lock so they are mutually consistent."""
        with self.levels.lock:
            return {
                "bids": self.levels.top_levels(Side.BID, depth),
                "asks": self.levels.top_levels(Side.ASK, depth),
            }

    def live_orders(self) -> int:
        return len(self.tracker)

    def get_statistics(self) -> Dict[str, int]:
        return {
            "live_orders": self.live_orders(),
            "bid_levels": self.levels.level_count(Side.BID),
            "ask_levels": self.levels.level_count(Side.ASK),
            "accepted": self.accepted_count,
            "rejected": self.rejected_count,
            "invariant_violations": self.levels.invariant_violations,
        }

    def clear(self) -> None:
        with self.levels.lock:
            self.tracker.clear()
            self.levels.clear()

    def __repr__(self) -> str:
        return f"OrderBook({self.instrument!r}, orders={self.live_orders()})"


__all__ = ["OrderBook"]
