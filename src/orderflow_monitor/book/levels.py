"""
Price Level Aggregator - per-side price→size maps derived from live orders.
"""

from __future__ import annotations

import threading
from itertools import islice
from typing import Dict, Iterable, Optional, Tuple

from sortedcontainers import SortedDict

from orderflow_monitor.core.logger import get_logger
from orderflow_monitor.events import Side

from .models import LevelDelta, LevelSnapshot


class PriceLevelAggregator:
    """
    Ordered bid/ask level maps.

    Both sides iterate best-first: asks ascending, bids descending (bids are
    keyed through a negating sort key). A level whose size reaches zero is
    dropped from the map.

    All mutation and every snapshot copy happen under `lock`, so a reader on
    another thread never sees a half-applied group of deltas. The lock is
    re-entrant and public so that OrderBook can extend the critical section
    around its tracker update.
    """

    def __init__(self, name: str = ""):
        self.name = name
        self.logger = get_logger(__name__)
        self.lock = threading.RLock()
        self._levels: Dict[Side, SortedDict] = {
            Side.BID: SortedDict(lambda price: -price),
            Side.ASK: SortedDict(),
        }
        self.invariant_violations = 0

    # ------------------------------------------------------------------
    # MUTATION
    # ------------------------------------------------------------------
    def apply_delta(self, side: Side, price: int, delta: int) -> int:
        """
        Add a signed size delta to one level.

        Returns:
            The level's size after the delta (0 if the level was removed)
        """
        with self.lock:
            return self._apply(side, price, delta)

    def apply_deltas(self, deltas: Iterable[LevelDelta]) -> Tuple[int, ...]:
        """Apply several deltas as a single atomic unit."""
        with self.lock:
            return tuple(self._apply(side, price, delta) for side, price, delta in deltas)

    def _apply(self, side: Side, price: int, delta: int) -> int:
        book = self._levels[side]
        new_size = book.get(price, 0) + delta

        if new_size < 0:
            self.invariant_violations += 1
            self.logger.error(
                f"[Levels{self._tag()}] Invariant violation: {side.value} level {price} "
                f"would go negative ({new_size}); clamping to zero"
            )
            new_size = 0

        if new_size <= 0:
            book.pop(price, None)
            return 0

        book[price] = new_size
        return new_size

    def clear(self) -> None:
        with self.lock:
            for book in self._levels.values():
                book.clear()

    # ------------------------------------------------------------------
    # QUERIES
    # ------------------------------------------------------------------
    def top_levels(self, side: Side, n: int) -> LevelSnapshot:
        """
        Snapshot up to `n` best levels on `side`.

        Only the first `n` entries are copied; the result is independent of
        later mutation.
        """
        if n < 0:
            raise ValueError(f"n must be >= 0, got {n}")
        with self.lock:
            levels = tuple(islice(self._levels[side].items(), n))
        return LevelSnapshot(side=side, levels=levels)

    def size_at(self, side: Side, price: int) -> int:
        with self.lock:
            return self._levels[side].get(price, 0)

    def best(self, side: Side) -> Optional[Tuple[int, int]]:
        with self.lock:
            book = self._levels[side]
            return book.peekitem(0) if book else None

    def best_bid(self) -> Optional[Tuple[int, int]]:
        return self.best(Side.BID)

    def best_ask(self) -> Optional[Tuple[int, int]]:
        return self.best(Side.ASK)

    def level_count(self, side: Side) -> int:
        with self.lock:
            return len(self._levels[side])

    def total_size(self, side: Side) -> int:
        with self.lock:
            return sum(self._levels[side].values())

    def _tag(self) -> str:
        return f" {self.name}" if self.name else ""

    def __repr__(self) -> str:
        return (
            f"PriceLevelAggregator({self.name!r}, bids={self.level_count(Side.BID)}, "
            f"asks={self.level_count(Side.ASK)})"
        )


__all__ = ["PriceLevelAggregator"]
