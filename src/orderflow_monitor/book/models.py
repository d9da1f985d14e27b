"""
Order book data models.
"""

from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from orderflow_monitor.core.errors import BookError
from orderflow_monitor.events import OrderEvent, OrderId, Side


@dataclass
class Order:
    """A live resting order. Owned by OrderLifecycleTracker."""
    order_id: OrderId
    side: Side
    price: int                       # integer tick
    size: int                        # non-negative

    def snapshot(self) -> "OrderSnapshot":
        return OrderSnapshot(self.order_id, self.side, self.price, self.size)


@dataclass(frozen=True)
class OrderSnapshot:
    """Immutable view of an order at one point in its lifecycle."""
    order_id: OrderId
    side: Side
    price: int
    size: int


# (side, price, signed size delta)
LevelDelta = Tuple[Side, int, int]


@dataclass(frozen=True)
class LevelSnapshot:
    """
    Best-first copy of the top levels on one side.

    Iterating it yields (price, size) pairs; every iteration starts over, and
    the contents never change after the snapshot was taken.
    """
    side: Side
    levels: Tuple[Tuple[int, int], ...] = ()

    def __iter__(self) -> Iterator[Tuple[int, int]]:
        return iter(self.levels)

    def __len__(self) -> int:
        return len(self.levels)

    def __getitem__(self, idx):
        return self.levels[idx]

    @property
    def best(self) -> Optional[Tuple[int, int]]:
        return self.levels[0] if self.levels else None

    def to_list(self):
        return [{"price": p, "size": s} for p, s in self.levels]


@dataclass(frozen=True)
class BookUpdateResult:
    """Outcome of applying one order event to the book."""
    event: OrderEvent
    accepted: bool
    deltas: Tuple[LevelDelta, ...] = ()
    error: Optional[BookError] = None

    @property
    def ok(self) -> bool:
        return self.accepted

    def __repr__(self) -> str:
        if self.accepted:
            return f"BookUpdateResult(accepted, deltas={len(self.deltas)})"
        return f"BookUpdateResult(rejected, {type(self.error).__name__}: {self.error})"
