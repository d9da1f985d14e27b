"""
Order book aggregation.

  models.py     → Order, snapshots, results (WHAT the data is)
  tracker.py    → live order store keyed by id
  levels.py     → price→size maps and top-N queries
  order_book.py → event → delta protocol tying the two together
"""

from .models import Order, OrderSnapshot, LevelSnapshot, BookUpdateResult
from .tracker import OrderLifecycleTracker
from .levels import PriceLevelAggregator
from .order_book import OrderBook

__all__ = [
    "Order",
    "OrderSnapshot",
    "LevelSnapshot",
    "BookUpdateResult",
    "OrderLifecycleTracker",
    "PriceLevelAggregator",
    "OrderBook",
]
