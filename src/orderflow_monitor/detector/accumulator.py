"""
Volume Period Accumulator - cumulative volume and range over a counting period.
"""

import math
from typing import Optional

from orderflow_monitor.core.errors import InvalidTrade
from orderflow_monitor.events import TradeEvent

from .enums import PeriodState
from .models import VolumePeriod


class VolumePeriodAccumulator:
    """
    Two-state machine fed by the trade stream.

    IDLE --first trade--> COUNTING --reset()--> IDLE

    The first trade of a period opens it (start_time, high = low = price,
    volume = 0) and is then folded in like every other trade. `reset()`
    discards all measurements; they read as None until the next trade.
    """

    def __init__(self):
        self._state = PeriodState.IDLE
        self._period_id = 0
        self._start_time: Optional[int] = None
        self._cumulative_volume: Optional[float] = None
        self._high: Optional[float] = None
        self._low: Optional[float] = None
        self._open_price: Optional[float] = None

    # ------------------------------------------------------------------
    # STATE
    # ------------------------------------------------------------------
    @property
    def state(self) -> PeriodState:
        return self._state

    @property
    def is_counting(self) -> bool:
        return self._state is PeriodState.COUNTING

    @property
    def period_id(self) -> int:
        """Sequence number of the current (or last) period; 0 before the first."""
        return self._period_id

    @property
    def start_time(self) -> Optional[int]:
        return self._start_time

    @property
    def cumulative_volume(self) -> Optional[float]:
        return self._cumulative_volume

    @property
    def high(self) -> Optional[float]:
        return self._high

    @property
    def low(self) -> Optional[float]:
        return self._low

    @property
    def open_price(self) -> Optional[float]:
        return self._open_price

    @property
    def period_range(self) -> Optional[float]:
        if not self.is_counting:
            return None
        return self._high - self._low

    # ------------------------------------------------------------------
    # TRANSITIONS
    # ------------------------------------------------------------------
    def on_trade(self, trade: TradeEvent) -> VolumePeriod:
        """
        Fold one trade into the period, opening a new period if idle.

        Raises:
            InvalidTrade: On a non-finite price or a negative/non-finite
                volume; nothing is changed
        """
        if not math.isfinite(trade.price):
            raise InvalidTrade(f"Trade price must be finite, got {trade.price!r}")
        if not math.isfinite(trade.volume) or trade.volume < 0:
            raise InvalidTrade(f"Trade volume must be finite and >= 0, got {trade.volume!r}")

        if self._state is PeriodState.IDLE:
            self._state = PeriodState.COUNTING
            self._period_id += 1
            self._start_time = trade.time
            self._high = trade.price
            self._low = trade.price
            self._open_price = trade.price
            self._cumulative_volume = 0

        self._cumulative_volume += trade.volume
        self._high = max(self._high, trade.price)
        self._low = min(self._low, trade.price)
        return self.snapshot()

    def reset(self) -> bool:
        """
        End the current period.

        Returns:
            True if a counting period was ended, False if already idle
        """
        if self._state is PeriodState.IDLE:
            return False

        self._state = PeriodState.IDLE
        self._start_time = None
        self._cumulative_volume = None
        self._high = None
        self._low = None
        self._open_price = None
        return True

    def snapshot(self) -> VolumePeriod:
        return VolumePeriod(
            state=self._state,
            period_id=self._period_id,
            start_time=self._start_time,
            cumulative_volume=self._cumulative_volume,
            high=self._high,
            low=self._low,
            open_price=self._open_price,
        )

    def __repr__(self) -> str:
        if not self.is_counting:
            return "VolumePeriodAccumulator(IDLE)"
        return (
            f"VolumePeriodAccumulator(COUNTING since {self._start_time}, "
            f"vol={self._cumulative_volume}, {self._low}-{self._high})"
        )


__all__ = ["VolumePeriodAccumulator"]
