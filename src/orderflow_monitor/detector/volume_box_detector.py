"""
Volume Box Detector

Segments the trade stream into counting periods and proposes breakout boxes
once a period's volume crosses the threshold.

Architecture:
- VolumePeriodAccumulator: volume/high/low over the current period
- RangeBoxRegistry: Pending → Active → Removed lifecycle, render commands
"""

from typing import Any, Dict, Optional

from orderflow_monitor.config.instruments.models import DetectorSettings
from orderflow_monitor.core.logger import get_logger
from orderflow_monitor.events import TimeEvent, TradeEvent

from .accumulator import VolumePeriodAccumulator
from .models import BoxEvaluation
from .registry import RangeBoxRegistry
from .render import RenderSink


class VolumeBoxDetector:
    """
    Trade-driven breakout box detector for one instrument.

    Each trade is first folded into the accumulator, then evaluated by the
    registry. A breakout inside the registry resets the accumulator, so the
    next trade opens a fresh period.

    Usage:
        detector = VolumeBoxDetector(settings, sink, instrument="ESZ5")
        detector.on_trade(TradeEvent(price=101.25, volume=40, time=ts))
        active = detector.registry.active()
    """

    def __init__(
        self,
        settings: DetectorSettings,
        sink: RenderSink,
        instrument: str = "",
        logger=None,
        removed_history: int = 100,
    ):
        self.settings = settings
        self.instrument = instrument
        self.logger = logger or get_logger(__name__)
        self.accumulator = VolumePeriodAccumulator()
        self.registry = RangeBoxRegistry(
            settings,
            self.accumulator,
            sink,
            instrument=instrument,
            logger=self.logger,
            removed_history=removed_history,
        )
        # accumulator and registry change together under the registry lock
        self.lock = self.registry.lock
        self.is_enabled = True
        self.trade_count = 0
        self.last_time: Optional[int] = None

    def on_trade(self, trade: TradeEvent) -> BoxEvaluation:
        if not self.is_enabled:
            return BoxEvaluation()

        with self.lock:
            # raises InvalidTrade before touching any state
            self.accumulator.on_trade(trade)
            self.trade_count += 1
            self.last_time = trade.time
            return self.registry.on_trade(trade)

    def on_time(self, event: TimeEvent) -> None:
        """Heartbeats carry no detector logic; only the clock is recorded."""
        self.last_time = event.time
        self.logger.debug(f"[Detector {self.instrument}] time {event.time}")

    def enable(self):
        self.is_enabled = True

    def disable(self):
        self.is_enabled = False

    def shutdown(self) -> int:
        return self.registry.shutdown(self.last_time)

    def get_statistics(self) -> Dict[str, Any]:
        with self.lock:
            period = self.accumulator.snapshot()
            stats = self.registry.get_statistics()
        stats.update({
            "enabled": self.is_enabled,
            "trades": self.trade_count,
            "period_state": period.state.value,
            "period_start": period.start_time,
            "period_volume": period.cumulative_volume,
        })
        return stats

    def __repr__(self) -> str:
        status = "enabled" if self.is_enabled else "disabled"
        return f"VolumeBoxDetector({self.instrument!r}, {status}, {self.accumulator!r})"


__all__ = ["VolumeBoxDetector"]
