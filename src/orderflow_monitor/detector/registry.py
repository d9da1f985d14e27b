"""
Range Box Registry

Owns every RangeBox and runs their lifecycle against each incoming trade.

Architecture:
- Uses RangeBox model from models/
- Reads (and on breakout resets) the VolumePeriodAccumulator
- Pushes draw commands to a RenderSink
"""

import threading
from collections import deque
from itertools import count
from typing import Any, Deque, Dict, List, Optional, Tuple

from orderflow_monitor.config.instruments.models import DetectorSettings
from orderflow_monitor.core.logger import get_logger
from orderflow_monitor.events import TradeEvent

from .accumulator import VolumePeriodAccumulator
from .enums import BoxDirection, BoxState
from .models import BoxEvaluation, RangeBox
from .render import RenderSink


class RangeBoxRegistry:
    """
    Box lifecycle, evaluated once per trade in a fixed order:

    1. Creation: the accumulator is counting, its volume has reached
       `volume_threshold`, and this period has not produced a box yet →
       create one PENDING box spanning the period's low/high.
    2. Activation: a PENDING box activates once price clears it by
       `activation_range` in its direction (UP: price >= high + R,
       DOWN: price <= low - R) and is drawn.
    3. Extend/break: every box that was already ACTIVE before this trade is
       extended to the trade time; if price is strictly outside [low, high]
       the box is removed and the accumulator reset, ending the period.

    A box created in step 1 may activate in step 2 of the same trade. A box
    activated in step 2 is first extended/checked on the following trade,
    since the activating print is by construction outside the box.

    Ids come from a monotonically increasing counter and are never reused.
    Removed boxes leave the live map and are kept only in a bounded history
    of the most recent `removed_history` removals.

    Every mutation and every query runs under `lock`, and queries return
    copies, so the HTTP thread can read while trades are evaluated.
    Sink failures are logged and counted; they never fail the caller.

    Usage:
        registry = RangeBoxRegistry(settings, accumulator, sink)
        accumulator.on_trade(trade)
        result = registry.on_trade(trade)
    """

    def __init__(
        self,
        settings: DetectorSettings,
        accumulator: VolumePeriodAccumulator,
        sink: RenderSink,
        instrument: str = "",
        logger=None,
        removed_history: int = 100,
    ):
        self.settings = settings
        self.accumulator = accumulator
        self.sink = sink
        self.instrument = instrument
        self.logger = logger or get_logger(__name__)

        self.lock = threading.RLock()
        self._boxes: Dict[int, RangeBox] = {}
        self._removed: Deque[RangeBox] = deque(maxlen=removed_history)
        self._ids = count(1)
        self.removed_count = 0
        self._boxed_period_id: Optional[int] = None
        self.sink_failures = 0

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def on_trade(self, trade: TradeEvent) -> BoxEvaluation:
        """Run creation, activation and extend/break for one trade."""
        with self.lock:
            created = self._check_creation(trade)
            previously_active = [b for b in self._boxes.values() if b.is_active]
            activated = self._activation_pass(trade)
            extended, removed = self._extend_pass(trade, previously_active)

        return BoxEvaluation(
            created=(created.box_id,) if created else (),
            activated=tuple(activated),
            extended=tuple(extended),
            removed=tuple(removed),
            period_reset=bool(removed),
        )

    def color_for(self, direction: BoxDirection) -> str:
        return self.settings.up_color if direction is BoxDirection.UP else self.settings.down_color

    def get_box(self, box_id: int) -> Optional[RangeBox]:
        """A live box, or a removed one still in the history."""
        with self.lock:
            box = self._boxes.get(box_id)
            if box is None:
                box = next((b for b in self._removed if b.box_id == box_id), None)
            return box

    def boxes(self, state: Optional[BoxState] = None) -> List[RangeBox]:
        """Live boxes in id order, then the removal history, optionally filtered by state."""
        with self.lock:
            every = list(self._boxes.values()) + list(self._removed)
        if state is None:
            return every
        return [b for b in every if b.state is state]

    def box_dicts(self, state: Optional[BoxState] = None) -> List[Dict[str, Any]]:
        """Serialized copies of `boxes(state)`, taken in one critical section."""
        with self.lock:
            return [b.to_dict() for b in self.boxes(state)]

    def pending(self) -> List[RangeBox]:
        return self.boxes(BoxState.PENDING)

    def active(self) -> List[RangeBox]:
        return self.boxes(BoxState.ACTIVE)

    def shutdown(self, time: Optional[int] = None) -> int:
        """
        Erase every drawn box and retire all live boxes.

        Returns:
            Number of rectangles removed from the sink
        """
        erased = 0
        with self.lock:
            for box in list(self._boxes.values()):
                if box.is_active:
                    box.remove(time)
                    self._emit("remove_rectangle", box.box_id)
                    erased += 1
                else:
                    box.discard(time)
                self._retire(box)
        if erased:
            self.logger.info(f"[Boxes {self.instrument}] Shutdown erased {erased} active boxes")
        return erased

    def get_statistics(self) -> Dict[str, int]:
        with self.lock:
            live = list(self._boxes.values())
            return {
                "total_boxes": len(live) + self.removed_count,
                "pending": sum(1 for b in live if b.is_pending),
                "active": sum(1 for b in live if b.is_active),
                "removed": self.removed_count,
                "sink_failures": self.sink_failures,
            }

    # =========================================================================
    # LIFECYCLE STEPS
    # =========================================================================

    def _check_creation(self, trade: TradeEvent) -> Optional[RangeBox]:
        acc = self.accumulator
        if not acc.is_counting:
            return None
        if acc.cumulative_volume < self.settings.volume_threshold:
            return None
        if self._boxed_period_id == acc.period_id:
            return None
        if any(b.start_time == acc.start_time for b in self.pending()):
            return None
        if self.settings.range_gate_enabled and acc.period_range < self.settings.range_threshold:
            return None

        box = RangeBox(
            box_id=next(self._ids),
            start_time=acc.start_time,
            low=acc.low,
            high=acc.high,
            direction=self._direction_for(trade),
            period_id=acc.period_id,
        )
        self._boxes[box.box_id] = box
        self._boxed_period_id = acc.period_id

        self.logger.info(
            f"[Boxes {self.instrument}] Created #{box.box_id} {box.direction.value} "
            f"{box.low}-{box.high} (vol={acc.cumulative_volume}, since {acc.start_time})"
        )
        return box

    def _direction_for(self, trade: TradeEvent) -> BoxDirection:
        if self.settings.direction_source == "period":
            up = trade.price >= self.accumulator.open_price
        else:
            up = trade.close_price >= trade.open_price
        return BoxDirection.UP if up else BoxDirection.DOWN

    def _activation_pass(self, trade: TradeEvent) -> List[int]:
        reach = self.settings.activation_range
        activated = []

        for box in self.pending():
            if box.direction is BoxDirection.UP:
                triggered = trade.price >= box.high + reach
            else:
                triggered = trade.price <= box.low - reach
            if not triggered:
                continue

            box.activate(trade.time)
            self._emit(
                "add_rectangle",
                box.box_id, box.start_time, trade.time, box.low, box.high, self.color_for(box.direction),
            )
            activated.append(box.box_id)
            self.logger.info(
                f"[Boxes {self.instrument}] Activated #{box.box_id} at {trade.price} (t={trade.time})"
            )

        return activated

    def _extend_pass(self, trade: TradeEvent, boxes: List[RangeBox]) -> Tuple[List[int], List[int]]:
        extended, removed = [], []

        for box in boxes:
            box.extend(trade.time)
            self._emit("extend_rectangle", box.box_id, trade.time)
            extended.append(box.box_id)

            if box.contains_price(trade.price):
                continue

            box.remove(trade.time)
            self._emit("remove_rectangle", box.box_id)
            self._retire(box)
            removed.append(box.box_id)
            self.accumulator.reset()
            self.logger.info(
                f"[Boxes {self.instrument}] Breakout #{box.box_id} at {trade.price} "
                f"outside {box.low}-{box.high}; period reset"
            )

        return extended, removed

    def _retire(self, box: RangeBox) -> None:
        """Move a REMOVED box from the live map into the bounded history."""
        del self._boxes[box.box_id]
        self._removed.append(box)
        self.removed_count += 1

    # =========================================================================
    # SINK
    # =========================================================================

    def _emit(self, command: str, *args) -> None:
        try:
            getattr(self.sink, command)(*args)
        except Exception as e:
            self.sink_failures += 1
            self.logger.error(f"[Boxes {self.instrument}] Render sink {command}{args} failed: {e}")

    def __repr__(self) -> str:
        stats = self.get_statistics()
        return (
            f"RangeBoxRegistry({self.instrument!r}, pending={stats['pending']}, "
            f"active={stats['active']}, removed={stats['removed']})"
        )


__all__ = ["RangeBoxRegistry"]
