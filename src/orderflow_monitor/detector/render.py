"""
Render Sink Interface

The detector never draws anything itself; it pushes rectangle commands to a
RenderSink. Sinks must be idempotent by box id: re-adding an id replaces it,
extending or removing an unknown id is a no-op.
"""

import threading
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from orderflow_monitor.core.logger import get_logger

from .models import Rectangle


class RenderSink(ABC):
    """
    Base class for anything that can show range boxes.

    Interface:
    - add_rectangle() - Draw a new box
    - extend_rectangle() - Move a box's right edge
    - remove_rectangle() - Erase a box
    """

    @abstractmethod
    def add_rectangle(
        self,
        box_id: int,
        start_time: int,
        end_time: int,
        low: float,
        high: float,
        color: str,
    ) -> None:
        pass

    @abstractmethod
    def extend_rectangle(self, box_id: int, end_time: int) -> None:
        pass

    @abstractmethod
    def remove_rectangle(self, box_id: int) -> None:
        pass


class InMemoryRenderSink(RenderSink):
    """
    Keeps the rectangles currently on screen, keyed by box id.

    Safe to read from another thread (the HTTP API does).
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._rectangles: Dict[int, Rectangle] = {}

    def add_rectangle(self, box_id, start_time, end_time, low, high, color):
        with self._lock:
            self._rectangles[box_id] = Rectangle(box_id, start_time, end_time, low, high, color)

    def extend_rectangle(self, box_id, end_time):
        with self._lock:
            rect = self._rectangles.get(box_id)
            if rect is None:
                return
            self._rectangles[box_id] = Rectangle(
                rect.box_id, rect.start_time, end_time, rect.low, rect.high, rect.color
            )

    def remove_rectangle(self, box_id):
        with self._lock:
            self._rectangles.pop(box_id, None)

    def get(self, box_id: int) -> Optional[Rectangle]:
        with self._lock:
            return self._rectangles.get(box_id)

    def rectangles(self) -> List[Rectangle]:
        with self._lock:
            return list(self._rectangles.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._rectangles)

    def __contains__(self, box_id: int) -> bool:
        with self._lock:
            return box_id in self._rectangles


class LoggingRenderSink(RenderSink):
    """Writes every command to a logger. Extends go to DEBUG (one per trade)."""

    def __init__(self, logger=None):
        self.logger = logger or get_logger(__name__)

    def add_rectangle(self, box_id, start_time, end_time, low, high, color):
        self.logger.info(
            f"[Render] add #{box_id} {low}-{high} t={start_time}..{end_time} color={color}"
        )

    def extend_rectangle(self, box_id, end_time):
        self.logger.debug(f"[Render] extend #{box_id} -> {end_time}")

    def remove_rectangle(self, box_id):
        self.logger.info(f"[Render] remove #{box_id}")


class CompositeRenderSink(RenderSink):
    """Fans every command out to several sinks, in order."""

    def __init__(self, *sinks: RenderSink):
        self.sinks = list(sinks)

    def add_rectangle(self, box_id, start_time, end_time, low, high, color):
        for sink in self.sinks:
            sink.add_rectangle(box_id, start_time, end_time, low, high, color)

    def extend_rectangle(self, box_id, end_time):
        for sink in self.sinks:
            sink.extend_rectangle(box_id, end_time)

    def remove_rectangle(self, box_id):
        for sink in self.sinks:
            sink.remove_rectangle(box_id)


__all__ = ["RenderSink", "InMemoryRenderSink", "LoggingRenderSink", "CompositeRenderSink"]
