"""
Volume box detector.

Separation of Concerns:
  enums.py / models.py   → Data structures (WHAT the data is)
  accumulator.py         → Period volume/range tracking
  registry.py            → Box lifecycle (HOW boxes are created/updated)
  render.py              → Render sink interface and implementations
"""

from .enums import PeriodState, BoxDirection, BoxState
from .models import VolumePeriod, RangeBox, BoxEvaluation, Rectangle
from .accumulator import VolumePeriodAccumulator
from .render import RenderSink, InMemoryRenderSink, LoggingRenderSink, CompositeRenderSink
from .registry import RangeBoxRegistry
from .volume_box_detector import VolumeBoxDetector

__all__ = [
    # Enums
    "PeriodState",
    "BoxDirection",
    "BoxState",

    # Models
    "VolumePeriod",
    "RangeBox",
    "BoxEvaluation",
    "Rectangle",

    # Components
    "VolumePeriodAccumulator",
    "RangeBoxRegistry",
    "VolumeBoxDetector",

    # Render sinks
    "RenderSink",
    "InMemoryRenderSink",
    "LoggingRenderSink",
    "CompositeRenderSink",
]
