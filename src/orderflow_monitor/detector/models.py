"""
Data models for the volume box detector.

Pure data structures, separate from the detection logic.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

from orderflow_monitor.core.errors import IllegalBoxTransition

from .enums import BoxDirection, BoxState, PeriodState


@dataclass(frozen=True)
class VolumePeriod:
    """
    Immutable view of the accumulator.

    While IDLE every measurement is None; there are no sentinel highs/lows.
    """
    state: PeriodState
    period_id: int = 0
    start_time: Optional[int] = None
    cumulative_volume: Optional[float] = None
    high: Optional[float] = None
    low: Optional[float] = None
    open_price: Optional[float] = None

    @property
    def is_counting(self) -> bool:
        return self.state is PeriodState.COUNTING

    @property
    def range(self) -> Optional[float]:
        if self.high is None or self.low is None:
            return None
        return self.high - self.low


@dataclass
class RangeBox:
    """
    Candidate/confirmed price range proposed after a volume threshold crossing.

    Lifecycle: PENDING → ACTIVE → REMOVED. Going backwards, or skipping from
    PENDING straight to REMOVED through `remove`, raises IllegalBoxTransition;
    `discard` is the one way to retire a box that was never drawn.
    """
    box_id: int                      # Unique, increasing, never reused
    start_time: int                  # Start of the period that produced it
    low: float
    high: float
    direction: BoxDirection
    period_id: int = 0
    state: BoxState = BoxState.PENDING
    activated_time: Optional[int] = None
    end_time: Optional[int] = None   # Right edge after the last extend
    removed_time: Optional[int] = None

    @property
    def is_pending(self) -> bool:
        return self.state is BoxState.PENDING

    @property
    def is_active(self) -> bool:
        return self.state is BoxState.ACTIVE

    @property
    def size(self) -> float:
        return self.high - self.low

    def contains_price(self, price: float) -> bool:
        return self.low <= price <= self.high

    # ------------------------------------------------------------------
    # TRANSITIONS
    # ------------------------------------------------------------------
    def _transition(self, expected: BoxState, target: BoxState) -> None:
        if self.state is not expected:
            raise IllegalBoxTransition(
                f"Box {self.box_id}: cannot go {self.state.value} -> {target.value}"
            )
        self.state = target

    def activate(self, time: int) -> None:
        self._transition(BoxState.PENDING, BoxState.ACTIVE)
        self.activated_time = time
        self.end_time = time

    def extend(self, time: int) -> None:
        if not self.is_active:
            raise IllegalBoxTransition(f"Box {self.box_id}: only active boxes extend ({self.state.value})")
        self.end_time = time

    def remove(self, time: int) -> None:
        self._transition(BoxState.ACTIVE, BoxState.REMOVED)
        self.removed_time = time

    def discard(self, time: Optional[int] = None) -> None:
        """Retire a pending box that never activated."""
        self._transition(BoxState.PENDING, BoxState.REMOVED)
        self.removed_time = time

    def to_dict(self) -> dict:
        return {
            "id": self.box_id,
            "start_time": self.start_time,
            "low": self.low,
            "high": self.high,
            "direction": self.direction.value,
            "state": self.state.value,
            "activated_time": self.activated_time,
            "end_time": self.end_time,
            "removed_time": self.removed_time,
        }

    def __repr__(self) -> str:
        return (
            f"RangeBox(#{self.box_id}, {self.direction.value}, "
            f"{self.low:.2f}-{self.high:.2f}, {self.state.value.upper()})"
        )


@dataclass(frozen=True)
class BoxEvaluation:
    """What one trade did to the registry."""
    created: Tuple[int, ...] = ()
    activated: Tuple[int, ...] = ()
    extended: Tuple[int, ...] = ()
    removed: Tuple[int, ...] = ()
    period_reset: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.created or self.activated or self.removed)


@dataclass(frozen=True)
class Rectangle:
    """A rectangle as last drawn through a render sink."""
    box_id: int
    start_time: int
    end_time: int
    low: float
    high: float
    color: str = field(default="")

    def to_dict(self) -> dict:
        return {
            "id": self.box_id,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "low": self.low,
            "high": self.high,
            "color": self.color,
        }
