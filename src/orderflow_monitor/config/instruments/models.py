"""Dataclass models for the instruments configuration."""
from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import List, Any, Dict

from .validators import InstrumentsConfigValidator


@dataclass(frozen=True)
class DetectorSettings:
    """Volume box detector parameters for one instrument.

    `range_threshold` is only consumed when `range_gate_enabled` is set;
    otherwise it is carried for display and left unused.
    """
    volume_threshold: int = 10000
    range_threshold: float = 0.5
    activation_range: float = 0.2
    direction_source: str = "trade"   # "trade" or "period"
    range_gate_enabled: bool = False
    up_color: str = "#26A69A"
    down_color: str = "#EF5350"

    def __post_init__(self):
        InstrumentsConfigValidator.validate_detector(self.to_dict())

    @classmethod
    def from_dict(cls, obj: Dict[str, Any]) -> "DetectorSettings":
        InstrumentsConfigValidator.validate_detector(obj)
        return cls(
            volume_threshold=obj.get("volume_threshold", 10000),
            range_threshold=float(obj.get("range_threshold", 0.5)),
            activation_range=float(obj.get("activation_range", 0.2)),
            direction_source=obj.get("direction_source", "trade"),
            range_gate_enabled=obj.get("range_gate_enabled", False),
            up_color=obj.get("up_color", "#26A69A"),
            down_color=obj.get("down_color", "#EF5350"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class InstrumentConfig:
    """Configuration for a single instrument."""
    name: str
    enabled: bool = True
    detector: DetectorSettings = field(default_factory=DetectorSettings)

    @classmethod
    def from_dict(cls, obj: Dict[str, Any]) -> "InstrumentConfig":
        InstrumentsConfigValidator.validate_instrument(obj)
        return cls(
            name=obj.get("name"),
            enabled=obj.get("enabled", True),
            detector=DetectorSettings.from_dict(obj.get("detector", {})),
        )

    def __repr__(self) -> str:
        return f"InstrumentConfig(name={self.name!r}, enabled={self.enabled})"


@dataclass(frozen=True)
class InstrumentsConfig:
    """Root configuration containing all instruments."""
    instruments: List[InstrumentConfig] = field(default_factory=list)

    @classmethod
    def from_dict(cls, obj: Dict[str, Any]) -> "InstrumentsConfig":
        InstrumentsConfigValidator.validate_instruments_config(obj)
        return cls(instruments=[InstrumentConfig.from_dict(i) for i in obj.get("instruments", [])])

    def enabled(self) -> List[InstrumentConfig]:
        return [i for i in self.instruments if i.enabled]

    def __repr__(self) -> str:
        return f"InstrumentsConfig(instruments={len(self.instruments)})"


__all__ = ["DetectorSettings", "InstrumentConfig", "InstrumentsConfig"]
