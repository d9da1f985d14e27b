"""Configuration validator for the instruments config."""
from typing import Any, Dict, Optional
from ..base import BaseValidator, ConfigError

# (min, max, step) for the detector parameters
VOLUME_THRESHOLD_RANGE = (1000, 100000, 1000)
RANGE_THRESHOLD_RANGE = (0.1, 5.0, 0.1)
ACTIVATION_RANGE_RANGE = (0.1, 5.0, 0.1)

DIRECTION_SOURCES = ("trade", "period")


class InstrumentsConfigValidator(BaseValidator):
    """Dedicated validator for the instruments config.

    Validators accept an optional `path` parameter that is prefixed to
    error messages to help locate the failing item in a nested config.
    """

    @staticmethod
    def _validate_stepped_float(obj: Any, field_name: str, bounds: tuple, path: Optional[str]) -> None:
        lo, hi, step = bounds
        BaseValidator.validate_float(obj, field_name, min_value=lo, max_value=hi, path=path)
        BaseValidator.validate_step(obj, field_name, step, path=path)

    @staticmethod
    def validate_detector(obj: Dict[str, Any], path: Optional[str] = None) -> None:
        BaseValidator.validate_dict(obj, "detector", path)

        lo, hi, step = VOLUME_THRESHOLD_RANGE
        volume_threshold = obj.get("volume_threshold", 10000)
        BaseValidator.validate_int(volume_threshold, "detector.volume_threshold", min_value=lo, max_value=hi, path=path)
        BaseValidator.validate_step(volume_threshold, "detector.volume_threshold", step, path=path)

        InstrumentsConfigValidator._validate_stepped_float(
            obj.get("range_threshold", 0.5), "detector.range_threshold", RANGE_THRESHOLD_RANGE, path
        )
        InstrumentsConfigValidator._validate_stepped_float(
            obj.get("activation_range", 0.2), "detector.activation_range", ACTIVATION_RANGE_RANGE, path
        )

        BaseValidator.validate_choice(
            obj.get("direction_source", "trade"), "detector.direction_source", DIRECTION_SOURCES, path=path
        )
        BaseValidator.validate_bool(obj.get("range_gate_enabled", False), "detector.range_gate_enabled", path=path)
        BaseValidator.validate_string(obj.get("up_color", "#26A69A"), "detector.up_color", path=path)
        BaseValidator.validate_string(obj.get("down_color", "#EF5350"), "detector.down_color", path=path)

    @staticmethod
    def validate_instrument(obj: Dict[str, Any], path: Optional[str] = None) -> None:
        BaseValidator.validate_dict(obj, "instrument", path)

        BaseValidator.validate_string(obj.get("name"), "instrument.name", path=path)
        BaseValidator.validate_bool(obj.get("enabled", True), "instrument.enabled", path=path)

        detector_path = f"{path}.detector" if path else "detector"
        InstrumentsConfigValidator.validate_detector(obj.get("detector", {}), path=detector_path)

    @staticmethod
    def validate_instruments_config(obj: Dict[str, Any], path: Optional[str] = None) -> None:
        base = path if path else ""
        ctx = f"{base}: " if base else ""

        BaseValidator.validate_dict(obj, "config", path)

        instruments = obj.get("instruments", [])
        BaseValidator.validate_list(instruments, "root 'instruments'", path)

        seen = set()
        for i, inst in enumerate(instruments):
            inst_path = f"{base}.instruments[{i}]" if base else f"instruments[{i}]"
            InstrumentsConfigValidator.validate_instrument(inst, path=inst_path)

            name = inst["name"]
            if name in seen:
                raise ConfigError(f"{ctx}duplicate instrument name {name!r}")
            seen.add(name)


__all__ = [
    "InstrumentsConfigValidator",
    "ConfigError",
    "VOLUME_THRESHOLD_RANGE",
    "RANGE_THRESHOLD_RANGE",
    "ACTIVATION_RANGE_RANGE",
    "DIRECTION_SOURCES",
]
