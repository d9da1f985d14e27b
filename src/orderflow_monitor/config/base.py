"""Base classes for configuration system."""
import math
from typing import Any, Optional, Sequence

from orderflow_monitor.core.errors import OrderFlowError


class ConfigError(OrderFlowError):
    """Base error for all config validation errors."""


class BaseValidator:
    """Base validator with common validation patterns."""

    @staticmethod
    def validate_dict(obj: Any, name: str, path: Optional[str] = None) -> None:
        """Validate that object is a dictionary.

        Args:
            obj: Object to validate
            name: Name of the field being validated
            path: Optional path context for error messages

        Raises:
            ConfigError: If obj is not a dict
        """
        ctx = f"{path}: " if path else ""
        if not isinstance(obj, dict):
            raise ConfigError(f"{ctx}{name} must be a dict")

    @staticmethod
    def validate_string(
        obj: Any,
        field_name: str,
        allow_empty: bool = False,
        path: Optional[str] = None
    ) -> None:
        """Validate that object is a string.

        Args:
            obj: Object to validate
            field_name: Name of the field being validated
            allow_empty: Whether empty strings are allowed
            path: Optional path context for error messages

        Raises:
            ConfigError: If obj is not a valid string
        """
        ctx = f"{path}: " if path else ""
        if not isinstance(obj, str):
            raise ConfigError(f"{ctx}{field_name} must be a string")
        if not allow_empty and not obj:
            raise ConfigError(f"{ctx}{field_name} must be a non-empty string")

    @staticmethod
    def validate_int(
        obj: Any,
        field_name: str,
        min_value: Optional[int] = None,
        max_value: Optional[int] = None,
        path: Optional[str] = None
    ) -> None:
        """Validate that object is an integer within optional bounds.

        Booleans are rejected even though `bool` subclasses `int`.

        Args:
            obj: Object to validate
            field_name: Name of the field being validated
            min_value: Optional minimum value (inclusive)
            max_value: Optional maximum value (inclusive)
            path: Optional path context for error messages

        Raises:
            ConfigError: If obj is not a valid integer or out of bounds
        """
        ctx = f"{path}: " if path else ""
        if isinstance(obj, bool) or not isinstance(obj, int):
            raise ConfigError(f"{ctx}{field_name} must be an integer")
        if min_value is not None and obj < min_value:
            raise ConfigError(f"{ctx}{field_name} must be >= {min_value}, got {obj}")
        if max_value is not None and obj > max_value:
            raise ConfigError(f"{ctx}{field_name} must be <= {max_value}, got {obj}")

    @staticmethod
    def validate_float(
        obj: Any,
        field_name: str,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None,
        path: Optional[str] = None
    ) -> None:
        """Validate that object is a finite number within optional bounds.

        Args:
            obj: Object to validate
            field_name: Name of the field being validated
            min_value: Optional minimum value (inclusive)
            max_value: Optional maximum value (inclusive)
            path: Optional path context for error messages

        Raises:
            ConfigError: If obj is not a valid number or out of bounds
        """
        ctx = f"{path}: " if path else ""
        if isinstance(obj, bool) or not isinstance(obj, (int, float)):
            raise ConfigError(f"{ctx}{field_name} must be a number")
        if not math.isfinite(obj):
            raise ConfigError(f"{ctx}{field_name} must be finite, got {obj}")
        if min_value is not None and obj < min_value:
            raise ConfigError(f"{ctx}{field_name} must be >= {min_value}, got {obj}")
        if max_value is not None and obj > max_value:
            raise ConfigError(f"{ctx}{field_name} must be <= {max_value}, got {obj}")

    @staticmethod
    def validate_step(
        obj: float,
        field_name: str,
        step: float,
        origin: float = 0.0,
        path: Optional[str] = None
    ) -> None:
        """Validate that object sits on the grid `origin + k * step`.

        Float noise is tolerated, so 0.3 passes for a 0.1 step.

        Args:
            obj: Number to validate (already type and bounds checked)
            field_name: Name of the field being validated
            step: Grid spacing
            origin: Grid origin
            path: Optional path context for error messages

        Raises:
            ConfigError: If obj is off the grid
        """
        ctx = f"{path}: " if path else ""
        steps = (obj - origin) / step
        if not math.isclose(steps, round(steps), abs_tol=1e-6):
            raise ConfigError(f"{ctx}{field_name} must be a multiple of {step}, got {obj}")

    @staticmethod
    def validate_bool(obj: Any, field_name: str, path: Optional[str] = None) -> None:
        """Validate that object is a boolean.

        Args:
            obj: Object to validate
            field_name: Name of the field being validated
            path: Optional path context for error messages

        Raises:
            ConfigError: If obj is not a boolean
        """
        ctx = f"{path}: " if path else ""
        if not isinstance(obj, bool):
            raise ConfigError(f"{ctx}{field_name} must be a boolean")

    @staticmethod
    def validate_list(obj: Any, field_name: str, path: Optional[str] = None) -> None:
        """Validate that object is a list.

        Args:
            obj: Object to validate
            field_name: Name of the field being validated
            path: Optional path context for error messages

        Raises:
            ConfigError: If obj is not a list
        """
        ctx = f"{path}: " if path else ""
        if not isinstance(obj, list):
            raise ConfigError(f"{ctx}{field_name} must be a list")

    @staticmethod
    def validate_choice(
        obj: Any,
        field_name: str,
        choices: Sequence[str],
        path: Optional[str] = None
    ) -> None:
        """Validate that object is one of the allowed values.

        Args:
            obj: Object to validate
            field_name: Name of the field being validated
            choices: Allowed values
            path: Optional path context for error messages

        Raises:
            ConfigError: If obj is not in choices
        """
        ctx = f"{path}: " if path else ""
        if obj not in choices:
            raise ConfigError(f"{ctx}{field_name} must be one of {list(choices)}, got {obj!r}")

    @staticmethod
    def validate_url(
        obj: Any,
        field_name: str,
        schemes: tuple = ("http", "https"),
        path: Optional[str] = None
    ) -> None:
        """Validate that object is a URL with allowed schemes.

        Args:
            obj: Object to validate
            field_name: Name of the field being validated
            schemes: Tuple of allowed URL schemes
            path: Optional path context for error messages

        Raises:
            ConfigError: If obj is not a valid URL
        """
        ctx = f"{path}: " if path else ""
        if not isinstance(obj, str):
            raise ConfigError(f"{ctx}{field_name} must be a string")
        if not any(obj.startswith(f"{scheme}://") for scheme in schemes):
            schemes_str = ", ".join(schemes)
            raise ConfigError(f"{ctx}{field_name} must start with one of: {schemes_str}")


__all__ = ["ConfigError", "BaseValidator"]
