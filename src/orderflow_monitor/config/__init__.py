"""Configuration: YAML loaders, validators and frozen dataclass models."""
from .base import ConfigError, BaseValidator

__all__ = ["ConfigError", "BaseValidator"]
