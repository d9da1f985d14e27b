"""`config.instruments` package exports.

Keep the package API small and explicit so other modules can import the
per-instrument configuration pieces from one place.
"""
from .loader import load_instruments_config, InstrumentsConfigLoader
from .models import InstrumentsConfig, InstrumentConfig, DetectorSettings
from .validators import InstrumentsConfigValidator, ConfigError

__all__ = [
    "load_instruments_config",
    "InstrumentsConfigLoader",
    "InstrumentsConfig",
    "InstrumentConfig",
    "DetectorSettings",
    "InstrumentsConfigValidator",
    "ConfigError",
]
