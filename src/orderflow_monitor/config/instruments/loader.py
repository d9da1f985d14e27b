"""Instruments config loader."""
from __future__ import annotations

from typing import Any, Dict
from pathlib import Path

import yaml

from .models import InstrumentsConfig
from .validators import InstrumentsConfigValidator, ConfigError


class InstrumentsConfigLoader:
    """Loader for YAML configuration files for the instruments config."""

    @staticmethod
    def _read_file(path: Path | str) -> Dict[str, Any]:
        p = Path(path)
        if not p.exists():
            raise FileNotFoundError(f"Config file not found: {p}")

        with p.open("r", encoding="utf-8") as f:
            try:
                return yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"{p}: invalid YAML: {e}") from e

    @staticmethod
    def load(path: Path | str = Path("config/instruments.yml")) -> InstrumentsConfig:
        data = InstrumentsConfigLoader._read_file(path)
        if data is None:
            raise ConfigError(f"Config file {path} is empty or invalid")

        try:
            InstrumentsConfigValidator.validate_instruments_config(data, path=str(path))
        except ConfigError as e:
            raise ConfigError(f"Invalid config in {path}: {e}") from e

        return InstrumentsConfig.from_dict(data)


def load_instruments_config(path: Path | str = Path("config/instruments.yml")) -> InstrumentsConfig:
    return InstrumentsConfigLoader.load(path)


__all__ = ["InstrumentsConfigLoader", "load_instruments_config"]
