"""Dataclass models for app configuration."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Any

from .validators import AppConfigValidator


@dataclass(frozen=True)
class AppInfo:
    """Application metadata."""
    name: str
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, obj: Dict[str, Any]) -> "AppInfo":
        AppConfigValidator.validate_app_info(obj)
        return cls(
            name=obj.get("name"),
            log_level=obj.get("log_level", "INFO")
        )


@dataclass(frozen=True)
class StreamSettings:
    """Event stream (websocket) settings."""
    ws_endpoint: str
    max_reconnect_attempts: int = 10
    reconnect_delay: float = 1.0
    ping_interval: int = 20
    ping_timeout: int = 10

    @classmethod
    def from_dict(cls, obj: Dict[str, Any]) -> "StreamSettings":
        AppConfigValidator.validate_stream_settings(obj)
        return cls(
            ws_endpoint=obj.get("ws_endpoint"),
            max_reconnect_attempts=obj.get("max_reconnect_attempts", 10),
            reconnect_delay=float(obj.get("reconnect_delay", 1.0)),
            ping_interval=obj.get("ping_interval", 20),
            ping_timeout=obj.get("ping_timeout", 10),
        )


@dataclass(frozen=True)
class ApiSettings:
    """HTTP snapshot/health API settings."""
    enabled: bool = True
    host: str = "0.0.0.0"
    port: int = 8080

    @classmethod
    def from_dict(cls, obj: Dict[str, Any]) -> "ApiSettings":
        AppConfigValidator.validate_api_settings(obj)
        return cls(
            enabled=obj.get("enabled", True),
            host=obj.get("host", "0.0.0.0"),
            port=obj.get("port", 8080),
        )


@dataclass(frozen=True)
class BookSettings:
    """Depth limits for level snapshot queries."""
    default_depth: int = 10
    max_depth: int = 100

    @classmethod
    def from_dict(cls, obj: Dict[str, Any]) -> "BookSettings":
        AppConfigValidator.validate_book_settings(obj)
        return cls(
            default_depth=obj.get("default_depth", 10),
            max_depth=obj.get("max_depth", 100),
        )

    def clamp_depth(self, depth: int) -> int:
        """Clamp a requested depth into [1, max_depth]."""
        return max(1, min(depth, self.max_depth))


@dataclass(frozen=True)
class RefreshSettings:
    """Coalesced refresh settings."""
    enabled: bool = True

    @classmethod
    def from_dict(cls, obj: Dict[str, Any]) -> "RefreshSettings":
        AppConfigValidator.validate_refresh_settings(obj)
        return cls(enabled=obj.get("enabled", True))


@dataclass(frozen=True)
class AppConfig:
    """Root application configuration."""
    app: AppInfo
    stream: StreamSettings
    api: ApiSettings = field(default_factory=ApiSettings)
    book: BookSettings = field(default_factory=BookSettings)
    refresh: RefreshSettings = field(default_factory=RefreshSettings)

    @classmethod
    def from_dict(cls, obj: Dict[str, Any]) -> "AppConfig":
        AppConfigValidator.validate_app_config(obj)
        return cls(
            app=AppInfo.from_dict(obj.get("app", {})),
            stream=StreamSettings.from_dict(obj.get("stream", {})),
            api=ApiSettings.from_dict(obj.get("api", {})),
            book=BookSettings.from_dict(obj.get("book", {})),
            refresh=RefreshSettings.from_dict(obj.get("refresh", {})),
        )

    def __repr__(self) -> str:
        return (
            f"AppConfig(app={self.app.name!r}, stream={self.stream.ws_endpoint!r}, "
            f"api={self.api.host}:{self.api.port}, depth={self.book.default_depth})"
        )


__all__ = ["AppConfig", "AppInfo", "StreamSettings", "ApiSettings", "BookSettings", "RefreshSettings"]
