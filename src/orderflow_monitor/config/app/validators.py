"""Validators for app configuration."""
from typing import Any, Dict, Optional
from ..base import BaseValidator, ConfigError

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class AppConfigValidator(BaseValidator):
    """Validator for app configuration objects."""

    @staticmethod
    def validate_app_info(obj: Dict[str, Any], path: Optional[str] = None) -> None:
        BaseValidator.validate_dict(obj, "app", path)

        name = obj.get("name")
        BaseValidator.validate_string(name, "app.name", path=path)

        log_level = obj.get("log_level", "INFO")
        BaseValidator.validate_choice(log_level, "app.log_level", VALID_LOG_LEVELS, path=path)

    @staticmethod
    def validate_stream_settings(obj: Dict[str, Any], path: Optional[str] = None) -> None:
        BaseValidator.validate_dict(obj, "stream", path)

        ws_endpoint = obj.get("ws_endpoint")
        BaseValidator.validate_url(ws_endpoint, "stream.ws_endpoint", schemes=("ws", "wss"), path=path)

        max_attempts = obj.get("max_reconnect_attempts", 10)
        BaseValidator.validate_int(max_attempts, "stream.max_reconnect_attempts", min_value=0, path=path)

        reconnect_delay = obj.get("reconnect_delay", 1.0)
        BaseValidator.validate_float(reconnect_delay, "stream.reconnect_delay", min_value=0, path=path)

        ping_interval = obj.get("ping_interval", 20)
        BaseValidator.validate_int(ping_interval, "stream.ping_interval", min_value=0, path=path)

        ping_timeout = obj.get("ping_timeout", 10)
        BaseValidator.validate_int(ping_timeout, "stream.ping_timeout", min_value=1, path=path)

        if ping_interval and ping_timeout >= ping_interval:
            ctx = f"{path}: " if path else ""
            raise ConfigError(f"{ctx}stream.ping_timeout must be smaller than stream.ping_interval")

    @staticmethod
    def validate_api_settings(obj: Dict[str, Any], path: Optional[str] = None) -> None:
        BaseValidator.validate_dict(obj, "api", path)

        BaseValidator.validate_bool(obj.get("enabled", True), "api.enabled", path=path)
        BaseValidator.validate_string(obj.get("host", "0.0.0.0"), "api.host", path=path)
        BaseValidator.validate_int(obj.get("port", 8080), "api.port", min_value=1, max_value=65535, path=path)

    @staticmethod
    def validate_book_settings(obj: Dict[str, Any], path: Optional[str] = None) -> None:
        BaseValidator.validate_dict(obj, "book", path)

        max_depth = obj.get("max_depth", 100)
        BaseValidator.validate_int(max_depth, "book.max_depth", min_value=1, path=path)

        default_depth = obj.get("default_depth", 10)
        BaseValidator.validate_int(default_depth, "book.default_depth", min_value=1, max_value=max_depth, path=path)

    @staticmethod
    def validate_refresh_settings(obj: Dict[str, Any], path: Optional[str] = None) -> None:
        BaseValidator.validate_dict(obj, "refresh", path)
        BaseValidator.validate_bool(obj.get("enabled", True), "refresh.enabled", path=path)

    @staticmethod
    def validate_app_config(obj: Dict[str, Any], path: Optional[str] = None) -> None:
        base = path if path else ""
        ctx = f"{base}: " if base else ""

        BaseValidator.validate_dict(obj, "config", path)

        app = obj.get("app")
        if not app:
            raise ConfigError(f"{ctx}missing required 'app' section")
        AppConfigValidator.validate_app_info(app, path=f"{base}.app" if base else "app")

        stream = obj.get("stream")
        if not stream:
            raise ConfigError(f"{ctx}missing required 'stream' section")
        AppConfigValidator.validate_stream_settings(stream, path=f"{base}.stream" if base else "stream")

        # Optional sections
        AppConfigValidator.validate_api_settings(
            obj.get("api", {}), path=f"{base}.api" if base else "api"
        )
        AppConfigValidator.validate_book_settings(
            obj.get("book", {}), path=f"{base}.book" if base else "book"
        )
        AppConfigValidator.validate_refresh_settings(
            obj.get("refresh", {}), path=f"{base}.refresh" if base else "refresh"
        )


__all__ = ["AppConfigValidator", "ConfigError"]
