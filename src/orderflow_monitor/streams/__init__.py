"""Event stream sources."""
from .ws_source import WebSocketEventSource, EventCallback

__all__ = ["WebSocketEventSource", "EventCallback"]
