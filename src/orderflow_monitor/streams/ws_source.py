"""
WebSocket Event Source: order and trade events from a market data gateway.

Message envelope (one JSON object per frame):

    {"instrument": "ESZ5", "event": {"type": "trade", ...}}

A frame may also carry a list of envelopes under "batch". Each decoded event
is routed to the callback registered for its instrument.

Features:
- Automatic reconnection with backoff + jitter
- Per-instrument routing
- Thread-safe subscriptions
- Malformed frames are logged and dropped, never raised into the run loop
"""

import json
import random
import threading
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

from websocket import WebSocketApp

from orderflow_monitor.config.app.models import StreamSettings
from orderflow_monitor.core.errors import EventParseError
from orderflow_monitor.core.logger import get_logger
from orderflow_monitor.events import Event, parse_event

EventCallback = Callable[[Event], None]


class WebSocketEventSource:
    """
    Gateway websocket client delivering parsed events per instrument.

    Events for one instrument are delivered in order on the websocket thread,
    which makes that thread the single producer context for the instrument.
    """

    def __init__(self, settings: StreamSettings):
        self.logger = get_logger(__name__)
        self.settings = settings
        self.ws_endpoint = settings.ws_endpoint

        # Connection state
        self.ws: Optional[WebSocketApp] = None
        self.ws_thread: Optional[threading.Thread] = None
        self.is_running = False
        self.is_connected = False

        # Reconnect parameters
        self.reconnect_attempts = 0
        self.max_reconnect_attempts = settings.max_reconnect_attempts
        self.reconnect_delay = settings.reconnect_delay

        # Subscriptions
        self.subscriptions: List[str] = []
        self.callbacks: Dict[str, EventCallback] = {}

        self.received_count = 0
        self.dropped_count = 0

        self.lock = threading.Lock()

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def subscribe(self, instrument: str, callback: EventCallback):
        """Route events for `instrument` to `callback(event)`."""
        with self.lock:
            if instrument not in self.callbacks:
                self.subscriptions.append(instrument)
                self.callbacks[instrument] = callback
                self.logger.info(f"[WebSocket] Subscribed to {instrument}")
            else:
                self.logger.warning(f"[WebSocket] Already subscribed: {instrument}")

    def start(self):
        """Start the WebSocket connection in a new thread."""
        if self.is_running:
            self.logger.warning("[WebSocket] Already running")
            return

        if not self.subscriptions:
            self.logger.error("[WebSocket] No subscriptions found. Use subscribe().")
            return

        self.is_running = True
        self.reconnect_attempts = 0

        url = f"{self.ws_endpoint}?instruments={','.join(self.subscriptions)}"
        self.logger.info(f"[WebSocket] Connecting for {len(self.subscriptions)} instruments")
        self.logger.debug(f"[WebSocket] URL: {url}")

        self.ws = WebSocketApp(
            url,
            on_open=self._on_open,
            on_message=self._on_message,
            on_error=self._on_error,
            on_close=self._on_close
        )

        self.ws_thread = threading.Thread(target=self._run_forever, name="ws-event-source", daemon=True)
        self.ws_thread.start()

        self.logger.info("[WebSocket] Started in background thread")

    def stop(self):
        """Gracefully stop the WebSocket connection."""
        if not self.is_running:
            self.logger.warning("[WebSocket] Not running")
            return

        self.logger.info("[WebSocket] Stopping...")
        self.is_running = False

        if self.ws:
            try:
                self.ws.close()
            except Exception as e:
                self.logger.debug(f"[WebSocket] Close error ignored: {e}")

        if self.ws_thread and self.ws_thread.is_alive():
            self.ws_thread.join(timeout=5)

        self.is_connected = False
        self.logger.info("[WebSocket] Stopped")

    def is_alive(self) -> bool:
        return self.is_running and self.is_connected

    # =========================================================================
    # INTERNAL RUN LOOP + CALLBACKS
    # =========================================================================

    def _run_forever(self):
        """Main WebSocket event loop with reconnection logic."""
        while self.is_running:
            try:
                self.ws.run_forever(
                    ping_interval=self.settings.ping_interval,
                    ping_timeout=self.settings.ping_timeout,
                )
                if self.is_running:
                    self._handle_reconnect()

            except Exception as e:
                self.logger.error(f"[WebSocket] Exception in run_forever: {e}")
                if self.is_running:
                    self._handle_reconnect()

    def _on_open(self, ws):
        self.is_connected = True
        self.reconnect_attempts = 0
        self.logger.info(f"[WebSocket] Connected ({len(self.subscriptions)} instruments)")

    def _on_message(self, ws, message: str):
        try:
            msg = json.loads(message)
        except ValueError as e:
            self.dropped_count += 1
            self.logger.warning(f"[WebSocket] Dropped non-JSON frame: {e}")
            return

        for instrument, event in self.decode(msg):
            self.dispatch(instrument, event)

    def _on_error(self, ws, error):
        self.logger.error(f"[WebSocket] Error: {error}")

    def _on_close(self, ws, code, msg):
        self.is_connected = False
        self.logger.warning(f"[WebSocket] Closed: code={code}, msg={msg}")

    # =========================================================================
    # DECODING + ROUTING
    # =========================================================================

    def decode(self, msg: Any) -> List[Tuple[str, Event]]:
        """
        Turn one decoded frame into (instrument, event) pairs.

        Bad envelopes inside a batch are dropped individually.
        """
        envelopes = msg.get("batch") if isinstance(msg, dict) and "batch" in msg else [msg]
        if not isinstance(envelopes, list):
            envelopes = [envelopes]

        decoded = []
        for env in envelopes:
            try:
                if not isinstance(env, dict) or "instrument" not in env or "event" not in env:
                    raise EventParseError("envelope needs 'instrument' and 'event'")
                decoded.append((str(env["instrument"]), parse_event(env["event"])))
            except EventParseError as e:
                self.dropped_count += 1
                self.logger.warning(f"[WebSocket] Dropped malformed event: {e}")
        return decoded

    def dispatch(self, instrument: str, event: Event) -> bool:
        """Deliver one event to its instrument callback."""
        with self.lock:
            callback = self.callbacks.get(instrument)

        if callback is None:
            self.dropped_count += 1
            self.logger.warning(f"[WebSocket] No callback registered for {instrument}")
            return False

        self.received_count += 1
        try:
            callback(event)
        except Exception as e:
            self.logger.exception(f"[WebSocket] Callback error for {instrument}: {e}")
            return False
        return True

    # =========================================================================
    # RECONNECTION
    # =========================================================================

    def _handle_reconnect(self):
        if self.reconnect_attempts >= self.max_reconnect_attempts:
            self.logger.error("[WebSocket] Max reconnection attempts reached.")
            self.is_running = False
            return

        self.reconnect_attempts += 1

        wait = min(
            self.reconnect_delay * (2 ** (self.reconnect_attempts - 1)),
            60
        )

        # jitter avoids reconnect storms
        wait += random.uniform(0, 0.3)

        self.logger.info(
            f"[WebSocket] Reconnecting in {wait:.2f}s "
            f"(attempt {self.reconnect_attempts}/{self.max_reconnect_attempts})"
        )

        time.sleep(wait)

    # =========================================================================

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()


__all__ = ["WebSocketEventSource", "EventCallback"]
