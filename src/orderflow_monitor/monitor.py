"""
Order Flow Monitor Orchestrator

Wires, per instrument:
- OrderBook (order events → price levels)
- VolumeBoxDetector (trade events → range boxes → render sink)
- UpdateCoalescer (debounced level refresh → snapshot consumer)

and, for the whole process:
- WebSocketEventSource feeding every instrument
- HTTP API exposing health, level snapshots and boxes
"""

import os
import signal
import sys
import threading
import time
from typing import Callable, Dict, Optional, Union

from dotenv import load_dotenv

from orderflow_monitor.api.server import create_api
from orderflow_monitor.book import BookUpdateResult, LevelSnapshot, OrderBook
from orderflow_monitor.config.app import AppConfig, load_app_config
from orderflow_monitor.config.instruments import InstrumentConfig, InstrumentsConfig, load_instruments_config
from orderflow_monitor.core.coalescer import Scheduler, UpdateCoalescer
from orderflow_monitor.core.errors import OrderFlowError
from orderflow_monitor.core.logger import get_instrument_logger, get_logger
from orderflow_monitor.detector import (
    BoxEvaluation,
    CompositeRenderSink,
    InMemoryRenderSink,
    LoggingRenderSink,
    RenderSink,
    VolumeBoxDetector,
)
from orderflow_monitor.events import CancelOrder, Event, ModifyOrder, NewOrder, Side, TimeEvent, TradeEvent
from orderflow_monitor.streams import WebSocketEventSource

LevelsConsumer = Callable[[str, Dict[str, LevelSnapshot]], None]


class InstrumentMonitor:
    """
    Everything attached to one instrument.

    Collaborators are injected at construction; `shutdown()` is the single
    teardown entry point. `on_event` never raises: protocol errors are
    logged and the event is dropped.

    Args:
        config: Instrument configuration (name + detector settings)
        render_sink: Receives add/extend/remove rectangle commands
        on_levels: Optional level-snapshot consumer, called from the refresh
            context with (instrument, {"bids": ..., "asks": ...})
        refresh_depth: Levels per side passed to `on_levels`
        schedule: Scheduler for coalesced refreshes (default: own thread)
        refresh_enabled: Disable to skip refresh scheduling entirely
    """

    def __init__(
        self,
        config: InstrumentConfig,
        render_sink: RenderSink,
        on_levels: Optional[LevelsConsumer] = None,
        refresh_depth: int = 10,
        schedule: Optional[Scheduler] = None,
        refresh_enabled: bool = True,
        logger=None,
    ):
        self.config = config
        self.name = config.name
        self.logger = logger or get_logger(__name__)
        self.render_sink = render_sink
        self.on_levels = on_levels
        self.refresh_depth = refresh_depth

        self.coalescer: Optional[UpdateCoalescer] = None
        if refresh_enabled:
            self.coalescer = UpdateCoalescer(self._refresh, schedule=schedule, name=self.name)

        self.book = OrderBook(self.name, coalescer=self.coalescer, logger=self.logger)
        self.detector = VolumeBoxDetector(config.detector, render_sink, instrument=self.name, logger=self.logger)

        self.is_shutdown = False
        self.error_count = 0

    # -------------------------------------------------------------------------
    # INGESTION
    # -------------------------------------------------------------------------
    def on_event(self, event: Event) -> Union[BookUpdateResult, BoxEvaluation, None]:
        if self.is_shutdown:
            return None

        try:
            if isinstance(event, (NewOrder, ModifyOrder, CancelOrder)):
                return self.book.apply(event)

            if isinstance(event, TradeEvent):
                result = self.detector.on_trade(event)
                if result.changed and self.coalescer is not None:
                    self.coalescer.request_update()
                return result

            if isinstance(event, TimeEvent):
                self.detector.on_time(event)
                return None

            self.logger.warning(f"[Monitor {self.name}] Ignored unsupported event {event!r}")
            return None

        except OrderFlowError as e:
            self.error_count += 1
            self.logger.error(f"[Monitor {self.name}] Dropped {type(event).__name__}: {e}")
            return None

    # -------------------------------------------------------------------------
    # REFRESH
    # -------------------------------------------------------------------------
    def _refresh(self) -> None:
        snapshot = self.book.snapshot(self.refresh_depth)
        if self.on_levels is not None:
            self.on_levels(self.name, snapshot)
        else:
            self.logger.debug(
                f"[Monitor {self.name}] best bid={snapshot['bids'].best} "
                f"best ask={snapshot['asks'].best}"
            )

    # -------------------------------------------------------------------------
    # QUERIES
    # -------------------------------------------------------------------------
    def top_levels(self, side: Side, n: int) -> LevelSnapshot:
        return self.book.top_levels(side, n)

    def get_status(self) -> Dict[str, object]:
        return {
            "book": self.book.get_statistics(),
            "detector": self.detector.get_statistics(),
            "errors": self.error_count,
            "refresh": {
                "scheduled": self.coalescer.scheduled_count,
                "executed": self.coalescer.executed_count,
            } if self.coalescer else None,
        }

    # -------------------------------------------------------------------------
    # SHUTDOWN
    # -------------------------------------------------------------------------
    def shutdown(self) -> None:
        if self.is_shutdown:
            return
        self.is_shutdown = True

        erased = self.detector.shutdown()
        if self.coalescer is not None:
            self.coalescer.shutdown(wait=True)
        self.logger.info(f"[Monitor {self.name}] Shut down ({erased} boxes erased)")

    def __repr__(self) -> str:
        return f"InstrumentMonitor({self.name!r}, {self.book!r}, {self.detector!r})"


class OrderFlowMonitor:
    """
    ORCHESTRATOR FLOW:

        1. Load configs (app.yml + instruments.yml)
        2. Create an InstrumentMonitor per enabled instrument
        3. Create the WebSocket event source and subscribe every instrument
        4. Build the HTTP API
        5. start(): open the stream, serve the API
        6. run(): periodic status logging until stopped
    """

    def __init__(self, install_signal_handlers: bool = True):
        load_dotenv()
        self.logger = get_logger(__name__)

        self.app_config: Optional[AppConfig] = None
        self.instruments_config: Optional[InstrumentsConfig] = None

        self.monitors: Dict[str, InstrumentMonitor] = {}
        self.sinks: Dict[str, InMemoryRenderSink] = {}
        self.event_source: Optional[WebSocketEventSource] = None

        self.api_app = None
        self.api_thread: Optional[threading.Thread] = None

        self.is_running = False
        if install_signal_handlers:
            signal.signal(signal.SIGINT, self._signal_handler)
            signal.signal(signal.SIGTERM, self._signal_handler)

    # -------------------------------------------------------------------------
    # SIGNAL HANDLER
    # -------------------------------------------------------------------------
    def _signal_handler(self, signum, frame):
        self.logger.info(f"Received signal {signum}, shutting down...")
        self.stop()
        sys.exit(0)

    # -------------------------------------------------------------------------
    # INITIALIZATION
    # -------------------------------------------------------------------------
    def initialize(
        self,
        app_config: Optional[AppConfig] = None,
        instruments_config: Optional[InstrumentsConfig] = None,
        event_source: Optional[WebSocketEventSource] = None,
    ) -> bool:
        self.logger.info("=" * 80)
        self.logger.info("INITIALIZING ORDER FLOW MONITOR")
        self.logger.info("=" * 80)

        # 1. Configs
        try:
            config_dir = os.getenv("CONFIG_DIR", "config")
            self.app_config = app_config or load_app_config(f"{config_dir}/app.yml")
            self.instruments_config = instruments_config or load_instruments_config(
                f"{config_dir}/instruments.yml"
            )
        except (OrderFlowError, OSError) as e:
            self.logger.error(f"Config error: {e}")
            return False

        enabled = self.instruments_config.enabled()
        if not enabled:
            self.logger.error("No enabled instruments found.")
            return False
        self.logger.info(f"✓ App loaded → {self.app_config.app.name}")
        self.logger.info(f"✓ Instruments loaded: {[i.name for i in enabled]}")

        # 2. Instrument monitors
        for inst in enabled:
            inst_logger = get_instrument_logger(inst.name)
            store = InMemoryRenderSink()
            sink = CompositeRenderSink(store, LoggingRenderSink(inst_logger))

            self.sinks[inst.name] = store
            self.monitors[inst.name] = InstrumentMonitor(
                inst,
                render_sink=sink,
                refresh_depth=self.app_config.book.default_depth,
                refresh_enabled=self.app_config.refresh.enabled,
                logger=inst_logger,
            )
            d = inst.detector
            self.logger.info(
                f"  ✓ {inst.name}: volume_threshold={d.volume_threshold}, "
                f"activation_range={d.activation_range}, direction={d.direction_source}"
            )

        # 3. Event source
        self.event_source = event_source or WebSocketEventSource(self.app_config.stream)
        for name, monitor in self.monitors.items():
            self.event_source.subscribe(name, monitor.on_event)

        # 4. API
        if self.app_config.api.enabled:
            self.api_app = create_api(
                self.monitors, self.app_config.book, status=lambda: self.is_running
            )

        self.logger.info("Initialization COMPLETE ✓")
        return True

    # -------------------------------------------------------------------------
    # HTTP API
    # -------------------------------------------------------------------------
    def _start_api(self):
        host, port = self.app_config.api.host, self.app_config.api.port

        def run_server():
            self.api_app.run(host=host, port=port, debug=False, use_reloader=False)

        self.api_thread = threading.Thread(target=run_server, name="monitor-api", daemon=True)
        self.api_thread.start()
        self.logger.info(f"✓ API running → http://{host}:{port}/health")

    # -------------------------------------------------------------------------
    # START + RUN
    # -------------------------------------------------------------------------
    def start(self) -> bool:
        if not self.event_source:
            self.logger.error("Cannot start monitor — not initialized")
            return False

        self.is_running = True
        self.event_source.start()
        if self.api_app is not None:
            self._start_api()
        self.logger.info("Order flow monitor LIVE")
        return True

    def run(self, status_interval: float = 60.0):
        while self.is_running:
            time.sleep(status_interval)
            self._log_status()

    def _log_status(self):
        self.logger.info("--- MONITOR STATUS ---")
        for name, monitor in self.monitors.items():
            book = monitor.book.get_statistics()
            boxes = monitor.detector.get_statistics()
            self.logger.info(
                f"{name}: orders={book['live_orders']} bids={book['bid_levels']} asks={book['ask_levels']} "
                f"rejected={book['rejected']} boxes pending={boxes['pending']} active={boxes['active']}"
            )

    # -------------------------------------------------------------------------
    # STOP
    # -------------------------------------------------------------------------
    def stop(self):
        if not self.is_running:
            return

        self.is_running = False
        self.logger.info("Stopping order flow monitor...")

        if self.event_source:
            self.event_source.stop()

        for monitor in self.monitors.values():
            monitor.shutdown()

        self.logger.info("✓ Order flow monitor stopped")


# -------------------------------------------------------------------------
# MAIN ENTRY
# -------------------------------------------------------------------------
def main():
    logger = get_logger(__name__)
    monitor = OrderFlowMonitor()

    if not monitor.initialize():
        logger.error("Monitor init failed")
        return 1

    if not monitor.start():
        logger.error("Monitor startup failed")
        return 1

    try:
        monitor.run()
    finally:
        monitor.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
