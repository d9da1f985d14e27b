"""Tests for InstrumentMonitor, OrderFlowMonitor, the HTTP API and the websocket source."""

import json

import pytest

from orderflow_monitor.api import create_api
from orderflow_monitor.book import BookUpdateResult
from orderflow_monitor.config.app import AppConfig
from orderflow_monitor.config.instruments import InstrumentConfig, InstrumentsConfig
from orderflow_monitor.config.app.models import BookSettings, StreamSettings
from orderflow_monitor.detector import InMemoryRenderSink
from orderflow_monitor.events import CancelOrder, NewOrder, Side, TimeEvent, TradeEvent
from orderflow_monitor.monitor import InstrumentMonitor, OrderFlowMonitor
from orderflow_monitor.streams import WebSocketEventSource

APP_CONFIG = {
    "app": {"name": "test-monitor"},
    "stream": {"ws_endpoint": "ws://localhost:9000/feed"},
    "api": {"enabled": True, "port": 18080},
    "book": {"default_depth": 2, "max_depth": 3},
}


@pytest.fixture
def monitor(instrument, scheduler):
    snapshots = []
    m = InstrumentMonitor(
        instrument,
        render_sink=InMemoryRenderSink(),
        on_levels=lambda name, snap: snapshots.append((name, snap)),
        refresh_depth=5,
        schedule=scheduler,
    )
    m.snapshots = snapshots
    yield m
    m.shutdown()


def feed_box(monitor):
    """Create and activate one box on the monitor's detector."""
    monitor.on_event(TradeEvent(price=100.0, volume=600, time=1))
    monitor.on_event(TradeEvent(price=101.0, volume=500, time=2))
    monitor.on_event(TradeEvent(price=101.5, volume=1, time=3))


# =============================================================================
# InstrumentMonitor
# =============================================================================

class TestInstrumentMonitor:
    def test_order_events_reach_the_book(self, monitor):
        result = monitor.on_event(NewOrder("A", Side.BID, 100, 5))

        assert isinstance(result, BookUpdateResult)
        assert result.accepted
        assert list(monitor.top_levels(Side.BID, 5)) == [(100, 5)]

    def test_refresh_is_coalesced_and_delivers_snapshot(self, monitor, scheduler):
        monitor.on_event(NewOrder("A", Side.BID, 100, 5))
        monitor.on_event(NewOrder("B", Side.ASK, 102, 1))
        monitor.on_event(NewOrder("C", Side.ASK, 103, 1))

        assert scheduler.run_all() == 1
        name, snap = monitor.snapshots[0]
        assert name == "ESZ5"
        assert list(snap["bids"]) == [(100, 5)]
        assert list(snap["asks"]) == [(102, 1), (103, 1)]

    def test_rejected_event_is_dropped(self, monitor):
        result = monitor.on_event(CancelOrder("missing"))

        assert not result.accepted
        assert monitor.book.rejected_count == 1

    def test_trades_drive_the_detector(self, monitor, scheduler):
        feed_box(monitor)

        assert len(monitor.detector.registry.active()) == 1
        assert 1 in monitor.render_sink
        # box changes request a refresh too
        assert len(scheduler.jobs) == 1

    def test_time_event_is_accepted(self, monitor):
        assert monitor.on_event(TimeEvent(99)) is None
        assert monitor.detector.last_time == 99

    def test_events_after_shutdown_are_ignored(self, monitor):
        feed_box(monitor)
        monitor.shutdown()

        assert len(monitor.render_sink) == 0
        assert monitor.on_event(NewOrder("A", Side.BID, 100, 5)) is None
        assert monitor.book.live_orders() == 0

    def test_status(self, monitor):
        monitor.on_event(NewOrder("A", Side.BID, 100, 5))
        status = monitor.get_status()

        assert status["book"]["live_orders"] == 1
        assert status["refresh"]["scheduled"] == 1
        assert status["detector"]["trades"] == 0

    def test_refresh_can_be_disabled(self, instrument):
        m = InstrumentMonitor(instrument, render_sink=InMemoryRenderSink(), refresh_enabled=False)
        m.on_event(NewOrder("A", Side.BID, 100, 5))

        assert m.coalescer is None
        assert m.get_status()["refresh"] is None
        m.shutdown()


# =============================================================================
# HTTP API
# =============================================================================

class TestApi:
    @pytest.fixture
    def client(self, monitor):
        monitor.on_event(NewOrder("A", Side.BID, 100, 5))
        monitor.on_event(NewOrder("B", Side.BID, 99, 3))
        monitor.on_event(NewOrder("C", Side.ASK, 101, 2))
        app = create_api({"ESZ5": monitor}, BookSettings(default_depth=1, max_depth=2))
        return app.test_client()

    def test_health(self, client):
        body = client.get("/health").get_json()

        assert body["status"] == "running"
        assert body["instruments"]["ESZ5"]["book"]["live_orders"] == 3

    def test_levels_both_sides_default_depth(self, client):
        body = client.get("/levels/ESZ5").get_json()

        assert body["depth"] == 1
        assert body["bids"] == [{"price": 100, "size": 5}]
        assert body["asks"] == [{"price": 101, "size": 2}]

    def test_levels_single_side_clamped_depth(self, client):
        body = client.get("/levels/ESZ5?side=bid&depth=50").get_json()

        assert body["depth"] == 2
        assert body["levels"] == [{"price": 100, "size": 5}, {"price": 99, "size": 3}]

    def test_levels_bad_side(self, client):
        resp = client.get("/levels/ESZ5?side=middle")

        assert resp.status_code == 400
        assert "side" in resp.get_json()["error"]

    def test_levels_bad_depth(self, client):
        assert client.get("/levels/ESZ5?depth=0").status_code == 400

    def test_unknown_instrument(self, client):
        resp = client.get("/levels/CLZ5")

        assert resp.status_code == 404
        assert "CLZ5" in resp.get_json()["error"]

    def test_boxes(self, monitor, client):
        feed_box(monitor)

        body = client.get("/boxes/ESZ5").get_json()
        assert [b["state"] for b in body["boxes"]] == ["active"]

        assert client.get("/boxes/ESZ5?state=pending").get_json()["boxes"] == []
        assert client.get("/boxes/ESZ5?state=bogus").status_code == 400


# =============================================================================
# WebSocketEventSource (no network)
# =============================================================================

class TestWebSocketEventSource:
    @pytest.fixture
    def source(self):
        return WebSocketEventSource(StreamSettings(ws_endpoint="ws://localhost:9000/feed"))

    def test_decode_single_envelope(self, source):
        decoded = source.decode({"instrument": "ESZ5", "event": {"type": "cancel", "id": "A"}})

        assert decoded == [("ESZ5", CancelOrder("A"))]

    def test_decode_batch_drops_bad_entries(self, source):
        decoded = source.decode({
            "batch": [
                {"instrument": "ESZ5", "event": {"type": "time", "time": 1}},
                {"instrument": "ESZ5", "event": {"type": "bogus"}},
                {"event": {"type": "time", "time": 2}},
            ]
        })

        assert decoded == [("ESZ5", TimeEvent(1))]
        assert source.dropped_count == 2

    def test_on_message_routes_to_subscriber(self, source):
        received = []
        source.subscribe("ESZ5", received.append)

        frame = {"instrument": "ESZ5", "event": {"type": "new", "id": "A", "side": "ask", "price": 5, "size": 1}}
        source._on_message(None, json.dumps(frame))
        source._on_message(None, "not json")

        assert received == [NewOrder("A", Side.ASK, 5, 1)]
        assert source.received_count == 1
        assert source.dropped_count == 1

    def test_dispatch_without_subscriber(self, source):
        assert source.dispatch("NQZ5", TimeEvent(1)) is False
        assert source.dropped_count == 1

    def test_callback_errors_do_not_escape(self, source):
        def broken(event):
            raise RuntimeError("boom")

        source.subscribe("ESZ5", broken)

        assert source.dispatch("ESZ5", TimeEvent(1)) is False

    def test_start_without_subscriptions_does_nothing(self, source):
        source.start()

        assert not source.is_running
        assert source.ws is None


# =============================================================================
# OrderFlowMonitor wiring
# =============================================================================

class TestOrderFlowMonitor:
    def make(self, instruments):
        monitor = OrderFlowMonitor(install_signal_handlers=False)
        source = WebSocketEventSource(StreamSettings(ws_endpoint="ws://localhost:9000/feed"))
        ok = monitor.initialize(
            app_config=AppConfig.from_dict(APP_CONFIG),
            instruments_config=InstrumentsConfig(instruments=instruments),
            event_source=source,
        )
        return monitor, source, ok

    def test_initialize_wires_enabled_instruments(self, settings):
        monitor, source, ok = self.make([
            InstrumentConfig(name="ESZ5", detector=settings),
            InstrumentConfig(name="NQZ5", enabled=False),
        ])

        assert ok
        assert list(monitor.monitors) == ["ESZ5"]
        assert source.subscriptions == ["ESZ5"]
        assert monitor.api_app is not None

        frame = {"instrument": "ESZ5", "event": {"type": "new", "id": "A", "side": "bid", "price": 5, "size": 2}}
        source._on_message(None, json.dumps(frame))
        assert list(monitor.monitors["ESZ5"].top_levels(Side.BID, 1)) == [(5, 2)]

        for m in monitor.monitors.values():
            m.shutdown()

    def test_initialize_fails_without_enabled_instruments(self):
        _, _, ok = self.make([InstrumentConfig(name="NQZ5", enabled=False)])

        assert not ok

    def test_stop_before_start_is_noop(self, settings):
        monitor, _, ok = self.make([InstrumentConfig(name="ESZ5", detector=settings)])

        monitor.stop()

        assert ok
        assert not monitor.is_running
        for m in monitor.monitors.values():
            m.shutdown()
