"""
HTTP API for health checks and snapshot queries.

Routes:
    GET /health
    GET /levels/<instrument>?side=bid|ask|both&depth=N
    GET /boxes/<instrument>?state=pending|active|removed
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable, Mapping, Optional

from flask import Flask, abort, jsonify, request

from orderflow_monitor.config.app.models import BookSettings
from orderflow_monitor.detector.enums import BoxState
from orderflow_monitor.events import Side

if TYPE_CHECKING:
    from orderflow_monitor.monitor import InstrumentMonitor


def create_api(
    monitors: Mapping[str, "InstrumentMonitor"],
    book_settings: Optional[BookSettings] = None,
    status: Optional[Callable[[], bool]] = None,
) -> Flask:
    """
    Build the Flask app over a live mapping of instrument monitors.

    Args:
        monitors: Instrument name → InstrumentMonitor (read at request time)
        book_settings: Depth defaults and limits for /levels
        status: Returns True while the owning process is running
    """
    app = Flask(__name__)
    book_settings = book_settings or BookSettings()

    def _monitor(instrument: str) -> "InstrumentMonitor":
        monitor = monitors.get(instrument)
        if monitor is None:
            abort(404, description=f"Unknown instrument: {instrument}")
        return monitor

    @app.errorhandler(400)
    @app.errorhandler(404)
    def _error(err):
        return jsonify({"error": err.description}), err.code

    @app.get("/health")
    def health():
        running = status() if status else True
        return jsonify(
            {
                "status": "running" if running else "stopped",
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "instruments": {name: m.get_status() for name, m in monitors.items()},
            }
        )

    @app.get("/levels/<instrument>")
    def levels(instrument: str):
        monitor = _monitor(instrument)

        depth = request.args.get("depth", default=book_settings.default_depth, type=int)
        if depth is None or depth < 1:
            abort(400, description="depth must be a positive integer")
        depth = book_settings.clamp_depth(depth)

        side = request.args.get("side", "both").lower()
        if side == "both":
            snap = monitor.book.snapshot(depth)
            return jsonify(
                {
                    "instrument": instrument,
                    "depth": depth,
                    "bids": snap["bids"].to_list(),
                    "asks": snap["asks"].to_list(),
                }
            )

        if side not in ("bid", "ask"):
            abort(400, description="side must be one of: bid, ask, both")

        snap = monitor.top_levels(Side(side), depth)
        return jsonify({"instrument": instrument, "depth": depth, "side": side, "levels": snap.to_list()})

    @app.get("/boxes/<instrument>")
    def boxes(instrument: str):
        monitor = _monitor(instrument)

        state = request.args.get("state")
        box_state = None
        if state:
            try:
                box_state = BoxState(state.lower())
            except ValueError:
                abort(400, description=f"state must be one of: {[s.value for s in BoxState]}")

        return jsonify(
            {
                "instrument": instrument,
                "boxes": monitor.detector.registry.box_dicts(box_state),
            }
        )

    return app


__all__ = ["create_api"]
