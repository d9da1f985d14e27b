"""Shared fixtures for the orderflow_monitor test suite."""

import os
import sys
import tempfile
from pathlib import Path

# Make the src/ layout importable without an editable install
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

# Keep test runs from writing into the project's logs/ directory
os.environ.setdefault("LOGS_DIR", tempfile.mkdtemp(prefix="orderflow-logs-"))

import pytest

from orderflow_monitor.config.instruments import DetectorSettings, InstrumentConfig
from orderflow_monitor.detector.render import RenderSink
from orderflow_monitor.events import TradeEvent


class ManualScheduler:
    """Collects scheduled jobs so tests decide when they run."""

    def __init__(self):
        self.jobs = []

    def __call__(self, fn):
        self.jobs.append(fn)

    def run_all(self):
        jobs, self.jobs = self.jobs, []
        for job in jobs:
            job()
        return len(jobs)


class RecordingSink(RenderSink):
    """Records every render command as a tuple."""

    def __init__(self):
        self.calls = []

    def add_rectangle(self, box_id, start_time, end_time, low, high, color):
        self.calls.append(("add", box_id, start_time, end_time, low, high, color))

    def extend_rectangle(self, box_id, end_time):
        self.calls.append(("extend", box_id, end_time))

    def remove_rectangle(self, box_id):
        self.calls.append(("remove", box_id))

    def of(self, kind):
        return [c for c in self.calls if c[0] == kind]


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def settings():
    return DetectorSettings(volume_threshold=1000, activation_range=0.5)


@pytest.fixture
def instrument(settings):
    return InstrumentConfig(name="ESZ5", detector=settings)


@pytest.fixture
def trade():
    def _trade(price, volume, time, open_price=None, close_price=None):
        return TradeEvent(price=price, volume=volume, time=time, open_price=open_price, close_price=close_price)
    return _trade
