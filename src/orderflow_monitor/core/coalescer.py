"""
Update Coalescer - single-flight scheduling of render refreshes.

Ingestion threads call `request_update()` as often as they like; at most one
refresh is ever pending. The pending flag is a non-blocking `threading.Lock`
acquire (an atomic test-and-set), and the scheduled job releases it *before*
running the refresh so that a request arriving mid-refresh schedules a new one.
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Optional

from orderflow_monitor.core.logger import get_logger

Scheduler = Callable[[Callable[[], None]], Any]


class UpdateCoalescer:
    """
    Debounce refresh requests coming from several threads.

    Usage:
        coalescer = UpdateCoalescer(refresh=panel.redraw)
        coalescer.request_update()   # schedules
        coalescer.request_update()   # no-op while the first is pending

    Args:
        refresh: Callable invoked by each scheduled refresh
        schedule: Callable that runs a zero-arg job later (e.g.
            `executor.submit`). Defaults to a private single-worker executor.
        name: Label used in logs and thread names
    """

    def __init__(
        self,
        refresh: Callable[[], None],
        schedule: Optional[Scheduler] = None,
        name: str = "refresh",
    ):
        self.name = name
        self.logger = get_logger(__name__)
        self._refresh = refresh
        self._pending = threading.Lock()
        self._stats_lock = threading.Lock()
        self._executor: Optional[ThreadPoolExecutor] = None

        if schedule is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"coalescer-{name}")
            schedule = self._executor.submit
        self._schedule = schedule

        self.scheduled_count = 0
        self.executed_count = 0
        self.failed_count = 0

    @property
    def pending(self) -> bool:
        return self._pending.locked()

    def request_update(self) -> bool:
        """
        Schedule a refresh unless one is already pending.

        Returns:
            True if this call scheduled a refresh, False if it was coalesced
        """
        if not self._pending.acquire(blocking=False):
            return False

        try:
            self._schedule(self._run)
        except Exception as e:
            # nothing will run, so clear the flag for the next caller
            self._pending.release()
            self.logger.error(f"[Coalescer {self.name}] Failed to schedule refresh: {e}")
            return False

        with self._stats_lock:
            self.scheduled_count += 1
        return True

    def _run(self) -> None:
        # clear first: requests from here on schedule a fresh refresh
        self._pending.release()

        with self._stats_lock:
            self.executed_count += 1

        try:
            self._refresh()
        except Exception:
            with self._stats_lock:
                self.failed_count += 1
            self.logger.exception(f"[Coalescer {self.name}] Refresh callback failed")

    def shutdown(self, wait: bool = True) -> None:
        """Stop the private executor, if this coalescer owns one."""
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None

    def __repr__(self) -> str:
        return (
            f"UpdateCoalescer({self.name!r}, pending={self.pending}, "
            f"scheduled={self.scheduled_count}, executed={self.executed_count})"
        )


__all__ = ["UpdateCoalescer", "Scheduler"]
