# fusionsolar_exporter/services/refresh_gate.py

from __future__ import annotations

import threading
from typing import Callable, Optional, TypeVar

T = TypeVar("T")


class RefreshGate:
    """
    Pull-side staleness check for the collection cycle.

    Holds the (monotonic) time of the last successful collection. The lock
    covers check, collection and update, so two overlapping scrapes never
    both decide to collect.
    """

    def __init__(self, log):
        self.log = log
        self.lock = threading.Lock()
        self.last_collected: Optional[float] = None

    def should_collect(self, now: float, interval: float) -> bool:
        if self.last_collected is None:
            return True
        elapsed = now - self.last_collected
        if elapsed < 0:
            # Clock went backwards; re-collect rather than wait for it to catch up.
            return True
        return elapsed > interval

    def touch(self, now: float) -> None:
        self.last_collected = now

    def run_if_stale(
        self,
        now: Callable[[], float],
        interval: float,
        collect: Callable[[], T],
        cached: Callable[[], T],
    ) -> T:
        with self.lock:
            if not self.should_collect(now(), interval):
                self.log.info(
                    "Refresh interval (%ss) not yet elapsed since last collection; returning cached result",
                    interval,
                )
                return cached()
            value = collect()
            self.touch(now())
            return value
