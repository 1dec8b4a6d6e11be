# fusionsolar_exporter/tests/test_refresh_gate.py

import threading
import time

import pytest

from fusionsolar_exporter.services.refresh_gate import RefreshGate
from fusionsolar_exporter.logging import get_logger


LOG = get_logger("gate-test")


def test_collects_when_never_collected():
    assert RefreshGate(LOG).should_collect(now=1000.0, interval=300)


def test_skips_within_interval_then_collects_again():
    gate = RefreshGate(LOG)
    gate.touch(1000.0)

    assert not gate.should_collect(now=1010.0, interval=300)
    assert not gate.should_collect(now=1300.0, interval=300)   # strictly greater than interval
    assert gate.should_collect(now=1300.5, interval=300)


def test_clock_moving_backwards_recollects():
    gate = RefreshGate(LOG)
    gate.touch(1000.0)
    assert gate.should_collect(now=900.0, interval=300)


def test_run_if_stale_returns_cached_value_when_fresh():
    gate = RefreshGate(LOG)
    clock = iter([0.0, 0.0, 10.0])
    calls = []

    first = gate.run_if_stale(lambda: next(clock), 300, lambda: calls.append(1) or "fresh", lambda: "cached")
    second = gate.run_if_stale(lambda: next(clock), 300, lambda: calls.append(1) or "fresh", lambda: "cached")

    assert first == "fresh"
    assert second == "cached"
    assert calls == [1]


def test_failed_collection_does_not_touch():
    gate = RefreshGate(LOG)

    def boom():
        raise RuntimeError("collection failed")

    with pytest.raises(RuntimeError):
        gate.run_if_stale(lambda: 0.0, 300, boom, lambda: "cached")

    assert gate.last_collected is None
    assert gate.should_collect(now=1.0, interval=300)


def test_overlapping_requests_collect_once():
    gate = RefreshGate(LOG)
    started = threading.Event()
    collections = []
    results = []

    def slow_collect():
        collections.append(1)
        started.set()
        time.sleep(0.1)
        return "fresh"

    def scrape():
        results.append(gate.run_if_stale(time.monotonic, 300, slow_collect, lambda: "cached"))

    first = threading.Thread(target=scrape)
    first.start()
    started.wait(timeout=5)
    second = threading.Thread(target=scrape)
    second.start()
    first.join(timeout=5)
    second.join(timeout=5)

    assert collections == [1]
    assert sorted(results) == ["cached", "fresh"]
