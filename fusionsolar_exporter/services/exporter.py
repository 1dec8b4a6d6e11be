# fusionsolar_exporter/services/exporter.py

from __future__ import annotations

import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterator

from fusionsolar_exporter.config import AppConfig
from fusionsolar_exporter.errors import FusionSolarError
from fusionsolar_exporter.logging import CollectionLogEntry, StructuredLog
from fusionsolar_exporter.models.collection import CollectionResult
from fusionsolar_exporter.models.session import Session
from fusionsolar_exporter.services.collector import StationWalker
from fusionsolar_exporter.services.fs_api_client import FusionSolarAPIClient
from fusionsolar_exporter.services.metrics import ExporterMetrics
from fusionsolar_exporter.services.refresh_gate import RefreshGate


class ExporterService:
    """
    Owns the collection cycle (login -> walk -> logout), the refresh gate
    and the last rendered metrics snapshot.
    """

    def __init__(
        self,
        cfg: AppConfig,
        client: FusionSolarAPIClient,
        log,
        *,
        structured_log: StructuredLog | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.cfg = cfg
        self.client = client
        self.log = log
        self.structured_log = structured_log
        self.clock = clock
        self.walker = StationWalker(client, log)
        self.gate = RefreshGate(log)
        self._snapshot: str = ""

    # ------------------------------------------------------------------
    @contextmanager
    def _session(self) -> Iterator[Session]:
        session = self.client.login()
        try:
            yield session
        finally:
            try:
                self.client.logout(session)
            except FusionSolarError as exc:
                self.log.warning("Logout failed (ignored): %s", exc)

    def _record(self, trigger: str, started: float, **fields: Any) -> None:
        if self.structured_log is None or not self.structured_log.enabled:
            return
        self.structured_log.write(
            CollectionLogEntry(
                timestamp=datetime.now(timezone.utc).isoformat(),
                trigger=trigger,
                duration_s=round(time.monotonic() - started, 3),
                **fields,
            )
        )

    # ------------------------------------------------------------------
    def run_collection_cycle(self, trigger: str = "collect") -> CollectionResult:
        started = time.monotonic()
        try:
            with self._session() as session:
                result = self.walker.collect(session)
        except FusionSolarError as exc:
            self.log.error("Collection cycle aborted: %s", exc)
            self._record(
                trigger,
                started,
                outcome="error",
                error_kind=exc.kind,
                error_detail=exc.detail,
            )
            raise

        self._record(
            trigger,
            started,
            outcome="ok",
            stations=len(result.stations),
            station_kpis=len(result.station_kpis),
            device_readings=len(result.readings),
            skipped=list(result.skipped) or None,
        )
        return result

    def collect_metrics(self, trigger: str = "collect") -> str:
        """Run one cycle regardless of the gate and store the rendered text."""
        result = self.run_collection_cycle(trigger)
        self._snapshot = ExporterMetrics.from_result(result).render()
        return self._snapshot

    def render_metrics(self) -> str:
        """Metrics text for a scrape; re-collects only when the interval elapsed."""
        return self.gate.run_if_stale(
            self.clock,
            self.cfg.exporter.interval,
            lambda: self.collect_metrics("metrics"),
            lambda: self._snapshot,
        )

    # ------------------------------------------------------------------
    def dump_devices(self) -> Dict[int, Dict[str, Any]]:
        started = time.monotonic()
        try:
            with self._session() as session:
                dump = self.walker.dump_devices(session)
        except FusionSolarError as exc:
            self.log.error("Device dump aborted: %s", exc)
            self._record(
                "dump-devices",
                started,
                outcome="error",
                error_kind=exc.kind,
                error_detail=exc.detail,
            )
            raise

        self._record(
            "dump-devices",
            started,
            outcome="ok",
            device_types=sorted(dump),
        )
        return dump
