# fusionsolar_exporter/services/collector.py

from __future__ import annotations

from typing import Any, Dict

from fusionsolar_exporter.errors import FusionSolarError, UnexpectedShape, UnsupportedDeviceType
from fusionsolar_exporter.models.collection import CollectionResult
from fusionsolar_exporter.models.device import DeviceReading
from fusionsolar_exporter.models.session import Session
from fusionsolar_exporter.models.station import Station
from fusionsolar_exporter.services.fs_api_client import FusionSolarAPIClient


class StationWalker:
    """
    Walks stations -> devices -> device KPIs for one session.

    Calls are strictly sequential; the API enforces a request-frequency
    ceiling and answers with failCode 407 when it is exceeded.
    """

    def __init__(self, client: FusionSolarAPIClient, log):
        self.client = client
        self.log = log

    # ------------------------------------------------------------------
    def _skip(self, result: CollectionResult, reason: str) -> None:
        self.log.warning("%s; skipping", reason)
        result.skipped.append(reason)

    def _collect_station_kpi(self, session: Session, station: Station, result: CollectionResult) -> None:
        try:
            kpis = self.client.fetch_station_kpis(session, station)
        except UnexpectedShape as exc:
            self._skip(result, f"Station {station.code}: {exc.detail}")
            return
        kpi = next((k for k in kpis if k.station_code == station.code), None)
        if kpi is None:
            self._skip(result, f"No KPI returned for station {station.code}")
            return
        result.station_kpis[station.code] = kpi

    def _collect_station_devices(self, session: Session, station: Station, result: CollectionResult) -> None:
        devices = self.client.fetch_devices(session, station)
        self.log.debug("Station %s: %d device(s)", station.code, len(devices))

        for device in devices:
            try:
                kpis = self.client.fetch_device_kpis(session, device)
            except (UnsupportedDeviceType, UnexpectedShape) as exc:
                self._skip(result, f"Device {device.id} of station {station.code}: {exc.detail}")
                continue

            kpi = next((k for k in kpis if k.device_id == device.id), None)
            if kpi is None:
                self._skip(result, f"No KPI returned for device {device.id} of station {station.code}")
                continue
            result.readings.append(DeviceReading(station=station, device=device, kpi=kpi))

    # ------------------------------------------------------------------
    def collect(self, session: Session) -> CollectionResult:
        """
        Run the metrics walk. Station/device enumeration errors abort the
        walk; per-item gaps are recorded in `skipped`.
        """
        result = CollectionResult()
        result.stations = self.client.fetch_stations(session)
        self.log.info("Collecting KPIs for %d station(s)", len(result.stations))

        for station in result.stations:
            self._collect_station_kpi(session, station, result)
            self._collect_station_devices(session, station, result)

        self.log.info(
            "Collection walk finished: %d station KPI(s), %d device reading(s), %d skipped",
            len(result.station_kpis),
            len(result.readings),
            len(result.skipped),
        )
        return result

    # ------------------------------------------------------------------
    def dump_devices(self, session: Session) -> Dict[int, Dict[str, Any]]:
        """
        Collect the raw `dataItemMap` of every device keyed by device type
        code. Only listing stations may fail the dump; everything after that
        is logged and skipped.
        """
        stations = self.client.fetch_stations(session)
        dump: Dict[int, Dict[str, Any]] = {}

        for station in stations:
            try:
                devices = self.client.fetch_devices(session, station)
            except FusionSolarError as exc:
                self.log.warning("Cannot list devices of station %s: %s", station.code, exc)
                continue

            for device in devices:
                try:
                    item_map = self.client.fetch_device_data_item_map(session, device)
                except FusionSolarError as exc:
                    self.log.warning(
                        "Cannot read KPI of device %s (type %s): %s",
                        device.id,
                        device.type_tag,
                        exc,
                    )
                    continue
                if item_map is None:
                    self.log.warning(
                        "No dataItemMap returned for device %s (type %s)",
                        device.id,
                        device.type_tag,
                    )
                    continue
                dump[device.type_tag.code] = item_map

        return dump
