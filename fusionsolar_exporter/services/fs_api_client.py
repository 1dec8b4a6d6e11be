# fusionsolar_exporter/services/fs_api_client.py

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

import requests

from fusionsolar_exporter.config import FusionSolarConfig
from fusionsolar_exporter.errors import UnsupportedDeviceType
from fusionsolar_exporter.models.device import Device, DeviceKpi
from fusionsolar_exporter.models.session import Session
from fusionsolar_exporter.models.station import Station, StationKpi
from fusionsolar_exporter.services import auth, envelope, request_pipeline
from fusionsolar_exporter.services.request_pipeline import (
    DEVICE_REAL_KPI,
    DEVICES,
    STATION_REAL_KPI,
    STATIONS,
)


class FusionSolarAPIClient:
    """Typed wrappers for the thirdData endpoints this exporter consumes."""

    def __init__(
        self,
        cfg: FusionSolarConfig,
        log,
        http_factory: Optional[Callable[[], requests.Session]] = None,
    ):
        self.cfg = cfg
        self.log = log
        self.http_factory = http_factory or requests.Session
        self.credentials = cfg.credentials()

    # ------------------------------------------------------------------
    def login(self) -> Session:
        return auth.login(
            self.credentials,
            log=self.log,
            timeout=self.cfg.timeout,
            http_factory=self.http_factory,
        )

    def logout(self, session: Session) -> None:
        auth.logout(session, log=self.log, timeout=self.cfg.timeout)

    # ------------------------------------------------------------------
    def _post(self, session: Session, endpoint: str, data: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        return request_pipeline.post(
            session,
            endpoint,
            data,
            log=self.log,
            timeout=self.cfg.timeout,
        )

    @staticmethod
    def _device_query(device: Device) -> Dict[str, str]:
        return {"devIds": str(device.id), "devTypeId": str(device.type_tag.code)}

    # ------------------------------------------------------------------
    def fetch_stations(self, session: Session) -> List[Station]:
        return envelope.decode_stations(self._post(session, STATIONS))

    def fetch_station_kpis(self, session: Session, station: Station) -> List[StationKpi]:
        payload = self._post(session, STATION_REAL_KPI, {"stationCodes": station.code})
        return envelope.decode_station_kpis(payload)

    def fetch_devices(self, session: Session, station: Station) -> List[Device]:
        payload = self._post(session, DEVICES, {"stationCodes": station.code})
        return envelope.decode_devices(payload)

    def fetch_device_kpis(self, session: Session, device: Device) -> List[DeviceKpi]:
        # No point spending a rate-limited call on a shape we cannot decode.
        if not device.type_tag.is_known:
            raise UnsupportedDeviceType(device.type_tag.code)
        payload = self._post(session, DEVICE_REAL_KPI, self._device_query(device))
        return envelope.decode_device_kpis(payload)

    def fetch_device_data_item_map(self, session: Session, device: Device) -> Optional[Dict[str, Any]]:
        """Raw telemetry fragment for any device type, including unknown ones."""
        payload = self._post(session, DEVICE_REAL_KPI, self._device_query(device))
        return envelope.decode_data_item_map(payload)
