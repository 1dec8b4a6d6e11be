# fusionsolar_exporter/services/metrics.py

from __future__ import annotations

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Gauge, generate_latest

from fusionsolar_exporter.models.collection import CollectionResult
from fusionsolar_exporter.models.device import DeviceReading

DEVICE_LABELS = ("station_code", "device_id", "device_type_id")


class ExporterMetrics:
    """Gauges for one collection cycle, kept in a private registry."""

    content_type = CONTENT_TYPE_LATEST

    def __init__(self):
        self.registry = CollectorRegistry(auto_describe=True)
        self.day_power = Gauge(
            "day_power",
            "total amount of power generated in current day (in kWh)",
            ["station_code"],
            registry=self.registry,
        )
        self.device_active_power = Gauge(
            "device_active_power",
            "active power production reported by inverter",
            list(DEVICE_LABELS),
            registry=self.registry,
        )
        self.device_temperature = Gauge(
            "device_temperature",
            "device reported temperature",
            list(DEVICE_LABELS),
            registry=self.registry,
        )

    @classmethod
    def from_result(cls, result: CollectionResult) -> "ExporterMetrics":
        metrics = cls()
        for code, kpi in result.station_kpis.items():
            metrics.day_power.labels(station_code=code).set(kpi.day_power_kwh)
        for reading in result.readings:
            metrics.observe_device(reading)
        return metrics

    def observe_device(self, reading: DeviceReading) -> None:
        if not reading.device.type_tag.is_known:
            return
        labels = (
            reading.station.code,
            str(reading.kpi.device_id),
            str(reading.device.type_tag.code),
        )
        if reading.kpi.active_power is not None:
            self.device_active_power.labels(*labels).set(reading.kpi.active_power)
        if reading.kpi.temperature is not None:
            self.device_temperature.labels(*labels).set(reading.kpi.temperature)

    def render(self) -> str:
        return generate_latest(self.registry).decode("utf-8")
