# fusionsolar_exporter/models/device.py
from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

from fusionsolar_exporter.models.station import Station


class DeviceKind(IntEnum):
    """Device types with a known real-KPI payload shape."""

    STRING_INVERTER = 1


@dataclass(frozen=True)
class DeviceTypeTag:
    """
    Device type as reported by the API.

    `kind` is None for codes we have no mapping for; the raw `code` is always
    kept so unknown devices can still be listed, dumped and labelled.
    """

    code: int
    kind: Optional[DeviceKind] = None

    @classmethod
    def from_code(cls, code: int) -> "DeviceTypeTag":
        try:
            kind = DeviceKind(code)
        except ValueError:
            kind = None
        return cls(code=code, kind=kind)

    @property
    def is_known(self) -> bool:
        return self.kind is not None

    def __int__(self) -> int:
        return self.code

    def __str__(self) -> str:
        return str(self.code)


@dataclass(frozen=True)
class Device:
    id: int
    type_tag: DeviceTypeTag
    name: str | None = None
    station_code: str | None = None


@dataclass(frozen=True)
class DeviceKpi:
    device_id: int
    temperature: float | None = None
    active_power: float | None = None


@dataclass(frozen=True)
class DeviceReading:
    station: Station
    device: Device
    kpi: DeviceKpi
