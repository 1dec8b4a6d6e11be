# fusionsolar_exporter/services/envelope.py

from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Optional

from fusionsolar_exporter.errors import (
    ApiRejected,
    MalformedResponse,
    RateLimited,
    UnexpectedShape,
    UnsupportedDeviceType,
)
from fusionsolar_exporter.models.device import Device, DeviceKind, DeviceKpi, DeviceTypeTag
from fusionsolar_exporter.models.station import Station, StationKpi


# failCode -> exception for codes that need distinct handling; the rest are ApiRejected.
# {"data":"ACCESS_FREQUENCY_IS_TOO_HIGH","failCode":407,"params":null,"success":false}
FAIL_CODES: Dict[int, type] = {
    407: RateLimited,
}

MWH_TO_KWH = 1000.0


# ----------------------------------------------------------------------
# Stage 1 + 2: raw text -> successful envelope
# ----------------------------------------------------------------------
def parse_envelope(text: str) -> Dict[str, Any]:
    """Decode a response body and raise if the envelope reports failure."""
    try:
        value = json.loads(text)
    except ValueError as exc:
        raise MalformedResponse(str(exc), text) from exc

    if not isinstance(value, dict):
        raise MalformedResponse(
            f"expected JSON object, got {type(value).__name__}", text
        )

    if value.get("success") is True:
        return value

    fail_code = _as_int(value.get("failCode"))
    message = value.get("message")
    if message is None and isinstance(value.get("data"), str):
        message = value["data"]

    exc_type = FAIL_CODES.get(fail_code)
    if exc_type is not None:
        raise exc_type(f"failCode {fail_code}: {message or json.dumps(value)}")
    raise ApiRejected(fail_code, message)


# ----------------------------------------------------------------------
# Field helpers
# ----------------------------------------------------------------------
def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _data_list(envelope: Dict[str, Any], endpoint: str) -> List[Dict[str, Any]]:
    data = envelope.get("data")
    if not isinstance(data, list):
        raise UnexpectedShape(f"{endpoint}: 'data' is not a list")
    for entry in data:
        if not isinstance(entry, dict):
            raise UnexpectedShape(f"{endpoint}: 'data' entry is not an object")
    return data


def _require(entry: Dict[str, Any], key: str, endpoint: str) -> Any:
    if entry.get(key) is None:
        raise UnexpectedShape(f"{endpoint}: record missing '{key}'")
    return entry[key]


def _require_float(entry: Dict[str, Any], key: str, endpoint: str) -> float:
    value = _as_float(_require(entry, key, endpoint))
    if value is None:
        raise UnexpectedShape(f"{endpoint}: '{key}' is not numeric")
    return value


def _require_int(entry: Dict[str, Any], key: str, endpoint: str) -> int:
    value = _as_int(_require(entry, key, endpoint))
    if value is None:
        raise UnexpectedShape(f"{endpoint}: '{key}' is not an integer")
    return value


def _data_item_map(entry: Dict[str, Any], endpoint: str) -> Dict[str, Any]:
    item_map = entry.get("dataItemMap")
    if not isinstance(item_map, dict):
        raise UnexpectedShape(f"{endpoint}: record missing 'dataItemMap'")
    return item_map


# ----------------------------------------------------------------------
# Endpoint decoders
# ----------------------------------------------------------------------
def decode_stations(envelope: Dict[str, Any]) -> List[Station]:
    stations: List[Station] = []
    for entry in _data_list(envelope, "getStationList"):
        capacity_mwh = _require_float(entry, "capacity", "getStationList")
        stations.append(
            Station(
                code=str(_require(entry, "stationCode", "getStationList")),
                name=str(entry.get("stationName") or ""),
                capacity_kwh=capacity_mwh * MWH_TO_KWH,
            )
        )
    return stations


def decode_station_kpis(envelope: Dict[str, Any]) -> List[StationKpi]:
    kpis: List[StationKpi] = []
    for entry in _data_list(envelope, "getStationRealKpi"):
        item_map = _data_item_map(entry, "getStationRealKpi")
        kpis.append(
            StationKpi(
                station_code=str(_require(entry, "stationCode", "getStationRealKpi")),
                day_power_kwh=_require_float(item_map, "day_power", "getStationRealKpi"),
            )
        )
    return kpis


def decode_devices(envelope: Dict[str, Any]) -> List[Device]:
    devices: List[Device] = []
    for entry in _data_list(envelope, "getDevList"):
        devices.append(
            Device(
                id=_require_int(entry, "id", "getDevList"),
                type_tag=DeviceTypeTag.from_code(_require_int(entry, "devTypeId", "getDevList")),
                name=entry.get("devName"),
                station_code=entry.get("stationCode"),
            )
        )
    return devices


def _decode_string_inverter(entry: Dict[str, Any]) -> DeviceKpi:
    item_map = _data_item_map(entry, "getDevRealKpi")
    return DeviceKpi(
        device_id=_require_int(entry, "devId", "getDevRealKpi"),
        temperature=_as_float(item_map.get("temperature")),
        active_power=_as_float(item_map.get("active_power")),
    )


# One decoder per known device kind. Adding a device type: add a DeviceKind
# member and an entry here.
DEVICE_KPI_DECODERS: Dict[DeviceKind, Callable[[Dict[str, Any]], DeviceKpi]] = {
    DeviceKind.STRING_INVERTER: _decode_string_inverter,
}


def device_type_of(envelope: Dict[str, Any]) -> DeviceTypeTag:
    """Return the tag at `params.devTypeId` that selects the `data` shape."""
    params = envelope.get("params")
    raw = params.get("devTypeId") if isinstance(params, dict) else None
    code = _as_int(raw)
    if code is None:
        raise UnexpectedShape("getDevRealKpi: missing 'params.devTypeId'")
    return DeviceTypeTag.from_code(code)


def decode_device_kpis(envelope: Dict[str, Any]) -> List[DeviceKpi]:
    tag = device_type_of(envelope)
    decoder = DEVICE_KPI_DECODERS.get(tag.kind) if tag.kind is not None else None
    if decoder is None:
        raise UnsupportedDeviceType(tag.code)
    return [decoder(entry) for entry in _data_list(envelope, "getDevRealKpi")]


def decode_data_item_map(envelope: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Raw `data[0].dataItemMap` (any device type) or None when absent."""
    data = envelope.get("data")
    if not isinstance(data, list) or not data or not isinstance(data[0], dict):
        return None
    item_map = data[0].get("dataItemMap")
    return item_map if isinstance(item_map, dict) else None
