# fusionsolar_exporter/services/output_formatter.py

from __future__ import annotations

import json
from typing import Any, Dict, Mapping

from fusionsolar_exporter.models.device import DeviceTypeTag


def dump_to_dict(dump: Mapping[int, Mapping[str, Any]]) -> Dict[str, Any]:
    payload = {}
    for code in sorted(dump):
        tag = DeviceTypeTag.from_code(code)
        payload[str(code)] = {
            "device_type": tag.kind.name.lower() if tag.kind is not None else None,
            "data_item_map": dict(dump[code]),
        }
    return {"device_types": payload}


def format_dump_json(dump: Mapping[int, Mapping[str, Any]]) -> str:
    return json.dumps(dump_to_dict(dump), indent=2, default=str)


def format_dump_human(dump: Mapping[int, Mapping[str, Any]]) -> str:
    if not dump:
        return "No device telemetry returned."
    lines = []
    for code in sorted(dump):
        tag = DeviceTypeTag.from_code(code)
        kind = tag.kind.name.lower() if tag.kind is not None else "unsupported"
        lines.append(f"[devTypeId {code}] {kind}")
        for key, value in sorted(dump[code].items()):
            lines.append(f"  {key}={value}")
    return "\n".join(lines)


def emit_dump(dump: Mapping[int, Mapping[str, Any]], *, as_json: bool = False) -> None:
    print(format_dump_json(dump) if as_json else format_dump_human(dump))
