# fusionsolar_exporter/models/collection.py
from dataclasses import dataclass, field
from typing import Dict, List

from fusionsolar_exporter.models.device import DeviceReading
from fusionsolar_exporter.models.station import Station, StationKpi


@dataclass
class CollectionResult:
    stations: List[Station] = field(default_factory=list)
    station_kpis: Dict[str, StationKpi] = field(default_factory=dict)
    readings: List[DeviceReading] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
