# fusionsolar_exporter/models/station.py
from dataclasses import dataclass


@dataclass(frozen=True)
class Station:
    code: str
    name: str
    capacity_kwh: float   # API reports MWh; converted on decode


@dataclass(frozen=True)
class StationKpi:
    station_code: str
    day_power_kwh: float
