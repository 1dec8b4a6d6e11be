#!/usr/bin/env python3
"""Quick helper to inspect FusionSolar cloud data with the configured account."""

from dotenv import load_dotenv

from fusionsolar_exporter.config import Config
from fusionsolar_exporter.services.fs_api_client import FusionSolarAPIClient
from fusionsolar_exporter.logging import ConsoleLog


def main() -> None:
    log = ConsoleLog(level="DEBUG").setup()
    load_dotenv()
    cfg = Config.load()
    client = FusionSolarAPIClient(cfg.fusionsolar, log)

    session = client.login()
    try:
        stations = client.fetch_stations(session)
        print("Stations:")
        for station in stations:
            print(f" - {station.code} {station.name} capacity={station.capacity_kwh:.1f}kWh")
            for kpi in client.fetch_station_kpis(session, station):
                print(f"   day_power={kpi.day_power_kwh}kWh")
            for device in client.fetch_devices(session, station):
                known = "known" if device.type_tag.is_known else "unsupported"
                print(f"   device {device.id} {device.name} type={device.type_tag} ({known})")
    finally:
        client.logout(session)


if __name__ == "__main__":
    main()
