# fusionsolar_exporter/tests/test_metrics.py

from prometheus_client.parser import text_string_to_metric_families

from fusionsolar_exporter.models.collection import CollectionResult
from fusionsolar_exporter.models.device import Device, DeviceKpi, DeviceReading, DeviceTypeTag
from fusionsolar_exporter.models.station import Station, StationKpi
from fusionsolar_exporter.services.metrics import ExporterMetrics


NORTH = Station(code="NE=1", name="North", capacity_kwh=5.0)
DEVICE_100 = {"station_code": "NE=1", "device_id": "100", "device_type_id": "1"}


def _reading(dev_id, temperature, active_power, dev_type=1):
    return DeviceReading(
        station=NORTH,
        device=Device(id=dev_id, type_tag=DeviceTypeTag.from_code(dev_type)),
        kpi=DeviceKpi(device_id=dev_id, temperature=temperature, active_power=active_power),
    )


def _samples(text):
    return {
        (sample.name, tuple(sorted(sample.labels.items()))): sample.value
        for family in text_string_to_metric_families(text)
        for sample in family.samples
    }


def test_gauges_carry_station_and_device_values():
    result = CollectionResult(
        stations=[NORTH],
        station_kpis={"NE=1": StationKpi(station_code="NE=1", day_power_kwh=12.5)},
        readings=[_reading(100, 40.5, 2.053)],
    )

    metrics = ExporterMetrics.from_result(result)

    assert metrics.registry.get_sample_value("day_power", {"station_code": "NE=1"}) == 12.5
    assert metrics.registry.get_sample_value("device_active_power", DEVICE_100) == 2.053
    assert metrics.registry.get_sample_value("device_temperature", DEVICE_100) == 40.5


def test_render_is_parseable_exposition():
    result = CollectionResult(
        stations=[NORTH],
        station_kpis={"NE=1": StationKpi(station_code="NE=1", day_power_kwh=12.5)},
        readings=[_reading(100, 40.5, 2.053)],
    )

    text = ExporterMetrics.from_result(result).render()

    assert "# TYPE day_power gauge" in text
    samples = _samples(text)
    assert samples[("day_power", (("station_code", "NE=1"),))] == 12.5
    assert samples[("device_temperature", tuple(sorted(DEVICE_100.items())))] == 40.5


def test_unset_readings_are_not_exported():
    result = CollectionResult(stations=[NORTH], readings=[_reading(100, None, 1.0)])

    metrics = ExporterMetrics.from_result(result)

    assert metrics.registry.get_sample_value("device_active_power", DEVICE_100) == 1.0
    assert metrics.registry.get_sample_value("device_temperature", DEVICE_100) is None
    assert "device_temperature{" not in metrics.render()


def test_unknown_device_types_are_not_exported():
    metrics = ExporterMetrics.from_result(CollectionResult(readings=[_reading(200, 30.0, 1.0, dev_type=38)]))

    assert 'device_id="200"' not in metrics.render()


def test_each_result_gets_a_fresh_registry():
    first = ExporterMetrics.from_result(CollectionResult(readings=[_reading(100, 1.0, 1.0)]))
    second = ExporterMetrics.from_result(CollectionResult())

    assert 'device_id="100"' in first.render()
    assert 'device_id="100"' not in second.render()
