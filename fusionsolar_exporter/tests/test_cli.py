# fusionsolar_exporter/tests/test_cli.py

import json

import pytest

from fusionsolar_exporter import main as main_module
from fusionsolar_exporter.cli import build_parser
from fusionsolar_exporter.errors import RateLimited


class StubService:
    def __init__(self, error=None):
        self.error = error

    def collect_metrics(self):
        if self.error:
            raise self.error
        return 'day_power{station_code="NE=1"} 3.0\n'

    def dump_devices(self):
        return {1: {"active_power": 2.0}}


@pytest.fixture
def env(monkeypatch):
    monkeypatch.setenv("FS_USERNAME", "user")
    monkeypatch.setenv("FS_PASSWORD", "secret")
    monkeypatch.setattr(main_module, "load_dotenv", lambda: False)


def _use_service(monkeypatch, service):
    monkeypatch.setattr(main_module, "build_service", lambda cfg, log: service)


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_serve_accepts_bind_and_port():
    args = build_parser().parse_args(["serve", "--bind", "127.0.0.1", "--port", "9100"])
    assert (args.command, args.bind, args.port) == ("serve", "127.0.0.1", 9100)


def test_collect_prints_metrics(env, monkeypatch, capsys):
    _use_service(monkeypatch, StubService())

    assert main_module.main(["--quiet", "collect"]) == 0
    assert 'day_power{station_code="NE=1"} 3.0' in capsys.readouterr().out


def test_dump_devices_json(env, monkeypatch, capsys):
    _use_service(monkeypatch, StubService())

    assert main_module.main(["--quiet", "--json", "dump-devices"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["device_types"]["1"]["data_item_map"] == {"active_power": 2.0}


def test_collect_failure_exit_code(env, monkeypatch):
    _use_service(monkeypatch, StubService(error=RateLimited("failCode 407")))

    assert main_module.main(["--quiet", "collect"]) == 2
