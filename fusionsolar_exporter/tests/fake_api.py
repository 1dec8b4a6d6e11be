# fusionsolar_exporter/tests/fake_api.py

import json

from fusionsolar_exporter.config import FusionSolarConfig


BASE_URL = "https://fs.test/thirdData"
TOKEN = "tok-123"


def url(endpoint: str) -> str:
    return f"{BASE_URL}{endpoint}"


def ok(data=None, params=None) -> dict:
    return {"success": True, "failCode": 0, "data": data, "params": params, "message": None}


def failed(fail_code: int, data=None, message=None) -> dict:
    return {"success": False, "failCode": fail_code, "data": data, "params": None, "message": message}


def station(code="NE=1", name="Roof", capacity=0.005) -> dict:
    return {"stationCode": code, "stationName": name, "capacity": capacity}


def station_kpi(code="NE=1", day_power=12.5) -> dict:
    return {"stationCode": code, "dataItemMap": {"day_power": day_power, "total_power": 1000.0}}


def device(dev_id=100, dev_type=1, name="INV-A", station_code="NE=1") -> dict:
    return {"id": dev_id, "devTypeId": dev_type, "devName": name, "stationCode": station_code}


def inverter_kpi(dev_id=100, temperature=41.2, active_power=2.053) -> dict:
    return {
        "devId": dev_id,
        "dataItemMap": {
            "temperature": temperature,
            "active_power": active_power,
            "mppt_power": 2.1,
        },
    }


class FakeResponse:
    def __init__(self, status_code=200, payload=None, cookies=None):
        self.status_code = status_code
        if isinstance(payload, str):
            self.text = payload
        else:
            self.text = json.dumps(payload if payload is not None else {})
        self.cookies = dict(cookies or {})


class FakeHTTPSession:
    """
    Stand-in for requests.Session.

    `routes` maps URL -> (status, payload) | FakeResponse | Exception |
    callable(json_body) returning any of those.
    """

    def __init__(self, routes):
        self.routes = routes
        self.calls = []
        self.closed = False

    def post(self, url, json=None, headers=None, timeout=None):
        self.calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        handler = self.routes.get(url, (404, "<html>Not Found</html>"))
        if callable(handler) and not isinstance(handler, FakeResponse):
            handler = handler(json)
        if isinstance(handler, Exception):
            raise handler
        if isinstance(handler, FakeResponse):
            return handler
        status_code, payload = handler
        return FakeResponse(status_code, payload)

    def close(self):
        self.closed = True

    def calls_to(self, endpoint: str) -> list:
        return [c for c in self.calls if c["url"] == url(endpoint)]


def login_ok(token=TOKEN) -> FakeResponse:
    return FakeResponse(200, ok(), cookies={"XSRF-TOKEN": token})


def base_routes() -> dict:
    return {
        url("/login"): login_ok(),
        url("/logout"): (200, ok()),
    }


def fs_config(**overrides) -> FusionSolarConfig:
    cfg = FusionSolarConfig(
        username="user",
        password="secret",
        api_url=BASE_URL,
        timeout=5,
    )
    for key, value in overrides.items():
        setattr(cfg, key, value)
    return cfg
