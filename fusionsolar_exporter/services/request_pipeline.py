# fusionsolar_exporter/services/request_pipeline.py

from __future__ import annotations

from typing import Any, Dict, Optional

import requests

from fusionsolar_exporter.errors import (
    ApiRejected,
    AuthenticationFailed,
    InternalError,
    RateLimited,
    TransportError,
)
from fusionsolar_exporter.models.session import Session
from fusionsolar_exporter.services.envelope import parse_envelope


LOGIN = "/login"
LOGOUT = "/logout"
STATIONS = "/getStationList"
STATION_REAL_KPI = "/getStationRealKpi"
DEVICES = "/getDevList"
DEVICE_REAL_KPI = "/getDevRealKpi"

# Raised before a request leaves the process: bad URL or un-encodable body.
_CLIENT_SIDE_ERRORS = (
    requests.exceptions.InvalidURL,
    requests.exceptions.MissingSchema,
    requests.exceptions.InvalidSchema,
    requests.exceptions.InvalidHeader,
    requests.exceptions.InvalidJSONError,
)


def endpoint_url(base_url: str, endpoint: str) -> str:
    if not endpoint.startswith("/"):
        endpoint = "/" + endpoint
    return f"{base_url.rstrip('/')}{endpoint}"


def send(
    http,
    url: str,
    *,
    data: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    timeout: Optional[float] = None,
):
    """POST `data` as JSON and map requests failures onto the error taxonomy."""
    try:
        return http.post(url, json=data, headers=headers, timeout=timeout)
    except _CLIENT_SIDE_ERRORS as exc:
        raise InternalError(f"cannot build request for {url}: {exc}") from exc
    except (TypeError, ValueError) as exc:
        raise InternalError(f"cannot encode request body for {url}: {exc}") from exc
    except requests.exceptions.RequestException as exc:
        raise TransportError(f"request to {url} failed: {exc}") from exc


def raise_for_http_status(resp, url: str) -> None:
    status = resp.status_code
    if 200 <= status < 300:
        return
    if status == 429:
        raise RateLimited(f"{url} returned HTTP 429")
    if status in (401, 403):
        raise AuthenticationFailed(f"{url} returned HTTP {status}")
    raise ApiRejected(None, f"HTTP {status} from {url}")


def post(
    session: Session,
    endpoint: str,
    data: Optional[Dict[str, Any]] = None,
    *,
    log,
    timeout: Optional[float] = None,
) -> Dict[str, Any]:
    """
    Send one authenticated call and return its successful envelope.

    All authenticated traffic goes through here: the session token is
    attached as a header, transport/HTTP failures are classified, and the
    body is decoded with `parse_envelope`.
    """
    url = endpoint_url(session.base_url, endpoint)
    resp = send(
        session.http,
        url,
        data=data,
        headers=session.auth_headers(),
        timeout=timeout,
    )
    raise_for_http_status(resp, url)

    text = resp.text
    log.debug("POST %s data=%s -> HTTP %s (%d bytes)", endpoint, data, resp.status_code, len(text))
    return parse_envelope(text)
