# fusionsolar_exporter/services/auth.py

from __future__ import annotations

import json
from typing import Callable, Optional

import requests

from fusionsolar_exporter.errors import AuthenticationFailed, FusionSolarError, InternalError
from fusionsolar_exporter.models.session import XSRF_TOKEN, Credentials, Session
from fusionsolar_exporter.services import request_pipeline
from fusionsolar_exporter.services.request_pipeline import LOGIN, LOGOUT, endpoint_url


def _rejection_detail(resp) -> str:
    """Best-effort summary of why a login answered 200 without a token."""
    detail = f"No {XSRF_TOKEN} received (server responded {resp.status_code})"
    try:
        body = json.loads(resp.text)
    except ValueError:
        return detail
    if isinstance(body, dict) and body.get("failCode") is not None:
        message = body.get("message") or body.get("data")
        detail += f"; failCode {body['failCode']}"
        if message:
            detail += f": {message}"
    return detail


def login(
    credentials: Credentials,
    *,
    log,
    timeout: Optional[float] = None,
    http_factory: Callable[[], requests.Session] = requests.Session,
) -> Session:
    try:
        http = http_factory()
    except Exception as exc:
        raise InternalError(f"cannot create HTTP client: {exc}") from exc

    url = endpoint_url(credentials.base_url, LOGIN)
    body = {"userName": credentials.username, "systemCode": credentials.secret}

    try:
        resp = request_pipeline.send(http, url, data=body, timeout=timeout)
        if not 200 <= resp.status_code < 300:
            raise AuthenticationFailed(f"{url} returned HTTP {resp.status_code}")

        # The API can answer 200 and still reject the credentials; the
        # cookie is the only reliable signal.
        token = resp.cookies.get(XSRF_TOKEN)
        if not token:
            raise AuthenticationFailed(_rejection_detail(resp))
    except FusionSolarError:
        http.close()
        raise

    log.info("Logged in to %s as %s", credentials.base_url, credentials.username)
    return Session(base_url=credentials.base_url, token=token, http=http)


def logout(session: Session, *, log, timeout: Optional[float] = None) -> None:
    """Terminate the session server-side and release the HTTP client."""
    try:
        request_pipeline.post(session, LOGOUT, log=log, timeout=timeout)
        log.debug("Logged out of %s", session.base_url)
    finally:
        session.http.close()
