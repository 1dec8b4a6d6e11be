# fusionsolar_exporter/server.py

from __future__ import annotations

from html import escape

from flask import Flask, Response

from fusionsolar_exporter.errors import AuthenticationFailed, FusionSolarError, RateLimited
from fusionsolar_exporter.services.exporter import ExporterService
from fusionsolar_exporter.services.metrics import ExporterMetrics
from fusionsolar_exporter.services.output_formatter import format_dump_json


def _status_for(exc: FusionSolarError) -> tuple[int, str]:
    if isinstance(exc, RateLimited):
        return 429, "429 Too Many Requests"
    if isinstance(exc, AuthenticationFailed):
        return 403, "403 Forbidden"
    return 500, "500 Internal Server Error"


def create_app(service: ExporterService, log) -> Flask:
    app = Flask(__name__)

    @app.errorhandler(FusionSolarError)
    def _handle_fusionsolar_error(exc: FusionSolarError):
        status, title = _status_for(exc)
        log.warning("Request failed with %s: %s", title, exc)
        body = (
            f"<html><body><h3>{title}</h3>"
            f"Downstream API error <code>{escape(exc.kind)}</code>: "
            f"<code>{escape(exc.detail)}</code></body></html>"
        )
        return Response(body, status=status, content_type="text/html; charset=utf-8")

    @app.get("/metrics")
    def metrics():
        return Response(service.render_metrics(), content_type=ExporterMetrics.content_type)

    @app.get("/dump-devices")
    def dump_devices():
        return Response(format_dump_json(service.dump_devices()), content_type="application/json")

    return app
