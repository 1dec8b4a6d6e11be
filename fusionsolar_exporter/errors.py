# fusionsolar_exporter/errors.py
from __future__ import annotations

from typing import Optional


class FusionSolarError(Exception):
    """Base class for every failure raised while talking to FusionSolar."""

    kind = "error"

    def __init__(self, detail: str = ""):
        super().__init__(detail)
        self.detail = detail

    def __str__(self) -> str:
        return f"{self.kind}: {self.detail}" if self.detail else self.kind


class AuthenticationFailed(FusionSolarError):
    kind = "authentication_failed"


class RateLimited(FusionSolarError):
    """Remote API asked us to slow down (failCode 407 or HTTP 429)."""

    kind = "rate_limited"


class ApiRejected(FusionSolarError):
    kind = "api_rejected"

    def __init__(self, fail_code: Optional[int], message: str | None = None):
        self.fail_code = fail_code
        self.message = message
        text = message or "(no error message received)"
        super().__init__(f"failCode {fail_code}: {text}" if fail_code is not None else text)


class MalformedResponse(FusionSolarError):
    """Body was not a JSON object; the raw text is kept for diagnosis."""

    kind = "malformed_response"

    def __init__(self, parse_error: str, raw_text: str):
        self.parse_error = parse_error
        self.raw_text = raw_text
        preview = raw_text if len(raw_text) <= 200 else raw_text[:200] + "..."
        super().__init__(f"{parse_error}; body={preview!r}")


class UnexpectedShape(FusionSolarError):
    kind = "unexpected_shape"


class UnsupportedDeviceType(FusionSolarError):
    """No payload mapping for this device type; skip the device, not the batch."""

    kind = "unsupported_device_type"

    def __init__(self, code: int):
        self.code = code
        super().__init__(f"device type {code} has no KPI decoder")


class TransportError(FusionSolarError):
    kind = "transport"


class InternalError(FusionSolarError):
    kind = "internal"
