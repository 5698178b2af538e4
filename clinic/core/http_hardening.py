"""
Per-request HTTP plumbing: request ids, response headers and the access log.

The request id is taken from ``X-Request-ID`` when the caller sends a sane
one, generated otherwise, echoed back on the response and exposed to every
log record emitted while the request is handled (see ``RequestIdLogFilter``).
"""

from __future__ import annotations

import logging
import re
from contextvars import ContextVar
from time import perf_counter
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.responses import Response

from clinic.core.errors import Internal

REQUEST_ID_HEADER = "X-Request-ID"
_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9._-]{1,128}$")
_LOG = logging.getLogger("clinic.http")

request_id_var: ContextVar[str] = ContextVar("clinic_request_id", default="-")

CLINIC_RESPONSE_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=(), payment=(), usb=()",
    # Responses carry patient data and tokens.
    "Cache-Control": "no-store",
    "Pragma": "no-cache",
}


class RequestIdLogFilter(logging.Filter):
    """Stamp ``record.request_id`` so formatters can use ``%(request_id)s``."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = request_id_var.get()
        return True


def resolve_request_id(raw: str | None) -> str:
    candidate = str(raw or "").strip()
    if _REQUEST_ID_RE.fullmatch(candidate):
        return candidate
    return uuid4().hex


def apply_clinic_headers(response: Response, request_id: str) -> None:
    for key, value in CLINIC_RESPONSE_HEADERS.items():
        response.headers[key] = value
    response.headers[REQUEST_ID_HEADER] = request_id


def _caller_role(request: Request) -> str:
    principal = getattr(request.state, "principal", None)
    return getattr(principal, "role", None) or "anonymous"


def install_http_hardening(app: FastAPI) -> None:
    @app.middleware("http")
    async def _clinic_request_middleware(request: Request, call_next):
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        started_at = perf_counter()
        try:
            try:
                response = await call_next(request)
            except Exception as exc:
                # Still inside the request id context.
                _LOG.error("unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
                response = JSONResponse(status_code=500, content={"error": Internal.default_message})
            apply_clinic_headers(response, request_id)
            _LOG.info(
                "%s %s status=%s role=%s duration_ms=%.2f",
                request.method,
                request.url.path,
                response.status_code,
                _caller_role(request),
                (perf_counter() - started_at) * 1000.0,
            )
            return response
        finally:
            request_id_var.reset(token)
