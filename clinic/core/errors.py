"""
Error hierarchy and FastAPI exception handlers.

Every typed error renders as ``{"error": message}`` with its status code.
Request body validation failures are reported the same way with status 400.
Anything else becomes a generic 500; the detail stays in the server log.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

_LOG = logging.getLogger("clinic.errors")


class ClinicError(Exception):
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.message}


class ValidationError(ClinicError):
    status_code = 400
    default_message = "Required fields are missing"


class OtpNotFound(ClinicError):
    status_code = 400
    default_message = "No OTP found. Please request a new one."


class OtpExpired(ClinicError):
    status_code = 400
    default_message = "OTP has expired. Please request a new one."


class OtpMismatch(ClinicError):
    status_code = 400
    default_message = "Invalid OTP. Please try again."


class EmailNotVerified(ClinicError):
    status_code = 400
    default_message = "Please verify your email first"


class VerificationExpired(ClinicError):
    status_code = 400
    default_message = "Email verification expired. Please verify again."


class Conflict(ClinicError):
    status_code = 400
    default_message = "Record already exists"


class InvalidCredentials(ClinicError):
    status_code = 401
    default_message = "Invalid email or password"


class Unauthorized(ClinicError):
    status_code = 401
    default_message = "Authentication required. Please login first."


class Forbidden(ClinicError):
    status_code = 403
    default_message = "Invalid or expired token. Please login again."


class NotFound(ClinicError):
    status_code = 404
    default_message = "Not found"


class Internal(ClinicError):
    status_code = 500
    default_message = "Internal server error"


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return ValidationError.default_message
    first = errors[0]
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    field = ".".join(loc)
    if first.get("type") == "missing":
        return f"Field '{field}' is required" if field else ValidationError.default_message
    msg = str(first.get("msg") or "Invalid value")
    return f"{field}: {msg}" if field else msg


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ClinicError)
    async def _clinic_error_handler(request: Request, exc: ClinicError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": _validation_message(exc)})

    @app.exception_handler(Exception)
    async def _unhandled_handler(request: Request, exc: Exception) -> JSONResponse:
        _LOG.error("unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"error": Internal.default_message})
