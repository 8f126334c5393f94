"""
Fel-taxonomi och den enda översättningen från fel till HTTP-svar.

Alla handlers och adapters kastar AppError-subklasser; main.py installerar
handlers som gör om dem till {"error": ...} med rätt statuskod.
"""
from enum import Enum
from typing import Any, Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

log = structlog.get_logger()


class ErrorKind(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    VALIDATION = "validation"
    NOT_CONFIGURED = "not_configured"
    STORAGE_WRITE = "storage_write"
    METADATA_WRITE = "metadata_write"
    UPSTREAM_PROVIDER = "upstream_provider"


STATUS_CODES = {
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_CONFIGURED: 400,
    ErrorKind.STORAGE_WRITE: 500,
    ErrorKind.METADATA_WRITE: 500,
    ErrorKind.UPSTREAM_PROVIDER: 502,
}


class AppError(Exception):
    kind: ErrorKind

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.kind]

    def to_body(self) -> dict:
        body = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class Unauthenticated(AppError):
    kind = ErrorKind.UNAUTHENTICATED


class ValidationError(AppError):
    kind = ErrorKind.VALIDATION


class ProviderNotConfigured(AppError):
    kind = ErrorKind.NOT_CONFIGURED


class StorageWriteError(AppError):
    kind = ErrorKind.STORAGE_WRITE


class MetadataWriteError(AppError):
    kind = ErrorKind.METADATA_WRITE


class UpstreamProviderError(AppError):
    kind = ErrorKind.UPSTREAM_PROVIDER


# ── Boundary translator ────────────────────────────────────────────────────

async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    log.warning(
        "request_failed",
        path=request.url.path,
        kind=exc.kind.value,
        status=exc.status_code,
        error=exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"{where}: {first.get('msg')}" if where else str(first.get("msg", "Invalid request"))
    log.warning("request_invalid", path=request.url.path, error=message)
    return JSONResponse(status_code=400, content={"error": message})


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    log.error("request_crashed", path=request.url.path, error=str(exc), exc_info=exc)
    return JSONResponse(status_code=500, content={"error": str(exc)})


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, _app_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
