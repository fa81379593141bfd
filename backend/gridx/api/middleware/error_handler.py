# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GridX — Error Taxonomy + Global Error Handler
Every failure the service can report is a GridXError subclass carrying its
HTTP status. All of them are converted into a JSON body of the form
{"error": message, "code": CODE, "details"?: ...} at the request boundary.
`details` is only included outside production.
Registered on the FastAPI app in main.py.
"""

from __future__ import annotations

import traceback
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from gridx.config import get_settings
from gridx.utils.logger import get_logger

log = get_logger(__name__)


# ─── Taxonomy ────────────────────────────────────────────────────────────────

class GridXError(Exception):
    """Base class for all errors surfaced to API clients."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_SERVER_ERROR"

    def __init__(
        self,
        message: str,
        *,
        details: Any = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code


class InvalidInputError(GridXError):
    """Bad grid, bad form field or bad upload. Client fixable."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "INVALID_INPUT"


class ImageValidationError(InvalidInputError):
    """Raised when an uploaded image fails MIME, size or decode validation."""

    code = "IMAGE_VALIDATION_ERROR"


class ResourceTooSmallError(GridXError):
    """The image is too small for the requested grid."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "RESOURCE_TOO_SMALL"


class UpstreamAuthError(GridXError):
    """Session token missing, or rejected by the provider (401 / 403)."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UPSTREAM_AUTH_ERROR"


class UpstreamRateLimitError(GridXError):
    """Provider rate limit hit. Never retried."""

    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    code = "UPSTREAM_RATE_LIMITED"


class ProcessingError(GridXError):
    """Image codec failure while cropping or encoding."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "PROCESSING_ERROR"


class UpstreamUnavailableError(GridXError):
    """Provider call failed for any reason other than auth or rate limiting."""

    status_code = status.HTTP_502_BAD_GATEWAY
    code = "UPSTREAM_UNAVAILABLE"


# ─── Response Rendering ──────────────────────────────────────────────────────

def _error_body(code: str, message: str, details: Any = None) -> dict:
    body: dict[str, Any] = {"error": message, "code": code}
    if details is not None and get_settings().expose_error_details:
        body["details"] = details
    return body


def error_response(exc: GridXError) -> JSONResponse:
    """Render a GridXError as its JSON response. Also used by route handlers."""
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.code, exc.message, exc.details),
    )


def register_error_handlers(app: FastAPI) -> None:
    """
    Register all global exception handlers on the FastAPI application.
    Call this in main.py after creating the app instance.
    """

    @app.exception_handler(GridXError)
    async def gridx_error_handler(req: Request, exc: GridXError) -> JSONResponse:
        if exc.status_code >= 500:
            log.error(
                "request_failed",
                path=str(req.url),
                code=exc.code,
                status=exc.status_code,
                error=exc.message,
                cause=repr(exc.__cause__) if exc.__cause__ else None,
            )
        else:
            log.warning(
                "request_rejected",
                path=str(req.url),
                code=exc.code,
                status=exc.status_code,
                error=exc.message,
            )
        return error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        req: Request, exc: RequestValidationError
    ) -> JSONResponse:
        log.warning("request_validation_error", path=str(req.url), errors=exc.errors())
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error_body(
                code="INVALID_INPUT",
                message="Invalid request.",
                details=[
                    {"loc": list(e.get("loc", ())), "msg": e.get("msg")}
                    for e in exc.errors()
                ],
            ),
        )

    @app.exception_handler(Exception)
    async def generic_handler(req: Request, exc: Exception) -> JSONResponse:
        tb = traceback.format_exc()
        log.error(
            "unhandled_exception",
            path=str(req.url),
            error=str(exc),
            exc_type=type(exc).__name__,
            traceback=tb,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(
                code="INTERNAL_SERVER_ERROR",
                message="An unexpected error occurred.",
                details=str(exc),
            ),
        )
