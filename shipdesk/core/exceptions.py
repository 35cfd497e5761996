"""
Application errors and the handlers that render them.

Every error response uses the same envelope as successful ones:
``{"status": false, "message": "...", "error": "..."}``.
"""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

log = logging.getLogger(__name__)


class ShipdeskError(Exception):
    """Base exception for all app errors, never raised directly."""
    status_code = 500
    message = "Server error"

    def __init__(self, message: str | None = None, **payload):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.payload = payload


class ValidationError(ShipdeskError):
    status_code = 400
    message = "Invalid input"


class NotFoundError(ShipdeskError):
    # "missing" and "owned by someone else" look the same to the caller
    status_code = 404
    message = "Not found or not authorized"


class ConflictError(ShipdeskError):
    status_code = 409
    message = "Resource already exists"


def error_body(message: str, **extra) -> dict:
    body = {"status": False, "message": message}
    body.update({k: v for k, v in extra.items() if v is not None})
    return body


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        field = ".".join(loc)
        parts.append(f"{field}: {err.get('msg')}" if field else str(err.get("msg")))
    return "; ".join(parts) or "Invalid input"


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ShipdeskError)
    async def handle_shipdesk_error(request: Request, exc: ShipdeskError):
        log.warning("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
        return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, **exc.payload))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        message = _format_validation_errors(exc)
        log.info("%s %s -> 400: %s", request.method, request.url.path, message)
        return JSONResponse(status_code=400, content=error_body(message))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(detail),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        log.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content=error_body("Server error", error=str(exc)))
