"""
Uniform error bodies.

Every error response is ``{"success": false, "error": "<message>"}``.
Validation failures use 400 and add ``errors``: field path to messages.
Anything unhandled is logged and becomes a generic 500.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from valet.core.logging import get_logger

logger = get_logger(__name__)

_VALUE_ERROR_PREFIX = "Value error, "


def _message(error: dict[str, Any]) -> str:
    if error.get("type") == "json_invalid":
        return "Invalid JSON body"
    msg = str(error.get("msg", "Invalid input"))
    if msg.startswith(_VALUE_ERROR_PREFIX):
        msg = msg[len(_VALUE_ERROR_PREFIX):]
    return msg


def format_validation_errors(errors: Sequence[dict[str, Any]]) -> tuple[str, dict[str, list[str]]]:
    """First message plus messages grouped by dotted field path."""
    grouped: dict[str, list[str]] = {}
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        grouped.setdefault(".".join(loc) or "__root__", []).append(_message(error))
    first = _message(errors[0]) if errors else "Invalid input"
    return first, grouped


def error_response(message: str, status_code: int, **extra: Any) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message, **extra},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    response = error_response(str(exc.detail), exc.status_code)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message, errors = format_validation_errors(exc.errors())
    logger.info("Request validation failed", path=request.url.path, errors=errors)
    return error_response(message, status.HTTP_400_BAD_REQUEST, errors=errors)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", path=request.url.path, method=request.method, exc_info=exc)
    return error_response("Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
