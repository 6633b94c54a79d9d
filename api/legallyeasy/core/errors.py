"""
Error taxonomy shared by both flows and the HTTP layer.

InvalidInputError is user-correctable and raised before any outbound call.
UpstreamError covers provider failures and schema violations; it keeps the
underlying exception on ``cause`` for diagnostics.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class LegallyEasyError(Exception):
    """Base class for errors surfaced by the flows."""

    code = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInputError(LegallyEasyError):
    """Malformed or missing input (empty query, unparsable data URI)."""

    code = "invalid_input"


class UpstreamError(LegallyEasyError):
    """The LLM provider failed, timed out or returned a non-conforming result."""

    code = "upstream_error"

    def __init__(self, message: str, cause: Any = None) -> None:
        super().__init__(message)
        self.cause = cause


async def _invalid_input_handler(request: Request, exc: InvalidInputError) -> JSONResponse:
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": exc.message, "error": exc.code},
    )


async def _request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed request bodies are reported like any other invalid input."""
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"] if part != "body")
        parts.append(f"{location}: {error['msg']}" if location else error["msg"])
    return await _invalid_input_handler(request, InvalidInputError("; ".join(parts)))


async def _upstream_handler(request: Request, exc: UpstreamError) -> JSONResponse:
    logger.error(
        "Upstream failure on %s %s: %s (cause: %r)",
        request.method,
        request.url.path,
        exc.message,
        exc.cause,
    )
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": exc.message, "error": exc.code},
    )


def register_exception_handlers(application: FastAPI) -> None:
    """Map flow errors to HTTP responses."""
    application.add_exception_handler(InvalidInputError, _invalid_input_handler)
    application.add_exception_handler(RequestValidationError, _request_validation_handler)
    application.add_exception_handler(UpstreamError, _upstream_handler)
