"""Global exception handlers — translate domain errors to HTTP responses.

Each domain exception maps to a specific HTTP status code, a short machine
readable code, and the standard ``{"status", "code", "message"}`` envelope.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from project_pulse.domain.exceptions import (
    AccessDeniedError,
    InvalidReferenceError,
    LlmError,
    PulseError,
    RateLimitedError,
    RepositoryNotFoundError,
    UpstreamError,
)

logger = logging.getLogger(__name__)

_EXCEPTION_STATUS: list[tuple[type[PulseError], int, str]] = [
    (InvalidReferenceError, 400, "INVALID_URL"),
    (RepositoryNotFoundError, 404, "REPO_NOT_FOUND"),
    (AccessDeniedError, 403, "ACCESS_DENIED"),
    (RateLimitedError, 429, "RATE_LIMITED"),
    (LlmError, 502, "LLM_ERROR"),
    (UpstreamError, 502, "UPSTREAM_ERROR"),
]


def _error_json(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "code": code, "message": message},
    )


def register_error_handlers(app: FastAPI) -> None:
    """Attach exception handlers to the FastAPI application."""

    # ── Domain exceptions ───────────────────────────────────────────────

    for exc_type, status, code in _EXCEPTION_STATUS:

        def _make_handler(
            status_code: int, error_code: str
        ):  # type: ignore[no-untyped-def]
            async def handler(request: Request, exc: Exception) -> JSONResponse:
                logger.warning("%s: %s", type(exc).__name__, exc)
                return _error_json(status_code, error_code, str(exc))

            return handler

        app.add_exception_handler(exc_type, _make_handler(status, code))

    # ── Aggregation timeout ─────────────────────────────────────────────

    @app.exception_handler(TimeoutError)
    async def timeout_handler(request: Request, exc: TimeoutError) -> JSONResponse:
        logger.warning("Aggregation timed out")
        return _error_json(504, "TIMEOUT", "Fetching repository data took too long.")

    # ── Pydantic / FastAPI validation errors ────────────────────────────

    @app.exception_handler(RequestValidationError)
    async def validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        messages = []
        for err in exc.errors():
            loc = " → ".join(str(p) for p in err.get("loc", []))
            messages.append(f"{loc}: {err.get('msg', 'validation error')}")
        return _error_json(400, "INVALID_INPUT", "; ".join(messages))

    # ── Catch-all for unexpected errors ─────────────────────────────────

    @app.exception_handler(Exception)
    async def generic_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception")
        return _error_json(
            500, "INTERNAL_ERROR", "An unexpected error occurred. Please try again later."
        )
