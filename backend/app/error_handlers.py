"""
Exception handling for the HTTP boundary.

Only two error categories reach clients: invalid argument (400) and
internal (500). Internal failures carry a fixed per-operation message and
never the underlying exception text.
"""

from collections.abc import Iterator
from contextlib import contextmanager

import structlog
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from core.exceptions import INVALID_ARGUMENT, ExploreError
from core.logging import get_logger

logger = get_logger("backend.errors")


def _get_request_id() -> str:
    """Current request ID from the log context; server-side use only."""
    return structlog.contextvars.get_contextvars().get("request_id", "-")


def _response_payload(detail: str, status_code: int) -> dict:
    return {
        "detail": detail,
        "status_code": status_code,
    }


@contextmanager
def translate_errors(operation: str, failure_message: str) -> Iterator[None]:
    """
    Map domain errors raised inside the block to HTTP errors.

    Args:
        operation: Operation name for logs
        failure_message: Fixed client-facing message for internal failures

    Usage:
        with translate_errors("list_liked_you", "failed to get likers"):
            return service.list_likers(recipient_user_id, pagination_token)
    """
    try:
        yield
    except ExploreError as e:
        if e.category == INVALID_ARGUMENT:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
        logger.error(
            "operation_failed",
            operation=operation,
            error=str(e),
            error_type=type(e).__name__,
            request_id=_get_request_id(),
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=failure_message
        ) from e


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        logger.warning(
            "http_exception",
            detail=exc.detail,
            status_code=exc.status_code,
            request_id=_get_request_id(),
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=_response_payload(str(exc.detail), exc.status_code),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(
            "validation_error",
            errors=exc.errors(),
            request_id=_get_request_id(),
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_response_payload("Validation error", status.HTTP_400_BAD_REQUEST),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.exception(
            "unhandled_exception",
            error=str(exc),
            error_type=type(exc).__name__,
            request_id=_get_request_id(),
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_response_payload("Internal server error", 500),
        )
