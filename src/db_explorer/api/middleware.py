"""
Middleware and exception handlers for the DB Explorer FastAPI application.

This module contains:
- HTTP middleware for trace IDs and request logging
- Centralized exception handlers mapping the error hierarchy to JSON

Exception Handling Strategy:
- DBExplorerException subclasses carry their own HTTP status and error code
- Validation failures (invalid identifier, invalid pagination) are 4xx and
  logged as warnings; database failures are 5xx and logged as errors
- Every error response includes the trace_id
"""

from datetime import datetime, timezone
from typing import Callable, Dict

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..domain.errors import DBExplorerException
from ..domain.responses import ErrorResponse
from ..utils.logging import get_module_logger
from ..utils.tracing import clear_trace_id, current_trace_id, generate_trace_id, set_trace_id

logger = get_module_logger()


# =============================================================================
# Middleware Functions
# =============================================================================


async def trace_id_middleware(request: Request, call_next: Callable) -> Response:
    """
    Generate or propagate the request's trace ID.

    - Uses the X-Trace-ID header when present, otherwise a new UUID
    - Binds it for the request so every log line carries it
    - Echoes it in the X-Trace-ID response header
    """
    trace_id = request.headers.get("X-Trace-ID") or generate_trace_id()
    set_trace_id(trace_id)

    try:
        response = await call_next(request)
    finally:
        clear_trace_id()

    response.headers["X-Trace-ID"] = trace_id
    return response


async def logging_middleware(request: Request, call_next: Callable) -> Response:
    """
    Log each HTTP request and its outcome.

    Adds an X-Process-Time header with the duration in milliseconds.
    """
    start_time = datetime.now(timezone.utc)

    logger.info(
        "HTTP request started",
        method=request.method,
        url=str(request.url),
        client_ip=request.client.host if request.client else None,
    )

    response = await call_next(request)

    duration_ms = (datetime.now(timezone.utc) - start_time).total_seconds() * 1000
    response.headers["X-Process-Time"] = str(round(duration_ms, 2))

    logger.info(
        "HTTP request completed",
        method=request.method,
        url=str(request.url),
        status_code=response.status_code,
        duration_ms=round(duration_ms, 2),
    )

    return response


# =============================================================================
# Exception Handlers
# =============================================================================


def _create_error_response(
    status_code: int,
    error_code: str,
    message: str,
    details: Dict | None = None
) -> JSONResponse:
    """
    Create a standardized JSON error response.

    {
        "error": "invalid_identifier",
        "message": "Invalid table name: 'a;b'",
        "details": {...},
        "trace_id": "uuid",
        "timestamp": "ISO8601"
    }
    """
    error_response = ErrorResponse(
        error=error_code.lower(),
        message=message,
        details=details,
        trace_id=current_trace_id(),
        timestamp=datetime.now(timezone.utc)
    )

    return JSONResponse(
        status_code=status_code,
        content=error_response.model_dump(mode="json", exclude_none=True)
    )


async def db_explorer_exception_handler(request: Request, exc: DBExplorerException) -> JSONResponse:
    """Handler for all DBExplorerException subclasses."""
    log_level = "warning" if exc.http_status < 500 else "error"
    getattr(logger, log_level)(
        f"{exc.__class__.__name__}: {exc.message}",
        error_code=exc.error_code,
        http_status=exc.http_status,
        details=exc.details,
        url=str(request.url),
        method=request.method,
    )

    return _create_error_response(
        status_code=exc.http_status,
        error_code=exc.error_code,
        message=exc.message,
        details=exc.details or None
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Convert FastAPI/Pydantic request validation errors to a 422 response."""
    errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"]
        }
        for error in exc.errors()
    ]

    logger.warning(
        "Request validation failed",
        error_count=len(errors),
        errors=errors,
        url=str(request.url),
        method=request.method,
    )

    return _create_error_response(
        status_code=422,
        error_code="VALIDATION_ERROR",
        message="Request validation failed",
        details={"errors": errors}
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Convert standard HTTP exceptions (404 routes, 405 methods) to the common format."""
    error_code_map = {
        400: "BAD_REQUEST",
        404: "NOT_FOUND",
        405: "METHOD_NOT_ALLOWED",
        500: "INTERNAL_ERROR",
        503: "SERVICE_UNAVAILABLE",
    }
    error_code = error_code_map.get(exc.status_code, "HTTP_ERROR")

    log_level = "warning" if exc.status_code < 500 else "error"
    getattr(logger, log_level)(
        f"HTTP {exc.status_code}: {exc.detail}",
        error_code=error_code,
        url=str(request.url),
        method=request.method,
    )

    return _create_error_response(
        status_code=exc.status_code,
        error_code=error_code,
        message=str(exc.detail) if exc.detail else f"HTTP {exc.status_code} error"
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Fallback for unhandled exceptions.

    Logs the stack trace and returns a generic 500 without internal details.
    """
    logger.error(
        "Unhandled exception occurred",
        error=str(exc),
        error_type=type(exc).__name__,
        url=str(request.url),
        method=request.method,
        exc_info=True
    )

    return _create_error_response(
        status_code=500,
        error_code="INTERNAL_ERROR",
        message="An internal server error occurred. Please try again later."
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with the FastAPI application.

    Priority (most specific first):
    1. DBExplorerException subclasses
    2. RequestValidationError (Pydantic)
    3. StarletteHTTPException
    4. Exception (fallback)
    """
    app.add_exception_handler(DBExplorerException, db_explorer_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, general_exception_handler)

    logger.debug(
        "Exception handlers registered",
        handlers=["DBExplorerException", "RequestValidationError", "StarletteHTTPException", "Exception"]
    )


# =============================================================================
# OpenAPI Error Response Models (for documentation)
# =============================================================================

ERROR_RESPONSES = {
    400: {
        "description": "Bad Request - invalid table/column identifier or pagination",
        "model": ErrorResponse,
    },
    404: {
        "description": "Not Found - the table is not in the browsed schema",
        "model": ErrorResponse,
    },
    500: {
        "description": "Internal Server Error - the row or count query failed",
        "model": ErrorResponse,
    },
    503: {
        "description": "Service Unavailable - the database is not reachable",
        "model": ErrorResponse,
    },
}
