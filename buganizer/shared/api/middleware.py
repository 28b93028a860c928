"""
Shared API Middleware
======================

Common middleware and exception handlers for the FastAPI application.
"""

import time
import uuid
from datetime import datetime, timezone
from typing import Callable

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from buganizer.config import settings
from buganizer.core import (
    ApplicationException,
    AuthenticationException,
    PermissionDeniedException,
    QueryExecutionException,
    ResourceNotFoundException,
    ValidationException,
)
from buganizer.shared.infrastructure.logging import get_context_logger, get_logger

logger = get_logger(__name__)


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """
    Adds correlation ID to requests for tracing.

    Correlation IDs link every log line of one request together.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = request.headers.get("X-Correlation-ID", str(uuid.uuid4()))
        request.state.correlation_id = correlation_id

        response = await call_next(request)
        response.headers["X-Correlation-ID"] = correlation_id
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """Tracks request count and response time."""

    def __init__(self, app: ASGIApp):
        super().__init__(app)
        self.request_count = 0
        self.total_response_time = 0.0

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        self.request_count += 1

        response = await call_next(request)

        response_time = time.perf_counter() - start_time
        self.total_response_time += response_time

        response.headers["X-Response-Time"] = f"{response_time:.3f}s"
        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request and its outcome."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_logger = get_context_logger(__name__, getattr(request.state, "correlation_id", None))
        start_time = time.perf_counter()

        request_logger.info(
            "Request started",
            extra={
                "method": request.method,
                "path": request.url.path,
                "client": request.client.host if request.client else None
            }
        )

        try:
            response = await call_next(request)
        except Exception as e:
            request_logger.error(
                "Request failed",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "error": str(e),
                    "response_time_ms": int((time.perf_counter() - start_time) * 1000)
                }
            )
            raise

        request_logger.info(
            "Request completed",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "response_time_ms": int((time.perf_counter() - start_time) * 1000)
            }
        )
        return response


def _status_for(exc: ApplicationException) -> int:
    if isinstance(exc, ValidationException):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, AuthenticationException):
        return status.HTTP_401_UNAUTHORIZED
    if isinstance(exc, PermissionDeniedException):
        return status.HTTP_403_FORBIDDEN
    if isinstance(exc, ResourceNotFoundException):
        return status.HTTP_404_NOT_FOUND
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def application_exception_handler(request: Request, exc: ApplicationException) -> JSONResponse:
    """
    Map application exceptions to HTTP responses.

    Client errors carry their message; storage failures are reported as
    "query execution failed" and everything else as an internal error.
    """
    correlation_id = getattr(request.state, "correlation_id", "unknown")
    status_code = _status_for(exc)

    if status_code < 500:
        detail = exc.message
    elif isinstance(exc, QueryExecutionException):
        detail = "query execution failed"
    else:
        detail = "Internal server error"

    if status_code >= 500:
        logger.error(
            "Application error",
            extra={
                "correlation_id": correlation_id,
                "path": request.url.path,
                "error_type": type(exc).__name__,
                "error_message": exc.message,
                "details": exc.details
            }
        )

    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "correlation_id": correlation_id}
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler for unhandled exceptions.

    Internal details are only exposed in development.
    """
    correlation_id = getattr(request.state, "correlation_id", "unknown")

    logger.error(
        "Unhandled exception",
        extra={
            "correlation_id": correlation_id,
            "path": request.url.path,
            "method": request.method,
            "error_type": type(exc).__name__,
            "error_message": str(exc)
        }
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Internal server error",
            "correlation_id": correlation_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "debug_info": str(exc) if settings.environment == "development" else None
        }
    )
