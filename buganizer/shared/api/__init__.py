"""
Shared API Layer
================

Middleware, exception handlers and dependencies used by all routers.
"""

from buganizer.shared.api.dependencies import get_current_user_id
from buganizer.shared.api.middleware import (
    CorrelationIDMiddleware,
    LoggingMiddleware,
    MetricsMiddleware,
    application_exception_handler,
    global_exception_handler,
)

__all__ = [
    "get_current_user_id",
    "CorrelationIDMiddleware",
    "LoggingMiddleware",
    "MetricsMiddleware",
    "application_exception_handler",
    "global_exception_handler",
]
