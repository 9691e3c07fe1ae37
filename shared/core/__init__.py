"""Shared core utilities for the shipping service.

Health probes plus the JSON logging setup, request/batch context helpers
and request logging middleware.
"""

from .health import ServiceHealth, HealthStatus
from .logging_config import (
    StructuredFormatter,
    setup_logging,
    get_logger,
    RequestLoggingMiddleware,
    set_request_context,
    current_trace_context,
    generate_request_id,
    LoggerAdapter,
)

__all__ = [
    "ServiceHealth",
    "HealthStatus",
    "StructuredFormatter",
    "setup_logging",
    "get_logger",
    "RequestLoggingMiddleware",
    "set_request_context",
    "current_trace_context",
    "generate_request_id",
    "LoggerAdapter",
]
