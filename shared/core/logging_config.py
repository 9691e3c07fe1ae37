"""
JSON logging for the shipping service

One JSON document per record. The request id, the caller's correlation id
and the id of the CSV import batch being processed live in context
variables and are stamped on every record, so all lines of one upload can
be pulled together in the log store.
"""

import json
import logging
import logging.handlers
import os
import re
import sys
import time
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

request_id_var: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
correlation_id_var: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)
batch_id_var: ContextVar[Optional[str]] = ContextVar('batch_id', default=None)

_TRACE_VARS = {
    "request_id": request_id_var,
    "correlation_id": correlation_id_var,
    "batch_id": batch_id_var,
}

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5


def current_trace_context() -> Optional[Dict[str, Any]]:
    """Identifiers bound to the running request or import batch, if any"""
    context = {name: var.get() for name, var in _TRACE_VARS.items() if var.get()}
    return context or None


class StructuredFormatter(logging.Formatter):
    """Render a record as a single JSON line"""

    def format(self, record: logging.LogRecord) -> str:
        document = {
            "@timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": os.getenv('SERVICE_NAME', 'shipping-service'),
            "version": os.getenv('SERVICE_VERSION', '1.0.0'),
            "source": f"{record.module}:{record.funcName}:{record.lineno}",
        }

        trace = current_trace_context()
        if trace:
            document["trace"] = trace

        # structured payload passed as extra={'extra_fields': {...}}
        custom = getattr(record, 'extra_fields', None)
        if custom:
            document["custom"] = custom

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            document["error"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "stacktrace": self.formatException(record.exc_info),
            }

        return json.dumps(document, default=str)


class SecurityFilter(logging.Filter):
    """Mask database credentials and secret-looking values before output"""

    _DSN_PASSWORD = re.compile(r"(\w+(?:\+\w+)?://[^:/@\s]+):[^@\s]+@")
    _SECRET_VALUE = re.compile(r"(?i)\b(password|token|api_key|secret|authorization)(\s*[=:]\s*)\S+")

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        masked = self._DSN_PASSWORD.sub(r"\1:***@", message)
        masked = self._SECRET_VALUE.sub(r"\1\2***", masked)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


def setup_logging(
    service_name: str,
    level: str = "INFO",
    enable_console: bool = True,
    log_file: Optional[str] = None
) -> None:
    """
    Route every logger of the process through the JSON formatter

    Args:
        service_name: Reported as ``service`` on each record
        level: Root level name, e.g. DEBUG or INFO
        enable_console: Emit to stdout
        log_file: Optional path of a size-rotated log file
    """
    os.environ['SERVICE_NAME'] = service_name

    handlers: list = []
    if enable_console:
        handlers.append(logging.StreamHandler(sys.stdout))
    if log_file:
        handlers.append(logging.handlers.RotatingFileHandler(
            log_file, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS
        ))

    root = logging.getLogger()
    root.handlers = []
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for handler in handlers:
        handler.setFormatter(StructuredFormatter())
        handler.addFilter(SecurityFilter())
        root.addHandler(handler)

    # keep per-statement SQL and access lines out of the service log
    for noisy in ('sqlalchemy.engine', 'uvicorn.access', 'multipart'):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    root.info(
        f"Logging configured for {service_name}",
        extra={'extra_fields': {'level': level, 'log_file': log_file}}
    )


class LoggerAdapter(logging.LoggerAdapter):
    """Copies the current trace ids onto the record as plain attributes"""

    def process(self, msg, kwargs):
        kwargs['extra'] = {**(current_trace_context() or {}), **kwargs.get('extra', {})}
        return msg, kwargs


def get_logger(name: str) -> LoggerAdapter:
    return LoggerAdapter(logging.getLogger(name), {})


def set_request_context(
    request_id: Optional[str] = None,
    correlation_id: Optional[str] = None,
    batch_id: Optional[str] = None
) -> None:
    """Bind the given ids to the current context; ``None`` leaves a value untouched"""
    values = {"request_id": request_id, "correlation_id": correlation_id, "batch_id": batch_id}
    for name, value in values.items():
        if value:
            _TRACE_VARS[name].set(value)


def generate_request_id() -> str:
    return uuid.uuid4().hex


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    One log line per finished request with its status and duration.

    The request id is taken from ``X-Request-ID`` when the caller sends one
    and is always returned in the same response header.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get('X-Request-ID') or generate_request_id()
        set_request_context(request_id=request_id,
                            correlation_id=request.headers.get('X-Correlation-ID'))
        logger = get_logger(__name__)
        fields = {'method': request.method, 'path': request.url.path}

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            fields['duration_ms'] = round((time.perf_counter() - started) * 1000, 2)
            logger.exception(f"{request.method} {request.url.path} raised",
                             extra={'extra_fields': fields})
            raise

        fields['status_code'] = response.status_code
        fields['duration_ms'] = round((time.perf_counter() - started) * 1000, 2)
        log = logger.warning if response.status_code >= 500 else logger.info
        log(f"{request.method} {request.url.path} -> {response.status_code}",
            extra={'extra_fields': fields})

        response.headers['X-Request-ID'] = request_id
        return response
