"""
Structured Logging Utility.

This module provides structured JSON logging suitable for CloudWatch Logs Insights
or any log pipeline that indexes JSON lines. All records share a consistent set of
fields so that security events, pipeline steps and HTTP traffic can be filtered
by user, request and event kind.

Features:
- JSON format, one object per line
- Correlation IDs (request_id, user_id) for request tracing
- Lambda context integration (function_name, aws_request_id, memory_limit)
- Performance metrics (duration_ms) via log_performance
- Log level from the LOG_LEVEL environment variable

Usage:
    from folioai.utils.logger import get_logger

    logger = get_logger(__name__)
    logger.info("Message", extra={"extra_fields": {"user_id": "u-1"}})
"""

import json
import logging
import os
import time
from contextlib import contextmanager
from typing import Any, Dict, Optional

# Determine log level from environment
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
LOG_LEVEL = getattr(logging, LOG_LEVEL, logging.INFO)

# Global context for correlation IDs
_log_context: Dict[str, Any] = {}

# Attributes every LogRecord carries; anything else was passed through `extra`
_RESERVED_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "taskName",
        "exc_info",
        "exc_text",
        "stack_info",
        "extra_fields",
    }
)


class JSONLogFormatter(logging.Formatter):
    """JSON formatter for structured log ingestion.

    Formats log records as JSON with correlation IDs and the custom fields
    passed as ``extra={"extra_fields": {...}}``.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: LogRecord to format.

        Returns:
            JSON string with structured log data.
        """
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Correlation IDs from global context
        for key in ("request_id", "user_id"):
            if key in _log_context:
                log_data[key] = _log_context[key]

        extra_fields = getattr(record, "extra_fields", None)
        if isinstance(extra_fields, dict):
            log_data.update(extra_fields)

        # Custom attributes added directly to the record (filters, plain extra=)
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and key not in log_data:
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
            log_data["exception_type"] = (
                record.exc_info[0].__name__ if record.exc_info[0] else None
            )

        return json.dumps(log_data, default=str)


def configure_logging(context: Optional[Any] = None) -> None:
    """Configure the root logger with the JSON formatter.

    Args:
        context: Lambda context object (optional). If provided, function_name,
            function_version, aws_request_id and memory limit are attached to
            every record.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(LOG_LEVEL)

    # Remove existing handlers to avoid duplicate logs
    root_logger.handlers = []

    handler = logging.StreamHandler()
    handler.setLevel(LOG_LEVEL)
    handler.setFormatter(JSONLogFormatter())
    root_logger.addHandler(handler)

    if context:

        class LambdaContextFilter(logging.Filter):
            def filter(self, record: logging.LogRecord) -> bool:
                record.function_name = getattr(context, "function_name", None)
                record.function_version = getattr(context, "function_version", None)
                record.aws_request_id = getattr(context, "aws_request_id", None)
                if hasattr(context, "memory_limit_in_mb"):
                    record.memory_limit_mb = context.memory_limit_in_mb
                return True

        handler.addFilter(LambdaContextFilter())


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with structured logging support.

    Args:
        name: Logger name (typically __name__).

    Returns:
        Logger instance.
    """
    return logging.getLogger(name)


def set_correlation_id(
    request_id: Optional[str] = None, user_id: Optional[str] = None
) -> None:
    """Set correlation IDs for request tracing.

    Args:
        request_id: Request ID (from the X-Request-ID header or Lambda context).
        user_id: The user the current request acts on behalf of.
    """
    if request_id:
        _log_context["request_id"] = request_id
    if user_id:
        _log_context["user_id"] = user_id


def clear_correlation_ids() -> None:
    """Clear correlation IDs from log context."""
    _log_context.clear()


@contextmanager
def log_performance(operation: str, **extra_fields):
    """Context manager for logging operation performance.

    Logs start, completion (or failure) and duration of an operation.

    Args:
        operation: Operation name (e.g., "normalize_profile").
        **extra_fields: Additional fields to include in log records.

    Example:
        with log_performance("llm_call", model="gpt-4"):
            result = call_llm(...)
    """
    start_time = time.time()
    logger = get_logger(__name__)

    logger.info(
        f"Starting {operation}",
        extra={"extra_fields": {"operation": operation, **extra_fields}},
    )
    try:
        yield
    except Exception as e:
        duration_ms = (time.time() - start_time) * 1000
        logger.error(
            f"Failed {operation}",
            extra={
                "extra_fields": {
                    "operation": operation,
                    "duration_ms": round(duration_ms, 2),
                    "status": "error",
                    "error": str(e),
                    "error_type": type(e).__name__,
                    **extra_fields,
                }
            },
        )
        raise
    duration_ms = (time.time() - start_time) * 1000
    logger.info(
        f"Completed {operation}",
        extra={
            "extra_fields": {
                "operation": operation,
                "duration_ms": round(duration_ms, 2),
                "status": "success",
                **extra_fields,
            }
        },
    )
