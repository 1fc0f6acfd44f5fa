"""
Request Logging Middleware.

Logs all incoming HTTP requests with structured context for CloudWatch Logs Insights queries.
"""

import time
import uuid
from typing import Any

from fastapi import Request

from folioai.utils.logger import clear_correlation_ids, get_logger, set_correlation_id
from folioai.utils.rate_limiter import get_client_ip

logger = get_logger(__name__)


async def log_requests_middleware(request: Request, call_next: Any) -> Any:
    """Log all incoming HTTP requests with structured context.

    Every request gets a request_id correlation id (from X-Request-ID, the
    X-Amzn-Trace-Id root, or a fresh uuid) which is echoed back in the
    X-Request-ID response header.

    Args:
        request: FastAPI Request object containing request details.
        call_next: Callable that processes the request and returns the response.

    Returns:
        Response: The response from the next middleware/handler.
    """
    start_time = time.time()
    client_ip = get_client_ip(request)

    # Correlation ids from a previous request must not leak into this one
    clear_correlation_ids()
    request_id = (
        request.headers.get("X-Request-ID")
        or request.headers.get("X-Amzn-Trace-Id", "").split("=")[-1]
        or str(uuid.uuid4())
    )
    set_correlation_id(request_id=request_id)

    logger.info(
        "HTTP request",
        extra={
            "extra_fields": {
                "http_method": request.method,
                "http_path": request.url.path,
                "client_ip": client_ip,
                "user_agent": request.headers.get("User-Agent", ""),
            }
        },
    )

    response = await call_next(request)
    duration_ms = (time.time() - start_time) * 1000

    logger.info(
        "HTTP response",
        extra={
            "extra_fields": {
                "http_method": request.method,
                "http_path": request.url.path,
                "http_status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            }
        },
    )

    response.headers["X-Request-ID"] = request_id
    return response
