"""
Exception Handlers for FastAPI Application.

Maps the FolioAI error taxonomy to HTTP responses with user-friendly messages.
Internal details (store errors, integrity failures, backend errors) are logged
but never returned to the client.
"""

import math
import time

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from folioai.utils.exceptions import (
    AccessDenied,
    GenerationError,
    IntegrityFailure,
    ParseError,
    ProfileStoreError,
    PromptRejected,
    RateLimited,
    ValidationFailure,
)
from folioai.utils.logger import get_logger

logger = get_logger(__name__)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors and return detailed error messages.

    Args:
        request: FastAPI Request object.
        exc: RequestValidationError containing validation error details.

    Returns:
        JSONResponse with status 422 (Unprocessable Content) containing:
            - detail: List of validation errors with field paths and messages
            - message: User-friendly error message
    """
    errors = exc.errors()
    error_details = []
    for error in errors:
        error_details.append(
            {
                "field": " -> ".join(str(loc) for loc in error["loc"]),
                "message": error["msg"],
                "type": error["type"],
            }
        )

    logger.error(
        "Validation error",
        extra={
            "extra_fields": {
                "validation_errors": error_details,
                "http_path": request.url.path if request else None,
            }
        },
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
        content={
            "detail": error_details,
            "message": "Validation error: Please check your input data",
        },
    )


async def parse_error_handler(request: Request, exc: ParseError) -> JSONResponse:
    logger.info(
        "Profile parse error",
        extra={"extra_fields": {"http_path": request.url.path, "error": str(exc)}},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": str(exc)},
    )


async def profile_validation_handler(
    request: Request, exc: ValidationFailure
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
        content={
            "detail": exc.errors,
            "message": "Profile validation failed",
        },
    )


async def access_denied_handler(request: Request, exc: AccessDenied) -> JSONResponse:
    logger.info(
        "Access denied",
        extra={"extra_fields": {"http_path": request.url.path, "reason": exc.reason}},
    )
    return JSONResponse(
        status_code=status.HTTP_402_PAYMENT_REQUIRED,
        content={"message": exc.reason},
    )


async def rate_limited_handler(request: Request, exc: RateLimited) -> JSONResponse:
    """Return 429 with a Retry-After header (seconds until the window resets)."""
    headers = {}
    content = {"message": str(exc)}
    if exc.reset_time is not None:
        retry_after = max(0, math.ceil(exc.reset_time - time.time()))
        headers["Retry-After"] = str(retry_after)
        content["reset_time"] = exc.reset_time
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content=content,
        headers=headers,
    )


async def prompt_rejected_handler(
    request: Request, exc: PromptRejected
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": str(exc)},
    )


async def integrity_failure_handler(
    request: Request, exc: IntegrityFailure
) -> JSONResponse:
    logger.critical(
        "Protected prompt integrity failure",
        extra={"extra_fields": {"http_path": request.url.path, "error": str(exc)}},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal server error"},
    )


async def profile_store_error_handler(
    request: Request, exc: ProfileStoreError
) -> JSONResponse:
    logger.error(
        "Profile store unavailable",
        extra={"extra_fields": {"http_path": request.url.path, "error": str(exc)}},
    )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"message": "Profile service temporarily unavailable. Please try again."},
    )


async def generation_error_handler(
    request: Request, exc: GenerationError
) -> JSONResponse:
    logger.error(
        "Generation failed",
        extra={"extra_fields": {"http_path": request.url.path, "error": str(exc)}},
    )
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"message": "AI generation failed. Please try again."},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach every handler in this module to ``app``."""
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ParseError, parse_error_handler)
    app.add_exception_handler(ValidationFailure, profile_validation_handler)
    app.add_exception_handler(AccessDenied, access_denied_handler)
    app.add_exception_handler(RateLimited, rate_limited_handler)
    app.add_exception_handler(PromptRejected, prompt_rejected_handler)
    app.add_exception_handler(IntegrityFailure, integrity_failure_handler)
    app.add_exception_handler(ProfileStoreError, profile_store_error_handler)
    app.add_exception_handler(GenerationError, generation_error_handler)
