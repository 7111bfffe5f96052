"""Global exception handlers for consistent error responses.

Design:
- RateLimitEngineError -> 503, tagged with the engine origin so clients and
  operators can tell a broken limiter from a broken service
- Other AppError subclasses -> 400 (client fault) or 500 (configuration)
- Unexpected Exception -> generic 500 (safety net)
- All responses include request_id for tracing

Engine failures raised from ``RateLimitMiddleware`` bypass Starlette's
ExceptionMiddleware and reach the generic handler, so it dispatches on the
origin marker as well.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from turnstile.core.errors import (
    AppError,
    ConfigurationAppError,
    RateLimitEngineError,
    is_engine_failure,
)
from turnstile.core.logging import get_request_id

logger = logging.getLogger(__name__)


async def engine_error_handler(request: Request, exc: RateLimitEngineError) -> JSONResponse:
    """Answer 503 when the admission engine itself failed.

    The cause is logged, never returned to the client.
    """
    logger.error(
        "rate_limit_engine_error_handled",
        extra={
            "error_code": exc.code,
            "origin": exc.origin,
            "rule_name": exc.rule_name,
            "cause_type": type(exc.__cause__).__name__ if exc.__cause__ else None,
            "request_path": request.url.path,
            "request_id": get_request_id(),
        },
    )

    return JSONResponse(
        status_code=503,
        content={
            "error": {
                "code": exc.code,
                "message": "Rate limiting is temporarily unavailable. Please try again later.",
                "origin": exc.origin,
                "request_id": get_request_id(),
            }
        },
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle application errors with a consistent JSON format.

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with ``error.code``, ``error.message``, ``error.request_id``
        and optional ``error.details``.
    """
    if isinstance(exc, RateLimitEngineError):
        return await engine_error_handler(request, exc)

    status_code = 500 if isinstance(exc, ConfigurationAppError) else 400

    logger.warning(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "has_details": bool(exc.details),
            "request_id": get_request_id(),
        },
    )

    error_content = {
        "code": exc.code,
        "message": exc.message,
        "request_id": get_request_id(),
    }
    if exc.details:
        error_content["details"] = exc.details

    return JSONResponse(
        status_code=status_code,
        content={"error": error_content},
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors.

    Returns a generic message; no stack traces or exception text leak to the
    client.
    """
    if is_engine_failure(exc):
        return await engine_error_handler(request, exc)

    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
            "request_id": get_request_id(),
        },
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
                "request_id": get_request_id(),
            }
        },
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with a FastAPI app.

    Example:
        >>> app = FastAPI()
        >>> setup_exception_handlers(app)
    """
    app.exception_handler(RateLimitEngineError)(engine_error_handler)
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
