"""
Logging helpers shared by the application entry point and the routers.

- `RequestLoggingMiddleware`: logs method, path, status and duration of every request.
- `log_application_lifecycle`: structured startup/shutdown events.
- `log_error_with_context`: error logging with an operation context dict.
"""

import time
from typing import Any, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from flashcard_trainer.managers.logging_manager import get_logger

logger = get_logger(prefix="[REQUEST]")
lifecycle_logger = get_logger(prefix="[LIFECYCLE]")
error_logger = get_logger(prefix="[ERROR]")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with its response status and duration."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        try:
            response = await call_next(request)
        except Exception as e:
            duration = time.time() - start_time
            logger.error(
                "%s %s failed after %.3fs: %s", request.method, request.url.path, duration, e
            )
            raise

        duration = time.time() - start_time
        logger.info(
            "%s %s -> %d (%.3fs)", request.method, request.url.path, response.status_code, duration
        )
        return response


def log_application_lifecycle(event: str, details: Optional[Dict[str, Any]] = None) -> None:
    """Log an application lifecycle event such as `startup_initiated` or `database_connected`."""
    if details:
        lifecycle_logger.info("%s: %s", event, details)
    else:
        lifecycle_logger.info("%s", event)


def log_error_with_context(error: Exception, context: Optional[Dict[str, Any]] = None) -> None:
    """Log an exception together with the operation it interrupted."""
    error_logger.error(
        "%s: %s | context=%s", type(error).__name__, error, context or {}, exc_info=error
    )
