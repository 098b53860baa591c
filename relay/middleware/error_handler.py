# relay/middleware/error_handler.py
# Error taxonomy and the outermost catch-all middleware.
# Every error leaves the service as {"error": <str>, "details"?: <str>}.

import logging
import traceback
from typing import Callable, Optional

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from relay.constants import INVALID_REQUEST, METHOD_NOT_ALLOWED
from relay.utils.logger import log_exception

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base application error; recovered locally into a JSON response."""

    status_code: int = 500
    error: str = "Internal Server Error"

    def __init__(self, details: Optional[str] = None, error: Optional[str] = None):
        super().__init__(details or error or self.error)
        if error is not None:
            self.error = error
        self.details = details

    def to_response(self, headers: Optional[dict] = None) -> JSONResponse:
        return create_error_response(self.error, self.status_code, self.details, headers)


class ValidationError(AppError):
    """Malformed or missing request fields."""
    status_code = 400
    error = INVALID_REQUEST


class NotFoundError(AppError):
    """Lookup by key/identifier yielded nothing."""
    status_code = 404
    error = "Not Found"


class RouteNotBound(AppError):
    """Method + path absent from the route table."""
    status_code = 405
    error = METHOD_NOT_ALLOWED


class ConflictError(AppError):
    """A uniqueness precondition was violated."""
    status_code = 409
    error = "Conflict"


class PayloadTooLarge(AppError):
    """Request body above the configured limit."""
    status_code = 413
    error = "Payload Too Large"


class RateExceeded(AppError):
    """Client quota for the current window is used up."""
    status_code = 429
    error = "Too many requests"


class StorageFailure(AppError):
    """Unexpected storage exception; the message is echoed in details."""
    status_code = 500
    error = "Storage failure"


def create_error_response(
    error: str,
    status_code: int,
    details: Optional[str] = None,
    headers: Optional[dict] = None,
) -> JSONResponse:
    """Create a standardized JSON error response."""
    content = {"error": error}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content, headers=headers)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Middleware that catches anything escaping the middleware chain or the
    dispatcher and returns a consistent JSON 500.
    """

    def __init__(self, app, debug: bool = False):
        super().__init__(app)
        self.debug = debug

    async def dispatch(self, request: Request, call_next: Callable):
        try:
            return await call_next(request)

        except AppError as e:
            logger.warning(f"AppError: {e.status_code} - {e.error}", extra={"path": request.url.path})
            return e.to_response()

        except Exception as e:
            log_exception(e, context=f"Unhandled error on {request.url.path}")
            logger.error(
                f"Unhandled exception: {type(e).__name__}: {str(e)}",
                extra={"path": request.url.path},
                exc_info=True,
            )
            details = traceback.format_exc() if self.debug else None
            return create_error_response("Internal Server Error", 500, details)
