"""Map raised exceptions onto JSON error bodies."""

from fastapi import Request
from fastapi.responses import JSONResponse

from ytm_remote.exceptions import ErrorCode, RemoteException
from ytm_remote.logging_config import get_logger, log_with_context
from ytm_remote.models import ErrorDetail, ErrorResponse

logger = get_logger(__name__)


async def remote_exception_handler(request: Request, exc: RemoteException) -> JSONResponse:
    """Answer a RemoteException with its own status and error code.

    Player and artwork failures reach clients as ``{"error": {...}}`` so
    the caller can tell a dropped connection from a bad command.
    """
    log_with_context(
        logger,
        "warning",
        "Request failed",
        error_code=exc.code.value,
        error_message=exc.message,
        status_code=exc.status_code,
        method=request.method,
        path=request.url.path,
        event_type="remote_error",
    )

    body = ErrorResponse(error=ErrorDetail(code=exc.code.value, message=exc.message, details=exc.details))
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(mode="json"))


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log_with_context(
        logger,
        "error",
        "Unhandled exception",
        error=str(exc),
        error_type=type(exc).__name__,
        method=request.method,
        path=request.url.path,
        event_type="unhandled_error",
    )
    logger.error("Exception traceback:", exc_info=exc)

    # Internal details stay in the log
    body = ErrorResponse(error=ErrorDetail(code=ErrorCode.INTERNAL_ERROR.value, message="Internal server error"))
    return JSONResponse(status_code=500, content=body.model_dump(mode="json"))


def register_error_handlers(app) -> None:
    """Install the remote, rate limit and catch-all handlers on ``app``."""
    from slowapi import _rate_limit_exceeded_handler
    from slowapi.errors import RateLimitExceeded

    app.add_exception_handler(RemoteException, remote_exception_handler)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(Exception, general_exception_handler)
