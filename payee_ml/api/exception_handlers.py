"""Centralized exception handlers for the FastAPI application.

Error Response Format:
    {
        "detail": "Human-readable error message",
        "code": "MACHINE_READABLE_ERROR_CODE"
    }
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from payee_ml.exceptions import ErrorCode, PayeeMLError

logger = logging.getLogger(__name__)


ERROR_CODE_TO_STATUS: dict[ErrorCode, int] = {
    # 400 Bad Request - validation errors
    ErrorCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    # 404 Not Found
    ErrorCode.JOB_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    # 409 Conflict - operation illegal in current job state
    ErrorCode.INVALID_JOB_STATE: status.HTTP_409_CONFLICT,
    # 429 Too Many Requests
    ErrorCode.UPSTREAM_RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
    # 502 Bad Gateway - upstream answered, but not usefully
    ErrorCode.UPSTREAM_AUTH_FAILED: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.UPSTREAM_REQUEST_REJECTED: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.PARSE_ERROR: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.ALL_SAMPLES_FAILED: status.HTTP_502_BAD_GATEWAY,
    # 503 Service Unavailable
    ErrorCode.UPSTREAM_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    # 504 Gateway Timeout
    ErrorCode.UPSTREAM_TIMEOUT: status.HTTP_504_GATEWAY_TIMEOUT,
    # 500 Internal Server Error
    ErrorCode.ALIGNMENT_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _create_error_response(status_code: int, message: str, code: str) -> JSONResponse:
    """Create a standardized error response."""
    return JSONResponse(
        status_code=status_code,
        content={
            "detail": message,
            "code": code,
        },
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the PayeeMLError handler on the application."""

    @app.exception_handler(PayeeMLError)
    async def payee_ml_exception_handler(
        request: Request,
        exc: PayeeMLError,
    ) -> JSONResponse:
        status_code = ERROR_CODE_TO_STATUS.get(exc.code, status.HTTP_400_BAD_REQUEST)
        log = logger.error if status_code >= 500 else logger.warning
        log(
            "Error on %s %s: %s (code=%s, details=%s)",
            request.method,
            request.url.path,
            exc.message,
            exc.code.value,
            exc.details,
        )
        return _create_error_response(
            status_code=status_code,
            message=exc.message,
            code=exc.code.value,
        )
