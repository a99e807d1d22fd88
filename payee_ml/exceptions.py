"""Exceptions and error codes for the payee classification service.

All errors raised by this package inherit from PayeeMLError so the API
layer can map them to consistent HTTP responses.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Stable error codes for API clients.

    These codes are part of the public API contract. Should not be changed.
    """

    # Validation Errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Not Found Errors (404)
    JOB_NOT_FOUND = "JOB_NOT_FOUND"

    # Conflict Errors (409)
    INVALID_JOB_STATE = "INVALID_JOB_STATE"

    # Upstream inference errors (429/502/503/504)
    UPSTREAM_TIMEOUT = "UPSTREAM_TIMEOUT"
    UPSTREAM_RATE_LIMITED = "UPSTREAM_RATE_LIMITED"
    UPSTREAM_UNAVAILABLE = "UPSTREAM_UNAVAILABLE"
    UPSTREAM_REQUEST_REJECTED = "UPSTREAM_REQUEST_REJECTED"
    UPSTREAM_AUTH_FAILED = "UPSTREAM_AUTH_FAILED"
    PARSE_ERROR = "PARSE_ERROR"
    ALL_SAMPLES_FAILED = "ALL_SAMPLES_FAILED"

    # Export errors
    ALIGNMENT_ERROR = "ALIGNMENT_ERROR"

    # General Errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class PayeeMLError(Exception):  # NOQA: N818
    """Base exception for all payee-ml errors.

    Attributes
    ----------
    message
        Human-readable error message (safe for end users)
    code
        Stable error code for programmatic handling
    details
        Optional additional context (logged but not exposed to users)
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code.value!r}, "
            f"details={self.details!r})"
        )


class ValidationError(PayeeMLError):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class JobNotFoundError(PayeeMLError):
    """Raised when a batch job is not tracked locally."""

    def __init__(self, job_id: str) -> None:
        super().__init__(
            f"Batch job not found: {job_id}",
            ErrorCode.JOB_NOT_FOUND,
            {"job_id": job_id},
        )
        self.job_id = job_id


class BatchJobStateError(PayeeMLError):
    """Raised when an operation is not legal in the job's current state."""

    def __init__(self, job_id: str, status: str, operation: str) -> None:
        super().__init__(
            f"Cannot {operation} batch job {job_id} in status '{status}'",
            ErrorCode.INVALID_JOB_STATE,
            {"job_id": job_id, "status": status, "operation": operation},
        )
        self.job_id = job_id
        self.status = status


class UpstreamError(PayeeMLError):
    """Base class for failures talking to the inference endpoint.

    ``retryable`` tells the retry policy whether another attempt may succeed.
    """

    retryable: bool = False

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.UPSTREAM_UNAVAILABLE,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class UpstreamTimeoutError(UpstreamError):
    """Raised when an external call exceeds its hard timeout."""

    retryable = True

    def __init__(
        self,
        message: str = "Inference request timed out",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.UPSTREAM_TIMEOUT, details)


class RateLimitError(UpstreamError):
    """Raised when the inference endpoint answers 429."""

    retryable = True

    def __init__(
        self,
        message: str = "Inference endpoint rate limit exceeded",
        retry_after: float | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.UPSTREAM_RATE_LIMITED, details)
        self.retry_after = retry_after


class TransientUpstreamError(UpstreamError):
    """Raised for connection failures and 5xx responses."""

    retryable = True

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.UPSTREAM_UNAVAILABLE, details)


class UpstreamRequestError(UpstreamError):
    """Raised when the inference endpoint rejects a request (4xx)."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.UPSTREAM_REQUEST_REJECTED, details)


class AuthError(UpstreamError):
    """Raised when the inference endpoint rejects our credentials.

    Fatal: every following call would fail the same way, so it is never
    retried and aborts the operation that triggered it.
    """

    def __init__(
        self,
        message: str = "Inference endpoint rejected the API key",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.UPSTREAM_AUTH_FAILED, details)


class ParseError(PayeeMLError):
    """Raised when an external response or persisted record is malformed."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.PARSE_ERROR, details)


class AlignmentError(PayeeMLError):
    """Raised when a result does not belong to the row it would be merged into."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.ALIGNMENT_ERROR, details)


class AllSamplesFailed(PayeeMLError):  # NOQA: N818
    """Raised when every consensus run failed for a name."""

    def __init__(self, name: str, causes: list[BaseException]) -> None:
        super().__init__(
            f"All {len(causes)} consensus runs failed for {name!r}",
            ErrorCode.ALL_SAMPLES_FAILED,
            {"causes": [repr(c) for c in causes]},
        )
        self.name = name
        self.causes = causes
