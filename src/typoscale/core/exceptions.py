"""Exception hierarchy for TypoScale.

Every error raised by the service derives from ``TypoScaleException`` and
carries a machine-readable code, an HTTP status, a message for logs and a
message that is safe to show to users.
"""

from __future__ import annotations

from enum import Enum
from http import HTTPStatus
from typing import Any

GENERIC_ANALYSIS_FAILURE = "Analysis failed. Please try again."


class ErrorCode(str, Enum):
    """Machine-readable error codes for API responses."""

    # General (1xxx)
    INTERNAL_ERROR = "TS1000"
    UNKNOWN_ERROR = "TS1001"

    # Validation (4xxx)
    VALIDATION_ERROR = "TS4000"
    MISSING_REQUIRED_FIELD = "TS4001"
    UNSUPPORTED_FILE_TYPE = "TS4002"
    FILE_TOO_LARGE = "TS4003"

    # Resources (5xxx)
    RESOURCE_NOT_FOUND = "TS5000"
    FILE_NOT_FOUND = "TS5001"

    # Infrastructure (6xxx)
    INFRASTRUCTURE_ERROR = "TS6000"

    # Vision model (7xxx)
    VISION_ERROR = "TS7000"
    VISION_RATE_LIMITED = "TS7001"
    VISION_INVALID_RESPONSE = "TS7002"
    VISION_TIMEOUT = "TS7003"

    # Rate limiting (8xxx)
    RATE_LIMIT_EXCEEDED = "TS8000"

    # Analysis (9xxx)
    ANALYSIS_FAILED = "TS9000"
    EXTRACTION_FAILED = "TS9001"
    EXACT_EXTRACTION_UNSUPPORTED = "TS9002"


class TypoScaleException(Exception):
    """Base exception for all TypoScale errors.

    Attributes:
        message: Human-readable error message for logs.
        error_code: Machine-readable error code.
        http_status: HTTP status code for API responses.
        details: Additional context for debugging.
        user_message: Message shown to API callers.
    """

    message: str = "An unexpected error occurred"
    error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR
    http_status: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR
    user_message: str | None = None

    def __init__(
        self,
        message: str | None = None,
        *,
        error_code: ErrorCode | None = None,
        http_status: HTTPStatus | None = None,
        details: dict[str, Any] | None = None,
        user_message: str | None = None,
    ) -> None:
        self.message = message or self.__class__.message
        self.error_code = error_code or self.__class__.error_code
        self.http_status = http_status or self.__class__.http_status
        self.details = details or {}
        self.user_message = user_message or self.__class__.user_message or self.message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for API responses."""
        return {
            "error": {
                "code": self.error_code.value,
                "message": self.user_message,
                "details": self.details if self.details else None,
            }
        }

    def __str__(self) -> str:
        return f"[{self.error_code.value}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code.value}, "
            f"http_status={self.http_status.value}, "
            f"details={self.details!r}"
            f")"
        )


# ============================================================================
# Caller errors
# ============================================================================


class ValidationError(TypoScaleException):
    """Bad input shape or a missing required field."""

    message = "Validation error"
    error_code = ErrorCode.VALIDATION_ERROR
    http_status = HTTPStatus.BAD_REQUEST

    def __init__(
        self,
        message: str | None = None,
        *,
        field: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {}) or {}
        if field:
            details["field"] = field
        super().__init__(message, details=details, **kwargs)


class MissingRequiredFieldError(ValidationError):
    message = "Required field is missing"
    error_code = ErrorCode.MISSING_REQUIRED_FIELD


class UnsupportedFileTypeError(ValidationError):
    message = "Only PDF and PNG files are allowed for accurate font analysis"
    error_code = ErrorCode.UNSUPPORTED_FILE_TYPE


class FileTooLargeError(ValidationError):
    message = "File exceeds the maximum upload size"
    error_code = ErrorCode.FILE_TOO_LARGE


class NotFoundError(TypoScaleException):
    """Referenced entity does not exist."""

    message = "Resource not found"
    error_code = ErrorCode.RESOURCE_NOT_FOUND
    http_status = HTTPStatus.NOT_FOUND

    def __init__(
        self,
        message: str | None = None,
        *,
        resource_type: str | None = None,
        resource_id: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {}) or {}
        if resource_type:
            details["resource_type"] = resource_type
        if resource_id:
            details["resource_id"] = resource_id
        if not message and resource_type:
            message = f"{resource_type} not found"
        super().__init__(message, details=details, **kwargs)


class FileNotFoundInStoreError(NotFoundError):
    message = "File not found"
    error_code = ErrorCode.FILE_NOT_FOUND


class RateLimitedError(TypoScaleException):
    """Caller exceeded an admission limit."""

    message = "Rate limit exceeded"
    error_code = ErrorCode.RATE_LIMIT_EXCEEDED
    http_status = HTTPStatus.TOO_MANY_REQUESTS
    user_message = "Rate limit exceeded. Please try again later."

    def __init__(
        self,
        message: str | None = None,
        *,
        retry_after_seconds: int,
        limit: int | None = None,
        **kwargs: Any,
    ) -> None:
        self.retry_after_seconds = retry_after_seconds
        details = kwargs.pop("details", {}) or {}
        details["retry_after_seconds"] = retry_after_seconds
        if limit is not None:
            details["limit"] = limit
        super().__init__(message, details=details, **kwargs)


# ============================================================================
# Analysis errors
# ============================================================================


class AnalysisError(TypoScaleException):
    """Generic failure shown to callers when an analysis run breaks."""

    message = "Analysis failed"
    error_code = ErrorCode.ANALYSIS_FAILED
    http_status = HTTPStatus.INTERNAL_SERVER_ERROR
    user_message = GENERIC_ANALYSIS_FAILURE


class ExtractionError(TypoScaleException):
    """A document could not be parsed for font metadata."""

    message = "Font extraction failed"
    error_code = ErrorCode.EXTRACTION_FAILED
    http_status = HTTPStatus.UNPROCESSABLE_ENTITY


class ExactExtractionUnsupportedError(ExtractionError):
    """Exact font sizes are only available from embedded text metadata."""

    message = (
        "Precise font size detection from raster images is not supported. "
        "Exact measurements require a PDF with embedded font metadata; "
        "image analysis can only provide estimates."
    )
    error_code = ErrorCode.EXACT_EXTRACTION_UNSUPPORTED


class VisionBoundaryError(TypoScaleException):
    """The vision model call failed."""

    message = "Vision analysis failed"
    error_code = ErrorCode.VISION_ERROR
    http_status = HTTPStatus.BAD_GATEWAY


class VisionRateLimitedError(VisionBoundaryError):
    message = "Vision model rate limit reached"
    error_code = ErrorCode.VISION_RATE_LIMITED
    http_status = HTTPStatus.TOO_MANY_REQUESTS


class InvalidVisionResponseError(VisionBoundaryError):
    message = "Vision model returned an invalid response"
    error_code = ErrorCode.VISION_INVALID_RESPONSE


class VisionTimeoutError(VisionBoundaryError):
    message = "Vision model request timed out"
    error_code = ErrorCode.VISION_TIMEOUT
    http_status = HTTPStatus.GATEWAY_TIMEOUT


class UnknownVisionError(VisionBoundaryError):
    message = "Vision model request failed"


# ============================================================================
# Infrastructure errors
# ============================================================================


class InfrastructureError(TypoScaleException):
    """The record store or another backing service is unreachable."""

    message = "Infrastructure error"
    error_code = ErrorCode.INFRASTRUCTURE_ERROR
    http_status = HTTPStatus.SERVICE_UNAVAILABLE
    user_message = "A storage error occurred. Please try again later."


def get_http_status_for_exception(exc: Exception) -> HTTPStatus:
    """Map an exception to the HTTP status used in error responses."""
    if isinstance(exc, TypoScaleException):
        return exc.http_status

    exception_status_map: dict[type, HTTPStatus] = {
        ValueError: HTTPStatus.BAD_REQUEST,
        PermissionError: HTTPStatus.FORBIDDEN,
        TimeoutError: HTTPStatus.GATEWAY_TIMEOUT,
    }
    for exc_type, status in exception_status_map.items():
        if isinstance(exc, exc_type):
            return status

    return HTTPStatus.INTERNAL_SERVER_ERROR
