"""
Centralized error handling for the conversion proxy.

This module provides the exception taxonomy raised by the conversion
pipeline, standardized error codes, and the helper that renders JSON error
responses for the HTTP layer.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Dict, Optional, Union

from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


# ===== EXCEPTIONS =====

class ConversionError(Exception):
    """Base class for every failure raised while converting a file."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnsupportedInputType(ConversionError):
    def __init__(self, declared_type: str):
        super().__init__(f"Unsupported file type: {declared_type}")
        self.declared_type = declared_type


class UnsupportedOutputFormat(ConversionError):
    def __init__(self, output_format: str):
        super().__init__(f"Unsupported output format: {output_format}")
        self.output_format = output_format


class UpstreamSubmissionError(ConversionError):
    """The conversion endpoint rejected a request or returned no result URL."""

    def __init__(self, http_status: Optional[int], message: Optional[str], path: Optional[str] = None):
        detail = message or "Conversion failed"
        if http_status is not None and path:
            text = f"Upstream error ({http_status}) at {path}: {detail}"
        else:
            text = detail
        super().__init__(text)
        self.http_status = http_status
        self.path = path


class UpstreamUploadError(ConversionError):
    """Uploading the payload to temporary storage failed."""

    def __init__(self, http_status: Optional[int], message: str):
        super().__init__(message)
        self.http_status = http_status


class PresignError(UpstreamUploadError):
    """The presigned upload URL could not be obtained."""


class SizeProbeFailure(ConversionError):
    """The result size could not be determined; always absorbed by callers."""


# ===== ERROR RESPONSES =====

class ErrorCode(str, Enum):
    """Standardized error codes for consistent error handling."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"
    MISSING_PARAMETER = "MISSING_PARAMETER"
    CONVERSION_FAILED = "CONVERSION_FAILED"


class ErrorSeverity(str, Enum):
    """Error severity levels for logging and response handling."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


ERROR_STATUS_MAP: Dict[ErrorCode, int] = {
    ErrorCode.INVALID_REQUEST: 400,
    ErrorCode.MISSING_PARAMETER: 400,
    ErrorCode.INTERNAL_ERROR: 500,
    ErrorCode.CONVERSION_FAILED: 500,
}

ERROR_SEVERITY_MAP: Dict[ErrorCode, ErrorSeverity] = {
    ErrorCode.INTERNAL_ERROR: ErrorSeverity.CRITICAL,
    ErrorCode.CONVERSION_FAILED: ErrorSeverity.HIGH,
    ErrorCode.INVALID_REQUEST: ErrorSeverity.LOW,
    ErrorCode.MISSING_PARAMETER: ErrorSeverity.LOW,
}


def create_error_response(
    error_code: Union[ErrorCode, str],
    message: str,
    status_code: Optional[int] = None,
    **kwargs
) -> JSONResponse:
    """
    Create a consistent JSON error response.

    The body always carries ``success: false`` and the human readable
    ``error`` message expected by the client, plus a machine readable
    ``code`` and a timestamp.

    Args:
        error_code: Error code from ErrorCode enum or custom string
        message: Error message shown to the client
        status_code: Override the default HTTP status code
        **kwargs: Additional fields to include in the error response

    Returns:
        JSONResponse with standardized error format
    """
    if isinstance(error_code, ErrorCode):
        code = error_code.value
        if status_code is None:
            status_code = ERROR_STATUS_MAP.get(error_code, 500)
        severity = ERROR_SEVERITY_MAP.get(error_code, ErrorSeverity.MEDIUM)
    else:
        code = str(error_code)
        if status_code is None:
            status_code = 500
        severity = ErrorSeverity.MEDIUM

    error_data = {
        "success": False,
        "error": str(message)[:1000],
        "code": code,
        "timestamp": datetime.now().isoformat() + "Z",
    }
    error_data.update(kwargs)

    log_message = f"Error response ({status_code}): {error_data}"
    if severity == ErrorSeverity.CRITICAL:
        logger.critical(log_message)
    elif severity == ErrorSeverity.HIGH:
        logger.error(log_message)
    elif severity == ErrorSeverity.MEDIUM:
        logger.warning(log_message)
    else:
        logger.info(log_message)

    return JSONResponse(status_code=status_code, content=error_data)


def describe_error(error: BaseException) -> str:
    """Return the message recorded for a failed attempt."""
    if isinstance(error, ConversionError):
        return error.message
    text = str(error)
    return text or type(error).__name__
