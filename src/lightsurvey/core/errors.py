"""
Custom exception hierarchy for the Lightsurvey application.

Every error that can abort a request derives from LightSurveyException and
carries the HTTP status code the API reports for it.
"""

from typing import Any, Dict, Optional


class LightSurveyException(Exception):
    """
    Base exception for all Lightsurvey-specific errors.

    Attributes:
        error_code: String identifier for the error type
        message: User-friendly error message
        details: Technical details for logging/debugging
        status_code: HTTP status code for API responses
    """

    def __init__(
        self,
        message: str,
        error_code: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize LightSurveyException.

        Args:
            message: User-friendly error message
            error_code: String identifier for the error type
            status_code: HTTP status code (default: 500)
            details: Technical details for logging
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for API responses.

        Returns:
            Dictionary representation of the error
        """
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        """String representation of the exception."""
        return f"{self.error_code}: {self.message}"

    def __repr__(self) -> str:
        """Detailed string representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"error_code='{self.error_code}', "
            f"message='{self.message}', "
            f"status_code={self.status_code})"
        )


class ValidationError(LightSurveyException):
    """
    Raised when request parameters are missing or invalid.

    Maps to HTTP 400 Bad Request.
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        error_details = details or {}
        if field:
            error_details["field"] = field

        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            status_code=400,
            details=error_details,
        )


class FetchError(LightSurveyException):
    """
    Raised when a remote KMZ resource cannot be retrieved.

    Covers unreachable hosts, timeouts and non-2xx responses. The status code
    mirrors the upstream response when one was received, otherwise 502.
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        upstream_status: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        error_details = details or {}
        if url:
            error_details["url"] = url
        if upstream_status is not None:
            error_details["upstream_status"] = upstream_status

        status_code = upstream_status if upstream_status and upstream_status >= 400 else 502

        super().__init__(
            message=message,
            error_code="FETCH_ERROR",
            status_code=status_code,
            details=error_details,
        )
        self.upstream_status = upstream_status


class ArchiveError(LightSurveyException):
    """Raised when bytes are not a readable ZIP container."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_code="ARCHIVE_ERROR",
            status_code=500,
            details=details,
        )


class NoKmlFoundError(LightSurveyException):
    """
    Raised when an archive is valid but holds no .kml entry.

    Maps to HTTP 400: the archive was readable but is the wrong content.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_code="NO_KML_FOUND",
            status_code=400,
            details=details,
        )


class MalformedDocumentError(LightSurveyException):
    """Raised when KML text is not well-formed XML."""

    def __init__(
        self,
        message: str,
        line_number: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        error_details = details or {}
        if line_number:
            error_details["line_number"] = line_number

        super().__init__(
            message=message,
            error_code="MALFORMED_DOCUMENT",
            status_code=500,
            details=error_details,
        )


class StorageError(LightSurveyException):
    """Raised when a route recording cannot be persisted or read."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        error_details = details or {}
        if operation:
            error_details["operation"] = operation

        super().__init__(
            message=message,
            error_code="STORAGE_ERROR",
            status_code=500,
            details=error_details,
        )


class NotFoundError(LightSurveyException):
    """Raised when a requested resource does not exist."""

    def __init__(
        self,
        message: str,
        resource: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        error_details = details or {}
        if resource:
            error_details["resource"] = resource

        super().__init__(
            message=message,
            error_code="NOT_FOUND",
            status_code=404,
            details=error_details,
        )


class CoordinateParseError(ValueError):
    """
    Raised when a single coordinate tuple cannot be parsed.

    Never leaves the parser: the offending tuple is dropped where it occurs.
    """

    def __init__(self, raw: str, reason: str):
        super().__init__(f"Invalid coordinate '{raw}': {reason}")
        self.raw = raw
        self.reason = reason
