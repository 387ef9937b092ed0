"""
Pydantic models for standardized error responses.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class ErrorResponse(BaseModel):
    """
    Error response returned by every endpoint.

    Attributes:
        error: Human-readable error message
        details: Short technical detail, e.g. the upstream HTTP status
        error_code: Machine-readable error identifier
        context: Structured details for debugging
        request_id: Request correlation ID for tracing
        timestamp: When the error occurred (UTC)
    """

    error: str = Field(..., description="Human-readable error message")
    details: Optional[str] = Field(None, description="Short technical detail")
    error_code: str = Field(
        ...,
        description="Machine-readable error code",
        examples=["VALIDATION_ERROR", "FETCH_ERROR", "MALFORMED_DOCUMENT"],
    )
    context: Optional[Dict[str, Any]] = Field(None, description="Structured error details")
    request_id: Optional[str] = Field(None, description="Request correlation ID")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_serializer("timestamp")
    def serialize_timestamp(self, timestamp: datetime, _info: Any) -> str:
        return timestamp.isoformat()

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": "Failed to fetch KMZ file",
                "details": "HTTP 404",
                "error_code": "FETCH_ERROR",
                "request_id": "550e8400-e29b-41d4-a716-446655440000",
                "timestamp": "2026-10-19T08:30:00+00:00",
            }
        }
    )
