"""Error response schemas for API."""

from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Request errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_PROVIDER = "INVALID_PROVIDER"
    INVALID_INPUT = "INVALID_INPUT"
    MISMATCHED_EMPLOYEE_ID = "MISMATCHED_EMPLOYEE_ID"
    NOT_FOUND = "NOT_FOUND"

    # Authentication
    UNAUTHORIZED = "UNAUTHORIZED"

    # Workforce API errors
    REMOTE_API_ERROR = "REMOTE_API_ERROR"

    # System errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class FieldError(BaseModel):
    """One invalid field in a rejected payload."""

    field: str
    message: str


class ErrorBody(BaseModel):
    """Machine-readable code plus human-readable message."""

    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: Any | None = Field(default=None, description="Additional error context")


class APIError(BaseModel):
    """Standardized API error response format.

    All API errors return this format for consistency.
    """

    success: Literal[False] = False
    error: ErrorBody
    request_id: str = Field(..., description="Request ID for tracing")
    timestamp: datetime = Field(..., description="When the error occurred")

    model_config = {"json_schema_extra": {"example": {
        "success": False,
        "error": {
            "code": "VALIDATION_ERROR",
            "message": "Invalid employee data",
            "details": [{"field": "email_address", "message": "must be a valid email address"}],
        },
        "request_id": "9f1c2d6e4b7a4c1e8d0f3a2b5c6d7e8f",
        "timestamp": "2026-01-30T12:00:00Z",
    }}}
