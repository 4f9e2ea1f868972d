"""API request/response schemas."""

from .employee import EmployeeData, EmployeeResponse, EmployeeSyncData, EmployeeSyncResponse
from .errors import APIError, ErrorBody, ErrorCode, FieldError
from .health import (
    ComponentHealth,
    DatabaseHealthResponse,
    HealthResponse,
    HealthStatus,
    ReadinessResponse,
)

__all__ = [
    "APIError",
    "ComponentHealth",
    "DatabaseHealthResponse",
    "EmployeeData",
    "EmployeeResponse",
    "EmployeeSyncData",
    "EmployeeSyncResponse",
    "ErrorBody",
    "ErrorCode",
    "FieldError",
    "HealthResponse",
    "HealthStatus",
    "ReadinessResponse",
]
