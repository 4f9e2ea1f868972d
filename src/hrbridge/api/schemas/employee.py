"""Employee endpoint response schemas."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class EmployeeSyncData(BaseModel):
    """Summary returned after a create or update."""

    id: int = Field(..., description="Local surrogate id")
    employeeId: str = Field(..., description="Provider-scoped employee id")
    provider: str
    remoteId: str | None = Field(default=None, description="Workforce API id")
    message: str


class EmployeeSyncResponse(BaseModel):
    """Response body for POST/PUT employee endpoints."""

    success: bool = True
    data: EmployeeSyncData

    model_config = {"json_schema_extra": {"example": {
        "success": True,
        "data": {
            "id": 1,
            "employeeId": "EMP001",
            "provider": "provider1",
            "remoteId": "tt-1",
            "message": "Employee created successfully",
        },
    }}}


class EmployeeData(BaseModel):
    """Local employee merged with the workforce API view."""

    model_config = ConfigDict(extra="allow")

    id: int
    employeeId: str
    provider: str
    remoteId: str | None = None
    firstName: str
    lastName: str
    email: str
    phoneNumber: str | None = None
    position: str | None = None
    department: str | None = None
    startDate: str | None = None
    status: str
    createdAt: str | None = None
    updatedAt: str | None = None
    remoteSnapshot: dict[str, Any] | None = Field(
        default=None, description="Workforce API record, null when unavailable"
    )


class EmployeeResponse(BaseModel):
    """Response body for GET employee endpoint."""

    success: bool = True
    data: EmployeeData
