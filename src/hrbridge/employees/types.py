"""Employee domain types.

Defines the provider discriminator, the canonical lifecycle states, the
canonical employee sync record sent to the workforce API, and the
validated payload models for each provider's native schema.
"""

from dataclasses import asdict, dataclass
from datetime import date
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator

from hrbridge.security.sanitization import validate_email


class Provider(str, Enum):
    """Supported HR data providers."""

    PROVIDER1 = "provider1"
    PROVIDER2 = "provider2"

    @classmethod
    def values(cls) -> list[str]:
        """All provider values."""
        return [p.value for p in cls]


class CanonicalStatus(str, Enum):
    """Canonical employee lifecycle states."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    TERMINATED = "terminated"


@dataclass(frozen=True)
class EmployeeSyncRecord:
    """Normalized employee shared by all providers.

    This is the shape forwarded to the workforce API. ``employee_id`` is
    unique within one provider only.
    """

    employee_id: str
    first_name: str
    last_name: str
    email: str
    status: CanonicalStatus
    phone_number: str | None = None
    position: str | None = None
    department: str | None = None
    start_date: str | None = None

    def to_remote_payload(self) -> dict[str, Any]:
        """Serialize to the workforce API field set (camelCase, nulls kept)."""
        return {
            "employeeId": self.employee_id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "phoneNumber": self.phone_number,
            "position": self.position,
            "department": self.department,
            "startDate": self.start_date,
            "status": self.status.value,
        }

    def to_local_fields(self) -> dict[str, Any]:
        """Column values for the local employee table."""
        fields = asdict(self)
        fields["status"] = self.status.value
        return fields


# =============================================================================
# Provider payloads
# =============================================================================


def _check_email(value: str) -> str:
    if not validate_email(value):
        raise ValueError("must be a valid email address")
    return value


EmailAddress = Annotated[str, AfterValidator(_check_email)]


class Provider1EmployeePayload(BaseModel):
    """Provider 1 native schema (flat)."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    emp_id: str = Field(min_length=1)
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email_address: EmailAddress
    phone: str | None = None
    job_title: str | None = None
    dept: str | None = None
    hire_date: date | None = None
    employment_status: Literal["active", "inactive", "terminated"] = "active"

    @field_validator("employment_status", mode="before")
    @classmethod
    def _default_status(cls, value: Any) -> Any:
        return "active" if value is None else value


class Provider2PersonalInfo(BaseModel):
    """Provider 2 ``personal_info`` block."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    given_name: str = Field(min_length=1)
    family_name: str = Field(min_length=1)
    email: EmailAddress
    mobile: str | None = None


class Provider2WorkInfo(BaseModel):
    """Provider 2 ``work_info`` block."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    role: str | None = None
    division: str | None = None
    start_date: date | None = None
    current_status: Literal["employed", "terminated", "on_leave"] = "employed"

    @field_validator("current_status", mode="before")
    @classmethod
    def _default_status(cls, value: Any) -> Any:
        return "employed" if value is None else value


class Provider2EmployeePayload(BaseModel):
    """Provider 2 native schema (nested)."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    employee_number: str = Field(min_length=1)
    personal_info: Provider2PersonalInfo
    work_info: Provider2WorkInfo


ProviderPayload = Provider1EmployeePayload | Provider2EmployeePayload
