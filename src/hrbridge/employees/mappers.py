"""Provider payload to canonical record mappers.

Mappers assume their input already passed the provider's payload model
validation; they never fail. Optional fields pass through as None.
"""

from datetime import date
from typing import Protocol, TypeVar

from hrbridge.employees.status import StatusTranslator
from hrbridge.employees.types import (
    EmployeeSyncRecord,
    Provider1EmployeePayload,
    Provider2EmployeePayload,
)

PayloadT = TypeVar("PayloadT", contravariant=True)


class EmployeeMapper(Protocol[PayloadT]):
    """Converts one provider's payload into the canonical record."""

    def map_to_canonical(self, payload: PayloadT) -> EmployeeSyncRecord:
        ...


def _iso(value: date | None) -> str | None:
    return value.isoformat() if value is not None else None


class Provider1EmployeeMapper:
    """Maps the flat Provider 1 schema."""

    def __init__(self, status_translator: StatusTranslator):
        self.status_translator = status_translator

    def map_to_canonical(self, payload: Provider1EmployeePayload) -> EmployeeSyncRecord:
        return EmployeeSyncRecord(
            employee_id=payload.emp_id,
            first_name=payload.first_name,
            last_name=payload.last_name,
            email=payload.email_address,
            status=self.status_translator.map_to_canonical(payload.employment_status),
            phone_number=payload.phone,
            position=payload.job_title,
            department=payload.dept,
            start_date=_iso(payload.hire_date),
        )


class Provider2EmployeeMapper:
    """Maps the nested Provider 2 schema, flattening personal and work info."""

    def __init__(self, status_translator: StatusTranslator):
        self.status_translator = status_translator

    def map_to_canonical(self, payload: Provider2EmployeePayload) -> EmployeeSyncRecord:
        personal = payload.personal_info
        work = payload.work_info
        return EmployeeSyncRecord(
            employee_id=payload.employee_number,
            first_name=personal.given_name,
            last_name=personal.family_name,
            email=personal.email,
            status=self.status_translator.map_to_canonical(work.current_status),
            phone_number=personal.mobile,
            position=work.role,
            department=work.division,
            start_date=_iso(work.start_date),
        )
