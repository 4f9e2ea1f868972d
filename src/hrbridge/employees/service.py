"""Employee synchronization service.

Decides between remote create and remote update for an inbound provider
record, performs the remote call, and only then persists the canonical
result locally. A failed remote call never produces a local write.

The remote call runs outside any database transaction; the local lookup
is repeated inside the write transaction so the row that gets updated is
the one current at commit time.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from hrbridge.core.logging import get_logger
from hrbridge.db.config import transaction
from hrbridge.db.models.employee import Employee
from hrbridge.db.repositories.employee import EmployeeRepository
from hrbridge.employees.types import EmployeeSyncRecord, Provider
from hrbridge.observability.metrics import record_employee_sync
from hrbridge.remote.client import WorkforceApiClient
from hrbridge.remote.types import ApiResult, Failure, Success

logger = get_logger(__name__)

NOT_FOUND_MESSAGE = "Employee not found"
RETRIEVAL_ERROR_MESSAGE = "Unable to retrieve employee"
SYNC_ERROR_MESSAGE = "An error occurred while processing the employee data"


@dataclass(frozen=True)
class SyncOutcome:
    """Result of ``synchronize`` plus the create/update decision."""

    result: ApiResult
    is_update: bool


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def serialize_employee(employee: Employee) -> dict[str, Any]:
    """Render a local employee in the camelCase response shape."""
    return {
        "id": employee.id,
        "employeeId": employee.employee_id,
        "provider": employee.provider,
        "remoteId": employee.remote_id,
        "firstName": employee.first_name,
        "lastName": employee.last_name,
        "email": employee.email,
        "phoneNumber": employee.phone_number,
        "position": employee.position,
        "department": employee.department,
        "startDate": employee.start_date,
        "status": employee.status,
        "createdAt": _iso(employee.created_at),
        "updatedAt": _iso(employee.updated_at),
    }


class EmployeeSyncService:
    """Keeps the local store and the workforce API in step.

    Example:
        service = EmployeeSyncService(session, remote_client)
        outcome = await service.synchronize(
            Provider.PROVIDER1, "EMP001", record, local_fields
        )
        status_code = 200 if outcome.is_update else 201
    """

    def __init__(self, session: AsyncSession, remote: WorkforceApiClient):
        self.session = session
        self.remote = remote
        self.repository = EmployeeRepository(session)

    async def exists(self, provider: Provider, employee_id: str) -> bool:
        """Check whether the employee has a local record."""
        employee = await self.repository.get_by_provider_and_employee_id(
            provider.value, employee_id
        )
        return employee is not None

    async def synchronize(
        self,
        provider: Provider,
        employee_id: str,
        record: EmployeeSyncRecord,
        local_fields: dict[str, Any],
    ) -> SyncOutcome:
        """Create or update the employee remotely, then persist locally.

        An existing local record only counts as synchronized when it carries
        a ``remote_id``; a record without one is created remotely again.

        Args:
            provider: The payload's provider
            employee_id: Provider-scoped employee identifier
            record: Canonical record sent to the workforce API
            local_fields: Column values for the local row

        Returns:
            SyncOutcome whose result is ``Success`` with a summary or the
            remote ``Failure``
        """
        log = logger.bind(provider=provider.value, employee_id=employee_id)

        try:
            existing = await self.repository.get_by_provider_and_employee_id(
                provider.value, employee_id
            )
            # Commit expires loaded rows; read what the decision needs first.
            remote_id = existing.remote_id if existing is not None else None
            is_update = existing is not None and remote_id is not None
            # Release the read transaction before the network call.
            if self.session.in_transaction():
                await self.session.commit()
        except Exception:
            log.exception("employee_lookup_failed")
            return SyncOutcome(result=Failure(SYNC_ERROR_MESSAGE), is_update=False)

        action = "update" if is_update else "create"

        if is_update:
            result = await self.remote.update_employee(remote_id, record)
        else:
            result = await self.remote.create_employee(record)

        if not result.success:
            record_employee_sync(provider.value, action, "failure")
            log.warning("employee_sync_remote_failed", action=action, error=result.error)
            return SyncOutcome(result=result, is_update=is_update)

        assigned = result.data.get("id")
        if assigned is None:
            assigned = result.data.get("employeeId")
        fields = dict(local_fields)
        if assigned is not None:
            fields["remote_id"] = str(assigned)
        elif remote_id is not None:
            fields["remote_id"] = remote_id

        try:
            summary = await self._persist(provider, employee_id, fields)
        except Exception:
            record_employee_sync(provider.value, action, "failure")
            log.exception("employee_persist_failed", action=action)
            return SyncOutcome(result=Failure(SYNC_ERROR_MESSAGE), is_update=is_update)

        record_employee_sync(provider.value, action, "success")
        log.info(
            "employee_synchronized",
            action=action,
            id=summary["id"],
            remote_id=summary["remoteId"],
        )
        summary["message"] = (
            "Employee updated successfully" if is_update else "Employee created successfully"
        )
        return SyncOutcome(result=Success(summary), is_update=is_update)

    async def _persist(
        self, provider: Provider, employee_id: str, fields: dict[str, Any]
    ) -> dict[str, Any]:
        try:
            return await self._write(provider, employee_id, fields)
        except IntegrityError:
            # A concurrent sync inserted the same employee after our lookup.
            logger.warning(
                "employee_insert_conflict", provider=provider.value, employee_id=employee_id
            )
            return await self._write(provider, employee_id, fields)

    async def _write(
        self, provider: Provider, employee_id: str, fields: dict[str, Any]
    ) -> dict[str, Any]:
        """Insert or update the local row and summarize it before commit."""
        async with transaction(self.session):
            employee = await self.repository.get_by_provider_and_employee_id(
                provider.value, employee_id
            )
            if employee is not None:
                values = dict(fields)
                if employee.remote_id is not None:
                    # remote_id is assigned once and never replaced.
                    values["remote_id"] = employee.remote_id
                employee = await self.repository.update(employee, values, commit=False)
            else:
                values = {"provider": provider.value, "employee_id": employee_id, **fields}
                employee = await self.repository.create(
                    Employee(**{k: v for k, v in values.items() if hasattr(Employee, k)}),
                    commit=False,
                )
            return {
                "id": employee.id,
                "employeeId": employee.employee_id,
                "provider": employee.provider,
                "remoteId": employee.remote_id,
            }

    async def fetch(self, provider: Provider, employee_id: str) -> ApiResult:
        """Return the local employee merged with the remote snapshot.

        A failing remote lookup leaves ``remoteSnapshot`` as None instead
        of failing the whole fetch.

        Returns:
            ``Success`` with the employee, ``Failure("Employee not found")``
            when there is no local record, or a generic ``Failure`` on
            unexpected errors
        """
        try:
            employee = await self.repository.get_by_provider_and_employee_id(
                provider.value, employee_id
            )
            if employee is None:
                return Failure(NOT_FOUND_MESSAGE)

            data = serialize_employee(employee)
            data["remoteSnapshot"] = None

            if employee.remote_id is not None:
                remote = await self.remote.get_employee(employee.remote_id)
                if remote.success:
                    data["remoteSnapshot"] = remote.data
                else:
                    logger.info(
                        "remote_snapshot_unavailable",
                        provider=provider.value,
                        employee_id=employee_id,
                        error=remote.error,
                    )

            return Success(data)
        except Exception:
            logger.exception(
                "employee_fetch_failed", provider=provider.value, employee_id=employee_id
            )
            return Failure(RETRIEVAL_ERROR_MESSAGE)
