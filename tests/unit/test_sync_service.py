"""Unit tests for EmployeeSyncService."""

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hrbridge.db.models.employee import Employee
from hrbridge.db.repositories.employee import EmployeeRepository
from hrbridge.employees.registry import get_binding
from hrbridge.employees.service import (
    NOT_FOUND_MESSAGE,
    RETRIEVAL_ERROR_MESSAGE,
    SYNC_ERROR_MESSAGE,
    EmployeeSyncService,
    serialize_employee,
)
from hrbridge.employees.types import Provider
from hrbridge.remote.types import Failure


@pytest.fixture
def service(db_session, remote_client) -> EmployeeSyncService:
    return EmployeeSyncService(db_session, remote_client)


async def _sync(service: EmployeeSyncService, provider: Provider, raw: dict):
    prepared = get_binding(provider).prepare(raw)
    return await service.synchronize(
        prepared.provider, prepared.employee_id, prepared.record, prepared.local_fields
    )


async def _count(session) -> int:
    result = await session.execute(select(func.count()).select_from(Employee))
    return result.scalar_one()


class TestSynchronize:
    """Tests for the create/update decision and local persistence."""

    @pytest.mark.asyncio
    async def test_first_sync_creates(self, service, provider1_payload, workforce_api):
        outcome = await _sync(service, Provider.PROVIDER1, provider1_payload)

        assert outcome.is_update is False
        assert outcome.result.success
        assert outcome.result.data["remoteId"] == "tt-1"
        assert outcome.result.data["employeeId"] == "EMP001"
        assert outcome.result.data["message"] == "Employee created successfully"
        assert workforce_api.employee_requests[0].method == "POST"

        employee = await service.repository.get_by_provider_and_employee_id("provider1", "EMP001")
        assert employee.remote_id == "tt-1"
        assert employee.first_name == "John"
        assert employee.status == "active"
        assert employee.provider_data["emp_id"] == "EMP001"

    @pytest.mark.asyncio
    async def test_second_sync_updates_same_row(self, service, provider1_payload, workforce_api):
        """Re-sending a synchronized employee updates it remotely and locally."""
        created = await _sync(service, Provider.PROVIDER1, provider1_payload)

        provider1_payload["last_name"] = "Smith"
        updated = await _sync(service, Provider.PROVIDER1, provider1_payload)

        assert updated.is_update is True
        assert updated.result.data["id"] == created.result.data["id"]
        assert updated.result.data["remoteId"] == "tt-1"
        assert updated.result.data["message"] == "Employee updated successfully"

        put = workforce_api.employee_requests[-1]
        assert put.method == "PUT"
        assert put.url.path == "/v1/employees/tt-1"

        employee = await service.repository.get_by_provider_and_employee_id("provider1", "EMP001")
        assert employee.last_name == "Smith"
        assert await _count(service.session) == 1

    @pytest.mark.asyncio
    async def test_remote_failure_writes_nothing(self, service, provider1_payload, workforce_api):
        workforce_api.queue_response(503, {"error": {"message": "Workforce API unavailable"}})

        outcome = await _sync(service, Provider.PROVIDER1, provider1_payload)

        assert outcome.result == Failure("Workforce API unavailable")
        assert outcome.is_update is False
        assert await _count(service.session) == 0

    @pytest.mark.asyncio
    async def test_failed_update_leaves_row_unchanged(
        self, service, provider1_payload, workforce_api, db_session
    ):
        await _sync(service, Provider.PROVIDER1, provider1_payload)
        workforce_api.queue_response(409, {"message": "Conflict"})

        provider1_payload["last_name"] = "Smith"
        outcome = await _sync(service, Provider.PROVIDER1, provider1_payload)

        assert outcome.result == Failure("Conflict")
        assert outcome.is_update is True
        employee = await service.repository.get_by_provider_and_employee_id("provider1", "EMP001")
        await db_session.refresh(employee)
        assert employee.last_name == "Doe"

    @pytest.mark.asyncio
    async def test_record_without_remote_id_is_created(
        self, service, provider1_payload, workforce_api, db_session
    ):
        """A local row that never reached the remote API is created, not updated."""
        prepared = get_binding(Provider.PROVIDER1).prepare(provider1_payload)
        await EmployeeRepository(db_session).create(Employee(**prepared.local_fields))

        outcome = await _sync(service, Provider.PROVIDER1, provider1_payload)

        assert outcome.is_update is False
        assert workforce_api.employee_requests[0].method == "POST"
        assert outcome.result.data["remoteId"] == "tt-1"
        assert await _count(service.session) == 1

    @pytest.mark.asyncio
    async def test_remote_employee_id_used_when_id_missing(
        self, service, provider1_payload, workforce_api
    ):
        workforce_api.queue_response(201, {"data": {"employeeId": "WF-77"}})

        outcome = await _sync(service, Provider.PROVIDER1, provider1_payload)

        assert outcome.result.data["remoteId"] == "WF-77"

    @pytest.mark.asyncio
    async def test_create_without_any_id_leaves_remote_id_unset(
        self, service, provider1_payload, workforce_api
    ):
        workforce_api.queue_response(201, {"data": {}})

        outcome = await _sync(service, Provider.PROVIDER1, provider1_payload)

        assert outcome.result.success
        assert outcome.result.data["remoteId"] is None

    @pytest.mark.asyncio
    async def test_providers_are_scoped(self, service, provider1_payload, provider2_payload):
        """The same employee id under two providers gives two employees."""
        provider2_payload["employee_number"] = "EMP001"

        first = await _sync(service, Provider.PROVIDER1, provider1_payload)
        second = await _sync(service, Provider.PROVIDER2, provider2_payload)

        assert second.is_update is False
        assert first.result.data["id"] != second.result.data["id"]
        assert second.result.data["remoteId"] == "tt-2"

    @pytest.mark.asyncio
    async def test_falsy_remote_id_is_kept(self, service, provider1_payload, workforce_api):
        workforce_api.queue_response(201, {"data": {"id": 0, "employeeId": "WF-77"}})

        outcome = await _sync(service, Provider.PROVIDER1, provider1_payload)

        assert outcome.result.data["remoteId"] == "0"

    @pytest.mark.asyncio
    async def test_sessions_that_expire_on_commit(
        self, test_engine, remote_client, provider1_payload
    ):
        """Loaded rows expire on commit; the outcome must not touch them afterwards."""
        factory = async_sessionmaker(test_engine, class_=AsyncSession)

        async with factory() as session:
            created = await _sync(
                EmployeeSyncService(session, remote_client), Provider.PROVIDER1, provider1_payload
            )

        provider1_payload["last_name"] = "Smith"
        async with factory() as session:
            updated = await _sync(
                EmployeeSyncService(session, remote_client), Provider.PROVIDER1, provider1_payload
            )

        assert created.result.success
        assert updated.result.success
        assert updated.is_update is True
        assert updated.result.data["id"] == created.result.data["id"]
        assert updated.result.data["remoteId"] == "tt-1"

    @pytest.mark.asyncio
    async def test_concurrent_insert_updates_existing_row(
        self, service, provider1_payload, db_session
    ):
        """A row inserted by another sync after the lookup is updated, not duplicated."""
        prepared = get_binding(Provider.PROVIDER1).prepare(provider1_payload)
        winner = await EmployeeRepository(db_session).create(
            Employee(**prepared.local_fields, remote_id="tt-winner")
        )
        winner_id = winner.id

        real_lookup = service.repository.get_by_provider_and_employee_id
        lookups = []

        async def stale_lookup(provider, employee_id):
            lookups.append(employee_id)
            if len(lookups) <= 2:
                return None
            return await real_lookup(provider, employee_id)

        provider1_payload["job_title"] = "Staff Engineer"
        with patch.object(service.repository, "get_by_provider_and_employee_id", stale_lookup):
            outcome = await _sync(service, Provider.PROVIDER1, provider1_payload)

        assert outcome.result.success
        assert outcome.result.data["id"] == winner_id
        assert outcome.result.data["remoteId"] == "tt-winner"
        assert len(lookups) == 3

        employee = await service.repository.get_by_provider_and_employee_id("provider1", "EMP001")
        assert employee.position == "Staff Engineer"
        assert await _count(service.session) == 1
    @pytest.mark.asyncio
    async def test_persist_error_returns_generic_failure(self, service, provider1_payload):
        with patch.object(
            service.repository, "create", AsyncMock(side_effect=RuntimeError("disk full"))
        ):
            outcome = await _sync(service, Provider.PROVIDER1, provider1_payload)

        assert outcome.result == Failure(SYNC_ERROR_MESSAGE)

    @pytest.mark.asyncio
    async def test_lookup_error_returns_generic_failure(
        self, service, provider1_payload, workforce_api
    ):
        with patch.object(
            service.repository,
            "get_by_provider_and_employee_id",
            AsyncMock(side_effect=RuntimeError("database locked")),
        ):
            outcome = await _sync(service, Provider.PROVIDER1, provider1_payload)

        assert outcome.result == Failure(SYNC_ERROR_MESSAGE)
        assert workforce_api.employee_requests == []


class TestExists:
    """Tests for EmployeeSyncService.exists."""

    @pytest.mark.asyncio
    async def test_exists(self, service, provider1_payload):
        assert not await service.exists(Provider.PROVIDER1, "EMP001")

        await _sync(service, Provider.PROVIDER1, provider1_payload)

        assert await service.exists(Provider.PROVIDER1, "EMP001")
        assert not await service.exists(Provider.PROVIDER2, "EMP001")


class TestFetch:
    """Tests for EmployeeSyncService.fetch."""

    @pytest.mark.asyncio
    async def test_not_found(self, service):
        assert await service.fetch(Provider.PROVIDER1, "EMP404") == Failure(NOT_FOUND_MESSAGE)

    @pytest.mark.asyncio
    async def test_includes_remote_snapshot(self, service, provider1_payload):
        await _sync(service, Provider.PROVIDER1, provider1_payload)

        result = await service.fetch(Provider.PROVIDER1, "EMP001")

        assert result.success
        assert result.data["firstName"] == "John"
        assert result.data["remoteId"] == "tt-1"
        assert result.data["remoteSnapshot"]["id"] == "tt-1"
        assert result.data["remoteSnapshot"]["email"] == "john@example.com"

    @pytest.mark.asyncio
    async def test_snapshot_null_when_remote_lookup_fails(
        self, service, provider1_payload, workforce_api
    ):
        await _sync(service, Provider.PROVIDER1, provider1_payload)
        workforce_api.employees.clear()

        result = await service.fetch(Provider.PROVIDER1, "EMP001")

        assert result.success
        assert result.data["remoteSnapshot"] is None

    @pytest.mark.asyncio
    async def test_snapshot_null_without_remote_id(
        self, service, provider1_payload, workforce_api, db_session
    ):
        prepared = get_binding(Provider.PROVIDER1).prepare(provider1_payload)
        await EmployeeRepository(db_session).create(Employee(**prepared.local_fields))

        result = await service.fetch(Provider.PROVIDER1, "EMP001")

        assert result.data["remoteSnapshot"] is None
        assert workforce_api.employee_requests == []

    @pytest.mark.asyncio
    async def test_unexpected_error(self, service):
        with patch.object(
            service.repository,
            "get_by_provider_and_employee_id",
            AsyncMock(side_effect=RuntimeError("boom")),
        ):
            result = await service.fetch(Provider.PROVIDER1, "EMP001")

        assert result == Failure(RETRIEVAL_ERROR_MESSAGE)


class TestSerializeEmployee:
    """Tests for serialize_employee."""

    @pytest.mark.asyncio
    async def test_camel_case_shape(self, db_session, provider2_payload):
        prepared = get_binding(Provider.PROVIDER2).prepare(provider2_payload)
        employee = await EmployeeRepository(db_session).create(Employee(**prepared.local_fields))

        data = serialize_employee(employee)

        assert data["employeeId"] == "E-42"
        assert data["provider"] == "provider2"
        assert data["phoneNumber"] == "+44-20-0000"
        assert data["startDate"] == "2023-01-15"
        assert data["status"] == "inactive"
        assert data["remoteId"] is None
        assert isinstance(data["createdAt"], str)
