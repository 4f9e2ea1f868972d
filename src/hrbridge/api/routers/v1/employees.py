"""Employee endpoints.

This module provides REST API endpoints for HR providers:
- GET /v1/{provider}/employees/{employee_id} - Local record with remote snapshot
- POST /v1/{provider}/employees - Create or update (201 created, 200 updated)
- PUT /v1/{provider}/employees/{employee_id} - Update an existing employee
"""

from typing import Annotated, Any, NoReturn

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response, status

from hrbridge.api.dependencies import get_employee_payload, get_provider, get_sync_service
from hrbridge.api.schemas.employee import EmployeeResponse, EmployeeSyncResponse
from hrbridge.api.schemas.errors import ErrorCode
from hrbridge.core.logging import LogContext
from hrbridge.employees.registry import get_binding
from hrbridge.employees.service import (
    NOT_FOUND_MESSAGE,
    SYNC_ERROR_MESSAGE,
    EmployeeSyncService,
    SyncOutcome,
)
from hrbridge.employees.types import Provider

logger = structlog.get_logger()

router = APIRouter(prefix="/{provider}/employees", tags=["employees"])

ProviderParam = Annotated[Provider, Depends(get_provider)]
ServiceParam = Annotated[EmployeeSyncService, Depends(get_sync_service)]
PayloadParam = Annotated[dict[str, Any], Depends(get_employee_payload)]


def _raise(status_code: int, code: ErrorCode, message: str, details: Any = None) -> NoReturn:
    detail: dict[str, Any] = {"code": code.value, "message": message}
    if details is not None:
        detail["details"] = details
    raise HTTPException(status_code=status_code, detail=detail)


def _raise_sync_failure(error: str) -> NoReturn:
    if error == SYNC_ERROR_MESSAGE:
        _raise(status.HTTP_500_INTERNAL_SERVER_ERROR, ErrorCode.INTERNAL_ERROR, error)
    _raise(status.HTTP_502_BAD_GATEWAY, ErrorCode.REMOTE_API_ERROR, error)


def _sync_response(outcome: SyncOutcome, response: Response, *, created_status: int) -> dict:
    result = outcome.result
    if not result.success:
        _raise_sync_failure(result.error)
    response.status_code = status.HTTP_200_OK if outcome.is_update else created_status
    return result.to_dict()


@router.get(
    "/{employee_id}",
    response_model=EmployeeResponse,
    summary="Get employee",
    responses={
        400: {"description": "Unknown provider"},
        404: {"description": "Employee never synchronized"},
    },
)
async def get_employee(
    provider: ProviderParam,
    employee_id: str,
    service: ServiceParam,
) -> dict:
    """Return the local employee merged with the workforce API snapshot.

    ``remoteSnapshot`` is null when the employee has no remote id yet or
    the workforce API lookup failed.
    """
    with LogContext(provider=provider.value, employee_id=employee_id):
        result = await service.fetch(provider, employee_id)

    if not result.success:
        if result.error == NOT_FOUND_MESSAGE:
            _raise(status.HTTP_404_NOT_FOUND, ErrorCode.NOT_FOUND, result.error)
        _raise(status.HTTP_500_INTERNAL_SERVER_ERROR, ErrorCode.INTERNAL_ERROR, result.error)

    return result.to_dict()


@router.post(
    "",
    response_model=EmployeeSyncResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create or update employee",
    description="""
    Validate the provider's native payload, normalize it and synchronize it
    with the workforce API.

    Returns 201 when the employee was created remotely and 200 when an
    already-synchronized employee was updated.
    """,
    responses={
        200: {"description": "Employee updated"},
        400: {"description": "Invalid provider, payload or escape characters"},
        401: {"description": "Missing or invalid provider token"},
        502: {"description": "Workforce API rejected the change"},
    },
)
async def create_employee(
    provider: ProviderParam,
    payload: PayloadParam,
    service: ServiceParam,
    response: Response,
) -> dict:
    """Create or update an employee from a provider payload."""
    prepared = get_binding(provider).prepare(payload)

    with LogContext(provider=provider.value, employee_id=prepared.employee_id):
        logger.info("employee_sync_requested", method="POST")
        outcome = await service.synchronize(
            prepared.provider, prepared.employee_id, prepared.record, prepared.local_fields
        )

    return _sync_response(outcome, response, created_status=status.HTTP_201_CREATED)


@router.put(
    "/{employee_id}",
    response_model=EmployeeSyncResponse,
    summary="Update employee",
    responses={
        400: {"description": "Invalid payload or mismatched employee id"},
        401: {"description": "Missing or invalid provider token"},
        404: {"description": "Employee never synchronized"},
        502: {"description": "Workforce API rejected the change"},
    },
)
async def update_employee(
    provider: ProviderParam,
    employee_id: str,
    payload: PayloadParam,
    service: ServiceParam,
    response: Response,
) -> dict:
    """Update an employee that was previously synchronized.

    The payload's employee identifier must match the path.
    """
    prepared = get_binding(provider).prepare(payload)

    if prepared.employee_id != employee_id:
        _raise(
            status.HTTP_400_BAD_REQUEST,
            ErrorCode.MISMATCHED_EMPLOYEE_ID,
            "Employee ID in payload does not match URL",
            {"path": employee_id, "payload": prepared.employee_id},
        )

    with LogContext(provider=provider.value, employee_id=employee_id):
        if not await service.exists(provider, employee_id):
            _raise(status.HTTP_404_NOT_FOUND, ErrorCode.NOT_FOUND, NOT_FOUND_MESSAGE)

        logger.info("employee_sync_requested", method="PUT")
        outcome = await service.synchronize(
            prepared.provider, prepared.employee_id, prepared.record, prepared.local_fields
        )

    return _sync_response(outcome, response, created_status=status.HTTP_200_OK)
