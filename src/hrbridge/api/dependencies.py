"""FastAPI dependencies for API endpoints."""

from typing import Annotated, Any

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from hrbridge.api.middleware.errors import INVALID_EMPLOYEE_DATA
from hrbridge.api.schemas.errors import ErrorCode
from hrbridge.db.config import get_db
from hrbridge.employees.registry import resolve_provider
from hrbridge.employees.service import EmployeeSyncService
from hrbridge.employees.types import Provider
from hrbridge.remote.client import WorkforceApiClient
from hrbridge.security.sanitization import check_escape_characters

__all__ = [
    "get_db",
    "get_employee_payload",
    "get_provider",
    "get_remote_client",
    "get_sync_service",
]


def get_provider(provider: str) -> Provider:
    """Resolve the ``{provider}`` path segment.

    Raises:
        InvalidProviderError: Mapped to 400 INVALID_PROVIDER
    """
    return resolve_provider(provider)


def get_remote_client(request: Request) -> WorkforceApiClient:
    """Workforce API client created during application startup."""
    client = getattr(request.app.state, "remote_client", None)
    if client is None:
        raise RuntimeError("Workforce API client not initialized")
    return client


def get_sync_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    remote: Annotated[WorkforceApiClient, Depends(get_remote_client)],
) -> EmployeeSyncService:
    """Synchronization service bound to the request's session."""
    return EmployeeSyncService(db, remote)


async def get_employee_payload(request: Request) -> dict[str, Any]:
    """Read the JSON body and reject strings carrying escape characters.

    Raises:
        HTTPException: 400 VALIDATION_ERROR when the body is not a JSON object
        EscapeCharacterError: Mapped to 400 INVALID_INPUT
    """
    try:
        payload = await request.json()
    except ValueError:
        payload = None

    if not isinstance(payload, dict):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "code": ErrorCode.VALIDATION_ERROR.value,
                "message": INVALID_EMPLOYEE_DATA,
                "details": [{"field": "body", "message": "Request body must be a JSON object"}],
            },
        )

    check_escape_characters(payload)
    return payload
