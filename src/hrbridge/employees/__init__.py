"""Employee normalization and synchronization.

Provider payloads are validated, mapped to the canonical
``EmployeeSyncRecord`` and synchronized with the workforce API by
``EmployeeSyncService``.
"""

from hrbridge.employees.registry import (
    PROVIDER_BINDINGS,
    PreparedEmployee,
    ProviderBinding,
    get_binding,
    resolve_provider,
)
from hrbridge.employees.types import CanonicalStatus, EmployeeSyncRecord, Provider

__all__ = [
    "CanonicalStatus",
    "EmployeeSyncRecord",
    "PROVIDER_BINDINGS",
    "PreparedEmployee",
    "Provider",
    "ProviderBinding",
    "get_binding",
    "resolve_provider",
]
