"""Provider dispatch.

Maps each ``Provider`` to the strategies that handle its schema: the
payload model used for validation, the mapper, and the status translator.
Provider logic is independent per provider; there is no shared base class.

Usage:
    binding = get_binding(resolve_provider("Provider1"))
    prepared = binding.prepare(request_json)   # raises pydantic.ValidationError
    outcome = await service.synchronize(
        prepared.provider, prepared.employee_id, prepared.record, prepared.local_fields
    )
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from hrbridge.core.exceptions import InvalidProviderError
from hrbridge.employees.mappers import (
    EmployeeMapper,
    Provider1EmployeeMapper,
    Provider2EmployeeMapper,
)
from hrbridge.employees.status import (
    Provider1StatusTranslator,
    Provider2StatusTranslator,
    StatusTranslator,
)
from hrbridge.employees.types import (
    EmployeeSyncRecord,
    Provider,
    Provider1EmployeePayload,
    Provider2EmployeePayload,
)


@dataclass(frozen=True)
class PreparedEmployee:
    """A validated provider payload ready for synchronization."""

    provider: Provider
    employee_id: str
    record: EmployeeSyncRecord
    local_fields: dict[str, Any]


@dataclass(frozen=True)
class ProviderBinding:
    """The strategy set for one provider."""

    provider: Provider
    payload_model: type[BaseModel]
    mapper: EmployeeMapper[Any]
    status_translator: StatusTranslator
    extract_employee_id: Callable[[Any], str]

    def validate(self, raw: dict[str, Any]) -> BaseModel:
        """Validate a raw payload against this provider's schema.

        Raises:
            pydantic.ValidationError: If the payload does not match
        """
        return self.payload_model.model_validate(raw)

    def prepare(self, raw: dict[str, Any]) -> PreparedEmployee:
        """Validate, map, and build local fields for a raw payload."""
        payload = self.validate(raw)
        record = self.mapper.map_to_canonical(payload)
        return PreparedEmployee(
            provider=self.provider,
            employee_id=self.extract_employee_id(payload),
            record=record,
            local_fields=self.prepare_local_fields(payload, record),
        )

    def prepare_local_fields(
        self, payload: BaseModel, record: EmployeeSyncRecord
    ) -> dict[str, Any]:
        """Column values for the local store, including the raw payload."""
        fields = record.to_local_fields()
        fields["provider"] = self.provider.value
        fields["provider_data"] = payload.model_dump(mode="json")
        return fields


_PROVIDER1_STATUS = Provider1StatusTranslator()
_PROVIDER2_STATUS = Provider2StatusTranslator()

PROVIDER_BINDINGS: dict[Provider, ProviderBinding] = {
    Provider.PROVIDER1: ProviderBinding(
        provider=Provider.PROVIDER1,
        payload_model=Provider1EmployeePayload,
        mapper=Provider1EmployeeMapper(_PROVIDER1_STATUS),
        status_translator=_PROVIDER1_STATUS,
        extract_employee_id=lambda payload: payload.emp_id,
    ),
    Provider.PROVIDER2: ProviderBinding(
        provider=Provider.PROVIDER2,
        payload_model=Provider2EmployeePayload,
        mapper=Provider2EmployeeMapper(_PROVIDER2_STATUS),
        status_translator=_PROVIDER2_STATUS,
        extract_employee_id=lambda payload: payload.employee_number,
    ),
}


def normalize_provider(value: str) -> str:
    """Lowercase and trim a provider discriminator."""
    return value.strip().lower()


def resolve_provider(value: str) -> Provider:
    """Resolve a provider discriminator, case-insensitively.

    Raises:
        InvalidProviderError: If the value names no supported provider
    """
    try:
        return Provider(normalize_provider(value))
    except ValueError:
        raise InvalidProviderError(value) from None


def get_binding(provider: Provider | str) -> ProviderBinding:
    """Get the strategy set for a provider (enum or raw string)."""
    if not isinstance(provider, Provider):
        provider = resolve_provider(provider)
    return PROVIDER_BINDINGS[provider]
