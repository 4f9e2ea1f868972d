"""Per-provider status translation to canonical lifecycle states.

Each provider has its own vocabulary and its own fallback for values it
does not recognise. Provider 1 falls back to ``terminated`` and Provider 2
falls back to ``active``; the two defaults differ on purpose and must not
be unified.
"""

from typing import Protocol

from hrbridge.employees.types import CanonicalStatus


class StatusTranslator(Protocol):
    """Maps a provider's lifecycle state to a canonical state."""

    def map_to_canonical(self, provider_status: str) -> CanonicalStatus:
        """Translate a provider status. Total: never raises."""
        ...


class Provider1StatusTranslator:
    """Provider 1 statuses (already in the canonical vocabulary)."""

    TABLE: dict[str, CanonicalStatus] = {
        "active": CanonicalStatus.ACTIVE,
        "inactive": CanonicalStatus.INACTIVE,
        "terminated": CanonicalStatus.TERMINATED,
    }
    DEFAULT = CanonicalStatus.TERMINATED

    def map_to_canonical(self, provider_status: str) -> CanonicalStatus:
        return self.TABLE.get(provider_status, self.DEFAULT)


class Provider2StatusTranslator:
    """Provider 2 statuses (employed / on_leave / terminated)."""

    TABLE: dict[str, CanonicalStatus] = {
        "employed": CanonicalStatus.ACTIVE,
        "terminated": CanonicalStatus.TERMINATED,
        "on_leave": CanonicalStatus.INACTIVE,
    }
    DEFAULT = CanonicalStatus.ACTIVE

    def map_to_canonical(self, provider_status: str) -> CanonicalStatus:
        return self.TABLE.get(provider_status, self.DEFAULT)
