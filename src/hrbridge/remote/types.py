"""Result types returned across the workforce API boundary.

Remote operations never raise. They return ``Success`` carrying the
response ``data`` object or ``Failure`` carrying a caller-safe message.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Success:
    """A completed operation and its payload."""

    data: dict[str, Any] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return True

    def to_dict(self) -> dict[str, Any]:
        return {"success": True, "data": self.data}


@dataclass(frozen=True)
class Failure:
    """A failed operation and the message to surface."""

    error: str

    @property
    def success(self) -> bool:
        return False

    def to_dict(self) -> dict[str, Any]:
        return {"success": False, "error": self.error}


ApiResult = Success | Failure
