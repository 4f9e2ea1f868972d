"""Repository pattern for database access."""

from hrbridge.db.repositories.base import BaseRepository
from hrbridge.db.repositories.employee import EmployeeRepository

__all__ = [
    "BaseRepository",
    "EmployeeRepository",
]
