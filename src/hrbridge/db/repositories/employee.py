"""Employee repository."""

from sqlalchemy import select

from hrbridge.db.models.employee import Employee
from hrbridge.db.repositories.base import BaseRepository


class EmployeeRepository(BaseRepository[Employee, int]):
    """Repository for Employee model operations."""

    model = Employee

    async def get_by_provider_and_employee_id(
        self, provider: str, employee_id: str
    ) -> Employee | None:
        """Look up an employee by its provider-scoped identifier.

        Args:
            provider: Provider value (``provider1`` / ``provider2``)
            employee_id: The provider's own employee identifier

        Returns:
            The employee, or None if never synchronized
        """
        stmt = select(Employee).where(
            Employee.provider == provider,
            Employee.employee_id == employee_id,
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()
