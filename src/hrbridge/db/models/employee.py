"""Employee model: the local copy of every synchronized employee."""

from typing import Any

from sqlalchemy import Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, PortableJSON, TimestampMixin


class Employee(Base, TimestampMixin):
    """An employee as received from one provider and mirrored remotely.

    ``employee_id`` is only unique within a provider, so lookups always use
    the (provider, employee_id) pair. ``remote_id`` stays null until the
    first successful remote create and is never cleared afterwards.
    """

    __tablename__ = "employees"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[str] = mapped_column(String(100), nullable=False)
    provider: Mapped[str] = mapped_column(String(50), nullable=False)

    # Canonical fields
    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    last_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    position: Mapped[str | None] = mapped_column(String(255), nullable=True)
    department: Mapped[str | None] = mapped_column(String(255), nullable=True)
    start_date: Mapped[str | None] = mapped_column(String(10), nullable=True)  # ISO date
    status: Mapped[str] = mapped_column(String(20), nullable=False)

    remote_id: Mapped[str | None] = mapped_column(String(255), nullable=True, unique=True)

    # Validated provider payload as received
    provider_data: Mapped[dict[str, Any]] = mapped_column(PortableJSON(), nullable=False, default=dict)

    __table_args__ = (
        UniqueConstraint("provider", "employee_id", name="uq_employees_provider_employee_id"),
        Index("idx_employees_email", "email"),
    )

    def __repr__(self) -> str:
        return (
            f"<Employee(id={self.id}, provider={self.provider}, "
            f"employee_id={self.employee_id}, remote_id={self.remote_id})>"
        )
