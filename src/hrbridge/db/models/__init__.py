"""Database models for hrbridge."""

from .base import Base, PortableJSON, TimestampMixin
from .employee import Employee

__all__ = [
    "Base",
    "Employee",
    "PortableJSON",
    "TimestampMixin",
]
