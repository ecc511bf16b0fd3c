"""Data Port protocol and its adapters."""

from budget_kernel.ports.base import DataPort
from budget_kernel.ports.memory import InMemoryDataPort
from budget_kernel.ports.sql import SqlAlchemyDataPort

__all__ = ["DataPort", "InMemoryDataPort", "SqlAlchemyDataPort"]
