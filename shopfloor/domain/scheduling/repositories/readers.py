"""
Interfaces for collaborators owned outside the scheduling subsystem:
work orders, machines, the action log and user roles.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from uuid import UUID

from ..entities.audit_entry import AuditEntry
from ..entities.machine import Machine
from ..entities.work_order import WorkOrder


class WorkOrderReader(ABC):
    """Read-only access to work orders."""

    @abstractmethod
    async def get(self, wo_id: UUID) -> WorkOrder | None:
        pass


class MachineReader(ABC):
    """Read-only access to machines."""

    @abstractmethod
    async def list(self, location: str | None = None) -> list[Machine]:
        """Machines ordered by code, optionally restricted to one location."""
        pass

    @abstractmethod
    async def get_many(self, machine_ids: Iterable[UUID]) -> dict[UUID, Machine]:
        """Machines keyed by ID; unknown IDs are absent from the result."""
        pass


class AuditLogSink(ABC):
    """Append-only action log."""

    @abstractmethod
    async def append(self, entry: AuditEntry) -> AuditEntry:
        pass


class RoleProvider(ABC):
    """Role lookup backed by the identity store."""

    @abstractmethod
    async def roles_for(self, actor: str) -> set[str]:
        pass
