"""
Unit of Work Interface

Coordinates one transaction across the scheduling repositories and holds the
domain events raised inside it until the transaction commits.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable

from ...shared.base import DomainEvent
from .assignment_repository import AssignmentRepository
from .readers import AuditLogSink, MachineReader, WorkOrderReader


class UnitOfWorkInterface(ABC):
    """
    Abstract base class for Unit of Work pattern.

    Used as a context manager: a clean exit commits and then publishes the
    collected events, an exception rolls back and discards them.
    """

    assignments: AssignmentRepository
    work_orders: WorkOrderReader
    machines: MachineReader
    audit_log: AuditLogSink

    @abstractmethod
    def __enter__(self):
        """Enter the runtime context for the unit of work."""
        pass

    @abstractmethod
    def __exit__(self, exc_type, exc_val, exc_tb):
        """Exit the runtime context for the unit of work."""
        pass

    @abstractmethod
    def commit(self) -> None:
        """Commit all changes in the current transaction."""
        pass

    @abstractmethod
    def rollback(self) -> None:
        """Rollback all changes in the current transaction."""
        pass

    @abstractmethod
    def add_domain_event(self, event: DomainEvent) -> None:
        """Queue an event for publication after a successful commit."""
        pass


UnitOfWorkFactory = Callable[[], UnitOfWorkInterface]
