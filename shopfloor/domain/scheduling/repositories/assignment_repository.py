"""
Assignment Repository Interface

Defines the contract for persisting machine assignments.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from uuid import UUID

from ..entities.assignment import Assignment
from ..value_objects.enums import ACTIVE_ASSIGNMENT_STATUSES, AssignmentStatus


class AssignmentRepository(ABC):
    """
    Abstract repository interface for Assignment entities.

    Defines the contract that infrastructure layer must implement
    for assignment persistence and retrieval.
    """

    @abstractmethod
    async def create_batch(self, assignments: list[Assignment]) -> list[Assignment]:
        """
        Insert all assignments, all or nothing.

        Args:
            assignments: Assignments created together for one work order

        Returns:
            The stored assignments

        Raises:
            StoreError: If any row fails; no rows remain written
        """
        pass

    @abstractmethod
    async def get(self, assignment_id: UUID) -> Assignment | None:
        """Retrieve an assignment by its ID."""
        pass

    @abstractmethod
    async def list_by_machine(
        self,
        machine_id: UUID,
        statuses: Iterable[AssignmentStatus] | None = None,
    ) -> list[Assignment]:
        """
        Retrieve assignments scheduled on a machine, ordered by start.

        Args:
            machine_id: Machine to filter by
            statuses: Optional status filter

        Raises:
            StoreError: If retrieval fails
        """
        pass

    @abstractmethod
    async def list_by_work_order(self, wo_id: UUID) -> list[Assignment]:
        """Retrieve all assignments for a work order, ordered by start."""
        pass

    @abstractmethod
    async def list_by_statuses(
        self, statuses: Iterable[AssignmentStatus]
    ) -> list[Assignment]:
        """Retrieve assignments in any of ``statuses``, ordered by start."""
        pass

    async def list_active(self) -> list[Assignment]:
        """Assignments shown on the live schedule board."""
        return await self.list_by_statuses(ACTIVE_ASSIGNMENT_STATUSES)

    @abstractmethod
    async def update_machine(self, assignment_id: UUID, new_machine_id: UUID) -> Assignment:
        """
        Move an assignment to another machine.

        Start, end, quantity and status are left untouched.

        Raises:
            AssignmentNotFoundError: If the assignment does not exist
            StoreError: If the update fails
        """
        pass

    @abstractmethod
    async def update_status(
        self, assignment_id: UUID, new_status: AssignmentStatus
    ) -> Assignment:
        """
        Change an assignment status.

        Raises:
            AssignmentNotFoundError: If the assignment does not exist
            AssignmentStatusError: If the transition is not allowed
            StoreError: If the update fails
        """
        pass
