"""
Assignment repository implementation backed by SQLModel.

Implements the AssignmentRepository interface defined in the domain layer.
The session belongs to the unit of work, so this repository flushes but never
commits.
"""

from collections.abc import Callable, Iterable
from datetime import datetime
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

from shopfloor.domain.scheduling.entities.assignment import Assignment
from shopfloor.domain.scheduling.repositories.assignment_repository import (
    AssignmentRepository,
)
from shopfloor.domain.scheduling.value_objects.enums import AssignmentStatus
from shopfloor.domain.shared.base import utc_now
from shopfloor.domain.shared.exceptions import (
    AssignmentNotFoundError,
    AssignmentStatusError,
    StoreError,
)
from shopfloor.infrastructure.database.models import AssignmentRow

from .mappers import AssignmentMapper


class SqlModelAssignmentRepository(AssignmentRepository):
    """
    Repository implementation for machine assignments.

    Reads are ordered by scheduled start. SQLAlchemy failures surface as
    StoreError; the owning unit of work rolls the transaction back.
    """

    def __init__(self, session: Session, clock: Callable[[], datetime] = utc_now):
        """
        Initialize repository with database session.

        Args:
            session: SQLModel session owned by the unit of work
            clock: Source of ``updated_at`` timestamps
        """
        self.session = session
        self._clock = clock

    async def create_batch(self, assignments: list[Assignment]) -> list[Assignment]:
        try:
            self.session.add_all([AssignmentMapper.domain_to_sql(a) for a in assignments])
            self.session.flush()
        except SQLAlchemyError as e:
            raise StoreError(
                f"Failed to insert assignment batch: {str(e)}", operation="create_batch"
            ) from e
        return list(assignments)

    async def get(self, assignment_id: UUID) -> Assignment | None:
        row = self._get_row(assignment_id)
        return AssignmentMapper.sql_to_domain(row) if row else None

    async def list_by_machine(
        self,
        machine_id: UUID,
        statuses: Iterable[AssignmentStatus] | None = None,
    ) -> list[Assignment]:
        statement = select(AssignmentRow).where(AssignmentRow.machine_id == machine_id)
        if statuses is not None:
            statement = statement.where(
                col(AssignmentRow.status).in_([s.value for s in statuses])
            )
        return self._list(statement, "list_by_machine")

    async def list_by_work_order(self, wo_id: UUID) -> list[Assignment]:
        statement = select(AssignmentRow).where(AssignmentRow.wo_id == wo_id)
        return self._list(statement, "list_by_work_order")

    async def list_by_statuses(
        self, statuses: Iterable[AssignmentStatus]
    ) -> list[Assignment]:
        statement = select(AssignmentRow).where(
            col(AssignmentRow.status).in_([s.value for s in statuses])
        )
        return self._list(statement, "list_by_statuses")

    async def update_machine(self, assignment_id: UUID, new_machine_id: UUID) -> Assignment:
        row = self._get_required_row(assignment_id)
        try:
            row.machine_id = new_machine_id
            row.updated_at = self._clock()
            self.session.add(row)
            self.session.flush()
        except SQLAlchemyError as e:
            raise StoreError(
                f"Failed to reassign assignment {assignment_id}: {str(e)}",
                operation="update_machine",
            ) from e
        return AssignmentMapper.sql_to_domain(row)

    async def update_status(
        self, assignment_id: UUID, new_status: AssignmentStatus
    ) -> Assignment:
        row = self._get_required_row(assignment_id)
        current = AssignmentStatus(row.status)
        if not current.can_transition_to(new_status):
            raise AssignmentStatusError(assignment_id, current.value, new_status.value)

        try:
            row.status = new_status.value
            row.updated_at = self._clock()
            self.session.add(row)
            self.session.flush()
        except SQLAlchemyError as e:
            raise StoreError(
                f"Failed to update status of assignment {assignment_id}: {str(e)}",
                operation="update_status",
            ) from e
        return AssignmentMapper.sql_to_domain(row)

    def _get_row(self, assignment_id: UUID) -> AssignmentRow | None:
        try:
            return self.session.get(AssignmentRow, assignment_id)
        except SQLAlchemyError as e:
            raise StoreError(
                f"Error finding assignment {assignment_id}: {str(e)}", operation="get"
            ) from e

    def _get_required_row(self, assignment_id: UUID) -> AssignmentRow:
        row = self._get_row(assignment_id)
        if row is None:
            raise AssignmentNotFoundError(assignment_id)
        return row

    def _list(self, statement, operation: str) -> list[Assignment]:
        statement = statement.order_by(AssignmentRow.scheduled_start)
        try:
            rows = self.session.exec(statement).all()
        except SQLAlchemyError as e:
            raise StoreError(f"Error listing assignments: {str(e)}", operation=operation) from e
        return [AssignmentMapper.sql_to_domain(row) for row in rows]
