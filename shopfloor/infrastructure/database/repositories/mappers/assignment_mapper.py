"""
Mapper for converting between Assignment domain entities and stored rows.

Handles both the SQLModel row and the plain record shape returned by the
hosted store's REST API.
"""

from typing import Any

from shopfloor.domain.scheduling.entities.assignment import Assignment
from shopfloor.infrastructure.database.models import AssignmentRow

ASSIGNMENT_COLUMNS = tuple(Assignment.model_fields)


class AssignmentMapper:
    """Converts assignments to and from persistence shapes."""

    @staticmethod
    def domain_to_sql(assignment: Assignment) -> AssignmentRow:
        """
        Convert a domain Assignment to a new SQL row.

        Args:
            assignment: Domain assignment to convert

        Returns:
            SQL assignment row
        """
        return AssignmentRow(
            id=assignment.id,
            wo_id=assignment.wo_id,
            machine_id=assignment.machine_id,
            assigned_by=assignment.assigned_by,
            assigned_at=assignment.assigned_at,
            scheduled_start=assignment.scheduled_start,
            scheduled_end=assignment.scheduled_end,
            quantity_allocated=assignment.quantity_allocated,
            status=assignment.status.value,
            override_cycle_time_seconds=assignment.override_cycle_time_seconds,
            override_applied_by=assignment.override_applied_by,
            override_applied_at=assignment.override_applied_at,
            original_cycle_time_seconds=assignment.original_cycle_time_seconds,
            created_at=assignment.assigned_at,
            updated_at=assignment.updated_at,
        )

    @staticmethod
    def sql_to_domain(row: AssignmentRow) -> Assignment:
        """
        Convert a SQL row to a domain Assignment.

        Naive datetimes read back from the database are taken as UTC.
        """
        return Assignment.model_validate(
            {column: getattr(row, column) for column in ASSIGNMENT_COLUMNS}
        )

    @staticmethod
    def to_record(assignment: Assignment) -> dict[str, Any]:
        """JSON-ready insert payload."""
        return assignment.model_dump(mode="json")

    @staticmethod
    def from_record(record: dict[str, Any]) -> Assignment:
        return Assignment.model_validate(
            {column: record.get(column) for column in ASSIGNMENT_COLUMNS if column in record}
        )
