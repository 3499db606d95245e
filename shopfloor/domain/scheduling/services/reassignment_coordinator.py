"""
Reassignment Coordinator

Moves an existing assignment to another machine in response to a
drag-and-drop intent. Timing, quantity and status are carried over as they
are; only the machine reference changes.
"""

from dataclasses import dataclass, field
from uuid import UUID

from shopfloor.core.config import settings
from shopfloor.core.observability import ASSIGNMENT_OPERATIONS, get_logger

from ...shared.exceptions import AssignmentNotFoundError, ResourceConflictError
from ..entities.assignment import Assignment
from ..events.domain_events import AssignmentReassigned
from ..repositories.unit_of_work import UnitOfWorkFactory
from ..value_objects.enums import ACTIVE_ASSIGNMENT_STATUSES, OverlapPolicy

logger = get_logger(__name__)


@dataclass(frozen=True)
class ReassignmentResult:
    """Outcome of a reassignment request."""

    assignment: Assignment
    changed: bool
    previous_machine_id: UUID
    overlapping: tuple[Assignment, ...] = field(default_factory=tuple)

    @property
    def has_overlap(self) -> bool:
        return bool(self.overlapping)


class ReassignmentCoordinator:
    """
    Applies a single machine change to an assignment.

    The quality gate and the target machine's availability status are not
    re-checked. Time overlap with other live assignments on the target machine
    is handled according to the configured ``OverlapPolicy``.
    """

    def __init__(
        self,
        unit_of_work_factory: UnitOfWorkFactory,
        overlap_policy: OverlapPolicy | None = None,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._overlap_policy = overlap_policy or settings.REASSIGN_OVERLAP_POLICY

    @property
    def overlap_policy(self) -> OverlapPolicy:
        return self._overlap_policy

    async def reassign(self, assignment_id: UUID, target_machine_id: UUID) -> ReassignmentResult:
        """
        Move an assignment onto ``target_machine_id``.

        Args:
            assignment_id: Assignment being dragged
            target_machine_id: Machine row it was dropped on

        Returns:
            The resulting assignment; ``changed`` is False for a same-machine drop

        Raises:
            AssignmentNotFoundError: If the assignment does not exist
            ResourceConflictError: If the policy forbids an overlap that exists
            StoreError: If the update fails
        """
        with self._uow_factory() as uow:
            assignment = await uow.assignments.get(assignment_id)
            if assignment is None:
                raise AssignmentNotFoundError(assignment_id)

            if assignment.machine_id == target_machine_id:
                logger.debug(
                    "Reassignment skipped, assignment already on target machine",
                    assignment_id=str(assignment_id),
                    machine_id=str(target_machine_id),
                )
                return ReassignmentResult(
                    assignment=assignment,
                    changed=False,
                    previous_machine_id=assignment.machine_id,
                )

            overlapping = await self._find_overlaps(uow, assignment, target_machine_id)

            updated = await uow.assignments.update_machine(assignment_id, target_machine_id)
            uow.add_domain_event(
                AssignmentReassigned(
                    aggregate_id=updated.id,
                    assignment_id=updated.id,
                    work_order_id=updated.wo_id,
                    old_machine_id=assignment.machine_id,
                    new_machine_id=target_machine_id,
                )
            )

        ASSIGNMENT_OPERATIONS.labels(operation="reassign", status="success").inc()
        logger.info(
            "Assignment reassigned",
            assignment_id=str(assignment_id),
            from_machine_id=str(assignment.machine_id),
            to_machine_id=str(target_machine_id),
            overlap_count=len(overlapping),
        )
        return ReassignmentResult(
            assignment=updated,
            changed=True,
            previous_machine_id=assignment.machine_id,
            overlapping=tuple(overlapping),
        )

    async def _find_overlaps(
        self, uow, assignment: Assignment, target_machine_id: UUID
    ) -> list[Assignment]:
        if self._overlap_policy is OverlapPolicy.PERMIT:
            return []

        live = await uow.assignments.list_by_machine(
            target_machine_id, ACTIVE_ASSIGNMENT_STATUSES
        )
        overlapping = [
            other for other in live if other.id != assignment.id and other.overlaps(assignment)
        ]
        if not overlapping:
            return []

        if self._overlap_policy is OverlapPolicy.FORBID:
            ASSIGNMENT_OPERATIONS.labels(operation="reassign", status="conflict").inc()
            raise ResourceConflictError(
                f"Machine {target_machine_id} already has {len(overlapping)} "
                f"overlapping assignment(s)",
                details={
                    "assignment_id": str(assignment.id),
                    "machine_id": str(target_machine_id),
                    "overlap_count": len(overlapping),
                },
            )

        logger.warning(
            "Reassignment overlaps existing assignments",
            assignment_id=str(assignment.id),
            machine_id=str(target_machine_id),
            overlapping_ids=[str(other.id) for other in overlapping],
        )
        return overlapping
