"""
Machine Assignment Service

The assignment-creation workflow: validates a machine selection for a work
order, resolves the effective cycle time, plans the allocation and writes the
assignment batch together with its audit entry in one unit of work.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from shopfloor.core.config import settings
from shopfloor.core.observability import (
    ASSIGNMENT_OPERATIONS,
    CYCLE_TIME_OVERRIDES,
    get_logger,
    set_actor_id,
)

from ...shared.base import as_utc, utc_now
from ...shared.exceptions import (
    AssignmentNotFoundError,
    DomainError,
    InvalidInputError,
    PreconditionFailedError,
    WorkOrderNotFoundError,
)
from ..entities.assignment import Assignment
from ..entities.audit_entry import AuditEntry
from ..entities.work_order import WorkOrder
from ..events.domain_events import (
    AssignmentStatusChanged,
    CycleTimeOverridden,
    MachinesAssigned,
)
from ..repositories.unit_of_work import UnitOfWorkFactory
from ..value_objects.allocation import AllocationPlan
from ..value_objects.cycle_time import EffectiveCycleTime
from ..value_objects.enums import AssignmentStatus
from . import allocation_calculator
from .override_authority import OverrideAuthority

logger = get_logger(__name__)


@dataclass(frozen=True)
class AssignmentBatchResult:
    """Assignments written for one work order and how they were derived."""

    assignments: list[Assignment]
    plan: AllocationPlan
    effective_cycle_time: EffectiveCycleTime
    audit_entry: AuditEntry | None = None


@dataclass(frozen=True)
class AssignmentPreview:
    """Live summary shown while the operator is still choosing machines."""

    work_order: WorkOrder
    plan: AllocationPlan
    effective_cycle_time_seconds: float
    is_overridden: bool

    @property
    def qc_material_passed(self) -> bool:
        return self.work_order.qc_material_passed


class MachineAssignmentService:
    """
    Service for assigning machines to a work order.

    Every check runs before the first write; the batch insert and the
    optional audit append share one transactional boundary.
    """

    def __init__(
        self,
        unit_of_work_factory: UnitOfWorkFactory,
        override_authority: OverrideAuthority,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """
        Initialize the machine assignment service.

        Args:
            unit_of_work_factory: Creates the transactional boundary per call
            override_authority: Decides the effective cycle time
            clock: Source of the assignment timestamp
        """
        self._uow_factory = unit_of_work_factory
        self._override_authority = override_authority
        self._clock = clock

    async def assign_machines(
        self,
        actor: str,
        work_order_id: UUID,
        machine_ids: Sequence[UUID],
        start: datetime | None,
        override_cycle_time_seconds: float | None = None,
    ) -> AssignmentBatchResult:
        """
        Create one assignment per selected machine.

        Args:
            actor: Identity performing the assignment
            work_order_id: Work order being scheduled
            machine_ids: Selected machines, in selection order
            start: Shared start instant
            override_cycle_time_seconds: Optional cycle time override

        Returns:
            The created assignments, the plan and the audit entry if any

        Raises:
            WorkOrderNotFoundError: If the work order does not exist
            PreconditionFailedError: If material QC has not passed
            InvalidInputError: If the selection, start or cycle time is unusable
            UnauthorizedError: If an override is requested without capability
            StoreError: If the write fails; nothing is left written
        """
        set_actor_id(actor)
        try:
            result = await self._assign(
                actor, work_order_id, list(machine_ids), start, override_cycle_time_seconds
            )
        except DomainError as e:
            ASSIGNMENT_OPERATIONS.labels(operation="assign", status=e.error_type.value).inc()
            logger.warning(
                "Machine assignment rejected",
                work_order_id=str(work_order_id),
                error_type=e.error_type.value,
                error=e.message,
            )
            raise

        ASSIGNMENT_OPERATIONS.labels(operation="assign", status="success").inc()
        if result.audit_entry is not None:
            CYCLE_TIME_OVERRIDES.inc()
        logger.info(
            "Machines assigned",
            work_order_id=str(work_order_id),
            machine_count=len(result.assignments),
            scheduled_end=result.plan.end.isoformat(),
            overridden=result.effective_cycle_time.is_overridden,
        )
        return result

    async def _assign(
        self,
        actor: str,
        work_order_id: UUID,
        machine_ids: list[UUID],
        start: datetime | None,
        override_cycle_time_seconds: float | None,
    ) -> AssignmentBatchResult:
        with self._uow_factory() as uow:
            work_order = await uow.work_orders.get(work_order_id)
            if work_order is None:
                raise WorkOrderNotFoundError(work_order_id)

            if not work_order.qc_material_passed:
                raise PreconditionFailedError(
                    "Material QC must be passed before assigning machines",
                    work_order_id=work_order_id,
                )

            self._validate_selection(machine_ids, start)
            await self._ensure_selectable(uow, machine_ids)

            effective = await self._override_authority.authorize(
                actor, override_cycle_time_seconds, work_order.cycle_time_seconds
            )
            allocation = allocation_calculator.plan(
                work_order.quantity, effective.seconds, len(machine_ids), as_utc(start)
            )
            if not allocation.is_feasible:
                raise InvalidInputError(
                    "machine_ids",
                    len(machine_ids),
                    f"Quantity {work_order.quantity} cannot be split across "
                    f"{len(machine_ids)} machines",
                )

            assigned_at = self._clock()
            assignments = [
                Assignment.create(
                    wo_id=work_order.id,
                    machine_id=machine_id,
                    scheduled_start=allocation.start,
                    scheduled_end=allocation.end,
                    quantity_allocated=quantity,
                    assigned_by=actor,
                    assigned_at=assigned_at,
                    override=effective.override,
                )
                for machine_id, quantity in zip(machine_ids, allocation.quantities())
            ]
            created = await uow.assignments.create_batch(assignments)

            audit_entry = None
            if effective.override is not None:
                audit_entry = AuditEntry.for_cycle_time_override(
                    work_order.id,
                    effective.override,
                    machine_count=len(machine_ids),
                    department=settings.PRODUCTION_DEPARTMENT,
                )
                await uow.audit_log.append(audit_entry)
                uow.add_domain_event(
                    CycleTimeOverridden(
                        aggregate_id=work_order.id,
                        work_order_id=work_order.id,
                        original_cycle_time_seconds=effective.override.original_cycle_time_seconds,
                        override_cycle_time_seconds=effective.override.override_cycle_time_seconds,
                        applied_by=actor,
                    )
                )

            uow.add_domain_event(
                MachinesAssigned(
                    aggregate_id=work_order.id,
                    work_order_id=work_order.id,
                    assignment_ids=[a.id for a in created],
                    machine_ids=list(machine_ids),
                    scheduled_start=allocation.start,
                    scheduled_end=allocation.end,
                )
            )

        return AssignmentBatchResult(
            assignments=created,
            plan=allocation,
            effective_cycle_time=effective,
            audit_entry=audit_entry,
        )

    @staticmethod
    def _validate_selection(machine_ids: list[UUID], start: datetime | None) -> None:
        if not machine_ids:
            raise InvalidInputError("machine_ids", None, "Select at least one machine")
        if len(set(machine_ids)) != len(machine_ids):
            raise InvalidInputError(
                "machine_ids", len(machine_ids), "The same machine was selected twice"
            )
        if start is None:
            raise InvalidInputError("start", None, "Start time is required")

    @staticmethod
    async def _ensure_selectable(uow, machine_ids: list[UUID]) -> None:
        machines = await uow.machines.get_many(machine_ids)
        for machine_id in machine_ids:
            machine = machines.get(machine_id)
            if machine is None:
                raise InvalidInputError("machine_ids", str(machine_id), "Machine not found")
            if not machine.is_selectable:
                raise InvalidInputError(
                    "machine_ids",
                    str(machine_id),
                    f"Machine {machine.machine_code} is {machine.status.value}, not idle",
                )

    async def preview(
        self,
        work_order_id: UUID,
        machine_count: int,
        start: datetime | None,
        override_cycle_time_seconds: float | None = None,
    ) -> AssignmentPreview:
        """
        Compute the allocation the current selection would produce.

        Nothing is written and no capability is checked; the override is
        only authorised when the batch is actually created.
        """
        with self._uow_factory() as uow:
            work_order = await uow.work_orders.get(work_order_id)
        if work_order is None:
            raise WorkOrderNotFoundError(work_order_id)

        is_overridden = bool(override_cycle_time_seconds and override_cycle_time_seconds > 0)
        cycle_time = (
            override_cycle_time_seconds if is_overridden else work_order.cycle_time_seconds
        )
        allocation = allocation_calculator.plan(
            work_order.quantity,
            cycle_time,
            machine_count,
            as_utc(start) if start is not None else None,
        )
        return AssignmentPreview(
            work_order=work_order,
            plan=allocation,
            effective_cycle_time_seconds=cycle_time,
            is_overridden=is_overridden,
        )

    async def change_status(
        self, assignment_id: UUID, new_status: AssignmentStatus | str
    ) -> Assignment:
        """
        Apply an externally driven status change (start, pause, complete, cancel).

        Raises:
            AssignmentNotFoundError: If the assignment does not exist
            AssignmentStatusError: If the transition is not allowed
            InvalidInputError: If the status name is unknown
        """
        try:
            target = AssignmentStatus(new_status)
        except ValueError as e:
            raise InvalidInputError("status", str(new_status), "Unknown assignment status") from e

        with self._uow_factory() as uow:
            current = await uow.assignments.get(assignment_id)
            if current is None:
                raise AssignmentNotFoundError(assignment_id)

            updated = await uow.assignments.update_status(assignment_id, target)
            uow.add_domain_event(
                AssignmentStatusChanged(
                    aggregate_id=assignment_id,
                    assignment_id=assignment_id,
                    old_status=current.status,
                    new_status=target,
                )
            )

        ASSIGNMENT_OPERATIONS.labels(operation="change_status", status="success").inc()
        logger.info(
            "Assignment status changed",
            assignment_id=str(assignment_id),
            old_status=current.status.value,
            new_status=target.value,
        )
        return updated
