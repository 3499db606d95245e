"""
Supabase-backed assignment store and readers.

Talks to the hosted store through supabase-py's PostgREST table API. A batch
insert is a single request and therefore atomic at the store; writes that
must be undone when a later step fails register a compensation in the
journal owned by ``SupabaseUnitOfWork``.
"""

from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Any
from uuid import UUID

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from shopfloor.domain.scheduling.entities.assignment import Assignment
from shopfloor.domain.scheduling.entities.audit_entry import AuditEntry
from shopfloor.domain.scheduling.entities.machine import Machine
from shopfloor.domain.scheduling.entities.work_order import WorkOrder
from shopfloor.domain.scheduling.repositories.assignment_repository import (
    AssignmentRepository,
)
from shopfloor.domain.scheduling.repositories.readers import (
    AuditLogSink,
    MachineReader,
    RoleProvider,
    WorkOrderReader,
)
from shopfloor.domain.scheduling.value_objects.enums import AssignmentStatus
from shopfloor.domain.shared.base import utc_now
from shopfloor.domain.shared.exceptions import (
    AssignmentNotFoundError,
    AssignmentStatusError,
    StoreError,
)
from shopfloor.infrastructure.database.repositories.mappers import (
    AssignmentMapper,
    AuditEntryMapper,
    MachineMapper,
    WorkOrderMapper,
)

ASSIGNMENTS_TABLE = "wo_machine_assignments"
AUDIT_TABLE = "wo_actions_log"
WORK_ORDERS_TABLE = "work_orders"
MACHINES_TABLE = "machines"
USER_ROLES_TABLE = "user_roles"

WORK_ORDER_COLUMNS = (
    "id, display_id, item_code, customer, quantity, cycle_time_seconds, "
    "qc_material_passed, due_date"
)

Compensation = Callable[[], None]


def _execute(query, operation: str) -> list[dict[str, Any]]:
    try:
        response = query.execute()
    except (APIError, httpx.HTTPError) as e:
        raise StoreError(f"Supabase {operation} failed: {str(e)}", operation=operation) from e
    return list(response.data or [])


class SupabaseAssignmentStore(AssignmentRepository):
    """
    AssignmentRepository over the ``wo_machine_assignments`` table.

    Args:
        client: Supabase client, normally the service-key client
        journal: Compensation list owned by the unit of work; when None no
            compensations are recorded
        clock: Source of ``updated_at`` timestamps
    """

    def __init__(
        self,
        client: Client,
        journal: list[Compensation] | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._client = client
        self._journal = journal
        self._clock = clock

    def _table(self):
        return self._client.table(ASSIGNMENTS_TABLE)

    def _remember(self, compensation: Compensation) -> None:
        if self._journal is not None:
            self._journal.append(compensation)

    async def create_batch(self, assignments: list[Assignment]) -> list[Assignment]:
        if not assignments:
            return []
        records = [AssignmentMapper.to_record(a) for a in assignments]
        rows = _execute(self._table().insert(records), "create_batch")

        ids = [str(a.id) for a in assignments]
        self._remember(lambda: self._delete(ids))
        return [AssignmentMapper.from_record(row) for row in rows] if rows else list(assignments)

    async def get(self, assignment_id: UUID) -> Assignment | None:
        rows = _execute(
            self._table().select("*").eq("id", str(assignment_id)).limit(1), "get"
        )
        return AssignmentMapper.from_record(rows[0]) if rows else None

    async def list_by_machine(
        self,
        machine_id: UUID,
        statuses: Iterable[AssignmentStatus] | None = None,
    ) -> list[Assignment]:
        query = self._table().select("*").eq("machine_id", str(machine_id))
        if statuses is not None:
            query = query.in_("status", [s.value for s in statuses])
        return self._list(query, "list_by_machine")

    async def list_by_work_order(self, wo_id: UUID) -> list[Assignment]:
        query = self._table().select("*").eq("wo_id", str(wo_id))
        return self._list(query, "list_by_work_order")

    async def list_by_statuses(
        self, statuses: Iterable[AssignmentStatus]
    ) -> list[Assignment]:
        query = self._table().select("*").in_("status", [s.value for s in statuses])
        return self._list(query, "list_by_statuses")

    async def update_machine(self, assignment_id: UUID, new_machine_id: UUID) -> Assignment:
        current = await self._get_required(assignment_id)
        updated = self._update(
            assignment_id,
            {"machine_id": str(new_machine_id), "updated_at": self._clock().isoformat()},
            "update_machine",
        )
        previous = str(current.machine_id)
        self._remember(
            lambda: self._restore(assignment_id, {"machine_id": previous}, "update_machine")
        )
        return updated

    async def update_status(
        self, assignment_id: UUID, new_status: AssignmentStatus
    ) -> Assignment:
        current = await self._get_required(assignment_id)
        if not current.status.can_transition_to(new_status):
            raise AssignmentStatusError(assignment_id, current.status.value, new_status.value)

        # Guarded on the status just read so a concurrent change is not overwritten
        rows = _execute(
            self._table()
            .update({"status": new_status.value, "updated_at": self._clock().isoformat()})
            .eq("id", str(assignment_id))
            .eq("status", current.status.value),
            "update_status",
        )
        if not rows:
            latest = await self._get_required(assignment_id)
            raise AssignmentStatusError(assignment_id, latest.status.value, new_status.value)
        updated = AssignmentMapper.from_record(rows[0])
        previous = current.status.value
        self._remember(
            lambda: self._restore(assignment_id, {"status": previous}, "update_status")
        )
        return updated

    async def _get_required(self, assignment_id: UUID) -> Assignment:
        assignment = await self.get(assignment_id)
        if assignment is None:
            raise AssignmentNotFoundError(assignment_id)
        return assignment

    def _update(self, assignment_id: UUID, values: dict[str, Any], operation: str) -> Assignment:
        rows = _execute(self._table().update(values).eq("id", str(assignment_id)), operation)
        if not rows:
            raise AssignmentNotFoundError(assignment_id)
        return AssignmentMapper.from_record(rows[0])

    def _restore(self, assignment_id: UUID, values: dict[str, Any], operation: str) -> None:
        _execute(
            self._table().update(values).eq("id", str(assignment_id)),
            f"compensate_{operation}",
        )

    def _delete(self, ids: list[str]) -> None:
        _execute(self._table().delete().in_("id", ids), "compensate_create_batch")

    def _list(self, query, operation: str) -> list[Assignment]:
        rows = _execute(query.order("scheduled_start"), operation)
        return [AssignmentMapper.from_record(row) for row in rows]


class SupabaseAuditLog(AuditLogSink):
    """Appends to ``wo_actions_log``."""

    def __init__(self, client: Client, journal: list[Compensation] | None = None):
        self._client = client
        self._journal = journal

    async def append(self, entry: AuditEntry) -> AuditEntry:
        _execute(
            self._client.table(AUDIT_TABLE).insert(AuditEntryMapper.to_record(entry)),
            "audit_append",
        )
        if self._journal is not None:
            entry_id = str(entry.id)
            self._journal.append(
                lambda: _execute(
                    self._client.table(AUDIT_TABLE).delete().eq("id", entry_id),
                    "compensate_audit_append",
                )
            )
        return entry


class SupabaseWorkOrderReader(WorkOrderReader):
    def __init__(self, client: Client):
        self._client = client

    async def get(self, wo_id: UUID) -> WorkOrder | None:
        rows = _execute(
            self._client.table(WORK_ORDERS_TABLE)
            .select(WORK_ORDER_COLUMNS)
            .eq("id", str(wo_id))
            .limit(1),
            "get_work_order",
        )
        return WorkOrderMapper.from_record(rows[0]) if rows else None


class SupabaseMachineReader(MachineReader):
    def __init__(self, client: Client):
        self._client = client

    async def list(self, location: str | None = None) -> list[Machine]:
        query = self._client.table(MACHINES_TABLE).select("*")
        if location is not None:
            query = query.eq("location", location)
        rows = _execute(query.order("machine_id"), "list_machines")
        return [MachineMapper.from_record(row) for row in rows]

    async def get_many(self, machine_ids: Iterable[UUID]) -> dict[UUID, Machine]:
        ids = [str(machine_id) for machine_id in machine_ids]
        if not ids:
            return {}
        rows = _execute(
            self._client.table(MACHINES_TABLE).select("*").in_("id", ids), "get_machines"
        )
        machines = [MachineMapper.from_record(row) for row in rows]
        return {machine.id: machine for machine in machines}


class SupabaseRoleProvider(RoleProvider):
    def __init__(self, client: Client):
        self._client = client

    async def roles_for(self, actor: str) -> set[str]:
        rows = _execute(
            self._client.table(USER_ROLES_TABLE).select("role").eq("user_id", actor),
            "roles_for",
        )
        return {row["role"] for row in rows}
