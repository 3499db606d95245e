"""
Mappers for the read models and the action log.

Work orders and machines are owned elsewhere in the console, so only the
read direction is needed for them. Audit entries are only ever written.
"""

from typing import Any

from shopfloor.domain.scheduling.entities.audit_entry import AuditEntry
from shopfloor.domain.scheduling.entities.machine import Machine
from shopfloor.domain.scheduling.entities.work_order import WorkOrder
from shopfloor.infrastructure.database.models import AuditLogRow, MachineRow, WorkOrderRow


class WorkOrderMapper:
    @staticmethod
    def sql_to_domain(row: WorkOrderRow) -> WorkOrder:
        return WorkOrderMapper.from_record(row.model_dump())

    @staticmethod
    def from_record(record: dict[str, Any]) -> WorkOrder:
        return WorkOrder(
            id=record["id"],
            display_id=record.get("display_id"),
            item_code=record.get("item_code"),
            customer=record.get("customer"),
            quantity=record["quantity"],
            cycle_time_seconds=record.get("cycle_time_seconds"),
            qc_material_passed=bool(record.get("qc_material_passed")),
            due_date=record.get("due_date"),
        )


class MachineMapper:
    """The stored ``machine_id`` column holds the human machine code."""

    @staticmethod
    def sql_to_domain(row: MachineRow) -> Machine:
        return MachineMapper.from_record(row.model_dump())

    @staticmethod
    def from_record(record: dict[str, Any]) -> Machine:
        return Machine(
            id=record["id"],
            machine_code=record["machine_id"],
            name=record.get("name") or "",
            location=record.get("location"),
            status=record.get("status") or "idle",
        )


class AuditEntryMapper:
    @staticmethod
    def domain_to_sql(entry: AuditEntry) -> AuditLogRow:
        return AuditLogRow(
            id=entry.id,
            wo_id=entry.wo_id,
            action_type=entry.action_type.value,
            department=entry.department,
            performed_by=entry.performed_by,
            action_details=dict(entry.action_details),
            created_at=entry.created_at,
        )

    @staticmethod
    def to_record(entry: AuditEntry) -> dict[str, Any]:
        return entry.model_dump(mode="json")
