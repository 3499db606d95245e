from .assignment import Assignment
from .audit_entry import AuditEntry
from .machine import Machine
from .work_order import WorkOrder

__all__ = ["Assignment", "AuditEntry", "Machine", "WorkOrder"]
