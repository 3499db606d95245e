from .assignment_repository import AssignmentRepository
from .readers import AuditLogSink, MachineReader, RoleProvider, WorkOrderReader
from .unit_of_work import UnitOfWorkFactory, UnitOfWorkInterface

__all__ = [
    "AssignmentRepository",
    "AuditLogSink",
    "MachineReader",
    "RoleProvider",
    "UnitOfWorkFactory",
    "UnitOfWorkInterface",
    "WorkOrderReader",
]
