from .assignment_repository import SqlModelAssignmentRepository
from .resource_repository import (
    SqlModelAuditLog,
    SqlModelMachineReader,
    SqlModelRoleProvider,
    SqlModelWorkOrderReader,
)

__all__ = [
    "SqlModelAssignmentRepository",
    "SqlModelAuditLog",
    "SqlModelMachineReader",
    "SqlModelRoleProvider",
    "SqlModelWorkOrderReader",
]
