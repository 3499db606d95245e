from .assignment_store import (
    SupabaseAssignmentStore,
    SupabaseAuditLog,
    SupabaseMachineReader,
    SupabaseRoleProvider,
    SupabaseWorkOrderReader,
)
from .unit_of_work import SupabaseUnitOfWork, supabase_unit_of_work_factory

__all__ = [
    "SupabaseAssignmentStore",
    "SupabaseAuditLog",
    "SupabaseMachineReader",
    "SupabaseRoleProvider",
    "SupabaseUnitOfWork",
    "SupabaseWorkOrderReader",
    "supabase_unit_of_work_factory",
]
