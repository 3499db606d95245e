"""
Mappers for converting between domain entities and stored rows.
"""

from .assignment_mapper import AssignmentMapper
from .resource_mapper import AuditEntryMapper, MachineMapper, WorkOrderMapper

__all__ = ["AssignmentMapper", "AuditEntryMapper", "MachineMapper", "WorkOrderMapper"]
