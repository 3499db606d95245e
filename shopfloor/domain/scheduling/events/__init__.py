from .domain_events import (
    AssignmentReassigned,
    AssignmentStatusChanged,
    CycleTimeOverridden,
    EventPublisher,
    MachinesAssigned,
)

__all__ = [
    "AssignmentReassigned",
    "AssignmentStatusChanged",
    "CycleTimeOverridden",
    "EventPublisher",
    "MachinesAssigned",
]
