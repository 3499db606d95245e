from .allocation import AllocationPlan
from .cycle_time import CycleTimeOverride, EffectiveCycleTime
from .enums import (
    ACTIVE_ASSIGNMENT_STATUSES,
    AssignmentStatus,
    AuditActionType,
    MachineStatus,
    OverlapPolicy,
    ZoomLevel,
)
from .timeline import BarGeometry, TimelineProjection, ZoomSpec

__all__ = [
    "ACTIVE_ASSIGNMENT_STATUSES",
    "AllocationPlan",
    "AssignmentStatus",
    "AuditActionType",
    "BarGeometry",
    "CycleTimeOverride",
    "EffectiveCycleTime",
    "MachineStatus",
    "OverlapPolicy",
    "TimelineProjection",
    "ZoomLevel",
    "ZoomSpec",
]
