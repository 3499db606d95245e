from .allocation_calculator import plan
from .machine_assignment_service import (
    AssignmentBatchResult,
    AssignmentPreview,
    MachineAssignmentService,
)
from .override_authority import CapabilityChecker, OverrideAuthority
from .reassignment_coordinator import ReassignmentCoordinator, ReassignmentResult
from .schedule_board import BoardSummary, ScheduledJob
from .timeline_projector import ZOOM_SPECS, project

__all__ = [
    "AssignmentBatchResult",
    "AssignmentPreview",
    "BoardSummary",
    "CapabilityChecker",
    "MachineAssignmentService",
    "OverrideAuthority",
    "ReassignmentCoordinator",
    "ReassignmentResult",
    "ScheduledJob",
    "ZOOM_SPECS",
    "plan",
]
