"""Domain enums for machine scheduling."""

from enum import Enum


class MachineStatus(str, Enum):
    """Machine availability status."""

    IDLE = "idle"
    RUNNING = "running"
    DOWN = "down"
    MAINTENANCE = "maintenance"

    @property
    def is_selectable(self) -> bool:
        """Only idle machines may receive new assignments."""
        return self is MachineStatus.IDLE


class AssignmentStatus(str, Enum):
    """Machine assignment status enumeration."""

    SCHEDULED = "scheduled"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        """Check if status is terminal (cannot transition further)."""
        return self in {AssignmentStatus.COMPLETED, AssignmentStatus.CANCELLED}

    @property
    def is_active(self) -> bool:
        """Statuses shown on the live schedule board."""
        return not self.is_terminal

    def can_transition_to(self, target_status: "AssignmentStatus") -> bool:
        """Check if assignment can transition from current status to target status."""
        valid_transitions = {
            AssignmentStatus.SCHEDULED: {
                AssignmentStatus.RUNNING,
                AssignmentStatus.PAUSED,
                AssignmentStatus.CANCELLED,
            },
            AssignmentStatus.RUNNING: {
                AssignmentStatus.PAUSED,
                AssignmentStatus.COMPLETED,
                AssignmentStatus.CANCELLED,
            },
            AssignmentStatus.PAUSED: {
                AssignmentStatus.RUNNING,
                AssignmentStatus.CANCELLED,
            },
            AssignmentStatus.COMPLETED: set(),  # Terminal state
            AssignmentStatus.CANCELLED: set(),  # Terminal state
        }
        return target_status in valid_transitions.get(self, set())


ACTIVE_ASSIGNMENT_STATUSES: tuple[AssignmentStatus, ...] = (
    AssignmentStatus.SCHEDULED,
    AssignmentStatus.RUNNING,
    AssignmentStatus.PAUSED,
)


class ZoomLevel(str, Enum):
    """Timeline resolution."""

    HOUR = "hour"
    DAY = "day"
    WEEK = "week"


class OverlapPolicy(str, Enum):
    """How reassignment treats a time overlap on the destination machine."""

    PERMIT = "permit"
    WARN = "warn"
    FORBID = "forbid"


class AuditActionType(str, Enum):
    """Action tags written to the work order action log."""

    CYCLE_TIME_OVERRIDE = "cycle_time_override"
