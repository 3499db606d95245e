"""
Schedule Board

Filters and aggregates that a Gantt screen draws from: status and text
filters, machine groups, per-machine utilisation over the visible window and
the summary panel figures.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from ...shared.base import as_utc
from ...shared.exceptions import InvalidInputError
from ..entities.assignment import Assignment
from ..entities.machine import Machine
from ..entities.work_order import WorkOrder
from ..value_objects.enums import AssignmentStatus
from ..value_objects.timeline import TimelineProjection

BOTTLENECK_THRESHOLD = 90.0


@dataclass(frozen=True)
class ScheduledJob:
    """An assignment joined with the work order it produces."""

    assignment: Assignment
    work_order: WorkOrder | None = None

    @property
    def display_id(self) -> str:
        if self.work_order is None:
            return str(self.assignment.wo_id)
        return self.work_order.label

    @property
    def item_code(self) -> str:
        if self.work_order is None or self.work_order.item_code is None:
            return ""
        return self.work_order.item_code


@dataclass(frozen=True)
class BoardSummary:
    total_jobs_today: int
    total_parts_in_progress: int
    bottleneck_machines: list[str]
    next_completion: datetime | None


def filter_assignments(
    jobs: Iterable[ScheduledJob],
    status: AssignmentStatus | str | None = None,
    search: str | None = None,
) -> list[ScheduledJob]:
    """
    Keep jobs matching ``status`` and a case-insensitive ``search`` over the
    work order display id, work order id, item code and customer.
    """
    wanted = _status_filter(status)
    term = search.strip().lower() if search else ""

    result = []
    for job in jobs:
        if wanted is not None and job.assignment.status is not wanted:
            continue
        if term and not _matches(job, term):
            continue
        result.append(job)
    return result


def _status_filter(status: AssignmentStatus | str | None) -> AssignmentStatus | None:
    if status in (None, "all"):
        return None
    try:
        return AssignmentStatus(status)
    except ValueError as e:
        raise InvalidInputError("status", str(status), "Unknown assignment status") from e


def _matches(job: ScheduledJob, term: str) -> bool:
    haystack = [str(job.assignment.wo_id)]
    if job.work_order is not None:
        haystack += [
            job.work_order.display_id or "",
            job.work_order.item_code or "",
            job.work_order.customer or "",
        ]
    return any(term in value.lower() for value in haystack)


def filter_machines(machines: Iterable[Machine], group: str | None = None) -> list[Machine]:
    if group in (None, "all"):
        return list(machines)
    return [machine for machine in machines if machine.location == group]


def machine_groups(machines: Iterable[Machine]) -> list[str]:
    """Distinct machine locations in first-seen order."""
    groups: list[str] = []
    for machine in machines:
        if machine.location and machine.location not in groups:
            groups.append(machine.location)
    return groups


def utilization(
    machines: Iterable[Machine],
    assignments: Iterable[Assignment],
    projection: TimelineProjection,
) -> dict[UUID, float]:
    """
    Percentage of the visible window each machine is booked, capped at 100.

    Completed assignments are ignored and each assignment only counts for the
    part of it that falls inside the window.
    """
    window_minutes = projection.window_minutes
    booked: dict[UUID, float] = {machine.id: 0.0 for machine in machines}

    for assignment in assignments:
        if assignment.machine_id not in booked:
            continue
        if assignment.status is AssignmentStatus.COMPLETED:
            continue
        start = max(assignment.scheduled_start, projection.window_start)
        end = min(assignment.scheduled_end, projection.window_end)
        if end > start:
            booked[assignment.machine_id] += (end - start).total_seconds() / 60

    return {
        machine_id: min(minutes / window_minutes * 100, 100.0)
        for machine_id, minutes in booked.items()
    }


def summary(
    machines: Iterable[Machine],
    jobs: Iterable[ScheduledJob],
    projection: TimelineProjection,
    today: date,
) -> BoardSummary:
    machines = list(machines)
    jobs = list(jobs)
    usage = utilization(machines, (job.assignment for job in jobs), projection)

    running = [job.assignment for job in jobs if job.assignment.status is AssignmentStatus.RUNNING]
    next_completion = min((a.scheduled_end for a in running), default=None)

    return BoardSummary(
        total_jobs_today=sum(
            1 for job in jobs if as_utc(job.assignment.scheduled_start).date() == today
        ),
        total_parts_in_progress=sum(a.quantity_allocated for a in running),
        bottleneck_machines=[
            machine.machine_code
            for machine in machines
            if usage.get(machine.id, 0.0) >= BOTTLENECK_THRESHOLD
        ],
        next_completion=next_completion,
    )


def utilization_band(percentage: float) -> str:
    """Colour band of a utilisation figure on the timeline."""
    if percentage >= 90:
        return "behind"
    if percentage >= 70:
        return "at_risk"
    if percentage >= 50:
        return "on_schedule"
    return "ahead"
