"""Machine assignment entity."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import Field, field_validator, model_validator

from ...shared.base import Entity, as_utc
from ..value_objects.cycle_time import CycleTimeOverride
from ..value_objects.enums import AssignmentStatus

OVERRIDE_FIELDS = (
    "override_cycle_time_seconds",
    "override_applied_by",
    "override_applied_at",
    "original_cycle_time_seconds",
)


class Assignment(Entity):
    """
    A share of one work order scheduled on one machine.

    Assignments are created together in a batch, one per selected machine,
    all sharing the same start and end. After creation only the machine
    (through reassignment) and the status change.
    """

    wo_id: UUID
    machine_id: UUID
    assigned_by: str | None = None
    assigned_at: datetime | None = None
    scheduled_start: datetime
    scheduled_end: datetime
    quantity_allocated: int = Field(ge=1)
    status: AssignmentStatus = AssignmentStatus.SCHEDULED

    # Cycle time override, populated all together or not at all
    override_cycle_time_seconds: float | None = Field(default=None, gt=0)
    override_applied_by: str | None = None
    override_applied_at: datetime | None = None
    original_cycle_time_seconds: float | None = Field(default=None, gt=0)

    updated_at: datetime | None = None

    @field_validator(
        "assigned_at",
        "scheduled_start",
        "scheduled_end",
        "override_applied_at",
        "updated_at",
    )
    @classmethod
    def normalise_to_utc(cls, v: datetime | None) -> datetime | None:
        return as_utc(v) if v is not None else None

    @model_validator(mode="after")
    def check_invariants(self) -> Assignment:
        if self.scheduled_end <= self.scheduled_start:
            raise ValueError("scheduled_end must be after scheduled_start")

        populated = [getattr(self, name) is not None for name in OVERRIDE_FIELDS]
        if any(populated) and not all(populated):
            raise ValueError(
                "override fields must be populated together: " + ", ".join(OVERRIDE_FIELDS)
            )
        return self

    @property
    def is_overridden(self) -> bool:
        return self.override_cycle_time_seconds is not None

    @property
    def duration_minutes(self) -> float:
        return (self.scheduled_end - self.scheduled_start).total_seconds() / 60

    def overlaps(self, other: Assignment) -> bool:
        """True when the two run windows intersect."""
        return (
            self.scheduled_start < other.scheduled_end
            and self.scheduled_end > other.scheduled_start
        )

    def with_changes(self, **changes: Any) -> Assignment:
        """Return a validated copy with ``changes`` applied."""
        return Assignment.model_validate({**self.model_dump(), **changes})

    @classmethod
    def create(
        cls,
        wo_id: UUID,
        machine_id: UUID,
        scheduled_start: datetime,
        scheduled_end: datetime,
        quantity_allocated: int,
        assigned_by: str | None = None,
        assigned_at: datetime | None = None,
        override: CycleTimeOverride | None = None,
    ) -> Assignment:
        """Factory method for a freshly scheduled assignment."""
        override_fields: dict[str, Any] = {}
        if override is not None:
            override_fields = {
                "override_cycle_time_seconds": override.override_cycle_time_seconds,
                "override_applied_by": override.applied_by,
                "override_applied_at": override.applied_at,
                "original_cycle_time_seconds": override.original_cycle_time_seconds,
            }

        return cls(
            wo_id=wo_id,
            machine_id=machine_id,
            assigned_by=assigned_by,
            assigned_at=assigned_at,
            scheduled_start=scheduled_start,
            scheduled_end=scheduled_end,
            quantity_allocated=quantity_allocated,
            status=AssignmentStatus.SCHEDULED,
            **override_fields,
        )
