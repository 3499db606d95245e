"""Audit entry for scheduling parameter changes."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from pydantic import Field, field_validator

from ...shared.base import ValueObject, as_utc
from ..value_objects.cycle_time import CycleTimeOverride
from ..value_objects.enums import AuditActionType


class AuditEntry(ValueObject):
    """Immutable record of who changed a scheduling parameter, when, and from what."""

    id: UUID = Field(default_factory=uuid4)
    wo_id: UUID
    action_type: AuditActionType
    department: str | None = None
    performed_by: str
    action_details: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def normalise_to_utc(cls, v: datetime) -> datetime:
        return as_utc(v)

    @classmethod
    def for_cycle_time_override(
        cls,
        wo_id: UUID,
        override: CycleTimeOverride,
        machine_count: int,
        department: str | None = None,
    ) -> AuditEntry:
        return cls(
            wo_id=wo_id,
            action_type=AuditActionType.CYCLE_TIME_OVERRIDE,
            department=department,
            performed_by=override.applied_by,
            action_details={
                "original_cycle_time": override.original_cycle_time_seconds,
                "override_cycle_time": override.override_cycle_time_seconds,
                "machine_count": machine_count,
            },
            created_at=override.applied_at,
        )
