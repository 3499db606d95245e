"""Cycle time value objects."""

from datetime import datetime

from pydantic import Field

from ...shared.base import ValueObject


class CycleTimeOverride(ValueObject):
    """Immutable description of an authorised cycle time override."""

    original_cycle_time_seconds: float = Field(gt=0, allow_inf_nan=False)
    override_cycle_time_seconds: float = Field(gt=0, allow_inf_nan=False)
    applied_by: str = Field(min_length=1)
    applied_at: datetime


class EffectiveCycleTime(ValueObject):
    """The cycle time actually used for a scheduling computation."""

    seconds: float = Field(gt=0, allow_inf_nan=False)
    override: CycleTimeOverride | None = None

    @property
    def is_overridden(self) -> bool:
        return self.override is not None
