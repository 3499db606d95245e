"""Work order read model consumed by machine scheduling."""

from datetime import datetime

from pydantic import Field

from ...shared.base import Entity


class WorkOrder(Entity):
    """
    Production work order as seen by the scheduler.

    Owned by the work order screens; scheduling only reads it.
    """

    display_id: str | None = None
    item_code: str | None = None
    customer: str | None = None
    quantity: int = Field(ge=1)
    cycle_time_seconds: float | None = Field(default=None, gt=0)
    qc_material_passed: bool = False
    due_date: datetime | None = None

    @property
    def label(self) -> str:
        return self.display_id or str(self.id)

    @property
    def has_cycle_time(self) -> bool:
        return self.cycle_time_seconds is not None
