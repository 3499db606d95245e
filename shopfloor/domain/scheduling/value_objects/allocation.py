"""
AllocationPlan Value Object

Result of splitting a work order's quantity across machines that run in
parallel from a shared start instant.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class AllocationPlan:
    """
    Per-machine quantities and the shared run window for one assignment batch.

    Every machine except the last receives ``per_machine_quantity``; the last
    receives ``last_machine_quantity`` so the batch total equals the work order
    quantity exactly.
    """

    quantity: int
    machine_count: int
    per_machine_quantity: int
    last_machine_quantity: int
    required_seconds: float
    start: datetime
    end: datetime

    @property
    def is_feasible(self) -> bool:
        """False when rounding up leaves the last machine nothing to make."""
        return self.last_machine_quantity > 0

    def quantities(self) -> list[int]:
        """Allocations in machine selection order."""
        return [self.per_machine_quantity] * (self.machine_count - 1) + [
            self.last_machine_quantity
        ]

    @property
    def required_hours(self) -> float:
        return self.required_seconds / 3600
