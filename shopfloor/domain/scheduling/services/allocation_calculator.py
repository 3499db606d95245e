"""
Allocation Calculator

Splits a work order's quantity across machines running in parallel and
computes the shared completion instant from the effective cycle time.
"""

import math
from datetime import datetime, timedelta

from ...shared.exceptions import InvalidInputError
from ..value_objects.allocation import AllocationPlan

_RESOLUTION = timedelta(microseconds=1)


def plan(
    quantity: int,
    effective_cycle_time_seconds: float,
    machine_count: int,
    start: datetime | None,
) -> AllocationPlan:
    """
    Plan an assignment batch.

    Every machine runs for ``cycle * quantity / machine_count`` seconds from
    ``start``. Every machine but the last receives ``ceil(quantity /
    machine_count)`` pieces and the last absorbs the remainder.

    Args:
        quantity: Pieces requested by the work order
        effective_cycle_time_seconds: Seconds per piece on one machine
        machine_count: Number of selected machines
        start: Shared start instant

    Returns:
        The allocation plan. Check ``is_feasible`` before scheduling it.

    Raises:
        InvalidInputError: If any input is missing, not positive or not finite,
            or the completion instant falls outside the datetime range
    """
    if start is None:
        raise InvalidInputError("start", None, "Start time is required")
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InvalidInputError("quantity", quantity, "Quantity must be a positive integer")
    if isinstance(machine_count, bool) or not isinstance(machine_count, int) or machine_count < 1:
        raise InvalidInputError(
            "machine_count", machine_count, "At least one machine must be selected"
        )
    if (
        effective_cycle_time_seconds is None
        or not math.isfinite(effective_cycle_time_seconds)
        or effective_cycle_time_seconds <= 0
    ):
        raise InvalidInputError(
            "effective_cycle_time_seconds",
            effective_cycle_time_seconds,
            "Cycle time must be a finite positive number",
        )

    required_seconds = effective_cycle_time_seconds * quantity / machine_count
    per_machine = math.ceil(quantity / machine_count)
    last_machine = quantity - per_machine * (machine_count - 1)

    return AllocationPlan(
        quantity=quantity,
        machine_count=machine_count,
        per_machine_quantity=per_machine,
        last_machine_quantity=last_machine,
        required_seconds=required_seconds,
        start=start,
        end=_completion(start, required_seconds, effective_cycle_time_seconds),
    )


def _completion(start: datetime, required_seconds: float, cycle_time: float) -> datetime:
    # timedelta keeps whole microseconds; a positive run never ends at its start
    try:
        run = max(timedelta(seconds=required_seconds), _RESOLUTION)
        return start + run
    except (OverflowError, ValueError):
        raise InvalidInputError(
            "effective_cycle_time_seconds",
            cycle_time,
            "Completion time is outside the supported date range",
        ) from None
