"""
Override Authority

Decides which cycle time a scheduling computation uses and whether the actor
may replace the work order default. Describes the override; never writes it.
"""

import math
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime

from ...shared.base import utc_now
from ...shared.exceptions import InvalidInputError, UnauthorizedError
from ..value_objects.cycle_time import CycleTimeOverride, EffectiveCycleTime

OVERRIDE_CAPABILITY = "cycle_time:override"


class CapabilityChecker(ABC):
    """Identity/capability lookup consulted before an override is accepted."""

    @abstractmethod
    async def has_override_capability(self, actor: str) -> bool:
        pass


class OverrideAuthority:
    """
    Gate for cycle time overrides.

    A missing or non-positive request means "use the default". A positive
    request needs the override capability and yields an override descriptor
    that the caller must persist together with the assignment batch.
    """

    def __init__(
        self,
        capability_checker: CapabilityChecker,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._capability_checker = capability_checker
        self._clock = clock

    async def authorize(
        self,
        actor: str,
        requested_cycle_time_seconds: float | None,
        default_cycle_time_seconds: float | None,
    ) -> EffectiveCycleTime:
        """
        Resolve the effective cycle time.

        Args:
            actor: Identity requesting the computation
            requested_cycle_time_seconds: Override value, if any
            default_cycle_time_seconds: Work order default cycle time

        Returns:
            Effective cycle time, with an override descriptor when one applies

        Raises:
            UnauthorizedError: If an override is requested without capability
            InvalidInputError: If no usable cycle time is defined or the override
                is not finite
        """
        if requested_cycle_time_seconds is None or requested_cycle_time_seconds <= 0:
            if default_cycle_time_seconds is None or default_cycle_time_seconds <= 0:
                raise InvalidInputError(
                    "cycle_time_seconds",
                    default_cycle_time_seconds,
                    "Cycle time not defined for this work order",
                )
            return EffectiveCycleTime(seconds=default_cycle_time_seconds)

        if not await self._capability_checker.has_override_capability(actor):
            raise UnauthorizedError(actor, OVERRIDE_CAPABILITY)

        if not math.isfinite(requested_cycle_time_seconds):
            raise InvalidInputError(
                "override_cycle_time_seconds",
                requested_cycle_time_seconds,
                "Override cycle time must be a finite number",
            )

        # The audit record needs the value being replaced
        if default_cycle_time_seconds is None or default_cycle_time_seconds <= 0:
            raise InvalidInputError(
                "cycle_time_seconds",
                default_cycle_time_seconds,
                "Cannot override a cycle time that is not defined",
            )

        override = CycleTimeOverride(
            original_cycle_time_seconds=default_cycle_time_seconds,
            override_cycle_time_seconds=requested_cycle_time_seconds,
            applied_by=actor,
            applied_at=self._clock(),
        )
        return EffectiveCycleTime(seconds=requested_cycle_time_seconds, override=override)
