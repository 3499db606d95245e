"""
Domain Events

Notifications published after an assignment write commits. Subscribers
treat them as a prompt to refresh, never as a copy of the authoritative state.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from uuid import UUID

from ...shared.base import DomainEvent
from ..value_objects.enums import AssignmentStatus


class MachinesAssigned(DomainEvent):
    """Raised when an assignment batch is created for a work order."""

    work_order_id: UUID
    assignment_ids: list[UUID]
    machine_ids: list[UUID]
    scheduled_start: datetime
    scheduled_end: datetime


class CycleTimeOverridden(DomainEvent):
    """Raised when an assignment batch used an overridden cycle time."""

    work_order_id: UUID
    original_cycle_time_seconds: float
    override_cycle_time_seconds: float
    applied_by: str


class AssignmentReassigned(DomainEvent):
    """Raised when an assignment moves to another machine."""

    assignment_id: UUID
    work_order_id: UUID
    old_machine_id: UUID
    new_machine_id: UUID


class AssignmentStatusChanged(DomainEvent):
    """Raised when an assignment status changes."""

    assignment_id: UUID
    old_status: AssignmentStatus
    new_status: AssignmentStatus


class EventPublisher(ABC):
    """Port through which committed domain events leave the domain."""

    @abstractmethod
    def publish(self, event: DomainEvent) -> None:
        pass

    def publish_batch(self, events: list[DomainEvent]) -> None:
        for event in events:
            self.publish(event)
