"""Tests for drag-and-drop reassignment."""

from datetime import timedelta
from uuid import uuid4

import pytest

from shopfloor.domain.scheduling.entities.assignment import Assignment
from shopfloor.domain.scheduling.events.domain_events import AssignmentReassigned
from shopfloor.domain.scheduling.services.reassignment_coordinator import (
    ReassignmentCoordinator,
)
from shopfloor.domain.scheduling.value_objects.cycle_time import CycleTimeOverride
from shopfloor.domain.scheduling.value_objects.enums import AssignmentStatus, OverlapPolicy
from shopfloor.domain.shared.exceptions import (
    AssignmentNotFoundError,
    ErrorType,
    ResourceConflictError,
)
from shopfloor.tests.conftest import NOW, START


@pytest.fixture
def store(uow_factory, work_order):
    """Write assignments for the seeded work order directly."""

    async def _store(machine_id, start=START, hours=2, status=AssignmentStatus.SCHEDULED, **extra):
        assignment = Assignment(
            wo_id=work_order.id,
            machine_id=machine_id,
            assigned_by="operator-7",
            assigned_at=NOW,
            scheduled_start=start,
            scheduled_end=start + timedelta(hours=hours),
            quantity_allocated=250,
            status=status,
            **extra,
        )
        with uow_factory() as uow:
            await uow.assignments.create_batch([assignment])
        return assignment

    return _store


@pytest.fixture
def coordinator(uow_factory) -> ReassignmentCoordinator:
    return ReassignmentCoordinator(uow_factory, OverlapPolicy.WARN)


class TestReassign:
    async def test_moves_assignment_and_keeps_everything_else(
        self, coordinator, store, machine_ids, uow_factory
    ):
        override = CycleTimeOverride(
            original_cycle_time_seconds=12,
            override_cycle_time_seconds=10,
            applied_by="prod-manager",
            applied_at=NOW,
        )
        original = await store(
            machine_ids[0],
            override_cycle_time_seconds=override.override_cycle_time_seconds,
            override_applied_by=override.applied_by,
            override_applied_at=override.applied_at,
            original_cycle_time_seconds=override.original_cycle_time_seconds,
        )

        result = await coordinator.reassign(original.id, machine_ids[1])

        assert result.changed
        assert result.previous_machine_id == machine_ids[0]
        moved = result.assignment
        assert moved.machine_id == machine_ids[1]
        for field in (
            "id",
            "wo_id",
            "scheduled_start",
            "scheduled_end",
            "quantity_allocated",
            "status",
            "assigned_by",
            "override_cycle_time_seconds",
            "original_cycle_time_seconds",
        ):
            assert getattr(moved, field) == getattr(original, field)
        assert moved.updated_at is not None

        with uow_factory() as uow:
            assert (await uow.assignments.get(original.id)).machine_id == machine_ids[1]

    async def test_same_machine_is_a_no_op(self, coordinator, store, machine_ids, event_bus):
        original = await store(machine_ids[0])

        result = await coordinator.reassign(original.id, machine_ids[0])

        assert not result.changed
        assert result.assignment.machine_id == machine_ids[0]
        assert result.assignment.updated_at is None
        assert event_bus.get_event_history(AssignmentReassigned) == []

    async def test_second_identical_drop_changes_nothing(self, coordinator, store, machine_ids):
        original = await store(machine_ids[0])

        first = await coordinator.reassign(original.id, machine_ids[2])
        second = await coordinator.reassign(original.id, machine_ids[2])

        assert first.changed
        assert not second.changed
        assert second.assignment.machine_id == machine_ids[2]

    async def test_publishes_event(self, coordinator, store, machine_ids, event_bus, work_order):
        original = await store(machine_ids[0])

        await coordinator.reassign(original.id, machine_ids[1])

        [event] = event_bus.get_event_history(AssignmentReassigned)
        assert event.assignment_id == original.id
        assert event.work_order_id == work_order.id
        assert event.old_machine_id == machine_ids[0]
        assert event.new_machine_id == machine_ids[1]

    async def test_target_status_is_not_rechecked(self, coordinator, store, machine_ids):
        original = await store(machine_ids[0])

        # CNC-04 is down
        result = await coordinator.reassign(original.id, machine_ids[3])
        assert result.changed

    async def test_unknown_assignment(self, coordinator, machines):
        with pytest.raises(AssignmentNotFoundError) as exc_info:
            await coordinator.reassign(uuid4(), machines[0].id)
        assert exc_info.value.error_type is ErrorType.NOT_FOUND


class TestOverlapPolicy:
    async def test_warn_moves_and_reports_overlap(self, uow_factory, store, machine_ids):
        coordinator = ReassignmentCoordinator(uow_factory, OverlapPolicy.WARN)
        busy = await store(machine_ids[1], start=START + timedelta(hours=1))
        dragged = await store(machine_ids[0])

        result = await coordinator.reassign(dragged.id, machine_ids[1])

        assert result.changed
        assert result.has_overlap
        assert [a.id for a in result.overlapping] == [busy.id]

    async def test_forbid_rejects_and_leaves_assignment_in_place(
        self, uow_factory, store, machine_ids, event_bus
    ):
        coordinator = ReassignmentCoordinator(uow_factory, OverlapPolicy.FORBID)
        await store(machine_ids[1], start=START + timedelta(hours=1))
        dragged = await store(machine_ids[0])

        with pytest.raises(ResourceConflictError) as exc_info:
            await coordinator.reassign(dragged.id, machine_ids[1])

        assert exc_info.value.details["overlap_count"] == 1
        with uow_factory() as uow:
            assert (await uow.assignments.get(dragged.id)).machine_id == machine_ids[0]
        assert event_bus.get_event_history(AssignmentReassigned) == []

    async def test_forbid_ignores_finished_and_adjacent_work(
        self, uow_factory, store, machine_ids
    ):
        coordinator = ReassignmentCoordinator(uow_factory, OverlapPolicy.FORBID)
        await store(machine_ids[1], status=AssignmentStatus.COMPLETED)
        await store(machine_ids[1], start=START + timedelta(hours=2))
        dragged = await store(machine_ids[0])

        result = await coordinator.reassign(dragged.id, machine_ids[1])

        assert result.changed
        assert not result.has_overlap

    async def test_permit_skips_overlap_detection(self, uow_factory, store, machine_ids):
        coordinator = ReassignmentCoordinator(uow_factory, OverlapPolicy.PERMIT)
        await store(machine_ids[1])
        dragged = await store(machine_ids[0])

        result = await coordinator.reassign(dragged.id, machine_ids[1])

        assert result.changed
        assert not result.has_overlap

    def test_policy_defaults_to_settings(self, uow_factory):
        assert ReassignmentCoordinator(uow_factory).overlap_policy is OverlapPolicy.WARN
