"""
Tests for the hosted-store adapters and their compensating unit of work.
"""

from datetime import timedelta
from uuid import UUID, uuid4

import httpx
import pytest
from postgrest.exceptions import APIError

from shopfloor.core import supabase as supabase_module
from shopfloor.core.supabase import SupabaseClient
from shopfloor.domain.scheduling.entities.assignment import Assignment
from shopfloor.domain.scheduling.events.domain_events import MachinesAssigned
from shopfloor.domain.scheduling.services.machine_assignment_service import (
    MachineAssignmentService,
)
from shopfloor.domain.scheduling.value_objects.enums import AssignmentStatus
from shopfloor.domain.shared.exceptions import (
    AssignmentNotFoundError,
    AssignmentStatusError,
    StoreError,
)
from shopfloor.infrastructure.supabase import (
    SupabaseAssignmentStore,
    SupabaseMachineReader,
    SupabaseRoleProvider,
    SupabaseUnitOfWork,
    SupabaseWorkOrderReader,
    supabase_unit_of_work_factory,
)
from shopfloor.tests.conftest import NOW, START, fixed_clock


def _assignment(machine_id, wo_id=None, hours=2) -> Assignment:
    return Assignment(
        wo_id=wo_id or uuid4(),
        machine_id=machine_id,
        assigned_by="operator-7",
        assigned_at=NOW,
        scheduled_start=START,
        scheduled_end=START + timedelta(hours=hours),
        quantity_allocated=50,
    )


class TestAssignmentStore:
    async def test_create_batch_and_read_back(self, client):
        store = SupabaseAssignmentStore(client)
        machine_id = uuid4()
        batch = [_assignment(machine_id, hours=3), _assignment(machine_id)]

        created = await store.create_batch(batch)
        listed = await store.list_by_machine(machine_id, [AssignmentStatus.SCHEDULED])

        assert [a.id for a in created] == [a.id for a in batch]
        assert len(client.tables["wo_machine_assignments"]) == 2
        assert {a.id for a in listed} == {a.id for a in batch}
        assert listed[0].scheduled_start == START

    async def test_get_missing_returns_none(self, client):
        assert await SupabaseAssignmentStore(client).get(uuid4()) is None

    async def test_update_machine(self, client):
        store = SupabaseAssignmentStore(client, clock=fixed_clock())
        [original] = await store.create_batch([_assignment(uuid4())])
        target = uuid4()

        moved = await store.update_machine(original.id, target)

        assert moved.machine_id == target
        assert moved.updated_at == NOW
        assert moved.scheduled_end == original.scheduled_end

    async def test_update_of_missing_assignment(self, client):
        with pytest.raises(AssignmentNotFoundError):
            await SupabaseAssignmentStore(client).update_machine(uuid4(), uuid4())

    async def test_invalid_transition_writes_nothing(self, client):
        store = SupabaseAssignmentStore(client)
        [original] = await store.create_batch([_assignment(uuid4())])

        with pytest.raises(AssignmentStatusError):
            await store.update_status(original.id, AssignmentStatus.COMPLETED)

        assert ("wo_machine_assignments", "update") not in client.calls

    async def test_status_change_does_not_overwrite_concurrent_completion(self, client):
        store = SupabaseAssignmentStore(client)
        [original] = await store.create_batch([_assignment(uuid4())])
        await store.update_status(original.id, AssignmentStatus.RUNNING)

        def complete_elsewhere(fake):
            [row] = fake.tables["wo_machine_assignments"]
            row["status"] = AssignmentStatus.COMPLETED.value

        client.before("wo_machine_assignments", "update", complete_elsewhere)

        with pytest.raises(AssignmentStatusError) as exc_info:
            await store.update_status(original.id, AssignmentStatus.CANCELLED)

        assert exc_info.value.current_status == "completed"
        stored = await store.get(original.id)
        assert stored.status is AssignmentStatus.COMPLETED

    @pytest.mark.parametrize(
        "error",
        [APIError({"message": "permission denied for table"}), httpx.ConnectError("offline")],
    )
    async def test_transport_errors_become_store_errors(self, client, error):
        client.fail("wo_machine_assignments", "insert", error)

        with pytest.raises(StoreError) as exc_info:
            await SupabaseAssignmentStore(client).create_batch([_assignment(uuid4())])
        assert exc_info.value.operation == "create_batch"


class TestReaders:
    async def test_work_order_reader(self, client, hosted_work_order):
        work_order = await SupabaseWorkOrderReader(client).get(UUID(hosted_work_order["id"]))

        assert work_order.display_id == "WO-2001"
        assert work_order.cycle_time_seconds == 20.0
        assert work_order.qc_material_passed

    async def test_machine_reader_maps_codes_and_orders(self, client, hosted_machines):
        reader = SupabaseMachineReader(client)

        machines = await reader.list()
        bay_a = await reader.list(location="Bay A")
        by_id = await reader.get_many([UUID(hosted_machines[2]["id"])])

        assert [m.machine_code for m in machines] == ["CNC-01", "CNC-02", "CNC-09"]
        assert [m.machine_code for m in bay_a] == ["CNC-01", "CNC-02"]
        [machine] = by_id.values()
        assert not machine.is_selectable
        assert await reader.get_many([]) == {}

    async def test_role_provider(self, client):
        client.tables["user_roles"] = [
            {"user_id": "prod-manager", "role": "production"},
            {"user_id": "prod-manager", "role": "quality"},
            {"user_id": "inspector", "role": "quality"},
        ]

        roles = await SupabaseRoleProvider(client).roles_for("prod-manager")
        assert roles == {"production", "quality"}


class TestSupabaseUnitOfWork:
    @pytest.fixture
    def service(self, client, override_authority, event_bus):
        return MachineAssignmentService(
            supabase_unit_of_work_factory(client, event_bus),
            override_authority,
            clock=fixed_clock(),
        )

    async def test_assignment_with_override_writes_batch_and_audit(
        self, service, client, hosted_work_order, hosted_machines, event_bus
    ):
        machine_ids = [UUID(hosted_machines[0]["id"]), UUID(hosted_machines[1]["id"])]

        result = await service.assign_machines(
            "prod-manager",
            UUID(hosted_work_order["id"]),
            machine_ids,
            START,
            override_cycle_time_seconds=15,
        )

        assert result.plan.end == START + timedelta(seconds=4500)
        assert len(client.tables["wo_machine_assignments"]) == 2
        [audit] = client.tables["wo_actions_log"]
        assert audit["action_type"] == "cycle_time_override"
        assert audit["action_details"]["original_cycle_time"] == 20.0
        assert len(event_bus.get_event_history(MachinesAssigned)) == 1

    async def test_failed_audit_deletes_inserted_batch(
        self, service, client, hosted_work_order, hosted_machines, event_bus
    ):
        client.fail("wo_actions_log", "insert", APIError({"message": "insert denied"}))

        with pytest.raises(StoreError):
            await service.assign_machines(
                "prod-manager",
                UUID(hosted_work_order["id"]),
                [UUID(hosted_machines[0]["id"])],
                START,
                override_cycle_time_seconds=15,
            )

        assert client.tables["wo_machine_assignments"] == []
        assert ("wo_machine_assignments", "delete") in client.calls
        assert event_bus.get_event_history() == []

    async def test_rollback_restores_previous_machine(self, client):
        store = SupabaseAssignmentStore(client)
        [original] = await store.create_batch([_assignment(uuid4())])
        uow = SupabaseUnitOfWork(client)

        with pytest.raises(RuntimeError):
            with uow:
                await uow.assignments.update_machine(original.id, uuid4())
                raise RuntimeError("later step failed")

        assert (await store.get(original.id)).machine_id == original.machine_id

    async def test_commit_forgets_compensations(self, client):
        uow = SupabaseUnitOfWork(client)

        with uow:
            await uow.assignments.create_batch([_assignment(uuid4())])

        uow.rollback()
        assert len(client.tables["wo_machine_assignments"]) == 1

    async def test_failed_compensation_is_reported(self, client):
        uow = SupabaseUnitOfWork(client)
        client.fail("wo_machine_assignments", "delete", httpx.ConnectError("offline"))

        with pytest.raises(StoreError, match="Rollback incomplete"):
            with uow:
                await uow.assignments.create_batch([_assignment(uuid4())])
                raise RuntimeError("later step failed")

    def test_unconfigured_client(self, monkeypatch):
        monkeypatch.setattr(supabase_module.settings, "SUPABASE_URL", None)

        with pytest.raises(StoreError, match="not configured"):
            SupabaseClient().admin
