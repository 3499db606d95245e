"""Tests for the SQLModel repositories and unit of work."""

from datetime import timedelta
from unittest.mock import Mock
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import Session, select

from shopfloor.domain.scheduling.entities.assignment import Assignment
from shopfloor.domain.scheduling.events.domain_events import AssignmentReassigned
from shopfloor.domain.scheduling.value_objects.enums import (
    ACTIVE_ASSIGNMENT_STATUSES,
    AssignmentStatus,
)
from shopfloor.domain.shared.exceptions import (
    AssignmentNotFoundError,
    AssignmentStatusError,
    StoreError,
)
from shopfloor.infrastructure.database.models import AssignmentRow
from shopfloor.infrastructure.database.repositories import (
    SqlModelAssignmentRepository,
    SqlModelMachineReader,
    SqlModelRoleProvider,
    SqlModelWorkOrderReader,
)
from shopfloor.infrastructure.database.unit_of_work import SqlModelUnitOfWork
from shopfloor.tests.conftest import NOW, START


@pytest.fixture
def make_assignment(work_order, machine_ids):
    def _make(machine_index=0, start_hours=0, status=AssignmentStatus.SCHEDULED):
        start = START + timedelta(hours=start_hours)
        return Assignment(
            wo_id=work_order.id,
            machine_id=machine_ids[machine_index],
            assigned_by="operator-7",
            assigned_at=NOW,
            scheduled_start=start,
            scheduled_end=start + timedelta(hours=1),
            quantity_allocated=100,
            status=status,
        )

    return _make


class TestAssignmentRepository:
    async def test_lists_are_filtered_and_ordered(
        self, session_factory, make_assignment, machine_ids
    ):
        later = make_assignment(start_hours=4)
        earlier = make_assignment(start_hours=1)
        done = make_assignment(status=AssignmentStatus.COMPLETED)
        other = make_assignment(machine_index=1, status=AssignmentStatus.RUNNING)

        with session_factory() as session:
            repo = SqlModelAssignmentRepository(session)
            await repo.create_batch([later, earlier, done, other])
            session.commit()

            on_first = await repo.list_by_machine(machine_ids[0])
            live_on_first = await repo.list_by_machine(machine_ids[0], ACTIVE_ASSIGNMENT_STATUSES)
            active = await repo.list_active()
            running = await repo.list_by_statuses([AssignmentStatus.RUNNING])
            by_order = await repo.list_by_work_order(later.wo_id)

        assert [a.id for a in on_first] == [done.id, earlier.id, later.id]
        assert [a.id for a in live_on_first] == [earlier.id, later.id]
        assert {a.id for a in active} == {earlier.id, later.id, other.id}
        assert [a.id for a in running] == [other.id]
        assert len(by_order) == 4

    async def test_update_status_checks_transition(self, session_factory, make_assignment):
        assignment = make_assignment()

        with session_factory() as session:
            repo = SqlModelAssignmentRepository(session, clock=lambda: NOW)
            await repo.create_batch([assignment])

            running = await repo.update_status(assignment.id, AssignmentStatus.RUNNING)
            with pytest.raises(AssignmentStatusError):
                await repo.update_status(assignment.id, AssignmentStatus.SCHEDULED)

        assert running.status is AssignmentStatus.RUNNING
        assert running.updated_at == NOW

    async def test_update_of_missing_assignment(self, session_factory, machines):
        with session_factory() as session:
            repo = SqlModelAssignmentRepository(session)
            with pytest.raises(AssignmentNotFoundError):
                await repo.update_machine(uuid4(), machines[0].id)

    async def test_database_errors_become_store_errors(self, make_assignment):
        session = Mock(spec=Session)
        session.flush.side_effect = OperationalError("INSERT", {}, Exception("disk I/O error"))

        with pytest.raises(StoreError) as exc_info:
            await SqlModelAssignmentRepository(session).create_batch([make_assignment()])
        assert exc_info.value.operation == "create_batch"


class TestReaders:
    async def test_work_order_reader(self, session_factory, work_order):
        with session_factory() as session:
            found = await SqlModelWorkOrderReader(session).get(work_order.id)
            missing = await SqlModelWorkOrderReader(session).get(uuid4())

        assert found.display_id == "WO-1001"
        assert found.qc_material_passed
        assert missing is None

    async def test_machine_reader(self, session_factory, machines):
        with session_factory() as session:
            reader = SqlModelMachineReader(session)
            every = await reader.list()
            bay_b = await reader.list(location="Bay B")
            picked = await reader.get_many([machines[3].id, uuid4()])

        assert [m.machine_code for m in every] == ["CNC-01", "CNC-02", "CNC-03", "CNC-04"]
        assert [m.machine_code for m in bay_b] == ["CNC-03", "CNC-04"]
        assert list(picked) == [machines[3].id]
        assert not picked[machines[3].id].is_selectable

    async def test_role_provider(self, session_factory, user_roles):
        provider = SqlModelRoleProvider(session_factory)

        assert await provider.roles_for("owner") == {"sales", "admin"}
        assert await provider.roles_for("nobody") == set()


class TestUnitOfWork:
    async def test_commit_on_clean_exit_publishes_events(
        self, session_factory, event_bus, make_assignment, machine_ids
    ):
        assignment = make_assignment()
        event = AssignmentReassigned(
            aggregate_id=assignment.id,
            assignment_id=assignment.id,
            work_order_id=assignment.wo_id,
            old_machine_id=machine_ids[0],
            new_machine_id=machine_ids[1],
        )

        with SqlModelUnitOfWork(session_factory, event_bus) as uow:
            await uow.assignments.create_batch([assignment])
            uow.add_domain_event(event)
            assert event_bus.get_event_history() == []

        with session_factory() as session:
            assert len(session.exec(select(AssignmentRow)).all()) == 1
        assert event_bus.get_event_history() == [event]

    async def test_rollback_on_exception_discards_writes_and_events(
        self, session_factory, event_bus, make_assignment
    ):
        assignment = make_assignment()

        with pytest.raises(RuntimeError):
            with SqlModelUnitOfWork(session_factory, event_bus) as uow:
                await uow.assignments.create_batch([assignment])
                uow.add_domain_event(Mock())
                raise RuntimeError("later step failed")

        with session_factory() as session:
            assert session.exec(select(AssignmentRow)).all() == []
        assert event_bus.get_event_history() == []

    async def test_publisher_failure_does_not_undo_commit(self, session_factory, make_assignment):
        publisher = Mock()
        publisher.publish_batch.side_effect = RuntimeError("bus down")

        with SqlModelUnitOfWork(session_factory, publisher) as uow:
            await uow.assignments.create_batch([make_assignment()])
            uow.add_domain_event(Mock())

        with session_factory() as session:
            assert len(session.exec(select(AssignmentRow)).all()) == 1
