"""
Shared fixtures: a fresh in-memory database per test, a unit of work factory
wired to an event bus, and seeded work orders and machines.
"""

from collections.abc import Callable
from datetime import datetime, timezone
from uuid import UUID

import pytest
from sqlmodel import Session

from shopfloor.core.db import build_engine, init_db, session_factory as make_session_factory
from shopfloor.domain.scheduling.services.override_authority import (
    CapabilityChecker,
    OverrideAuthority,
)
from shopfloor.infrastructure.database.models import MachineRow, UserRoleRow, WorkOrderRow
from shopfloor.infrastructure.database.unit_of_work import sqlmodel_unit_of_work_factory
from shopfloor.infrastructure.events.event_bus import InMemoryEventBus

START = datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc)
NOW = datetime(2024, 1, 1, 7, 30, tzinfo=timezone.utc)


class StubCapabilityChecker(CapabilityChecker):
    """Grants the override capability to a fixed set of actors."""

    def __init__(self, allowed: set[str] | None = None):
        self.allowed = allowed or set()
        self.checked: list[str] = []

    async def has_override_capability(self, actor: str) -> bool:
        self.checked.append(actor)
        return actor in self.allowed


def fixed_clock(instant: datetime = NOW) -> Callable[[], datetime]:
    return lambda: instant


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine) -> Callable[[], Session]:
    return make_session_factory(engine)


@pytest.fixture
def event_bus() -> InMemoryEventBus:
    return InMemoryEventBus()


@pytest.fixture
def uow_factory(session_factory, event_bus):
    return sqlmodel_unit_of_work_factory(session_factory, event_bus)


@pytest.fixture
def capability_checker() -> StubCapabilityChecker:
    return StubCapabilityChecker(allowed={"prod-manager"})


@pytest.fixture
def override_authority(capability_checker) -> OverrideAuthority:
    return OverrideAuthority(capability_checker, clock=fixed_clock())


@pytest.fixture
def seed(session_factory):
    """Insert rows directly and return them."""

    def _seed(*rows):
        with session_factory() as session:
            for row in rows:
                session.add(row)
            session.commit()
        return rows

    return _seed


@pytest.fixture
def work_order(seed) -> WorkOrderRow:
    row = WorkOrderRow(
        display_id="WO-1001",
        item_code="FLANGE-200",
        customer="Acme Corp",
        quantity=1000,
        cycle_time_seconds=12.0,
        qc_material_passed=True,
    )
    seed(row)
    return row


@pytest.fixture
def machines(seed) -> list[MachineRow]:
    rows = [
        MachineRow(machine_id="CNC-01", name="Haas VF-2", location="Bay A"),
        MachineRow(machine_id="CNC-02", name="Haas VF-4", location="Bay A"),
        MachineRow(machine_id="CNC-03", name="Mazak QT", location="Bay B"),
        MachineRow(machine_id="CNC-04", name="DMG Mori", location="Bay B", status="down"),
    ]
    seed(*rows)
    return rows


@pytest.fixture
def machine_ids(machines) -> list[UUID]:
    return [row.id for row in machines]


@pytest.fixture
def user_roles(seed) -> list[UserRoleRow]:
    rows = [
        UserRoleRow(user_id="prod-manager", role="production"),
        UserRoleRow(user_id="inspector", role="quality"),
        UserRoleRow(user_id="owner", role="sales"),
        UserRoleRow(user_id="owner", role="admin"),
    ]
    seed(*rows)
    return rows
