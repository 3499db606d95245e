"""
SQLModel implementations of the work order, machine, action log and role
lookups the scheduling services depend on.
"""

from collections.abc import Callable, Iterable
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

from shopfloor.domain.scheduling.entities.audit_entry import AuditEntry
from shopfloor.domain.scheduling.entities.machine import Machine
from shopfloor.domain.scheduling.entities.work_order import WorkOrder
from shopfloor.domain.scheduling.repositories.readers import (
    AuditLogSink,
    MachineReader,
    RoleProvider,
    WorkOrderReader,
)
from shopfloor.domain.shared.exceptions import StoreError
from shopfloor.infrastructure.database.models import (
    MachineRow,
    UserRoleRow,
    WorkOrderRow,
)

from .mappers import AuditEntryMapper, MachineMapper, WorkOrderMapper


class SqlModelWorkOrderReader(WorkOrderReader):
    def __init__(self, session: Session):
        self.session = session

    async def get(self, wo_id: UUID) -> WorkOrder | None:
        try:
            row = self.session.get(WorkOrderRow, wo_id)
        except SQLAlchemyError as e:
            raise StoreError(f"Error finding work order {wo_id}: {str(e)}", operation="get") from e
        return WorkOrderMapper.sql_to_domain(row) if row else None


class SqlModelMachineReader(MachineReader):
    def __init__(self, session: Session):
        self.session = session

    async def list(self, location: str | None = None) -> list[Machine]:
        statement = select(MachineRow)
        if location is not None:
            statement = statement.where(MachineRow.location == location)
        statement = statement.order_by(MachineRow.machine_id)
        try:
            rows = self.session.exec(statement).all()
        except SQLAlchemyError as e:
            raise StoreError(f"Error listing machines: {str(e)}", operation="list") from e
        return [MachineMapper.sql_to_domain(row) for row in rows]

    async def get_many(self, machine_ids: Iterable[UUID]) -> dict[UUID, Machine]:
        ids = list(machine_ids)
        if not ids:
            return {}
        statement = select(MachineRow).where(col(MachineRow.id).in_(ids))
        try:
            rows = self.session.exec(statement).all()
        except SQLAlchemyError as e:
            raise StoreError(f"Error loading machines: {str(e)}", operation="get_many") from e
        return {row.id: MachineMapper.sql_to_domain(row) for row in rows}


class SqlModelAuditLog(AuditLogSink):
    def __init__(self, session: Session):
        self.session = session

    async def append(self, entry: AuditEntry) -> AuditEntry:
        try:
            self.session.add(AuditEntryMapper.domain_to_sql(entry))
            self.session.flush()
        except SQLAlchemyError as e:
            raise StoreError(
                f"Failed to write audit entry: {str(e)}", operation="audit_append"
            ) from e
        return entry


class SqlModelRoleProvider(RoleProvider):
    """Reads roles in a short-lived session of its own, outside any unit of work."""

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    async def roles_for(self, actor: str) -> set[str]:
        statement = select(UserRoleRow.role).where(UserRoleRow.user_id == actor)
        try:
            with self._session_factory() as session:
                return set(session.exec(statement).all())
        except SQLAlchemyError as e:
            raise StoreError(f"Error loading roles: {str(e)}", operation="roles_for") from e
