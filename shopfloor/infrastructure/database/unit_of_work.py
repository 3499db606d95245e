"""
Unit of Work implementation for managing transactions across repositories.

One SQLModel session spans the assignment batch insert and the audit append,
so either both are committed or neither is. Domain events collected during
the transaction are published only after a successful commit.
"""

import logging
from collections.abc import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from shopfloor.core.db import get_engine, session_factory as default_session_factory
from shopfloor.domain.scheduling.events.domain_events import EventPublisher
from shopfloor.domain.scheduling.repositories.unit_of_work import UnitOfWorkInterface
from shopfloor.domain.shared.base import DomainEvent
from shopfloor.domain.shared.exceptions import StoreError

from .repositories import (
    SqlModelAssignmentRepository,
    SqlModelAuditLog,
    SqlModelMachineReader,
    SqlModelWorkOrderReader,
)

logger = logging.getLogger(__name__)


class SqlModelUnitOfWork(UnitOfWorkInterface):
    """
    SQLModel-based implementation of Unit of Work pattern.

    Manages database transactions using SQLModel/SQLAlchemy sessions and provides
    access to all repositories within a single transactional boundary.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session] | None = None,
        event_publisher: EventPublisher | None = None,
    ):
        """
        Initialize the unit of work.

        Args:
            session_factory: Optional session factory. If None, uses the configured engine.
            event_publisher: Receives domain events after commit
        """
        self._session_factory = session_factory
        self._event_publisher = event_publisher
        self._session: Session | None = None
        self._domain_events: list[DomainEvent] = []

    def __enter__(self):
        """
        Enter the runtime context and create database session.

        Returns:
            Self for context manager usage
        """
        factory = self._session_factory or default_session_factory(get_engine())
        self._session = factory()
        self._domain_events = []

        self.assignments = SqlModelAssignmentRepository(self._session)
        self.work_orders = SqlModelWorkOrderReader(self._session)
        self.machines = SqlModelMachineReader(self._session)
        self.audit_log = SqlModelAuditLog(self._session)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """
        Commit on a clean exit, roll back otherwise, then close the session.

        Args:
            exc_type: Exception type if any
            exc_val: Exception value if any
            exc_tb: Exception traceback if any
        """
        try:
            if exc_type is not None:
                self.rollback()
            else:
                self.commit()
        finally:
            if self._session:
                self._session.close()
                self._session = None

        if exc_type is None:
            self._publish_domain_events()

    def commit(self) -> None:
        """
        Commit the current transaction.

        Raises:
            StoreError: If commit fails
        """
        if not self._session:
            raise StoreError("No active session to commit", operation="commit")

        try:
            self._session.commit()
        except SQLAlchemyError as e:
            self.rollback()
            raise StoreError(
                f"Failed to commit transaction: {str(e)}", operation="commit"
            ) from e

    def rollback(self) -> None:
        """Rollback the current transaction and drop pending events."""
        self._domain_events.clear()
        if not self._session:
            return
        try:
            self._session.rollback()
        except SQLAlchemyError as e:
            raise StoreError(
                f"Failed to rollback transaction: {str(e)}", operation="rollback"
            ) from e

    def add_domain_event(self, event: DomainEvent) -> None:
        """
        Add a domain event to be published after successful transaction commit.

        Args:
            event: Domain event to publish
        """
        self._domain_events.append(event)

    def get_pending_events(self) -> list[DomainEvent]:
        return self._domain_events.copy()

    def _publish_domain_events(self) -> None:
        events, self._domain_events = self._domain_events, []
        if not events or self._event_publisher is None:
            return

        try:
            self._event_publisher.publish_batch(events)
        except Exception as e:
            # The write is already committed
            logger.error(f"Failed to publish domain events: {str(e)}")


def sqlmodel_unit_of_work_factory(
    session_factory: Callable[[], Session] | None = None,
    event_publisher: EventPublisher | None = None,
) -> Callable[[], SqlModelUnitOfWork]:
    """Zero-argument factory handed to the scheduling services."""

    def _factory() -> SqlModelUnitOfWork:
        return SqlModelUnitOfWork(session_factory, event_publisher)

    return _factory
