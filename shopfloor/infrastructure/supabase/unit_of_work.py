"""
Unit of Work over the hosted store.

PostgREST has no multi-request transactions, so each successful write
registers a compensation. On failure the compensations run in reverse order,
deleting an inserted batch when the audit append after it fails.
"""

import logging
from collections.abc import Callable

from supabase import Client

from shopfloor.core.supabase import get_supabase_client
from shopfloor.domain.scheduling.events.domain_events import EventPublisher
from shopfloor.domain.scheduling.repositories.unit_of_work import UnitOfWorkInterface
from shopfloor.domain.shared.base import DomainEvent
from shopfloor.domain.shared.exceptions import StoreError

from .assignment_store import (
    Compensation,
    SupabaseAssignmentStore,
    SupabaseAuditLog,
    SupabaseMachineReader,
    SupabaseWorkOrderReader,
)

logger = logging.getLogger(__name__)


class SupabaseUnitOfWork(UnitOfWorkInterface):
    """Saga-style unit of work with explicit compensation."""

    def __init__(
        self,
        client: Client | None = None,
        event_publisher: EventPublisher | None = None,
    ):
        self._client = client
        self._event_publisher = event_publisher
        self._journal: list[Compensation] = []
        self._domain_events: list[DomainEvent] = []

    def __enter__(self):
        client = self._client or get_supabase_client().admin
        self._journal = []
        self._domain_events = []

        self.assignments = SupabaseAssignmentStore(client, self._journal)
        self.work_orders = SupabaseWorkOrderReader(client)
        self.machines = SupabaseMachineReader(client)
        self.audit_log = SupabaseAuditLog(client, self._journal)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:
            self.rollback()
            return

        self.commit()
        events, self._domain_events = self._domain_events, []
        if events and self._event_publisher is not None:
            try:
                self._event_publisher.publish_batch(events)
            except Exception as e:
                # The writes are already durable
                logger.error(f"Failed to publish domain events: {str(e)}")

    def commit(self) -> None:
        """Writes are already durable; forget how to undo them."""
        self._journal.clear()

    def rollback(self) -> None:
        """
        Undo every recorded write, newest first.

        Raises:
            StoreError: If a compensation fails; the remaining ones still run
        """
        self._domain_events.clear()
        # Stores hold a reference to the same list
        journal = list(self._journal)
        self._journal.clear()

        failures: list[str] = []
        for compensation in reversed(journal):
            try:
                compensation()
            except StoreError as e:
                logger.error(f"Compensation failed: {e.message}")
                failures.append(e.message)

        if failures:
            raise StoreError(
                f"Rollback incomplete, {len(failures)} compensation(s) failed: "
                + "; ".join(failures),
                operation="rollback",
            )

    def add_domain_event(self, event: DomainEvent) -> None:
        self._domain_events.append(event)


def supabase_unit_of_work_factory(
    client: Client | None = None,
    event_publisher: EventPublisher | None = None,
) -> Callable[[], SupabaseUnitOfWork]:
    def _factory() -> SupabaseUnitOfWork:
        return SupabaseUnitOfWork(client, event_publisher)

    return _factory
