"""
Event bus implementation for domain event publishing and subscription.

Committed assignment changes are pushed to subscribers (other screens, cache
invalidation). Delivery is a refresh prompt, not a synchronisation primitive.
"""

import logging
from collections import defaultdict
from collections.abc import Callable

from shopfloor.domain.scheduling.events.domain_events import EventPublisher
from shopfloor.domain.shared.base import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]


class InMemoryEventBus(EventPublisher):
    """
    In-memory implementation of event bus.

    Handlers subscribe per event type; a handler for ``DomainEvent`` receives
    everything. A failing handler is logged and does not stop the others.
    """

    def __init__(self, max_history_size: int = 1000):
        self._handlers: dict[type[DomainEvent], list[EventHandler]] = defaultdict(list)
        self._event_history: list[DomainEvent] = []
        self._max_history_size = max_history_size

    def publish(self, event: DomainEvent) -> None:
        """
        Publish a domain event synchronously to all registered handlers.

        Args:
            event: Domain event to publish
        """
        self._add_to_history(event)

        event_type = type(event)
        handlers = self._handlers_for(event_type)
        if not handlers:
            logger.debug(f"No handlers registered for event type: {event_type.__name__}")
            return

        logger.info(f"Publishing event {event_type.__name__} to {len(handlers)} handlers")

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(
                    f"Error handling event {event_type.__name__} with {handler}: {str(e)}"
                )

    def subscribe(self, event_type: type[DomainEvent], handler: EventHandler) -> None:
        if handler in self._handlers[event_type]:
            logger.warning(
                f"Handler {handler} already subscribed to event type {event_type.__name__}"
            )
            return
        self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: type[DomainEvent], handler: EventHandler) -> None:
        if handler in self._handlers[event_type]:
            self._handlers[event_type].remove(handler)

    def clear_handlers(self, event_type: type[DomainEvent] | None = None) -> None:
        if event_type is None:
            self._handlers.clear()
        else:
            self._handlers.pop(event_type, None)

    def get_event_history(
        self, event_type: type[DomainEvent] | None = None, limit: int | None = None
    ) -> list[DomainEvent]:
        """Published events, oldest first, optionally filtered by type."""
        events = self._event_history
        if event_type is not None:
            events = [e for e in events if isinstance(e, event_type)]
        if limit is not None:
            events = events[-limit:]
        return list(events)

    def _handlers_for(self, event_type: type[DomainEvent]) -> list[EventHandler]:
        handlers: list[EventHandler] = []
        for registered_type, registered in self._handlers.items():
            if issubclass(event_type, registered_type):
                handlers.extend(registered)
        return handlers

    def _add_to_history(self, event: DomainEvent) -> None:
        self._event_history.append(event)
        if len(self._event_history) > self._max_history_size:
            self._event_history = self._event_history[-self._max_history_size :]
