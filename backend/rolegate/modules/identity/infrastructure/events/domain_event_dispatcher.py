"""
Domain Event Dispatcher

Drains pending events from aggregates once their changes are stored and
publishes them on the event bus.
"""

from rolegate.core.domain.base import AggregateRoot
from rolegate.core.events import DomainEvent, EventBus
from rolegate.core.logging import get_logger

logger = get_logger(__name__)


class DomainEventDispatcher:
    """Publishes the pending events of persisted aggregates."""

    def __init__(self, event_bus: EventBus):
        self._event_bus = event_bus

    async def dispatch(self, *aggregates: AggregateRoot | None) -> list[DomainEvent]:
        """
        Publish and clear the pending events of each aggregate, in order.

        Returns:
            The events that were published
        """
        published: list[DomainEvent] = []
        for aggregate in aggregates:
            if aggregate is None:
                continue
            for event in aggregate.clear_events():
                await self._event_bus.publish(event)
                published.append(event)

        if published:
            logger.debug(
                "Dispatched domain events",
                count=len(published),
                event_types=[event.event_type for event in published],
            )
        return published
