"""In-process event bus.

Handlers subscribe to an event class and receive every published instance
of that class or of its subclasses. Handlers may be plain callables or
coroutine functions.
"""

import inspect
from abc import ABC, abstractmethod
from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import Any

from rolegate.core.events.types import DomainEvent
from rolegate.core.logging import get_logger

logger = get_logger(__name__)

EventHandlerType = Callable[[DomainEvent], Awaitable[None] | None]


class EventBus(ABC):
    """Contract for publishing and subscribing to domain events."""

    @abstractmethod
    async def publish(self, event: DomainEvent) -> None:
        """
        Publish a domain event to every matching handler.

        Args:
            event: The domain event to publish
        """

    @abstractmethod
    def subscribe(self, event_type: type[DomainEvent], handler: EventHandlerType) -> None:
        """
        Subscribe a handler to an event type.

        Args:
            event_type: The event class to listen for
            handler: Callable that processes the event (sync or async)
        """

    @abstractmethod
    def unsubscribe(
        self, event_type: type[DomainEvent], handler: EventHandlerType
    ) -> None:
        """Remove a handler subscription for an event type."""


class InMemoryEventBus(EventBus):
    """
    Event bus for single-process deployments.

    Handlers run sequentially in subscription order. A failing handler is
    logged and does not stop delivery to the remaining handlers, because the
    change that raised the event has already been stored.
    """

    def __init__(self):
        self._handlers: dict[type[DomainEvent], list[EventHandlerType]] = defaultdict(
            list
        )
        self._published_count = 0

    def subscribe(self, event_type: type[DomainEvent], handler: EventHandlerType) -> None:
        if not callable(handler):
            raise TypeError("Event handler must be callable")
        if handler not in self._handlers[event_type]:
            self._handlers[event_type].append(handler)

    def unsubscribe(
        self, event_type: type[DomainEvent], handler: EventHandlerType
    ) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def _handlers_for(self, event: DomainEvent) -> list[EventHandlerType]:
        matched: list[EventHandlerType] = []
        for event_type, handlers in self._handlers.items():
            if isinstance(event, event_type):
                matched.extend(handlers)
        return matched

    async def publish(self, event: DomainEvent) -> None:
        handlers = self._handlers_for(event)
        self._published_count += 1

        logger.debug(
            "Publishing domain event",
            event_type=event.event_type,
            event_id=str(event.event_id),
            handler_count=len(handlers),
        )

        for handler in handlers:
            try:
                outcome = handler(event)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception as e:
                logger.exception(
                    "Event handler failed",
                    event_type=event.event_type,
                    event_id=str(event.event_id),
                    handler=getattr(handler, "__qualname__", repr(handler)),
                    error=str(e),
                )

    @property
    def published_count(self) -> int:
        return self._published_count

    def get_stats(self) -> dict[str, Any]:
        return {
            "subscriptions": {
                event_type.__name__: len(handlers)
                for event_type, handlers in self._handlers.items()
            },
            "published_count": self._published_count,
        }


__all__ = ["EventBus", "EventHandlerType", "InMemoryEventBus"]
