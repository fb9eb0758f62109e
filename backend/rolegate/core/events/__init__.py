"""Domain event base type and in-process bus."""

from rolegate.core.events.bus import EventBus, EventHandlerType, InMemoryEventBus
from rolegate.core.events.types import DomainEvent

__all__ = ["DomainEvent", "EventBus", "EventHandlerType", "InMemoryEventBus"]
