from .domain_event_dispatcher import DomainEventDispatcher

__all__ = ["DomainEventDispatcher"]
