"""Domain layer base classes.

Provides identity-based entities and aggregate roots that collect domain
events until the infrastructure layer drains them after a successful write.

Design Principles:
- Entities are defined by their identity, not their attributes
- Aggregate roots are the only objects that record domain events
- The pending event list is append-only until drained
"""

from abc import ABC
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from rolegate.core.events.types import DomainEvent

IdT = TypeVar("IdT")


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


# =====================================================================================
# ENTITY BASE CLASS
# =====================================================================================


class Entity(ABC, Generic[IdT]):
    """
    Base entity with identity and timestamps.

    Entities are mutable objects with a distinct identity that persists over
    time. Two entities are equal when they have the same type and id.
    """

    def __init__(self, entity_id: IdT, created_at: datetime | None = None):
        """
        Initialize entity.

        Args:
            entity_id: Typed identifier of the entity
            created_at: Creation timestamp (defaults to now)
        """
        if entity_id is None:
            raise ValueError(f"{self.__class__.__name__} requires an id")
        self.id: IdT = entity_id
        self.created_at = created_at or utc_now()
        self.updated_at = self.created_at

    def _touch(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = utc_now()

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, self.__class__):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash((self.__class__.__name__, self.id))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.id})"


# =====================================================================================
# AGGREGATE ROOT CLASS
# =====================================================================================


class AggregateRoot(Entity[IdT]):
    """
    Aggregate root with domain event management.

    Aggregate roots are the consistency boundary for a cluster of related
    objects. State changes record domain events with :meth:`add_domain_event`;
    the persistence layer drains them with :meth:`clear_events` once the
    change has been stored.
    """

    def __init__(self, entity_id: IdT, created_at: datetime | None = None):
        super().__init__(entity_id, created_at)
        self._events: list["DomainEvent"] = []

    def add_domain_event(self, event: "DomainEvent") -> None:
        """
        Record a domain event raised by this aggregate.

        Args:
            event: Domain event to add
        """
        self._events.append(event)
        self._touch()

    def clear_events(self) -> list["DomainEvent"]:
        """
        Clear and return all pending events.

        Returns:
            list[DomainEvent]: Events in the order they were raised
        """
        events = self._events.copy()
        self._events.clear()
        return events

    def get_events(self) -> list["DomainEvent"]:
        """Copy of the pending events without clearing them."""
        return self._events.copy()

    def has_events(self) -> bool:
        return len(self._events) > 0

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"id={self.id}, "
            f"events={len(self._events)})"
        )


__all__ = ["AggregateRoot", "Entity", "utc_now"]
