"""Domain event base type.

Domain events are immutable pydantic models. Each event carries its own id,
the UTC time it occurred and the id of the aggregate that raised it.
"""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


class DomainEvent(BaseModel):
    """
    Base domain event.

    Usage Example:
        class RoleCreated(DomainEvent):
            role_id: UUID
            name: str

            def get_aggregate_id(self) -> str:
                return str(self.role_id)
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    event_id: UUID = Field(default_factory=uuid4)
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def event_type(self) -> str:
        return self.__class__.__name__

    def get_aggregate_id(self) -> str:
        """Get the aggregate ID for this event."""
        raise NotImplementedError("Subclasses must implement get_aggregate_id")

    def to_dict(self) -> dict[str, Any]:
        """Serialize event with its type name for logging and transport."""
        return {
            "event_type": self.event_type,
            "aggregate_id": self.get_aggregate_id(),
            **self.model_dump(mode="json"),
        }


__all__ = ["DomainEvent"]
