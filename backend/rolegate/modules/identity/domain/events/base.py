"""Base classes for identity domain events."""

from typing import Any

from pydantic import Field

from rolegate.core.events.types import DomainEvent


class IdentityDomainEvent(DomainEvent):
    """Base class for all identity domain events."""

    domain: str = Field(default="identity", frozen=True)

    def get_event_metadata(self) -> dict[str, Any]:
        """Get event metadata for audit and monitoring."""
        return {
            "domain": self.domain,
            "event_type": self.event_type,
            "aggregate_id": self.get_aggregate_id(),
            "timestamp": self.occurred_at.isoformat(),
            "event_id": str(self.event_id),
        }
