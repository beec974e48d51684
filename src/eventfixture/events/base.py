"""
Base classes for domain events.

Events are immutable records of things that have happened to an aggregate.
A ``DomainEvent`` carries only its payload so that two events are equal
exactly when they have the same type and the same field values. Everything
the unit of work knows about an event (identifier, position, timestamp,
metadata) lives on the ``EventMessage`` envelope instead.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Self
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


class DomainEvent(BaseModel):
    """
    Base class for all domain events.

    Events are frozen Pydantic models. Equality is structural: pydantic
    compares the concrete type and every field value, which is what the
    then-phase assertions rely on.

    Example:
        >>> class MessageChanged(DomainEvent):
        ...     message: str
        ...
        >>> MessageChanged(message="hi") == MessageChanged(message="hi")
        True
        >>> MessageChanged(message="hi") == MessageChanged(message="bye")
        False
    """

    model_config = ConfigDict(frozen=True)

    @property
    def event_type(self) -> str:
        """Type name of the event, derived from the class name."""
        return type(self).__name__

    def to_dict(self) -> dict[str, Any]:
        """
        Convert the event payload to a JSON-compatible dictionary.

        Returns:
            Dictionary of field values with UUIDs and datetimes as strings
        """
        return self.model_dump(mode="json")

    def __str__(self) -> str:
        """String representation of event."""
        fields = ", ".join(f"{k}={v!r}" for k, v in self.model_dump().items())
        return f"{self.event_type}({fields})"


class EventMessage(BaseModel):
    """
    Envelope around a domain event recorded during a unit of work.

    Attributes:
        event_id: Unique identifier for this event instance
        aggregate_id: Identifier of the aggregate that signaled the event
        aggregate_type: Type of aggregate (e.g., 'Order')
        sequence_number: Position of the event within its unit of work (0-based)
        occurred_at: When the event was signaled (UTC timestamp)
        payload: The domain event itself
        metadata: Metadata copied from the command message that caused the event
    """

    model_config = ConfigDict(frozen=True)

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier",
    )
    aggregate_id: Any = Field(
        default=None,
        description="ID of the aggregate this event belongs to",
    )
    aggregate_type: str | None = Field(
        default=None,
        description="Type of aggregate (e.g., 'Order')",
    )
    sequence_number: int = Field(
        ...,
        ge=0,
        description="Position of the event within its unit of work",
    )
    occurred_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="When event occurred (UTC)",
    )
    payload: DomainEvent = Field(
        ...,
        description="The domain event",
    )
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Metadata inherited from the command message",
    )

    @property
    def payload_type(self) -> type[DomainEvent]:
        """Concrete class of the payload."""
        return type(self.payload)

    def with_metadata(self, **kwargs: Any) -> Self:
        """
        Create a copy of this message with additional metadata.

        Args:
            **kwargs: Key-value pairs to add to metadata

        Returns:
            New message instance with updated metadata
        """
        return self.model_copy(update={"metadata": {**self.metadata, **kwargs}})

    def __repr__(self) -> str:
        """Detailed string representation."""
        return (
            f"{self.__class__.__name__}("
            f"sequence_number={self.sequence_number}, "
            f"aggregate_id={self.aggregate_id!r}, "
            f"aggregate_type={self.aggregate_type!r}, "
            f"payload={self.payload!r})"
        )


__all__ = ["DomainEvent", "EventMessage"]
