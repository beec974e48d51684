"""Event primitives for the eventfixture library."""

from eventfixture.events.base import DomainEvent, EventMessage

__all__ = [
    "DomainEvent",
    "EventMessage",
]
