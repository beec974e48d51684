"""
Base class for aggregates driven by the fixture.

Aggregates are the consistency boundaries under test. Command handlers
mutate their fields and signal domain events through ``apply()``. The
events go to whatever unit of work the dispatcher bound to the instance;
outside an active unit of work ``apply()`` does nothing.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, ClassVar

from eventfixture.events.base import DomainEvent, EventMessage
from eventfixture.exceptions import UnhandledEventError
from eventfixture.handlers.registry import AggregateModel

if TYPE_CHECKING:
    from eventfixture.unitofwork.scope import TransactionScope

# Type alias for unregistered event handling mode
UnregisteredEventHandling = str  # "ignore" | "warn" | "error"

logger = logging.getLogger(__name__)


class AggregateRoot:
    """
    Base class for aggregate roots.

    Subclasses keep whatever fields they like and declare command handlers
    with ``@command_handler``. Optional ``@handles`` methods update state
    when an event is applied, so the same handler can serve both
    state-stored and event-sourced aggregates.

    Example:
        >>> class StateStoredAggregate(AggregateRoot):
        ...     aggregate_identifier = "id"
        ...
        ...     def __init__(self, id: str, message: str) -> None:
        ...         super().__init__()
        ...         self.id = id
        ...         self.message = message
        ...
        ...     @command_handler
        ...     def set_message(self, command: SetMessage) -> None:
        ...         self.message = command.message
        ...         self.apply(MessageChanged())

    Attributes:
        aggregate_type: Type name for event envelopes (defaults to the class name)
        aggregate_identifier: Name of the attribute holding the identifier
        unregistered_event_handling: What to do when an applied event has no
            ``@handles`` method:
            - "ignore": Silently ignore (default)
            - "warn": Log a warning
            - "error": Raise UnhandledEventError
    """

    aggregate_type: ClassVar[str | None] = None
    aggregate_identifier: ClassVar[str] = "aggregate_id"
    unregistered_event_handling: ClassVar[UnregisteredEventHandling] = "ignore"

    def __init__(self) -> None:
        self._scope: TransactionScope | None = None

    @classmethod
    def model(cls) -> AggregateModel:
        """Get the cached aggregate model for this class."""
        return AggregateModel.for_type(cls)

    @property
    def identifier(self) -> Any:
        """Get the identifier of this aggregate."""
        return self.model().identifier_of(self)

    def apply(self, event: DomainEvent) -> EventMessage | None:
        """
        Signal a domain event.

        While a unit of work is active the event's ``@handles`` method (if
        any) runs and the event is recorded. Otherwise the call is a no-op:
        nothing runs and nothing is recorded.

        Args:
            event: The domain event to signal

        Returns:
            The recorded EventMessage, or None if the signal was discarded
        """
        scope = getattr(self, "_scope", None)
        if scope is None or not scope.is_active:
            logger.debug(
                "Discarding %s signaled outside an active unit of work",
                event.event_type,
                extra={
                    "aggregate_type": self.model().aggregate_type,
                    "event_type": event.event_type,
                },
            )
            return None

        self._apply(event)
        return scope.signal(event, aggregate=self)

    def _apply(self, event: DomainEvent) -> None:
        """
        Run the event-sourcing handler for an event.

        Raises:
            UnhandledEventError: If unregistered_event_handling="error" and no handler found
        """
        handler_name = self.model().get_event_handler(type(event))
        if handler_name:
            getattr(self, handler_name)(event)
        else:
            self._handle_unregistered_event(event)

    def _handle_unregistered_event(self, event: DomainEvent) -> None:
        """
        Handle an event that has no registered handler.

        Raises:
            UnhandledEventError: If unregistered_event_handling="error"
        """
        mode = self.unregistered_event_handling
        if mode == "ignore":
            return

        available_handlers = [et.__name__ for et in self.model().handled_events()]
        if mode == "error":
            raise UnhandledEventError(
                event_type=event.event_type,
                handler_class=self.__class__.__name__,
                available_handlers=available_handlers,
            )
        logger.warning(
            "No handler registered for event type %s in %s. Available handlers: %s.",
            event.event_type,
            self.__class__.__name__,
            ", ".join(available_handlers) if available_handlers else "none",
            extra={
                "event_type": event.event_type,
                "handler_class": self.__class__.__name__,
                "available_handlers": available_handlers,
            },
        )

    def _bind_scope(self, scope: TransactionScope | None) -> None:
        """Attach the unit of work that ``apply()`` signals into."""
        self._scope = scope

    def __repr__(self) -> str:
        """String representation of aggregate."""
        return f"{self.__class__.__name__}(id={self.identifier!r})"


__all__ = [
    "AggregateRoot",
    "UnregisteredEventHandling",
]
