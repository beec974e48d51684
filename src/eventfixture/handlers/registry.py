"""
Aggregate model: the handler lookup table for one aggregate type.

An AggregateModel maps each command type to exactly one handler on the
aggregate class, maps event types to event-sourcing handlers, and knows how
to read the aggregate's identifier. It is built once per aggregate class,
either by scanning @command_handler / @handles decorated methods or by
explicit registration, and cached.

Example:
    >>> model = AggregateModel.for_type(AccountAggregate)
    >>> model.get_handler(Deposit)
    CommandHandlerInfo(command_type=<class 'Deposit'>, handler_name='deposit', ...)
    >>> model.identifier_of(account)
    'acc-1'
"""

import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, ClassVar

from eventfixture.commands.base import Command
from eventfixture.events.base import DomainEvent
from eventfixture.exceptions import DuplicateHandlerError, HandlerSignatureError
from eventfixture.handlers.decorators import (
    get_handled_command_type,
    get_handled_event_type,
    is_creation_handler,
)

logger = logging.getLogger(__name__)

# Default name of the attribute holding an aggregate's identifier
DEFAULT_IDENTIFIER_ATTRIBUTE = "aggregate_id"


@dataclass(frozen=True)
class CommandHandlerInfo:
    """
    Metadata about a registered command handler.

    Attributes:
        command_type: The Command subclass this handler processes
        handler_name: Name of the handler (method name or function name)
        handler: Unbound function; called with the aggregate first
        is_creation: True for handlers that initialize a brand-new aggregate
        param_count: Parameters after self (1 for command, 2 for command+metadata)
    """

    command_type: type[Command]
    handler_name: str
    handler: Callable[..., Any]
    is_creation: bool
    param_count: int

    def invoke(self, target: Any, command: Command, metadata: dict[str, Any]) -> Any:
        """
        Call the handler.

        Args:
            target: The aggregate instance (a blank one for creation handlers)
            command: The command payload
            metadata: The command message's metadata

        Returns:
            Whatever the handler returns
        """
        if self.param_count == 1:
            return self.handler(target, command)
        return self.handler(target, command, metadata)


class AggregateModel:
    """
    Lookup table for one aggregate type.

    Use ``AggregateModel.for_type(cls)`` to get the cached, scanned model of
    an aggregate class. Frameworks that do not use decorators can build a
    model by hand and register it with ``AggregateModel.register``.

    Attributes:
        aggregate_class: The aggregate class this model describes
        aggregate_type: Type name used in event envelopes and messages
    """

    _cache: ClassVar[dict[type, "AggregateModel"]] = {}

    def __init__(
        self,
        aggregate_class: type,
        *,
        aggregate_type: str | None = None,
        identifier: Callable[[Any], Any] | None = None,
    ) -> None:
        """
        Initialize an empty model.

        Args:
            aggregate_class: The aggregate class
            aggregate_type: Type name (defaults to the class's ``aggregate_type``
                attribute, then to the class name)
            identifier: Accessor returning an instance's identifier. Defaults to
                reading the attribute named by the class's ``aggregate_identifier``
                (``"aggregate_id"`` if the class does not declare one).
        """
        self.aggregate_class = aggregate_class
        self.aggregate_type = aggregate_type or getattr(
            aggregate_class, "aggregate_type", None
        ) or aggregate_class.__name__
        self._identifier_attribute: str = getattr(
            aggregate_class, "aggregate_identifier", DEFAULT_IDENTIFIER_ATTRIBUTE
        )
        self._identifier = identifier or self._read_identifier_attribute
        self._command_handlers: dict[type[Command], CommandHandlerInfo] = {}
        self._event_handlers: dict[type[DomainEvent], str] = {}

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def for_type(cls, aggregate_class: type) -> "AggregateModel":
        """
        Get the model for an aggregate class, scanning it on first use.

        Args:
            aggregate_class: The aggregate class

        Returns:
            The cached AggregateModel

        Raises:
            HandlerSignatureError: If a handler has the wrong number of parameters
            DuplicateHandlerError: If two handlers accept the same command type
        """
        model = cls._cache.get(aggregate_class)
        if model is None:
            model = cls.inspect(aggregate_class)
            cls._cache[aggregate_class] = model
        return model

    @classmethod
    def register(cls, model: "AggregateModel") -> "AggregateModel":
        """
        Register a hand-built model so ``for_type`` returns it.

        Args:
            model: The model to register

        Returns:
            The registered model
        """
        cls._cache[model.aggregate_class] = model
        return model

    @classmethod
    def clear_cache(cls) -> None:
        """Forget all scanned and registered models."""
        cls._cache.clear()

    @classmethod
    def inspect(cls, aggregate_class: type) -> "AggregateModel":
        """
        Build a model by scanning an aggregate class for decorated methods.

        Args:
            aggregate_class: The aggregate class to scan

        Returns:
            A new AggregateModel (not cached)
        """
        model = cls(aggregate_class)
        for attr_name in dir(aggregate_class):
            # Skip dunder methods
            if attr_name.startswith("__"):
                continue

            raw = inspect.getattr_static(aggregate_class, attr_name, None)
            if raw is None:
                continue

            command_type = get_handled_command_type(raw)
            if command_type is not None:
                model.add_command_handler(
                    command_type,
                    raw,
                    name=attr_name,
                    is_creation=is_creation_handler(raw),
                )
                continue

            event_type = get_handled_event_type(raw)
            if isinstance(event_type, type):
                model._event_handlers[event_type] = attr_name

        return model

    def add_command_handler(
        self,
        command_type: type[Command],
        handler: Callable[..., Any],
        *,
        name: str | None = None,
        is_creation: bool = False,
    ) -> CommandHandlerInfo:
        """
        Register the handler for a command type.

        Args:
            command_type: The command type
            handler: Function taking the aggregate, the command and
                optionally the metadata
            name: Handler name for diagnostics (defaults to the function name)
            is_creation: Whether the handler creates a new aggregate

        Returns:
            The registered CommandHandlerInfo

        Raises:
            HandlerSignatureError: If the handler has the wrong number of parameters
            DuplicateHandlerError: If a handler for the command type already exists
        """
        handler_name = name or getattr(handler, "__name__", repr(handler))

        existing = self._command_handlers.get(command_type)
        if existing is not None:
            raise DuplicateHandlerError(
                owner_name=self.aggregate_class.__name__,
                command_type=command_type,
                handler_names=[existing.handler_name, handler_name],
            )

        try:
            param_count = len(inspect.signature(handler).parameters) - 1
        except (ValueError, TypeError):
            # Can't inspect signature - assume command-only
            param_count = 1

        if param_count < 1 or param_count > 2:
            raise HandlerSignatureError(
                handler_name=handler_name,
                owner_name=self.aggregate_class.__name__,
                command_type=command_type,
                param_count=param_count,
            )

        info = CommandHandlerInfo(
            command_type=command_type,
            handler_name=handler_name,
            handler=handler,
            is_creation=is_creation,
            param_count=param_count,
        )
        self._command_handlers[command_type] = info

        logger.debug(
            "Registered handler %s for %s",
            handler_name,
            command_type.__name__,
            extra={
                "aggregate_type": self.aggregate_type,
                "handler": handler_name,
                "command_type": command_type.__name__,
                "is_creation": is_creation,
                "param_count": param_count,
            },
        )
        return info

    def add_event_handler(self, event_type: type[DomainEvent], method_name: str) -> None:
        """
        Register an event-sourcing handler by method name.

        Args:
            event_type: The event type
            method_name: Name of the aggregate method to call with the event
        """
        self._event_handlers[event_type] = method_name

    # =========================================================================
    # Lookup
    # =========================================================================

    def get_handler(self, command_type: type[Command]) -> CommandHandlerInfo | None:
        """
        Get the handler for a command type.

        Args:
            command_type: The command type to look up

        Returns:
            CommandHandlerInfo if found, None otherwise
        """
        return self._command_handlers.get(command_type)

    def get_event_handler(self, event_type: type[DomainEvent]) -> str | None:
        """Get the name of the event-sourcing handler method for an event type."""
        return self._event_handlers.get(event_type)

    def handled_commands(self) -> list[type[Command]]:
        """Get the command types this aggregate handles."""
        return list(self._command_handlers)

    def handled_events(self) -> list[type[DomainEvent]]:
        """Get the event types this aggregate has event-sourcing handlers for."""
        return list(self._event_handlers)

    def _read_identifier_attribute(self, aggregate: Any) -> Any:
        return getattr(aggregate, self._identifier_attribute, None)

    def identifier_of(self, aggregate: Any) -> Any:
        """
        Read an aggregate instance's identifier.

        Args:
            aggregate: The aggregate instance

        Returns:
            The identifier, or None if it is not set
        """
        return self._identifier(aggregate)

    def __repr__(self) -> str:
        return (
            f"AggregateModel({self.aggregate_type}, "
            f"commands={len(self._command_handlers)}, "
            f"events={len(self._event_handlers)})"
        )


__all__ = [
    "AggregateModel",
    "CommandHandlerInfo",
    "DEFAULT_IDENTIFIER_ATTRIBUTE",
]
