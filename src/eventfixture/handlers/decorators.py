"""
Handler decorators.

This module contains the decorators aggregates use to declare their
behavior:

- @command_handler marks the method that handles one command type
- @creation_handler marks a method that initializes a brand-new aggregate
  from a command (the constructor-style handler)
- @handles marks an event-sourcing handler that updates aggregate state
  when an event is applied

The decorators only attach the handled type to the function. Discovery
happens once per aggregate class in AggregateModel.

Example:
    >>> from eventfixture.handlers import command_handler, creation_handler, handles
"""

import inspect
import typing
from collections.abc import Callable
from typing import Any, TypeVar, overload

from eventfixture.commands.base import Command
from eventfixture.events.base import DomainEvent

# Type variable for handler functions - preserves the exact type of the decorated function
F = TypeVar("F", bound=Callable[..., Any])


@overload
def command_handler(command_type: F) -> F: ...


@overload
def command_handler(command_type: type[Command]) -> Callable[[F], F]: ...


def command_handler(command_type: Any) -> Any:
    """
    Decorator to mark a method as the handler for a command type.

    Can be used with an explicit command type, or bare, in which case the
    command type is read from the annotation of the first parameter after
    ``self``.

    Handler Signatures:
        def handler(self, command: CommandType) -> Any
        def handler(self, command: CommandType, metadata: dict) -> Any

    Example:
        >>> class Account(AggregateRoot):
        ...     @command_handler
        ...     def deposit(self, command: Deposit) -> None:
        ...         self.apply(MoneyDeposited(amount=command.amount))
        ...
        ...     @command_handler(Withdraw)
        ...     def withdraw(self, command, metadata) -> None:
        ...         ...
    """
    return _decorate(command_type, creates=False)


@overload
def creation_handler(command_type: F) -> F: ...


@overload
def creation_handler(command_type: type[Command]) -> Callable[[F], F]: ...


def creation_handler(command_type: Any) -> Any:
    """
    Decorator to mark a method as the creation handler for a command type.

    The dispatcher allocates a blank instance without calling ``__init__``,
    binds the active unit of work to it and then calls the handler on it, so
    the handler plays the role of a constructor and may ``apply()`` events.

    Example:
        >>> class Account(AggregateRoot):
        ...     @creation_handler
        ...     def open(self, command: OpenAccount) -> None:
        ...         self.account_id = command.account_id
        ...         self.balance = 0
        ...         self.apply(AccountOpened(account_id=command.account_id))
    """
    return _decorate(command_type, creates=True)


def _decorate(command_type: Any, *, creates: bool) -> Any:
    if isinstance(command_type, type):

        def decorator(func: F) -> F:
            _mark(func, command_type, creates)
            return func

        return decorator

    func = command_type
    _mark(func, _command_type_from_annotation(func), creates)
    return func


def _mark(func: Any, command_type: type[Command], creates: bool) -> None:
    func._handles_command_type = command_type
    func._creates_aggregate = creates


def _command_type_from_annotation(func: Callable[..., Any]) -> type[Command]:
    try:
        hints = typing.get_type_hints(func)
    except NameError:
        hints = {}
    params = list(inspect.signature(func).parameters.values())
    # params[0] is self
    if len(params) < 2:
        raise TypeError(
            f"Handler {func.__qualname__} needs a command parameter "
            "or an explicit command type: @command_handler(MyCommand)"
        )
    annotation = hints.get(params[1].name, params[1].annotation)
    if not (isinstance(annotation, type) and issubclass(annotation, Command)):
        raise TypeError(
            f"Cannot infer command type for {func.__qualname__}: parameter "
            f"'{params[1].name}' is not annotated with a Command subclass. "
            "Pass the type explicitly: @command_handler(MyCommand)"
        )
    return annotation


def handles(event_type: type[DomainEvent]) -> Callable[[F], F]:
    """
    Decorator to mark a method as an event-sourcing handler.

    When the aggregate applies an event during an active unit of work, the
    handler registered for the event's type runs before the event is
    recorded.

    Args:
        event_type: The DomainEvent subclass this handler processes

    Example:
        >>> class Account(AggregateRoot):
        ...     @handles(MoneyDeposited)
        ...     def _on_deposited(self, event: MoneyDeposited) -> None:
        ...         self.balance += event.amount
    """

    def decorator(func: F) -> F:
        # Attach the event type to the function for later discovery
        func._handles_event_type = event_type  # type: ignore[attr-defined]
        return func

    return decorator


def get_handled_command_type(func: Callable[..., Any]) -> type[Command] | None:
    """
    Get the command type handled by a decorated function.

    Args:
        func: A function potentially decorated with @command_handler or
            @creation_handler

    Returns:
        The command type if decorated, None otherwise
    """
    return getattr(func, "_handles_command_type", None)


def is_creation_handler(func: Callable[..., Any]) -> bool:
    """Check if a function is decorated with @creation_handler."""
    return bool(getattr(func, "_creates_aggregate", False))


def get_handled_event_type(func: Callable[..., Any]) -> type[DomainEvent] | None:
    """
    Get the event type handled by a decorated function.

    Args:
        func: A function potentially decorated with @handles

    Returns:
        The event type if decorated with @handles, None otherwise
    """
    return getattr(func, "_handles_event_type", None)


def is_command_handler(func: Callable[..., Any]) -> bool:
    """Check if a function is decorated as a command or creation handler."""
    return get_handled_command_type(func) is not None


__all__ = [
    "command_handler",
    "creation_handler",
    "handles",
    "get_handled_command_type",
    "get_handled_event_type",
    "is_command_handler",
    "is_creation_handler",
]
