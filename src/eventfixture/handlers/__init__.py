"""
Handler infrastructure for aggregates.

This module provides:
- command_handler / creation_handler: Decorators for command handler methods
- handles: Decorator for event-sourcing handler methods
- AggregateModel: Per-aggregate-type lookup table of handlers and identifier
- CommandHandlerInfo: Metadata about a registered command handler

Example:
    >>> from eventfixture.handlers import AggregateModel, command_handler
    >>>
    >>> class Account(AggregateRoot):
    ...     @command_handler
    ...     def deposit(self, command: Deposit) -> None: ...
    >>>
    >>> AggregateModel.for_type(Account).handled_commands()
    [<class 'Deposit'>]
"""

from eventfixture.handlers.decorators import (
    command_handler,
    creation_handler,
    get_handled_command_type,
    get_handled_event_type,
    handles,
    is_command_handler,
    is_creation_handler,
)
from eventfixture.handlers.registry import (
    DEFAULT_IDENTIFIER_ATTRIBUTE,
    AggregateModel,
    CommandHandlerInfo,
)

__all__ = [
    "AggregateModel",
    "CommandHandlerInfo",
    "DEFAULT_IDENTIFIER_ATTRIBUTE",
    "command_handler",
    "creation_handler",
    "handles",
    "get_handled_command_type",
    "get_handled_event_type",
    "is_command_handler",
    "is_creation_handler",
]
