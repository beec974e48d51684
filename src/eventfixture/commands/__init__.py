"""Command primitives for the eventfixture library."""

from eventfixture.commands.base import NO_TARGET, Command, CommandMessage

__all__ = [
    "Command",
    "CommandMessage",
    "NO_TARGET",
]
