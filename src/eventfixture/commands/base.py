"""
Base classes for commands.

Commands are immutable instructions directed at a single aggregate
instance. Each command names the field that carries the identifier of the
aggregate it targets; the dispatcher uses that value to check the command
reaches the right instance.
"""

from __future__ import annotations

from typing import Any, ClassVar
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from eventfixture.exceptions import MissingTargetIdentifierError


class _NoTarget:
    """Sentinel type for commands that carry no routing identifier."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "<NO_TARGET>"


NO_TARGET: Any = _NoTarget()


class Command(BaseModel):
    """
    Base class for all commands.

    Subclasses declare their payload fields. The class variable
    ``target_aggregate_identifier`` names the field holding the identifier
    of the target aggregate; set it to ``None`` for commands that create a
    new aggregate and therefore have nothing to route to.

    Example:
        >>> class SetMessage(Command):
        ...     target_aggregate_identifier = "id"
        ...     id: str
        ...     message: str
        ...
        >>> SetMessage(id="id", message="hello").target_identifier()
        'id'
    """

    model_config = ConfigDict(frozen=True)

    target_aggregate_identifier: ClassVar[str | None] = "aggregate_id"

    @property
    def command_type(self) -> str:
        """Type name of the command, derived from the class name."""
        return type(self).__name__

    def target_identifier(self) -> Any:
        """
        Get the identifier of the aggregate this command is directed at.

        Returns:
            The value of the routing field (which may itself be None), or
            NO_TARGET if the command does not route to an existing aggregate

        Raises:
            MissingTargetIdentifierError: If the command has no field by the
                routing name
        """
        field_name = self.target_aggregate_identifier
        if field_name is None:
            return NO_TARGET
        try:
            return getattr(self, field_name)
        except AttributeError:
            raise MissingTargetIdentifierError(type(self), field_name) from None


class CommandMessage(BaseModel):
    """
    Envelope around a command dispatched by the fixture.

    Attributes:
        command_id: Unique identifier for this dispatch
        payload: The command itself
        metadata: Metadata propagated onto every event the command produces
    """

    model_config = ConfigDict(frozen=True)

    command_id: UUID = Field(
        default_factory=uuid4,
        description="Unique command identifier",
    )
    payload: Command = Field(
        ...,
        description="The command",
    )
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Metadata attached by the caller",
    )

    @property
    def payload_type(self) -> type[Command]:
        """Concrete class of the payload."""
        return type(self.payload)

    @classmethod
    def of(cls, command: Command, metadata: dict[str, Any] | None = None) -> CommandMessage:
        """
        Wrap a command in a message.

        Args:
            command: The command to wrap
            metadata: Optional metadata to attach

        Returns:
            New CommandMessage instance
        """
        return cls(payload=command, metadata=dict(metadata or {}))


__all__ = ["Command", "CommandMessage", "NO_TARGET"]
