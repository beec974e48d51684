"""Library exceptions for the eventfixture package."""

from typing import Any


class EventFixtureError(Exception):
    """Base exception for eventfixture library."""

    pass


# =============================================================================
# Harness errors (fixture bugs, never test failures)
# =============================================================================


class ScopeAlreadyActiveError(EventFixtureError):
    """Raised when a unit of work is started while another one is still active."""

    def __init__(self, aggregate_id: Any = None) -> None:
        self.aggregate_id = aggregate_id
        target = f" for aggregate {aggregate_id!r}" if aggregate_id is not None else ""
        super().__init__(
            f"A Unit of Work is already active{target}. Nested units of work are not supported."
        )


class ScopeAlreadyCompletedError(EventFixtureError):
    """Raised when a unit of work that already committed or rolled back is reused."""

    def __init__(self, phase: str) -> None:
        self.phase = phase
        super().__init__(
            f"The Unit of Work has already completed (phase: {phase}). "
            "A unit of work reaches exactly one terminal phase."
        )


class ScopeNotActiveError(EventFixtureError):
    """Raised when an operation requires an active unit of work and there is none."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Cannot {operation}: no Unit of Work is active.")


class LeakedActiveScopeError(EventFixtureError):
    """Raised at teardown when a unit of work is still active."""

    def __init__(self, aggregate_id: Any = None) -> None:
        self.aggregate_id = aggregate_id
        super().__init__(
            f"A Unit of Work is still running (aggregate: {aggregate_id!r}). "
            "Every given/when/then cycle must leave its unit of work committed or rolled back."
        )


class FixtureExecutionError(EventFixtureError):
    """Raised when the fixture's given/when/then phases are used out of order."""

    pass


# =============================================================================
# Aggregate model errors
# =============================================================================


class HandlerSignatureError(EventFixtureError, ValueError):
    """
    Raised when a command handler has an invalid signature.

    Attributes:
        handler_name: Name of the handler method
        owner_name: Name of the aggregate class containing the handler
        command_type: The command type the handler was registered for
        param_count: Actual number of parameters (excluding self/cls)
    """

    def __init__(
        self,
        handler_name: str,
        owner_name: str,
        command_type: type,
        param_count: int,
    ) -> None:
        self.handler_name = handler_name
        self.owner_name = owner_name
        self.command_type = command_type
        self.param_count = param_count

        command_name = command_type.__name__
        super().__init__(
            f"Handler '{handler_name}' in {owner_name} has invalid signature "
            f"for @command_handler({command_name}).\n\n"
            f"Expected one of:\n"
            f"  def {handler_name}(self, command: {command_name}) -> Any\n"
            f"  def {handler_name}(self, command: {command_name}, metadata: dict) -> Any\n\n"
            f"Got: {param_count} parameter(s) (excluding self)"
        )


class DuplicateHandlerError(EventFixtureError, ValueError):
    """Raised when two handlers on one aggregate accept the same command type."""

    def __init__(self, owner_name: str, command_type: type, handler_names: list[str]) -> None:
        self.owner_name = owner_name
        self.command_type = command_type
        self.handler_names = handler_names
        super().__init__(
            f"{owner_name} declares more than one handler for {command_type.__name__}: "
            f"{', '.join(handler_names)}. Exactly one handler per command type is allowed."
        )


class UnhandledEventError(EventFixtureError):
    """
    Raised when an applied event has no event-sourcing handler and strict mode is on.

    Attributes:
        event_type: The name of the event type that wasn't handled
        handler_class: Name of the aggregate class
        available_handlers: List of event type names that have handlers
    """

    def __init__(
        self,
        event_type: str,
        handler_class: str,
        available_handlers: list[str],
    ) -> None:
        self.event_type = event_type
        self.handler_class = handler_class
        self.available_handlers = available_handlers
        handlers_str = ", ".join(available_handlers) if available_handlers else "none"
        super().__init__(
            f"No handler registered for event type '{event_type}' "
            f"in {handler_class}. "
            f"Available handlers: {handlers_str}. "
            f"Add @handles({event_type}) decorator or set "
            f"unregistered_event_handling='ignore' or 'warn'."
        )


# =============================================================================
# Dispatch failures (surfaced as failed outcomes)
# =============================================================================


class NoHandlerFoundError(EventFixtureError):
    """Raised when an aggregate has no handler for a command type."""

    def __init__(self, command_type: type, aggregate_type: str, available: list[str]) -> None:
        self.command_type = command_type
        self.aggregate_type = aggregate_type
        self.available = available
        available_str = ", ".join(available) if available else "none"
        super().__init__(
            f"No handler found for command {command_type.__name__} on aggregate "
            f"{aggregate_type}. Handled commands: {available_str}."
        )


class AggregateNotFoundError(EventFixtureError):
    """Raised when a command targets an aggregate the fixture does not hold."""

    def __init__(self, aggregate_id: Any, aggregate_type: str | None = None) -> None:
        self.aggregate_id = aggregate_id
        self.aggregate_type = aggregate_type
        type_info = f" of type {aggregate_type}" if aggregate_type else ""
        super().__init__(f"Aggregate{type_info} not found: {aggregate_id!r}")


class AggregateAlreadyExistsError(EventFixtureError):
    """Raised when a creation command is sent while the fixture already holds an aggregate."""

    def __init__(self, aggregate_id: Any, aggregate_type: str | None = None) -> None:
        self.aggregate_id = aggregate_id
        self.aggregate_type = aggregate_type
        type_info = f" of type {aggregate_type}" if aggregate_type else ""
        super().__init__(
            f"Aggregate{type_info} already exists: {aggregate_id!r}. "
            "Creation commands need given_no_prior_activity()."
        )


class MissingTargetIdentifierError(EventFixtureError):
    """
    Raised when a command lacks the field its routing identifier is read from.

    Attributes:
        command_type: The command class
        field_name: The routing field named by ``target_aggregate_identifier``
    """

    def __init__(self, command_type: type, field_name: str) -> None:
        self.command_type = command_type
        self.field_name = field_name
        super().__init__(
            f"Command {command_type.__name__} has no routing field '{field_name}'. "
            f"Declare the field or set target_aggregate_identifier on {command_type.__name__}."
        )


class CommandHandlerFailure(EventFixtureError):
    """
    Wraps the exception raised by a command handler.

    This is the expected path for failure-testing scenarios. The original
    exception is available as ``cause`` (and as ``__cause__``).
    """

    def __init__(self, command_type: type, cause: BaseException) -> None:
        self.command_type = command_type
        self.cause = cause
        super().__init__(
            f"Handler for {command_type.__name__} raised "
            f"{type(cause).__name__}: {cause}"
        )
        self.__cause__ = cause


# =============================================================================
# Assertion failures (reported to the test runner)
# =============================================================================


class FixtureAssertionError(EventFixtureError, AssertionError):
    """Base class for then-phase assertion failures."""

    pass


class EventMismatchError(FixtureAssertionError):
    """
    Raised when the committed events differ from the expected events.

    Attributes:
        index: Position of the first mismatch (None for a count mismatch)
        expected: Expected event(s)
        actual: Actual event(s)
    """

    def __init__(self, message: str, index: int | None, expected: Any, actual: Any) -> None:
        self.index = index
        self.expected = expected
        self.actual = actual
        super().__init__(message)


class ExpectedExceptionNotThrownError(FixtureAssertionError):
    """Raised when an exception was expected but the handler completed normally."""

    def __init__(self, matcher: Any) -> None:
        self.matcher = matcher
        super().__init__(
            f"Expected an exception matching {matcher!r}, "
            "but the command handler completed successfully."
        )


class UnexpectedExceptionError(FixtureAssertionError):
    """Raised when the handler's exception is not the one the test expected."""

    def __init__(self, message: str, exception: BaseException | None) -> None:
        self.exception = exception
        super().__init__(message)


class ResultMismatchError(FixtureAssertionError):
    """Raised when the handler's return value does not match the expectation."""

    def __init__(self, expected: Any, actual: Any) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Expected handler result {expected!r}, got {actual!r}")


class IllegalStateError(EventFixtureError, RuntimeError):
    """Raised when aggregate state is inspected after its Unit of Work rolled back."""

    pass


__all__ = [
    "EventFixtureError",
    "ScopeAlreadyActiveError",
    "ScopeAlreadyCompletedError",
    "ScopeNotActiveError",
    "LeakedActiveScopeError",
    "FixtureExecutionError",
    "HandlerSignatureError",
    "DuplicateHandlerError",
    "UnhandledEventError",
    "NoHandlerFoundError",
    "AggregateNotFoundError",
    "AggregateAlreadyExistsError",
    "MissingTargetIdentifierError",
    "CommandHandlerFailure",
    "FixtureAssertionError",
    "EventMismatchError",
    "ExpectedExceptionNotThrownError",
    "UnexpectedExceptionError",
    "ResultMismatchError",
    "IllegalStateError",
]
