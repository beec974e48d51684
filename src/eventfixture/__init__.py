"""
eventfixture - Given/when/then test fixtures for event-sourced aggregates.

This library provides:
- AggregateTestFixture: given/when/then driver for one aggregate type
- TransactionScope: unit of work that commits or discards captured events
- CommandDispatcher: routes a command to its aggregate handler
- ResultValidator and matchers: then-phase assertions
- Domain Event and Command base classes with Pydantic models
- Optional OpenTelemetry tracing of command dispatch
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("eventfixture")
except PackageNotFoundError:
    # Package not installed (running from source without install)
    __version__ = "0.0.0.dev0"

# Aggregates
from eventfixture.aggregates.base import AggregateRoot, UnregisteredEventHandling
from eventfixture.aggregates.container import AggregateStateContainer

# Commands
from eventfixture.commands.base import Command, CommandMessage

# Configuration
from eventfixture.config import FixtureConfig

# Dispatch
from eventfixture.dispatch import CommandDispatcher

# Core event primitives
from eventfixture.events.base import DomainEvent, EventMessage

# Exceptions
from eventfixture.exceptions import (
    AggregateAlreadyExistsError,
    AggregateNotFoundError,
    CommandHandlerFailure,
    DuplicateHandlerError,
    EventFixtureError,
    EventMismatchError,
    ExpectedExceptionNotThrownError,
    FixtureAssertionError,
    FixtureExecutionError,
    HandlerSignatureError,
    IllegalStateError,
    LeakedActiveScopeError,
    MissingTargetIdentifierError,
    NoHandlerFoundError,
    ResultMismatchError,
    ScopeAlreadyActiveError,
    ScopeAlreadyCompletedError,
    ScopeNotActiveError,
    UnexpectedExceptionError,
    UnhandledEventError,
)

# Fixture
from eventfixture.fixture import AggregateTestFixture

# Handlers
from eventfixture.handlers import (
    AggregateModel,
    CommandHandlerInfo,
    command_handler,
    creation_handler,
    handles,
)

# Unit of work
from eventfixture.unitofwork import (
    EventCaptureBuffer,
    Failure,
    Outcome,
    ScopePhase,
    Success,
    TransactionScope,
)

# Validation
from eventfixture.validation import (
    Matcher,
    ResultValidator,
    all_of,
    any_exception,
    any_of,
    equal_to,
    has_fields,
    instance_of,
    message_contains,
)

__all__ = [
    "__version__",
    # Events
    "DomainEvent",
    "EventMessage",
    # Commands
    "Command",
    "CommandMessage",
    # Aggregates
    "AggregateRoot",
    "AggregateStateContainer",
    "UnregisteredEventHandling",
    # Handlers
    "AggregateModel",
    "CommandHandlerInfo",
    "command_handler",
    "creation_handler",
    "handles",
    # Unit of work
    "EventCaptureBuffer",
    "Failure",
    "Outcome",
    "ScopePhase",
    "Success",
    "TransactionScope",
    # Dispatch
    "CommandDispatcher",
    # Fixture
    "AggregateTestFixture",
    "FixtureConfig",
    # Validation
    "ResultValidator",
    "Matcher",
    "all_of",
    "any_exception",
    "any_of",
    "equal_to",
    "has_fields",
    "instance_of",
    "message_contains",
    # Exceptions
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
