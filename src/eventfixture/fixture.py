"""
Given/when/then fixture for testing aggregates.

AggregateTestFixture drives one aggregate through a single test cycle:

- **given**: build the aggregate directly (``given_state``) or start with
  nothing (``given_no_prior_activity``)
- **when**: dispatch one command inside a fresh unit of work, which commits
  the command's events on success and rolls back on failure
- **then**: assert on the returned ResultValidator

Example:
    >>> fixture = AggregateTestFixture(StateStoredAggregate)
    >>> fixture.given_state(lambda: StateStoredAggregate("id", "message")) \\
    ...     .when(SetMessage(id="id", message="message2")) \\
    ...     .expect_events(MessageChanged()) \\
    ...     .expect_state(lambda aggregate: assert_message(aggregate, "message2"))

Each fixture owns its own unit of work. There is no shared "current unit of
work", so any number of fixtures can be used side by side.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from types import TracebackType
from typing import Any, Generic

from eventfixture.aggregates.container import AggregateStateContainer
from eventfixture.commands.base import Command, CommandMessage
from eventfixture.config import DEFAULT_CONFIG, FixtureConfig
from eventfixture.dispatch import CommandDispatcher
from eventfixture.exceptions import (
    FixtureExecutionError,
    LeakedActiveScopeError,
    ScopeAlreadyActiveError,
)
from eventfixture.handlers.registry import AggregateModel
from eventfixture.observability.tracer import Tracer, create_tracer
from eventfixture.types import TAggregate
from eventfixture.unitofwork.scope import Failure, TransactionScope
from eventfixture.validation.validator import ResultValidator

logger = logging.getLogger(__name__)


class AggregateTestFixture(Generic[TAggregate]):
    """
    Test fixture for a single aggregate type.

    Args:
        aggregate_class: The aggregate class under test
        config: Fixture configuration (defaults to FixtureConfig())
        tracer: Optional custom Tracer. If not provided, one is created from
            ``config.enable_tracing``.

    Raises:
        HandlerSignatureError: If the aggregate declares an invalid handler
        DuplicateHandlerError: If two handlers claim the same command type
    """

    def __init__(
        self,
        aggregate_class: type[TAggregate],
        config: FixtureConfig | None = None,
        tracer: Tracer | None = None,
    ) -> None:
        self._config = config or DEFAULT_CONFIG
        self._model = AggregateModel.for_type(aggregate_class)
        self._tracer = tracer or create_tracer(__name__, self._config.enable_tracing)
        self._dispatcher = CommandDispatcher(
            self._tracer,
            check_target_identifier=self._config.check_target_identifier,
        )
        self._container: AggregateStateContainer[TAggregate] | None = None
        self._scope: TransactionScope | None = None

    # =========================================================================
    # Given
    # =========================================================================

    def given_state(self, factory: Callable[[], TAggregate]) -> AggregateTestFixture[TAggregate]:
        """
        Start a cycle with an aggregate built directly by ``factory``.

        Any aggregate from a previous cycle is replaced.

        Args:
            factory: Zero-argument callable returning the aggregate

        Returns:
            The fixture, for chaining ``when()``

        Raises:
            ScopeAlreadyActiveError: If a unit of work is still active
            FixtureExecutionError: If the factory returns the wrong type
        """
        self._ensure_no_active_scope()
        self._container = AggregateStateContainer.from_state(self._model, factory)
        self._scope = None
        return self

    def given_no_prior_activity(self) -> AggregateTestFixture[TAggregate]:
        """
        Start a cycle with no aggregate.

        The command passed to ``when()`` must be handled by a creation handler.
        """
        self._ensure_no_active_scope()
        self._container = AggregateStateContainer.empty(self._model)
        self._scope = None
        logger.debug(
            "Starting %s cycle with no prior activity",
            self._model.aggregate_type,
            extra={"aggregate_type": self._model.aggregate_type},
        )
        return self

    # =========================================================================
    # When
    # =========================================================================

    def when(
        self,
        command: Command | CommandMessage,
        metadata: dict[str, Any] | None = None,
    ) -> ResultValidator:
        """
        Dispatch one command inside a new unit of work.

        The unit of work is always completed before this returns, whether
        the handler succeeds, raises or cannot be found.

        Args:
            command: The command (or a prepared CommandMessage)
            metadata: Metadata added to the command message and copied onto
                every event the command produces

        Returns:
            ResultValidator bound to the completed unit of work

        Raises:
            FixtureExecutionError: If no given step ran, or when() was already
                called in this cycle
            ScopeAlreadyActiveError: If a unit of work is still active
        """
        self._ensure_no_active_scope()
        if self._container is None:
            raise FixtureExecutionError(
                "No given state. Call given_state() or given_no_prior_activity() before when()."
            )
        if self._scope is not None:
            raise FixtureExecutionError(
                "when() was already called in this cycle. "
                "Start a new cycle with given_state() or given_no_prior_activity()."
            )

        message = _to_message(command, metadata)
        scope = TransactionScope(
            metadata=message.metadata,
            discard_on_rollback=self._config.discard_events_on_rollback,
        )
        self._scope = scope

        scope.start(
            aggregate_id=self._container.identifier,
            aggregate_type=self._model.aggregate_type,
        )
        try:
            outcome = self._dispatcher.dispatch(self._container, message, scope)
        except BaseException as e:
            scope.complete(Failure(e))
            raise
        scope.complete(outcome)

        logger.debug(
            "Dispatched %s to %s: %s with %d event(s)",
            message.payload.command_type,
            self._model.aggregate_type,
            scope.phase.value,
            len(scope.messages),
            extra={
                "command_type": message.payload.command_type,
                "aggregate_type": self._model.aggregate_type,
                "aggregate_id": scope.aggregate_id,
                "phase": scope.phase.value,
                "event_count": len(scope.messages),
            },
        )
        return ResultValidator(scope, self._container)

    # =========================================================================
    # Self-checks
    # =========================================================================

    def assert_no_active_scope(self) -> None:
        """
        Fail if this fixture's unit of work is still active.

        Raises:
            LeakedActiveScopeError: If the unit of work never completed
        """
        if self._scope is not None and self._scope.is_active:
            raise LeakedActiveScopeError(self._scope.aggregate_id)

    def _ensure_no_active_scope(self) -> None:
        if self._scope is not None and self._scope.is_active:
            raise ScopeAlreadyActiveError(self._scope.aggregate_id)

    def __enter__(self) -> AggregateTestFixture[TAggregate]:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_type is None:
            self.assert_no_active_scope()

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def aggregate_class(self) -> type[TAggregate]:
        return self._model.aggregate_class

    @property
    def model(self) -> AggregateModel:
        return self._model

    @property
    def config(self) -> FixtureConfig:
        return self._config

    @property
    def tracer(self) -> Tracer:
        return self._tracer

    @property
    def scope(self) -> TransactionScope | None:
        """The unit of work of the current cycle, or None before when()."""
        return self._scope

    @property
    def container(self) -> AggregateStateContainer[TAggregate] | None:
        return self._container

    def __repr__(self) -> str:
        return f"AggregateTestFixture({self._model.aggregate_type}, scope={self._scope!r})"


def _to_message(command: Command | CommandMessage, metadata: dict[str, Any] | None) -> CommandMessage:
    if isinstance(command, CommandMessage):
        if metadata:
            return command.model_copy(update={"metadata": {**command.metadata, **metadata}})
        return command
    return CommandMessage.of(command, metadata)


__all__ = ["AggregateTestFixture"]
