"""
Command dispatcher.

Routes one command to the single handler its aggregate declares for the
command's type, inside a unit of work opened by the caller. The dispatcher
never raises for handler failures and never closes the scope: it returns
an Outcome and leaves completion to whoever owns the scope.

Example:
    >>> scope = TransactionScope()
    >>> scope.start(aggregate_id=container.identifier)
    >>> outcome = CommandDispatcher().dispatch(container, CommandMessage.of(cmd), scope)
    >>> scope.complete(outcome)
"""

import logging
from typing import Any

from eventfixture.aggregates.base import AggregateRoot
from eventfixture.aggregates.container import AggregateStateContainer
from eventfixture.commands.base import NO_TARGET, CommandMessage
from eventfixture.exceptions import (
    AggregateAlreadyExistsError,
    AggregateNotFoundError,
    CommandHandlerFailure,
    MissingTargetIdentifierError,
    NoHandlerFoundError,
    ScopeNotActiveError,
)
from eventfixture.handlers.registry import CommandHandlerInfo
from eventfixture.observability.attributes import (
    ATTR_AGGREGATE_ID,
    ATTR_AGGREGATE_TYPE,
    ATTR_COMMAND_ID,
    ATTR_COMMAND_TYPE,
    ATTR_ERROR_TYPE,
    ATTR_EVENT_COUNT,
    ATTR_HANDLER_NAME,
    ATTR_OUTCOME,
)
from eventfixture.observability.tracer import NullTracer, Tracer
from eventfixture.unitofwork.scope import Failure, Outcome, Success, TransactionScope

logger = logging.getLogger(__name__)


class CommandDispatcher:
    """
    Resolves and invokes the handler for a command on the aggregate under test.

    Args:
        tracer: Tracer for dispatch spans (defaults to NullTracer)
        check_target_identifier: Whether to verify the command's routing
            identifier against the aggregate's identifier
    """

    def __init__(
        self,
        tracer: Tracer | None = None,
        *,
        check_target_identifier: bool = True,
    ) -> None:
        self._tracer = tracer or NullTracer()
        self._check_target_identifier = check_target_identifier

    def dispatch(
        self,
        container: AggregateStateContainer,
        message: CommandMessage,
        scope: TransactionScope,
    ) -> Outcome:
        """
        Dispatch a command message inside an already active unit of work.

        Args:
            container: Holds the aggregate under test (or nothing, for creation)
            message: The command message to dispatch
            scope: The active unit of work events are captured into

        Returns:
            Success with the handler's return value, or Failure wrapping a
            dispatch error (no handler, routing, existence) or CommandHandlerFailure

        Raises:
            ScopeNotActiveError: If the scope is not active
        """
        if not scope.is_active:
            raise ScopeNotActiveError("dispatch a command")

        model = container.model
        command = message.payload
        command_type = type(command)

        attributes = {
            ATTR_COMMAND_TYPE: command.command_type,
            ATTR_COMMAND_ID: str(message.command_id),
            ATTR_AGGREGATE_TYPE: model.aggregate_type,
        }
        if container.exists:
            attributes[ATTR_AGGREGATE_ID] = str(container.identifier)

        with self._tracer.span("eventfixture.dispatch", attributes) as span:
            outcome = self._dispatch(container, message, scope)
            if span is not None:
                span.set_attribute(ATTR_OUTCOME, "success" if outcome.succeeded else "failure")
                span.set_attribute(ATTR_EVENT_COUNT, len(scope.messages))
                if isinstance(outcome, Failure):
                    span.set_attribute(ATTR_ERROR_TYPE, type(outcome.cause).__name__)
                handler = model.get_handler(command_type)
                if handler is not None:
                    span.set_attribute(ATTR_HANDLER_NAME, handler.handler_name)
        return outcome

    def _dispatch(
        self,
        container: AggregateStateContainer,
        message: CommandMessage,
        scope: TransactionScope,
    ) -> Outcome:
        model = container.model
        command = message.payload
        command_type = type(command)

        handler = model.get_handler(command_type)
        if handler is None:
            error = NoHandlerFoundError(
                command_type=command_type,
                aggregate_type=model.aggregate_type,
                available=[c.__name__ for c in model.handled_commands()],
            )
            logger.debug(
                "No handler for %s on %s",
                command_type.__name__,
                model.aggregate_type,
                extra={"command_type": command_type.__name__, "aggregate_type": model.aggregate_type},
            )
            return Failure(error)

        if handler.is_creation:
            if container.exists:
                logger.debug(
                    "%s is a creation command but %r already exists",
                    command_type.__name__,
                    container.identifier,
                    extra={
                        "command_type": command_type.__name__,
                        "aggregate_id": container.identifier,
                    },
                )
                return Failure(
                    AggregateAlreadyExistsError(container.identifier, model.aggregate_type)
                )
            return self._invoke_creation(container, handler, message, scope)

        try:
            target = command.target_identifier()
        except MissingTargetIdentifierError as e:
            return Failure(e)

        if not container.exists:
            missing = None if target is NO_TARGET else target
            return Failure(AggregateNotFoundError(missing, model.aggregate_type))

        aggregate = container.instance
        if (
            self._check_target_identifier
            and target is not NO_TARGET
            and target != container.identifier
        ):
            logger.debug(
                "%s targets %r but the aggregate under test is %r",
                command_type.__name__,
                target,
                container.identifier,
                extra={
                    "command_type": command_type.__name__,
                    "target_id": target,
                    "aggregate_id": container.identifier,
                },
            )
            return Failure(AggregateNotFoundError(target, model.aggregate_type))

        return self._invoke(aggregate, handler, message, scope)

    def _invoke_creation(
        self,
        container: AggregateStateContainer,
        handler: CommandHandlerInfo,
        message: CommandMessage,
        scope: TransactionScope,
    ) -> Outcome:
        aggregate_class = container.model.aggregate_class
        aggregate = aggregate_class.__new__(aggregate_class)
        if isinstance(aggregate, AggregateRoot):
            AggregateRoot.__init__(aggregate)

        outcome = self._invoke(aggregate, handler, message, scope)
        if outcome.succeeded:
            container.replace(aggregate)
        return outcome

    def _invoke(
        self,
        aggregate: Any,
        handler: CommandHandlerInfo,
        message: CommandMessage,
        scope: TransactionScope,
    ) -> Outcome:
        command = message.payload
        if isinstance(aggregate, AggregateRoot):
            aggregate._bind_scope(scope)
        try:
            result = handler.invoke(aggregate, command, dict(message.metadata))
        except Exception as e:
            logger.debug(
                "Handler %s raised %s: %s",
                handler.handler_name,
                type(e).__name__,
                e,
                extra={
                    "handler": handler.handler_name,
                    "command_type": command.command_type,
                    "error_type": type(e).__name__,
                },
            )
            return Failure(CommandHandlerFailure(type(command), e))

        logger.debug(
            "Handler %s completed with %d event(s)",
            handler.handler_name,
            len(scope.messages),
            extra={
                "handler": handler.handler_name,
                "command_type": command.command_type,
                "event_count": len(scope.messages),
            },
        )
        return Success(result)


__all__ = ["CommandDispatcher"]
