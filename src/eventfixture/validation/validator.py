"""
Then-phase assertions for an aggregate test fixture.

A ResultValidator is created by ``AggregateTestFixture.when()`` once the unit
of work around the command has completed. It never sees an active unit of
work: the scope it holds has already committed or rolled back, so its
recorded events are final.

Example:
    >>> fixture.given_state(lambda: StateStoredAggregate("id", "message")) \\
    ...     .when(SetMessage(id="id", message="message2")) \\
    ...     .expect_events(MessageChanged()) \\
    ...     .expect_state(lambda aggregate: aggregate.message == "message2")

Note:
    Every expectation returns the validator, so assertions can be chained in
    any order and repeated. Inspecting state never records new events.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from eventfixture.aggregates.container import AggregateStateContainer
from eventfixture.events.base import DomainEvent, EventMessage
from eventfixture.exceptions import (
    EventMismatchError,
    ExpectedExceptionNotThrownError,
    IllegalStateError,
    ResultMismatchError,
    UnexpectedExceptionError,
)
from eventfixture.unitofwork.scope import Outcome, TransactionScope
from eventfixture.validation.matchers import as_matcher, equal_to, instance_of

logger = logging.getLogger(__name__)


class ResultValidator:
    """
    Assertions over the terminal outcome of one command dispatch.

    Args:
        scope: The completed unit of work (committed or rolled back)
        container: The container holding the aggregate under test

    Raises:
        ValueError: If the scope has not completed
    """

    def __init__(self, scope: TransactionScope, container: AggregateStateContainer) -> None:
        if not scope.phase.is_terminal:
            raise ValueError(
                f"ResultValidator requires a completed unit of work, got {scope.phase.value}"
            )
        self._scope = scope
        self._container = container

    # =========================================================================
    # Read-only views
    # =========================================================================

    @property
    def events(self) -> list[DomainEvent]:
        """Events recorded by the unit of work, in signal order."""
        return list(self._scope.events)

    @property
    def messages(self) -> list[EventMessage]:
        return list(self._scope.messages)

    @property
    def exception(self) -> BaseException | None:
        """The handler's exception (or the dispatch failure), if the scope rolled back."""
        outcome = self._scope.outcome
        if outcome is None or outcome.succeeded:
            return None
        return outcome.cause

    @property
    def outcome(self) -> Outcome:
        outcome = self._scope.outcome
        assert outcome is not None
        return outcome

    @property
    def aggregate(self) -> Any:
        """The live aggregate instance (None if no aggregate exists)."""
        if not self._container.exists:
            return None
        return self._container.instance

    # =========================================================================
    # Events
    # =========================================================================

    def expect_events(self, *expected: DomainEvent | EventMessage) -> ResultValidator:
        """
        Assert the recorded events equal ``expected``, in order.

        Events are compared structurally (type and field values). Expected
        EventMessages are compared by payload.

        Raises:
            EventMismatchError: On a count mismatch (index is None) or on the
                first differing event
        """
        expected_events = [e.payload if isinstance(e, EventMessage) else e for e in expected]
        actual_events = self.events

        if len(actual_events) != len(expected_events):
            raise EventMismatchError(
                f"Event count mismatch: expected {len(expected_events)} events, "
                f"got {len(actual_events)}.\n"
                f"Expected: {_describe(expected_events)}\n"
                f"Actual:   {_describe(actual_events)}",
                index=None,
                expected=expected_events,
                actual=actual_events,
            )

        for i, (actual, wanted) in enumerate(zip(actual_events, expected_events, strict=True)):
            if actual != wanted:
                raise EventMismatchError(
                    f"Event mismatch at index {i}:\n"
                    f"Expected: {wanted!r}\n"
                    f"Actual:   {actual!r}",
                    index=i,
                    expected=wanted,
                    actual=actual,
                )
        return self

    def expect_no_events(self) -> ResultValidator:
        """Assert that no events were recorded."""
        return self.expect_events()

    def expect_events_matching(self, *predicates: Any) -> ResultValidator:
        """
        Assert each recorded event satisfies the predicate at its position.

        Predicates may be matchers, plain callables, event classes or event
        instances (compared with ``==``).

        Raises:
            EventMismatchError: On a count mismatch or the first failing predicate
        """
        matchers = [_event_matcher(p) for p in predicates]
        actual_events = self.events

        if len(actual_events) != len(matchers):
            raise EventMismatchError(
                f"Event count mismatch: expected {len(matchers)} events, "
                f"got {len(actual_events)}.\n"
                f"Expected: {matchers!r}\n"
                f"Actual:   {_describe(actual_events)}",
                index=None,
                expected=matchers,
                actual=actual_events,
            )

        for i, (actual, matcher) in enumerate(zip(actual_events, matchers, strict=True)):
            if not matcher(actual):
                raise EventMismatchError(
                    f"Event at index {i} does not match {matcher!r}:\n"
                    f"Actual:   {actual!r}",
                    index=i,
                    expected=matcher,
                    actual=actual,
                )
        return self

    # =========================================================================
    # Exceptions
    # =========================================================================

    def expect_exception(self, matcher: Any) -> ResultValidator:
        """
        Assert the command failed with an exception satisfying ``matcher``.

        ``matcher`` may be an exception class, a Matcher or any predicate. It
        is applied to the handler's own exception; for failures the harness
        raised itself (no handler, wrong target) it is applied to that error.

        Raises:
            ExpectedExceptionNotThrownError: If the unit of work committed
            UnexpectedExceptionError: If the failure does not satisfy the matcher
        """
        resolved = as_matcher(matcher)
        failure = self._scope.failure
        if failure is None:
            raise ExpectedExceptionNotThrownError(resolved)

        cause = self.exception
        if not (resolved(cause) or resolved(failure)):
            raise UnexpectedExceptionError(
                f"Expected an exception matching {resolved!r}, "
                f"but got {type(cause).__name__}: {cause}",
                cause,
            )
        return self

    def expect_exception_message(self, message: str | Callable[[str], bool]) -> ResultValidator:
        """
        Assert the failure's message equals ``message`` (or satisfies it, if callable).

        Raises:
            ExpectedExceptionNotThrownError: If the unit of work committed
            UnexpectedExceptionError: If the message does not match
        """
        resolved = equal_to(message) if isinstance(message, str) else as_matcher(message)
        cause = self.exception
        if cause is None:
            raise ExpectedExceptionNotThrownError(resolved)

        text = str(cause)
        if not resolved(text):
            raise UnexpectedExceptionError(
                f"Expected an exception message matching {resolved!r}, "
                f"but got {type(cause).__name__}: {text!r}",
                cause,
            )
        return self

    def expect_successful_handler_execution(self) -> ResultValidator:
        """
        Assert the command handler completed without raising.

        Raises:
            UnexpectedExceptionError: If the unit of work rolled back
        """
        cause = self.exception
        if cause is not None:
            raise UnexpectedExceptionError(
                f"Expected the command handler to complete successfully, "
                f"but it raised {type(cause).__name__}: {cause}",
                cause,
            ) from cause
        return self

    def expect_result(self, expected: Any) -> ResultValidator:
        """
        Assert the handler's return value equals ``expected`` (or satisfies it).

        Raises:
            UnexpectedExceptionError: If the unit of work rolled back
            ResultMismatchError: If the return value does not match
        """
        self.expect_successful_handler_execution()
        resolved = as_matcher(expected)
        actual = self._scope.result
        if not resolved(actual):
            raise ResultMismatchError(resolved, actual)
        return self

    # =========================================================================
    # State
    # =========================================================================

    def expect_state(self, inspector: Callable[[Any], Any]) -> ResultValidator:
        """
        Run ``inspector`` against the aggregate after a committed unit of work.

        The inspector runs with no unit of work active, so any events it
        causes the aggregate to signal are discarded and the recorded events
        stay the same. Use plain ``assert`` statements inside the inspector;
        its return value is ignored.

        Raises:
            IllegalStateError: If the unit of work rolled back
        """
        if self._scope.rolled_back:
            cause = self.exception
            raise IllegalStateError(
                "Unit of Work has been rolled back. The command handler failed with "
                f"{type(cause).__name__}: {cause}. The aggregate's state may have been "
                "modified before the failure and cannot be inspected."
            )

        aggregate = self._container.instance
        inspector(aggregate)
        logger.debug(
            "Inspected %r after commit",
            aggregate,
            extra={"aggregate_id": self._container.identifier},
        )
        return self

    def __repr__(self) -> str:
        return (
            f"ResultValidator(phase={self._scope.phase.value}, "
            f"events={len(self._scope.messages)})"
        )


def _event_matcher(predicate: Any) -> Callable[[Any], bool]:
    if isinstance(predicate, type) and issubclass(predicate, DomainEvent):
        return instance_of(predicate)
    if isinstance(predicate, DomainEvent):
        return equal_to(predicate)
    return as_matcher(predicate)


def _describe(events: list[Any]) -> list[str]:
    return [repr(e) for e in events]


__all__ = ["ResultValidator"]
