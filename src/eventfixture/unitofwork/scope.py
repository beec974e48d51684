"""
Transaction scope (unit of work) for one command dispatch.

The scope is a small state machine:

    IDLE --start()--> ACTIVE --complete(Success)--> COMMITTED
                             --complete(Failure)--> ROLLED_BACK

It owns the event capture buffer for its lifetime. Events are captured only
while the scope is ACTIVE. Completion is data-driven: the dispatcher returns
an Outcome and the owner passes it to ``complete()``. A rolled-back scope
discards its staged events.

The scope is an explicit value owned by whoever started it (normally one
AggregateTestFixture). There is no module-level "current unit of work".
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from eventfixture.events.base import DomainEvent, EventMessage
from eventfixture.exceptions import (
    ScopeAlreadyActiveError,
    ScopeAlreadyCompletedError,
    ScopeNotActiveError,
)
from eventfixture.unitofwork.buffer import EventCaptureBuffer

if TYPE_CHECKING:
    from eventfixture.aggregates.base import AggregateRoot

logger = logging.getLogger(__name__)


class ScopePhase(Enum):
    """
    Lifecycle phase of a transaction scope.

    Attributes:
        IDLE: Created, not started
        ACTIVE: Started; events are being captured
        COMMITTED: Completed successfully; events are final
        ROLLED_BACK: Completed with a failure; staged events were discarded
    """

    IDLE = "idle"
    ACTIVE = "active"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"

    @property
    def is_terminal(self) -> bool:
        """Check whether this phase ends the scope's lifecycle."""
        return self in (ScopePhase.COMMITTED, ScopePhase.ROLLED_BACK)


@dataclass(frozen=True)
class Success:
    """
    Outcome of a command handler that returned normally.

    Attributes:
        result: The handler's return value
    """

    result: Any = None

    @property
    def succeeded(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """
    Outcome of a command dispatch that failed.

    Attributes:
        error: The failure (CommandHandlerFailure, NoHandlerFoundError, ...)
    """

    error: BaseException

    @property
    def succeeded(self) -> bool:
        return False

    @property
    def cause(self) -> BaseException:
        """The handler's own exception when wrapped, otherwise the error itself."""
        return getattr(self.error, "cause", None) or self.error


# Type alias for dispatch outcomes
Outcome = Success | Failure


@dataclass
class _Callbacks:
    on_commit: list[Callable[[TransactionScope], None]] = field(default_factory=list)
    on_rollback: list[Callable[[TransactionScope], None]] = field(default_factory=list)


class TransactionScope:
    """
    Unit of work around a single command dispatch.

    Example:
        >>> scope = TransactionScope()
        >>> scope.start(aggregate_id="id")
        >>> scope.signal(MessageChanged())
        EventMessage(sequence_number=0, ...)
        >>> scope.complete(Success())
        >>> scope.phase
        <ScopePhase.COMMITTED: 'committed'>
        >>> scope.events
        (MessageChanged(),)

    Attributes:
        discard_on_rollback: When True (default) a rolled-back scope exposes
            no events. When False the events staged before the failure stay
            visible for diagnostics.
    """

    def __init__(
        self,
        *,
        metadata: dict[str, Any] | None = None,
        discard_on_rollback: bool = True,
    ) -> None:
        """
        Initialize an idle scope.

        Args:
            metadata: Metadata copied onto every event message this scope records
            discard_on_rollback: Whether rollback discards staged events
        """
        self._phase = ScopePhase.IDLE
        self._buffer = EventCaptureBuffer()
        self._metadata = dict(metadata or {})
        self._aggregate_id: Any = None
        self._aggregate_type: str | None = None
        self._outcome: Outcome | None = None
        self._discarded: tuple[EventMessage, ...] = ()
        self._callbacks = _Callbacks()
        self.discard_on_rollback = discard_on_rollback

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self, aggregate_id: Any = None, aggregate_type: str | None = None) -> None:
        """
        Transition IDLE -> ACTIVE with a fresh capture buffer.

        Args:
            aggregate_id: Identifier of the aggregate this unit of work covers
            aggregate_type: Type name of that aggregate

        Raises:
            ScopeAlreadyActiveError: If the scope is already active
            ScopeAlreadyCompletedError: If the scope already committed or rolled back
        """
        if self._phase is ScopePhase.ACTIVE:
            raise ScopeAlreadyActiveError(self._aggregate_id)
        if self._phase.is_terminal:
            raise ScopeAlreadyCompletedError(self._phase.value)

        self._buffer = EventCaptureBuffer()
        self._aggregate_id = aggregate_id
        self._aggregate_type = aggregate_type
        self._phase = ScopePhase.ACTIVE

        logger.debug(
            "Unit of work started for %s %r",
            aggregate_type or "aggregate",
            aggregate_id,
            extra={"aggregate_id": aggregate_id, "aggregate_type": aggregate_type},
        )

    def signal(
        self,
        event: DomainEvent,
        aggregate: AggregateRoot | None = None,
    ) -> EventMessage | None:
        """
        Record an event if the scope is active.

        Signals outside the ACTIVE phase are accepted and dropped; they are
        never an error and never recorded.

        Args:
            event: The domain event
            aggregate: The aggregate that signaled it (used for the envelope)

        Returns:
            The recorded EventMessage, or None if the signal was dropped
        """
        if self._phase is not ScopePhase.ACTIVE:
            logger.debug(
                "Ignoring %s signaled while unit of work is %s",
                event.event_type,
                self._phase.value,
                extra={"event_type": event.event_type, "phase": self._phase.value},
            )
            return None

        aggregate_id = self._aggregate_id
        aggregate_type = self._aggregate_type
        if aggregate is not None:
            model = aggregate.model()
            aggregate_id = model.identifier_of(aggregate)
            aggregate_type = model.aggregate_type
            # Creation handlers set the identifier while the scope is open
            if self._aggregate_id is None:
                self._aggregate_id = aggregate_id
                self._aggregate_type = aggregate_type

        message = EventMessage(
            aggregate_id=aggregate_id,
            aggregate_type=aggregate_type,
            sequence_number=self._buffer.next_sequence_number,
            payload=event,
            metadata=dict(self._metadata),
        )
        self._buffer.append(message)
        return message

    def complete(self, outcome: Outcome) -> None:
        """
        Transition ACTIVE -> COMMITTED (Success) or ACTIVE -> ROLLED_BACK (Failure).

        The capture buffer is frozen either way; on rollback its staged events
        are discarded unless ``discard_on_rollback`` is False.

        Args:
            outcome: The dispatch outcome

        Raises:
            ScopeNotActiveError: If the scope was never started
            ScopeAlreadyCompletedError: If the scope already completed
        """
        if self._phase is ScopePhase.IDLE:
            raise ScopeNotActiveError("complete a unit of work that was never started")
        if self._phase.is_terminal:
            raise ScopeAlreadyCompletedError(self._phase.value)

        self._outcome = outcome
        if outcome.succeeded:
            self._buffer.freeze()
            self._phase = ScopePhase.COMMITTED
            callbacks = self._callbacks.on_commit
        else:
            if self.discard_on_rollback:
                self._discarded = self._buffer.discard()
            else:
                self._buffer.freeze()
            self._phase = ScopePhase.ROLLED_BACK
            callbacks = self._callbacks.on_rollback

        logger.debug(
            "Unit of work %s for %r with %d event(s), %d discarded",
            self._phase.value,
            self._aggregate_id,
            len(self._buffer),
            len(self._discarded),
            extra={
                "aggregate_id": self._aggregate_id,
                "phase": self._phase.value,
                "event_count": len(self._buffer),
                "discarded_count": len(self._discarded),
            },
        )

        for callback in callbacks:
            callback(self)

    def on_commit(self, callback: Callable[[TransactionScope], None]) -> None:
        """Register a callback to run once when the scope commits."""
        self._callbacks.on_commit.append(callback)

    def on_rollback(self, callback: Callable[[TransactionScope], None]) -> None:
        """Register a callback to run once when the scope rolls back."""
        self._callbacks.on_rollback.append(callback)

    # =========================================================================
    # State
    # =========================================================================

    @property
    def phase(self) -> ScopePhase:
        """Get the current phase."""
        return self._phase

    @property
    def is_active(self) -> bool:
        """Check whether events are currently being captured."""
        return self._phase is ScopePhase.ACTIVE

    @property
    def committed(self) -> bool:
        return self._phase is ScopePhase.COMMITTED

    @property
    def rolled_back(self) -> bool:
        return self._phase is ScopePhase.ROLLED_BACK

    @property
    def outcome(self) -> Outcome | None:
        """The outcome passed to ``complete()``, or None while not completed."""
        return self._outcome

    @property
    def failure(self) -> BaseException | None:
        """The failure that rolled the scope back, if any."""
        if isinstance(self._outcome, Failure):
            return self._outcome.error
        return None

    @property
    def result(self) -> Any:
        """The handler's return value, if the scope committed."""
        if isinstance(self._outcome, Success):
            return self._outcome.result
        return None

    @property
    def aggregate_id(self) -> Any:
        """Identifier of the aggregate this unit of work covers."""
        return self._aggregate_id

    @property
    def messages(self) -> tuple[EventMessage, ...]:
        """Recorded event messages, in signal order."""
        return self._buffer.messages

    @property
    def events(self) -> tuple[DomainEvent, ...]:
        """Recorded event payloads, in signal order."""
        return self._buffer.events

    @property
    def discarded_messages(self) -> tuple[EventMessage, ...]:
        """Messages dropped by rollback."""
        return self._discarded

    def __repr__(self) -> str:
        return (
            f"TransactionScope(phase={self._phase.value}, "
            f"aggregate_id={self._aggregate_id!r}, "
            f"events={len(self._buffer)})"
        )


__all__ = [
    "Failure",
    "Outcome",
    "ScopePhase",
    "Success",
    "TransactionScope",
]
