"""
Event capture buffer.

An append-only sequence of event messages owned by exactly one unit of
work. While the unit of work is active, signaled events are appended; when
it completes the buffer is frozen and becomes a read-only snapshot.
"""

import logging

from eventfixture.events.base import DomainEvent, EventMessage

logger = logging.getLogger(__name__)


class EventCaptureBuffer:
    """
    Ordered record of the events signaled during one unit of work.

    Example:
        >>> buffer = EventCaptureBuffer()
        >>> buffer.append(EventMessage(sequence_number=0, payload=MessageChanged()))
        True
        >>> buffer.freeze()
        >>> buffer.append(EventMessage(sequence_number=1, payload=MessageChanged()))
        False
        >>> len(buffer)
        1
    """

    def __init__(self) -> None:
        self._messages: list[EventMessage] = []
        self._frozen = False

    @property
    def frozen(self) -> bool:
        """Check whether the buffer still accepts events."""
        return self._frozen

    @property
    def messages(self) -> tuple[EventMessage, ...]:
        """Snapshot of the recorded event messages, in signal order."""
        return tuple(self._messages)

    @property
    def events(self) -> tuple[DomainEvent, ...]:
        """Snapshot of the recorded event payloads, in signal order."""
        return tuple(message.payload for message in self._messages)

    @property
    def next_sequence_number(self) -> int:
        """Sequence number the next appended message will get."""
        return len(self._messages)

    def append(self, message: EventMessage) -> bool:
        """
        Record an event message.

        Args:
            message: The message to record

        Returns:
            True if recorded, False if the buffer is frozen and the message
            was dropped
        """
        if self._frozen:
            logger.debug(
                "Dropping %s appended to a frozen buffer",
                message.payload.event_type,
                extra={"event_type": message.payload.event_type},
            )
            return False
        self._messages.append(message)
        return True

    def freeze(self) -> None:
        """Stop accepting events. Idempotent."""
        self._frozen = True

    def discard(self) -> tuple[EventMessage, ...]:
        """
        Drop every recorded message and freeze the buffer.

        Returns:
            The messages that were dropped
        """
        dropped = tuple(self._messages)
        self._messages.clear()
        self._frozen = True
        return dropped

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self):
        return iter(self.messages)

    def __repr__(self) -> str:
        event_types = [m.payload.event_type for m in self._messages]
        return f"EventCaptureBuffer(events={event_types}, frozen={self._frozen})"


__all__ = ["EventCaptureBuffer"]
