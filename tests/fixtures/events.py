"""
Shared test event types.

This module provides reusable domain event types for testing:
- StubDomainEvent: Payload-free event signaled by the message aggregate
- MessageChanged: Carries the new message
- AccountOpened, MoneyDeposited, MoneyWithdrawn: Events of the account aggregate
"""

from eventfixture.events.base import DomainEvent


class StubDomainEvent(DomainEvent):
    """Event without fields; every instance equals every other."""


class MessageChanged(DomainEvent):
    message: str


class AccountOpened(DomainEvent):
    account_id: str
    owner: str


class MoneyDeposited(DomainEvent):
    amount: int


class MoneyWithdrawn(DomainEvent):
    amount: int
