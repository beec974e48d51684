"""
Shared test fixtures for the eventfixture library.

Usage:
    from tests.fixtures import (
        StateStoredAggregate,
        SetMessage,
        ErrorCommand,
        StubDomainEvent,
    )
"""

from tests.fixtures.aggregates import (
    BankAccount,
    InsufficientFundsError,
    StateStoredAggregate,
)
from tests.fixtures.commands import (
    AnnounceMessage,
    Deposit,
    ErrorCommand,
    OpenAccount,
    SetMessage,
    TagMessage,
    UnhandledCommand,
    Withdraw,
)
from tests.fixtures.events import (
    AccountOpened,
    MessageChanged,
    MoneyDeposited,
    MoneyWithdrawn,
    StubDomainEvent,
)

__all__ = [
    # Events
    "StubDomainEvent",
    "MessageChanged",
    "AccountOpened",
    "MoneyDeposited",
    "MoneyWithdrawn",
    # Commands
    "SetMessage",
    "ErrorCommand",
    "AnnounceMessage",
    "TagMessage",
    "UnhandledCommand",
    "OpenAccount",
    "Deposit",
    "Withdraw",
    # Aggregates
    "StateStoredAggregate",
    "BankAccount",
    "InsufficientFundsError",
]
