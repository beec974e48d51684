"""Aggregate pattern implementations for the eventfixture library."""

from eventfixture.aggregates.base import AggregateRoot, UnregisteredEventHandling
from eventfixture.aggregates.container import AggregateStateContainer

__all__ = [
    "AggregateRoot",
    "AggregateStateContainer",
    "UnregisteredEventHandling",
]
