"""
Configuration for aggregate test fixtures.

This module provides FixtureConfig, the frozen set of options an
AggregateTestFixture runs with.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FixtureConfig:
    """
    Configuration for an AggregateTestFixture.

    Attributes:
        enable_tracing: Create OpenTelemetry spans around command dispatch.
            Off by default so test suites don't pollute traces.
        check_target_identifier: Fail the dispatch with AggregateNotFoundError
            when a command's routing identifier differs from the identifier of
            the aggregate under test.
        discard_events_on_rollback: When True (default) a rolled-back unit of
            work exposes no events to the then-phase. When False the events
            signaled before the failure remain visible to expect_events.

    Example:
        >>> config = FixtureConfig(check_target_identifier=False)
        >>> fixture = AggregateTestFixture(OrderAggregate, config=config)
    """

    enable_tracing: bool = False
    check_target_identifier: bool = True
    discard_events_on_rollback: bool = True

    def __post_init__(self) -> None:
        """Validate configuration values."""
        for name in ("enable_tracing", "check_target_identifier", "discard_events_on_rollback"):
            value = getattr(self, name)
            if not isinstance(value, bool):
                raise ValueError(f"{name} must be a bool, got {type(value).__name__}: {value!r}")


DEFAULT_CONFIG = FixtureConfig()

__all__ = ["FixtureConfig", "DEFAULT_CONFIG"]
