"""
eventfixture pytest plugin, auto-registered via the ``pytest11`` entry point.

Provides the ``aggregate_fixture`` factory fixture. Every fixture it creates
is checked at teardown: a unit of work still active when the test ends is a
harness failure reported as LeakedActiveScopeError.

Example:
    >>> def test_set_message(aggregate_fixture):
    ...     fixture = aggregate_fixture(StateStoredAggregate)
    ...     fixture.given_state(lambda: StateStoredAggregate("id", "message")) \\
    ...         .when(SetMessage(id="id", message="message2")) \\
    ...         .expect_events(StubDomainEvent())
"""

from collections.abc import Generator
from typing import Any

import pytest

from eventfixture.config import FixtureConfig
from eventfixture.fixture import AggregateTestFixture
from eventfixture.observability.tracer import Tracer


class FixtureTracker:
    """Creates AggregateTestFixtures and checks them all for leaked units of work."""

    def __init__(self) -> None:
        self.created: list[AggregateTestFixture[Any]] = []

    def __call__(
        self,
        aggregate_class: type,
        config: FixtureConfig | None = None,
        tracer: Tracer | None = None,
    ) -> AggregateTestFixture[Any]:
        fixture = AggregateTestFixture(aggregate_class, config=config, tracer=tracer)
        self.created.append(fixture)
        return fixture

    def check(self) -> None:
        """
        Raises:
            LeakedActiveScopeError: If any created fixture has an active unit of work
        """
        for fixture in self.created:
            fixture.assert_no_active_scope()


def pytest_configure(config):
    """Register the eventfixture marker so --strict-markers doesn't complain."""
    config.addinivalue_line("markers", "aggregate: given/when/then aggregate tests")


@pytest.fixture
def aggregate_fixture() -> Generator[FixtureTracker, None, None]:
    """Factory for AggregateTestFixture instances that are leak-checked at teardown."""
    tracker = FixtureTracker()
    yield tracker
    tracker.check()
