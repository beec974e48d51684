"""
Tests for the eventfixture pytest plugin.

The ``aggregate_fixture`` fixture is provided by the plugin's ``pytest11``
entry point, so these tests use it exactly as a downstream project would.
"""

import pytest

from eventfixture.exceptions import LeakedActiveScopeError
from eventfixture.fixture import AggregateTestFixture
from eventfixture.pytest_plugin import FixtureTracker
from eventfixture.unitofwork.scope import TransactionScope
from tests.fixtures import SetMessage, StateStoredAggregate, StubDomainEvent


class TestAggregateFixtureFactory:
    """Tests for the aggregate_fixture factory fixture."""

    def test_creates_fixture(self, aggregate_fixture):
        fixture = aggregate_fixture(StateStoredAggregate)
        assert isinstance(fixture, AggregateTestFixture)
        fixture.given_state(lambda: StateStoredAggregate("id", "message")) \
            .when(SetMessage(id="id", message="message2")) \
            .expect_events(StubDomainEvent())

    def test_tracks_created_fixtures(self, aggregate_fixture):
        first = aggregate_fixture(StateStoredAggregate)
        second = aggregate_fixture(StateStoredAggregate)
        assert first is not second
        assert aggregate_fixture.created == [first, second]


class TestFixtureTracker:
    """Tests for the teardown leak check."""

    def test_check_detects_leaked_scope(self):
        tracker = FixtureTracker()
        fixture = tracker(StateStoredAggregate)
        leaked = TransactionScope()
        leaked.start()
        fixture._scope = leaked

        with pytest.raises(LeakedActiveScopeError):
            tracker.check()

    def test_check_passes_for_clean_cycles(self):
        tracker = FixtureTracker()
        tracker(StateStoredAggregate).given_state(
            lambda: StateStoredAggregate("id", "message")
        ).when(SetMessage(id="id", message="m"))
        tracker(StateStoredAggregate)

        tracker.check()
