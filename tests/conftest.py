"""
Shared pytest fixtures for the eventfixture library tests.

This module provides:
- Fixture factories for the shared test aggregates (message_fixture, account_fixture)
- A MockTracer for asserting dispatch spans
- Automatic reset of the aggregate model cache between tests

The ``aggregate_fixture`` factory itself comes from the eventfixture pytest
plugin, registered through the ``pytest11`` entry point.
"""

from __future__ import annotations

from collections.abc import Generator

import pytest

from eventfixture.fixture import AggregateTestFixture
from eventfixture.handlers.registry import AggregateModel
from eventfixture.observability.tracer import MockTracer
from tests.fixtures import BankAccount, StateStoredAggregate


@pytest.fixture(autouse=True)
def reset_aggregate_models() -> Generator[None, None, None]:
    """Drop scanned and registered aggregate models after each test."""
    yield
    AggregateModel.clear_cache()


@pytest.fixture
def mock_tracer() -> MockTracer:
    """Provide a tracer that records spans."""
    return MockTracer()


@pytest.fixture
def message_fixture() -> AggregateTestFixture[StateStoredAggregate]:
    """Provide a fixture for the state-stored message aggregate."""
    return AggregateTestFixture(StateStoredAggregate)


@pytest.fixture
def account_fixture() -> AggregateTestFixture[BankAccount]:
    """Provide a fixture for the event-sourced bank account."""
    return AggregateTestFixture(BankAccount)


@pytest.fixture
def given_message(
    message_fixture: AggregateTestFixture[StateStoredAggregate],
) -> AggregateTestFixture[StateStoredAggregate]:
    """Provide a message fixture already given {id: "id", message: "message"}."""
    return message_fixture.given_state(lambda: StateStoredAggregate("id", "message"))
