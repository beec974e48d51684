"""
Unit tests for AggregateTestFixture.

Covers the given/when/then cycle end to end, including the three reference
scenarios for state-stored aggregates and the unit-of-work guarantees every
cycle must keep.
"""

import pytest

from eventfixture.aggregates.base import AggregateRoot
from eventfixture.commands.base import Command
from eventfixture.config import FixtureConfig
from eventfixture.exceptions import (
    AggregateAlreadyExistsError,
    AggregateNotFoundError,
    EventMismatchError,
    FixtureExecutionError,
    IllegalStateError,
    LeakedActiveScopeError,
    MissingTargetIdentifierError,
    NoHandlerFoundError,
    ScopeAlreadyActiveError,
)
from eventfixture.fixture import AggregateTestFixture
from eventfixture.handlers import AggregateModel, command_handler
from eventfixture.unitofwork.scope import ScopePhase, TransactionScope
from eventfixture.validation.matchers import any_exception
from eventfixture.validation.validator import ResultValidator
from tests.fixtures import (
    AccountOpened,
    AnnounceMessage,
    BankAccount,
    Deposit,
    ErrorCommand,
    InsufficientFundsError,
    MessageChanged,
    MoneyDeposited,
    OpenAccount,
    SetMessage,
    StateStoredAggregate,
    StubDomainEvent,
    UnhandledCommand,
    Withdraw,
)


class Ping(Command):
    """Routes on the default ``aggregate_id`` field, which it never declares."""

    id: str


class Retarget(Command):
    target_aggregate_identifier = "id"

    id: str | None = None


class Beacon(AggregateRoot):
    aggregate_identifier = "id"

    def __init__(self, id: str) -> None:
        super().__init__()
        self.id = id

    @command_handler
    def ping(self, command: Ping) -> None:
        self.apply(StubDomainEvent())

    @command_handler
    def retarget(self, command: Retarget) -> None:
        self.apply(StubDomainEvent())


class Ledger(AggregateRoot):
    """Aggregate wired up by hand instead of with decorators."""

    unregistered_event_handling = "error"

    def __init__(self, aggregate_id: str, balance: int = 0) -> None:
        super().__init__()
        self.aggregate_id = aggregate_id
        self.balance = balance

    def deposit(self, command: Deposit) -> int:
        self.apply(MoneyDeposited(amount=command.amount))
        return self.balance

    def on_deposited(self, event: MoneyDeposited) -> None:
        self.balance += event.amount


def _assert_message(expected: str):
    def inspector(aggregate: StateStoredAggregate) -> None:
        assert aggregate.message == expected

    return inspector


class TestStateStoredScenarios:
    """The reference given/when/then scenarios."""

    def test_events_and_state_after_success(self, given_message):
        """Given a message, SetMessage records one event and updates the state."""
        given_message.when(SetMessage(id="id", message="message2")) \
            .expect_events(StubDomainEvent()) \
            .expect_state(_assert_message("message2"))

    def test_state_inspection_does_not_record_events(self, given_message):
        """Events signaled from inside expect_state are never recorded."""
        validator = given_message.when(SetMessage(id="id", message="message2"))

        validator.expect_events(StubDomainEvent()) \
            .expect_state(lambda aggregate: aggregate.apply(StubDomainEvent())) \
            .expect_events(StubDomainEvent()) \
            .expect_state(_assert_message("message2"))

        assert validator.events == [StubDomainEvent()]

    def test_state_after_failed_handler_is_not_inspectable(self, given_message):
        """A handler that signals then raises rolls back; state is off limits."""
        validator = given_message.when(ErrorCommand(id="id", message="message2"))

        validator.expect_exception(any_exception()).expect_no_events()

        with pytest.raises(IllegalStateError) as exc_info:
            validator.expect_state(_assert_message("message2"))
        message = str(exc_info.value).lower()
        assert "unit of work" in message
        assert "rolled back" in message


class TestUnitOfWorkGuarantees:
    """Properties every cycle keeps, whatever the handler does."""

    @pytest.mark.parametrize(
        "command",
        [
            SetMessage(id="id", message="m"),
            ErrorCommand(id="id", message="m"),
            UnhandledCommand(id="id"),
            SetMessage(id="other", message="m"),
        ],
    )
    def test_no_scope_left_active(self, given_message, command):
        validator = given_message.when(command)

        assert given_message.scope is not None
        assert not given_message.scope.is_active
        assert given_message.scope.phase.is_terminal
        given_message.assert_no_active_scope()
        assert isinstance(validator, ResultValidator)

    def test_events_in_signal_order(self, given_message):
        given_message.when(AnnounceMessage(id="id", message="hello")) \
            .expect_events(MessageChanged(message="hello"), StubDomainEvent())

    def test_wrong_order_fails(self, given_message):
        validator = given_message.when(AnnounceMessage(id="id", message="hello"))
        with pytest.raises(EventMismatchError) as exc_info:
            validator.expect_events(StubDomainEvent(), MessageChanged(message="hello"))
        assert exc_info.value.index == 0

    def test_rolled_back_mutation_is_not_undone(self, given_message):
        """The aggregate keeps its mutation; only inspection is blocked."""
        given_message.when(ErrorCommand(id="id", message="message2"))
        assert given_message.container.instance.message == "message2"

    def test_failures_are_captured_not_raised(self, given_message):
        given_message.when(UnhandledCommand(id="id")) \
            .expect_exception(NoHandlerFoundError) \
            .expect_no_events()

    def test_keep_events_on_rollback(self):
        fixture = AggregateTestFixture(
            StateStoredAggregate, config=FixtureConfig(discard_events_on_rollback=False)
        )
        fixture.given_state(lambda: StateStoredAggregate("id", "message")) \
            .when(ErrorCommand(id="id", message="message2")) \
            .expect_exception(RuntimeError) \
            .expect_events(StubDomainEvent())


class TestFixtureCycle:
    """Tests for given/when ordering rules."""

    def test_when_without_given(self, message_fixture):
        with pytest.raises(FixtureExecutionError, match="given_state"):
            message_fixture.when(SetMessage(id="id", message="m"))

    def test_second_when_in_cycle(self, given_message):
        given_message.when(SetMessage(id="id", message="m"))
        with pytest.raises(FixtureExecutionError, match="already called"):
            given_message.when(SetMessage(id="id", message="m2"))

    def test_new_given_starts_new_cycle(self, given_message):
        given_message.when(SetMessage(id="id", message="m"))
        given_message.given_state(lambda: StateStoredAggregate("id", "fresh")) \
            .when(SetMessage(id="id", message="m2")) \
            .expect_state(_assert_message("m2"))

    def test_given_state_wrong_type(self, message_fixture):
        with pytest.raises(FixtureExecutionError):
            message_fixture.given_state(lambda: BankAccount("acc-1"))

    def test_when_refused_while_scope_active(self, given_message):
        """A leaked active unit of work blocks the next dispatch."""
        leaked = TransactionScope()
        leaked.start(aggregate_id="id")
        given_message._scope = leaked

        with pytest.raises(ScopeAlreadyActiveError):
            given_message.when(SetMessage(id="id", message="m"))
        with pytest.raises(LeakedActiveScopeError):
            given_message.assert_no_active_scope()

    def test_context_manager_checks_leaks(self, message_fixture):
        with pytest.raises(LeakedActiveScopeError):
            with message_fixture as fixture:
                leaked = TransactionScope()
                leaked.start()
                fixture._scope = leaked

    def test_context_manager_clean_exit(self, message_fixture):
        with message_fixture as fixture:
            fixture.given_state(lambda: StateStoredAggregate("id", "message")) \
                .when(SetMessage(id="id", message="m")) \
                .expect_events(StubDomainEvent())

    def test_metadata_reaches_events(self, given_message):
        validator = given_message.when(SetMessage(id="id", message="m"), metadata={"user": "alice"})
        assert validator.messages[0].metadata == {"user": "alice"}

    def test_separate_fixtures_do_not_share_scope(self, message_fixture):
        other = AggregateTestFixture(StateStoredAggregate)
        message_fixture.given_state(lambda: StateStoredAggregate("id", "message"))
        other.given_state(lambda: StateStoredAggregate("id", "message"))

        message_fixture.when(SetMessage(id="id", message="a"))
        other.when(ErrorCommand(id="id", message="b"))

        assert message_fixture.scope.phase is ScopePhase.COMMITTED
        assert other.scope.phase is ScopePhase.ROLLED_BACK


class TestEventSourcedAggregate:
    """Tests with an aggregate whose state changes in @handles methods."""

    def test_creation_command(self, account_fixture):
        account_fixture.given_no_prior_activity() \
            .when(OpenAccount(account_id="acc-1", owner="alice")) \
            .expect_events(AccountOpened(account_id="acc-1", owner="alice")) \
            .expect_state(lambda account: account.owner == "alice")

        assert account_fixture.container.identifier == "acc-1"

    def test_regular_command_without_aggregate(self, account_fixture):
        account_fixture.given_no_prior_activity() \
            .when(Deposit(aggregate_id="acc-1", amount=10)) \
            .expect_exception(AggregateNotFoundError)

    def test_deposit_returns_new_balance(self, account_fixture):
        account_fixture.given_state(lambda: BankAccount("acc-1", "alice", 10)) \
            .when(Deposit(aggregate_id="acc-1", amount=5)) \
            .expect_events(MoneyDeposited(amount=5)) \
            .expect_result(15)

    def test_withdraw_beyond_balance(self, account_fixture):
        account_fixture.given_state(lambda: BankAccount("acc-1", "alice", 10)) \
            .when(Withdraw(aggregate_id="acc-1", amount=50)) \
            .expect_exception(InsufficientFundsError) \
            .expect_exception_message("Insufficient funds: balance 10, requested 50") \
            .expect_no_events()

    def test_creation_command_on_existing_aggregate(self, account_fixture):
        validator = account_fixture.given_state(lambda: BankAccount("acc-1", "alice", 10)) \
            .when(OpenAccount(account_id="acc-2", owner="bob")) \
            .expect_exception(AggregateAlreadyExistsError) \
            .expect_no_events()

        assert validator.exception.aggregate_id == "acc-1"
        assert validator.aggregate.owner == "alice"
        assert account_fixture.container.identifier == "acc-1"


class TestCommandRouting:
    """Tests for routing failures reported as failed outcomes."""

    def test_missing_routing_field_is_a_failure(self):
        fixture = AggregateTestFixture(Beacon)
        validator = fixture.given_state(lambda: Beacon("id")) \
            .when(Ping(id="id")) \
            .expect_exception(MissingTargetIdentifierError) \
            .expect_no_events()

        assert validator.exception.field_name == "aggregate_id"
        assert fixture.scope.rolled_back
        fixture.assert_no_active_scope()

    def test_none_routing_value_is_checked(self):
        fixture = AggregateTestFixture(Beacon)
        validator = fixture.given_state(lambda: Beacon("id")) \
            .when(Retarget()) \
            .expect_exception(AggregateNotFoundError) \
            .expect_no_events()

        assert validator.exception.aggregate_id is None

    def test_matching_routing_value_succeeds(self):
        AggregateTestFixture(Beacon).given_state(lambda: Beacon("id")) \
            .when(Retarget(id="id")) \
            .expect_successful_handler_execution() \
            .expect_events(StubDomainEvent())


class TestHandRegisteredModel:
    """A model built with add_command_handler / add_event_handler and registered."""

    def test_full_cycle(self):
        model = AggregateModel(Ledger, aggregate_type="Ledger")
        model.add_command_handler(Deposit, Ledger.deposit)
        model.add_event_handler(MoneyDeposited, "on_deposited")
        assert AggregateModel.register(model) is model

        def assert_balance(ledger: Ledger) -> None:
            assert ledger.balance == 15

        fixture = AggregateTestFixture(Ledger)
        assert fixture.model is model

        fixture.given_state(lambda: Ledger("led-1", 10)) \
            .when(Deposit(aggregate_id="led-1", amount=5)) \
            .expect_events(MoneyDeposited(amount=5)) \
            .expect_result(15) \
            .expect_state(assert_balance)

        assert fixture.scope.messages[0].aggregate_type == "Ledger"
        assert fixture.scope.messages[0].aggregate_id == "led-1"

    def test_unregistered_command(self):
        AggregateModel.register(AggregateModel(Ledger))

        AggregateTestFixture(Ledger).given_state(lambda: Ledger("led-1")) \
            .when(Deposit(aggregate_id="led-1", amount=5)) \
            .expect_exception(NoHandlerFoundError) \
            .expect_no_events()


class TestFixtureTracing:
    def test_custom_tracer_used(self, mock_tracer):
        fixture = AggregateTestFixture(StateStoredAggregate, tracer=mock_tracer)
        fixture.given_state(lambda: StateStoredAggregate("id", "message")) \
            .when(SetMessage(id="id", message="m"))
        assert mock_tracer.span_names == ["eventfixture.dispatch"]

    def test_tracing_disabled_by_default(self, message_fixture):
        assert not message_fixture.tracer.enabled
