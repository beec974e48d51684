"""
Unit tests for exceptions module.

Tests the exception hierarchy and the information each error carries.
"""

import pytest

from eventfixture.exceptions import (
    AggregateAlreadyExistsError,
    AggregateNotFoundError,
    CommandHandlerFailure,
    DuplicateHandlerError,
    EventFixtureError,
    EventMismatchError,
    ExpectedExceptionNotThrownError,
    FixtureAssertionError,
    FixtureExecutionError,
    HandlerSignatureError,
    IllegalStateError,
    LeakedActiveScopeError,
    MissingTargetIdentifierError,
    NoHandlerFoundError,
    ResultMismatchError,
    ScopeAlreadyActiveError,
    ScopeAlreadyCompletedError,
    ScopeNotActiveError,
    UnexpectedExceptionError,
    UnhandledEventError,
)
from tests.fixtures import SetMessage


class TestEventFixtureError:
    """Tests for the base EventFixtureError."""

    def test_base_exception(self):
        """Test that EventFixtureError can be raised with message."""
        with pytest.raises(EventFixtureError) as exc_info:
            raise EventFixtureError("Test error")
        assert str(exc_info.value) == "Test error"

    @pytest.mark.parametrize(
        "error_class",
        [
            ScopeAlreadyActiveError,
            ScopeAlreadyCompletedError,
            ScopeNotActiveError,
            LeakedActiveScopeError,
            FixtureExecutionError,
            HandlerSignatureError,
            DuplicateHandlerError,
            UnhandledEventError,
            NoHandlerFoundError,
            AggregateNotFoundError,
            AggregateAlreadyExistsError,
            MissingTargetIdentifierError,
            CommandHandlerFailure,
            FixtureAssertionError,
            IllegalStateError,
        ],
    )
    def test_all_errors_share_base(self, error_class):
        """Test that every error derives from EventFixtureError."""
        assert issubclass(error_class, EventFixtureError)


class TestScopeErrors:
    """Tests for unit-of-work lifecycle errors."""

    def test_already_active_names_aggregate(self):
        """Test ScopeAlreadyActiveError carries the aggregate id."""
        error = ScopeAlreadyActiveError("id")
        assert error.aggregate_id == "id"
        assert "'id'" in str(error)

    def test_already_completed_names_phase(self):
        """Test ScopeAlreadyCompletedError mentions the terminal phase."""
        error = ScopeAlreadyCompletedError("committed")
        assert error.phase == "committed"
        assert "committed" in str(error)

    def test_leaked_scope_carries_aggregate(self):
        """Test LeakedActiveScopeError carries the aggregate id."""
        error = LeakedActiveScopeError("id")
        assert error.aggregate_id == "id"


class TestDispatchErrors:
    """Tests for errors surfaced as failed dispatch outcomes."""

    def test_no_handler_lists_available(self):
        """Test NoHandlerFoundError names the command and available handlers."""
        error = NoHandlerFoundError(SetMessage, "StateStoredAggregate", ["ErrorCommand"])
        assert error.command_type is SetMessage
        assert "SetMessage" in str(error)
        assert "ErrorCommand" in str(error)

    def test_aggregate_not_found(self):
        """Test AggregateNotFoundError carries id and type."""
        error = AggregateNotFoundError("other", "StateStoredAggregate")
        assert error.aggregate_id == "other"
        assert error.aggregate_type == "StateStoredAggregate"
        assert "other" in str(error)

    def test_aggregate_already_exists(self):
        """Test AggregateAlreadyExistsError names the existing aggregate."""
        error = AggregateAlreadyExistsError("acc-1", "Account")
        assert error.aggregate_id == "acc-1"
        assert "acc-1" in str(error)
        assert "given_no_prior_activity" in str(error)

    def test_missing_target_identifier(self):
        """Test MissingTargetIdentifierError names the command and field."""
        error = MissingTargetIdentifierError(SetMessage, "aggregate_id")
        assert error.command_type is SetMessage
        assert error.field_name == "aggregate_id"
        assert "SetMessage" in str(error)
        assert "'aggregate_id'" in str(error)

    def test_command_handler_failure_chains_cause(self):
        """Test CommandHandlerFailure keeps the handler's exception."""
        cause = RuntimeError("Stub")
        error = CommandHandlerFailure(SetMessage, cause)
        assert error.cause is cause
        assert error.__cause__ is cause
        assert "SetMessage" in str(error)
        assert "Stub" in str(error)


class TestAssertionErrors:
    """Tests for then-phase assertion failures."""

    @pytest.mark.parametrize(
        "error",
        [
            EventMismatchError("mismatch", 0, "a", "b"),
            ExpectedExceptionNotThrownError("matcher"),
            UnexpectedExceptionError("unexpected", None),
            ResultMismatchError(1, 2),
        ],
    )
    def test_assertion_errors_are_assertion_errors(self, error):
        """Test that pytest reports assertion failures as failures."""
        assert isinstance(error, AssertionError)
        assert isinstance(error, FixtureAssertionError)

    def test_event_mismatch_attributes(self):
        """Test EventMismatchError exposes index, expected and actual."""
        error = EventMismatchError("mismatch", 2, "expected", "actual")
        assert error.index == 2
        assert error.expected == "expected"
        assert error.actual == "actual"

    def test_result_mismatch_message(self):
        """Test ResultMismatchError shows both values."""
        error = ResultMismatchError("a", "b")
        assert "'a'" in str(error)
        assert "'b'" in str(error)

    def test_illegal_state_is_runtime_error(self):
        """Test IllegalStateError is also a RuntimeError."""
        assert issubclass(IllegalStateError, RuntimeError)
        assert not issubclass(IllegalStateError, AssertionError)


class TestModelErrors:
    """Tests for aggregate definition errors."""

    def test_handler_signature_error(self):
        """Test HandlerSignatureError shows the valid signatures."""
        error = HandlerSignatureError("bad", "StateStoredAggregate", SetMessage, 3)
        assert error.param_count == 3
        assert "bad" in str(error)
        assert "def bad(self, command: SetMessage)" in str(error)

    def test_duplicate_handler_error(self):
        """Test DuplicateHandlerError names both handlers."""
        error = DuplicateHandlerError("StateStoredAggregate", SetMessage, ["one", "two"])
        assert "one" in str(error)
        assert "two" in str(error)
        assert "SetMessage" in str(error)

    def test_unhandled_event_error(self):
        """Test UnhandledEventError lists available handlers."""
        error = UnhandledEventError("MoneyDeposited", "BankAccount", ["AccountOpened"])
        assert error.event_type == "MoneyDeposited"
        assert "AccountOpened" in str(error)
