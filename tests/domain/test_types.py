"""Tests for the load state and error taxonomies."""

from fragctl.domain.types import (
    TERMINAL_STATES,
    ExecutionError,
    LoadErrorKind,
    LoadState,
)


class TestLoadErrorKind:
    def test_only_transient_is_retryable(self) -> None:
        retryable = [k for k in LoadErrorKind if k.retryable]
        assert retryable == [LoadErrorKind.TRANSIENT_EXECUTION_ERROR]


class TestExecutionError:
    def test_maps_to_load_error_kind(self) -> None:
        assert ExecutionError.NOT_FOUND.load_error_kind is LoadErrorKind.FRAGMENT_NOT_FOUND
        assert ExecutionError.SYNTAX.load_error_kind is LoadErrorKind.SYNTAX_ERROR
        assert (
            ExecutionError.TRANSIENT.load_error_kind is LoadErrorKind.TRANSIENT_EXECUTION_ERROR
        )


class TestLoadState:
    def test_terminal_states(self) -> None:
        assert LoadState.SUCCEEDED in TERMINAL_STATES
        assert LoadState.TRANSIENT_FAILURE not in TERMINAL_STATES
        assert LoadState.EXECUTING not in TERMINAL_STATES

    def test_values_are_strings(self) -> None:
        assert str(LoadState.SYNTAX_REJECTED) == "syntax_rejected"
