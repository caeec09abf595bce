"""Classification enums for fragments, load states, and registry entries."""

from __future__ import annotations

from enum import StrEnum


class CommandKind(StrEnum):
    """Kinds of names a fragment can expose in the shared namespace."""

    FUNCTION = "function"
    ALIAS = "alias"
    VARIABLE = "variable"


class PathKind(StrEnum):
    """What a fragment location resolved to on disk."""

    FILE = "file"
    DIRECTORY = "directory"
    MISSING = "missing"


class LoadState(StrEnum):
    """States of the single-fragment load state machine."""

    NOT_STARTED = "not_started"
    VALIDATING = "validating"
    INVALID = "invalid"
    DEPENDENCIES_UNMET = "dependencies_unmet"
    SYNTAX_REJECTED = "syntax_rejected"
    EXECUTING = "executing"
    TRANSIENT_FAILURE = "transient_failure"
    PERMANENT_FAILURE = "permanent_failure"
    SUCCEEDED = "succeeded"


TERMINAL_STATES = frozenset(
    {
        LoadState.INVALID,
        LoadState.DEPENDENCIES_UNMET,
        LoadState.SYNTAX_REJECTED,
        LoadState.PERMANENT_FAILURE,
        LoadState.SUCCEEDED,
    }
)


class LoadErrorKind(StrEnum):
    """Typed failure taxonomy for fragment loading."""

    INVALID_DESCRIPTOR = "invalid_descriptor"
    FRAGMENT_NOT_FOUND = "fragment_not_found"
    DEPENDENCY_UNMET = "dependency_unmet"
    SYNTAX_ERROR = "syntax_error"
    TRANSIENT_EXECUTION_ERROR = "transient_execution_error"
    REGISTRY_CORRUPTION = "registry_corruption"

    @property
    def retryable(self) -> bool:
        """Only transient execution errors are eligible for retry."""
        return self is LoadErrorKind.TRANSIENT_EXECUTION_ERROR


class ExecutionError(StrEnum):
    """Failure classes an executor maps low-level exceptions into."""

    NOT_FOUND = "not_found"
    SYNTAX = "syntax"
    TRANSIENT = "transient"

    @property
    def load_error_kind(self) -> LoadErrorKind:
        return _EXECUTION_TO_LOAD[self]


_EXECUTION_TO_LOAD: dict[ExecutionError, LoadErrorKind] = {
    ExecutionError.NOT_FOUND: LoadErrorKind.FRAGMENT_NOT_FOUND,
    ExecutionError.SYNTAX: LoadErrorKind.SYNTAX_ERROR,
    ExecutionError.TRANSIENT: LoadErrorKind.TRANSIENT_EXECUTION_ERROR,
}
