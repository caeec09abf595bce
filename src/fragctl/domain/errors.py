"""Exception types raised to callers.

Most failures are values (:class:`~fragctl.domain.descriptor.LoadOutcome`).
Exceptions are reserved for escalation: a required fragment that failed
to load, or a config file that cannot be read at all.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fragctl.domain.descriptor import LoadOutcome
    from fragctl.domain.types import LoadErrorKind


class FragctlError(Exception):
    """Base class for fragctl errors."""


class FragmentLoadError(FragctlError):
    """A required fragment failed to load."""

    def __init__(self, outcome: LoadOutcome) -> None:
        self.outcome = outcome
        reason = outcome.error.message if outcome.error else "unknown failure"
        super().__init__(f"Required fragment {outcome.context!r} failed to load: {reason}")

    @property
    def kind(self) -> LoadErrorKind | None:
        return self.outcome.error.kind if self.outcome.error else None


class ConfigError(FragctlError):
    """``fragctl.toml`` exists but is not valid TOML."""

    def __init__(self, path: object, reason: str) -> None:
        self.path = path
        super().__init__(f"Invalid TOML in {path}: {reason}")
