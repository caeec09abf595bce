"""Pluggy hook specifications for fragment loading.

Three collaborator hooks let a host take over parts of loading (execution
sandbox, error reporting, capability presence). Two lifecycle hooks
announce load results.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from fragctl.domain.descriptor import LoadError
    from fragctl.infrastructure.executor import FragmentContext

hookspec = pluggy.HookspecMarker("fragctl")


class FragctlHookSpec:
    """Hook specifications for the fragctl plugin system."""

    @hookspec(firstresult=True)
    def execute_fragment(self, name: str, path: Path, context: FragmentContext) -> bool | None:
        """Execute a fragment in a host sandbox.

        Return True on success, False on failure, or None to decline so the
        fragment runs directly. Definitions must go through *context*.
        """

    @hookspec
    def report_fragment_error(self, error: LoadError, context: str, category: str) -> None:
        """Called with every fragment load failure."""

    @hookspec(firstresult=True)
    def has_capability(self, name: str) -> bool | None:
        """Return True if *name* is present in the host environment."""

    @hookspec
    def post_fragment_load(
        self,
        fragment: str | None,
        context: str,
        ok: bool,
        attempts: int,
    ) -> None:
        """Called after every single-fragment load attempt completes."""

    @hookspec
    def post_batch_load(
        self,
        success_count: int,
        failure_count: int,
        failed: list[str],
        skipped: list[str],
    ) -> None:
        """Called after a batch load completes."""


HOOK_NAMES: tuple[str, ...] = (
    "execute_fragment",
    "report_fragment_error",
    "has_capability",
    "post_fragment_load",
    "post_batch_load",
)
