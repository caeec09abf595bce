"""Single-fragment loader: the load state machine.

::

    NOT_STARTED -> VALIDATING -> INVALID               (terminal)
                              -> DEPENDENCIES_UNMET    (terminal)
                              -> SYNTAX_REJECTED       (terminal, pre-check only)
                              -> EXECUTING -> SUCCEEDED         (terminal)
                                           -> TRANSIENT_FAILURE -> EXECUTING (retry)
                                           -> PERMANENT_FAILURE (terminal)

Validation, dependency and syntax failures are never retried. Only
execution failures classified as transient are retried, and a retry
re-runs execution alone.

INVARIANT: a failed attempt never leaves entries in the registry. The
fragment's definitions are committed only after execution succeeds.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

import structlog

from fragctl.domain.descriptor import FragmentDescriptor, LoadError, LoadOutcome
from fragctl.domain.errors import FragmentLoadError
from fragctl.domain.types import ExecutionError, LoadErrorKind, LoadState
from fragctl.infrastructure.executor import (
    DirectExecutor,
    ExecutionFailure,
    FragmentContext,
    FragmentExecutor,
    check_syntax,
    classify_exception,
)
from fragctl.infrastructure.namespace import Namespace, NamespaceItem
from fragctl.infrastructure.registry import CommandRegistry
from fragctl.services.dependencies import DependencyChecker, default_checker
from fragctl.services.validator import FragmentValidator

logger = logging.getLogger(__name__)
log = structlog.get_logger(__name__)

UNNAMED = "<unnamed>"


class ErrorReporter(Protocol):
    """Receives load failures: ``(error, context label, category)``."""

    def __call__(self, error: LoadError, context: str, category: str) -> None: ...


class Sandbox(Protocol):
    """Host-provided execution.

    Returns a truthy value on success, a falsy one on failure, or None to
    decline and let the loader execute the fragment directly.
    """

    def __call__(self, name: str, path: Path, context: FragmentContext) -> bool | None: ...


class FragmentLoader:
    """Validate, check, execute, retry, and report on one fragment.

    Parameters:
        registry: Command registry that successful loads commit into.
        namespace: Shared namespace fragments contribute to.
        validator: Shape and existence checks.
        checker: Dependency presence checks; defaults to :func:`default_checker`.
        executor: Runs fragment bodies when no sandbox takes them.
        sandbox: Optional host execution collaborator.
        reporter: Optional failure sink.
        debug: Warn about failures when no reporter is injected.
        syntax_check: Parse fragments before executing them.
        retry_delay: Seconds to sleep between attempts (0 for none).
        resolver: Maps a fragment name to a descriptor, enabling
            ``fragment.require(name)`` from inside a fragment body.
        on_outcome: Called with every final outcome.
    """

    def __init__(
        self,
        registry: CommandRegistry,
        namespace: Namespace,
        *,
        validator: FragmentValidator | None = None,
        checker: DependencyChecker | None = None,
        executor: FragmentExecutor | None = None,
        sandbox: Sandbox | None = None,
        reporter: ErrorReporter | None = None,
        debug: bool = False,
        syntax_check: bool = False,
        retry_delay: float = 0.0,
        resolver: Callable[[str], FragmentDescriptor | None] | None = None,
        on_outcome: Callable[[LoadOutcome], None] | None = None,
    ) -> None:
        self._registry = registry
        self._namespace = namespace
        self._validator = validator or FragmentValidator()
        self._checker = checker if checker is not None else default_checker(namespace, registry)
        self._executor = executor or DirectExecutor()
        self._sandbox = sandbox
        self._reporter = reporter
        self._debug = debug
        self._syntax_check = syntax_check
        self._retry_delay = retry_delay
        self._resolver = resolver
        self._on_outcome = on_outcome
        self._lock = threading.RLock()
        self._in_progress: set[str] = set()

    @property
    def registry(self) -> CommandRegistry:
        return self._registry

    @property
    def namespace(self) -> Namespace:
        return self._namespace

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def load(self, descriptor: FragmentDescriptor) -> bool:
        """Load one fragment; True on success.

        Raises:
            FragmentLoadError: If the descriptor is ``required`` and the
                final outcome is a failure.
        """
        outcome = self.attempt(descriptor)
        if not outcome.ok and descriptor.required:
            raise FragmentLoadError(outcome)
        return outcome.ok

    def attempt(self, descriptor: FragmentDescriptor) -> LoadOutcome:
        """Run the state machine and return the final outcome. Never raises."""
        outcome = self._run(descriptor)
        if not outcome.ok and outcome.error is not None:
            self._report(outcome.error, outcome.context)
        log.debug(
            "fragment.outcome",
            context=outcome.context,
            fragment=outcome.fragment,
            ok=outcome.ok,
            state=str(outcome.state),
            attempts=outcome.attempts,
        )
        if self._on_outcome is not None:
            self._on_outcome(outcome)
        return outcome

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    def _run(self, descriptor: FragmentDescriptor) -> LoadOutcome:
        label = descriptor.label or UNNAMED

        # VALIDATING: shape
        if not self._validator.validate_shape(descriptor):
            return _failure(
                label,
                None,
                LoadState.INVALID,
                LoadErrorKind.INVALID_DESCRIPTOR,
                "Fragment descriptor has no usable root/segments or path",
            )

        # VALIDATING: existence and kind
        path = self._validator.resolve(descriptor)
        fragment = descriptor.fragment_name
        if path is None:
            target = self._validator.compose_path(descriptor)
            return _failure(
                label,
                fragment,
                LoadState.INVALID,
                LoadErrorKind.FRAGMENT_NOT_FOUND,
                f"Fragment not found or not a loadable file: {target}",
            )
        fragment = fragment or path.stem

        if descriptor.dependencies:
            missing = self._checker.missing(descriptor.dependencies)
            if missing:
                return _failure(
                    label,
                    fragment,
                    LoadState.DEPENDENCIES_UNMET,
                    LoadErrorKind.DEPENDENCY_UNMET,
                    f"Missing dependencies: {', '.join(missing)}",
                )

        if self._syntax_check:
            try:
                check_syntax(path)
            except ExecutionFailure as failure:
                kind = failure.error.load_error_kind
                state = (
                    LoadState.SYNTAX_REJECTED
                    if failure.error is ExecutionError.SYNTAX
                    else LoadState.INVALID
                )
                return _failure(label, fragment, state, kind, str(failure), failure)

        with self._lock:
            if fragment in self._in_progress:
                return _failure(
                    label,
                    fragment,
                    LoadState.PERMANENT_FAILURE,
                    LoadErrorKind.DEPENDENCY_UNMET,
                    f"Fragment {fragment!r} is already loading (circular require)",
                )
            self._in_progress.add(fragment)
        try:
            return self._execute_with_retries(descriptor, label, fragment, path)
        finally:
            with self._lock:
                self._in_progress.discard(fragment)

    def _execute_with_retries(
        self,
        descriptor: FragmentDescriptor,
        label: str,
        fragment: str,
        path: Path,
    ) -> LoadOutcome:
        max_attempts = descriptor.retries + 1
        error: LoadError | None = None

        for attempt in range(1, max_attempts + 1):
            context = FragmentContext(fragment, path, self._namespace, require=self._require)
            try:
                self._execute(context)
            except ExecutionFailure as failure:
                cause = failure.__cause__ or failure
                error = LoadError(failure.error.load_error_kind, str(failure), cause)
            else:
                self._commit(context)
                return LoadOutcome(
                    ok=True,
                    context=label,
                    fragment=fragment,
                    state=LoadState.SUCCEEDED,
                    attempts=attempt,
                )

            if not error.retryable:
                return LoadOutcome(
                    ok=False,
                    context=label,
                    fragment=fragment,
                    state=LoadState.PERMANENT_FAILURE,
                    error=error,
                    attempts=attempt,
                )

            # TRANSIENT_FAILURE
            log.debug(
                "fragment.retry",
                context=label,
                attempt=attempt,
                remaining=max_attempts - attempt,
                error=error.message,
            )
            if attempt < max_attempts and self._retry_delay > 0:
                time.sleep(self._retry_delay)

        assert error is not None
        return LoadOutcome(
            ok=False,
            context=label,
            fragment=fragment,
            state=LoadState.PERMANENT_FAILURE,
            error=error,
            attempts=max_attempts,
        )

    def _execute(self, context: FragmentContext) -> None:
        """Run the fragment through the sandbox if it accepts it, else directly."""
        if self._sandbox is not None:
            try:
                handled = self._sandbox(context.name, context.path, context)
            except ExecutionFailure:
                raise
            except (Exception, SystemExit) as exc:
                msg = f"Sandbox failed: {type(exc).__name__}: {exc}"
                raise ExecutionFailure(classify_exception(exc), msg) from exc
            if handled is not None:
                if handled:
                    return
                msg = f"Sandbox rejected fragment {context.name!r}"
                raise ExecutionFailure(ExecutionError.TRANSIENT, msg)
        self._executor.execute(context)

    def _commit(self, context: FragmentContext) -> None:
        """Publish staged definitions and drop names this fragment no longer defines."""
        fragment = context.name
        with self._lock:
            defined: list[str] = []
            for definition in context.definitions:
                self._namespace.define(
                    NamespaceItem(
                        definition.name,
                        definition.kind,
                        value=definition.value,
                        target=definition.target,
                        fragment=fragment,
                    )
                )
                self._registry.register(
                    definition.name,
                    fragment,
                    definition.kind,
                    definition.target,
                    definition.dependencies,
                )
                defined.append(definition.name)
            for stale in self._registry.drop_fragment(fragment, keep=defined):
                self._namespace.remove(stale, fragment=fragment)
                logger.debug("Dropped stale command %s from fragment %s", stale, fragment)
            self._namespace.mark_loaded(fragment)

    def _require(self, name: str) -> bool:
        if self._resolver is None:
            return False
        descriptor = self._resolver(name)
        if descriptor is None:
            logger.debug("Cannot require unknown fragment %s", name)
            return False
        return self.attempt(descriptor).ok

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def _report(self, error: LoadError, context: str) -> None:
        if self._reporter is not None:
            try:
                self._reporter(error, context, str(error.kind))
            except Exception:
                logger.debug("Error reporter failed for %s", context, exc_info=True)
            return
        if self._debug:
            log.warning(
                "fragment.failed",
                context=context,
                kind=str(error.kind),
                error=error.message,
            )


def _failure(
    label: str,
    fragment: str | None,
    state: LoadState,
    kind: LoadErrorKind,
    message: str,
    exception: BaseException | None = None,
) -> LoadOutcome:
    return LoadOutcome(
        ok=False,
        context=label,
        fragment=fragment,
        state=state,
        error=LoadError(kind, message, exception),
        attempts=0,
    )
