"""FragmentRuntime: the composition root for fragment loading.

Builds the shared namespace, command registry, path cache, validator,
dependency checker, loader and batch loader from :class:`FragSettings`,
and wires plugin hooks in as the optional host collaborators. Every piece
can be injected instead, which is how tests swap in their own registry.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

from fragctl.domain.descriptor import BatchResult, FragmentDescriptor, LoadError, LoadOutcome
from fragctl.infrastructure.executor import FragmentContext
from fragctl.infrastructure.namespace import Namespace
from fragctl.infrastructure.path_cache import MemoryCacheBackend, PathCache
from fragctl.infrastructure.registry import CommandRegistry, default_registry
from fragctl.services.batch import BatchLoader
from fragctl.services.dependencies import HookCapabilities, default_checker
from fragctl.services.discovery import discover_fragments, find_descriptor
from fragctl.services.loader import ErrorReporter, FragmentLoader
from fragctl.services.validator import FragmentValidator

if TYPE_CHECKING:
    from fragctl.config.settings import FragSettings
    from fragctl.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


class FragmentRuntime:
    """Owns the loader stack for one process (or one test).

    Parameters:
        settings: Resolved settings.
        registry: Command registry; defaults to the process registry.
        namespace: Shared namespace; a fresh one by default.
        path_cache: Path cache; built from ``[cache]`` by default.
        plugin_manager: Plugin manager supplying host hooks, if any.
        reporter: Explicit error reporter. Takes precedence over the
            ``report_fragment_error`` plugin hook.
    """

    def __init__(
        self,
        settings: FragSettings,
        *,
        registry: CommandRegistry | None = None,
        namespace: Namespace | None = None,
        path_cache: PathCache | None = None,
        plugin_manager: PluginManager | None = None,
        reporter: ErrorReporter | None = None,
    ) -> None:
        self.settings = settings
        self.registry = registry if registry is not None else default_registry()
        self.namespace = namespace if namespace is not None else Namespace()
        self.path_cache = path_cache or PathCache(
            MemoryCacheBackend(), enabled=settings.cache.enabled
        )
        self.plugins = plugin_manager
        self.warnings: list[str] = []

        self.validator = FragmentValidator(self.path_cache, extensions=settings.loader.extensions)
        self.checker = default_checker(self.namespace, self.registry)
        if plugin_manager is not None:
            self.checker.add_provider(HookCapabilities(self._hook_has_capability))

        self.loader = FragmentLoader(
            self.registry,
            self.namespace,
            validator=self.validator,
            checker=self.checker,
            sandbox=self._hook_sandbox if self._implements("execute_fragment") else None,
            reporter=reporter or self._plugin_reporter(),
            debug=settings.debug,
            syntax_check=settings.syntax_check_enabled,
            retry_delay=settings.loader.retry_delay,
            resolver=self.descriptor_for,
            on_outcome=self._after_fragment,
        )
        self.batch = BatchLoader(self.loader, on_complete=self._after_batch)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def discover(self) -> list[FragmentDescriptor]:
        """Descriptors for the configured fragment directory, in load order."""
        return discover_fragments(self.settings)

    def descriptor_for(self, name: str) -> FragmentDescriptor | None:
        """Descriptor for the fragment file named *name*, if it exists."""
        return find_descriptor(self.settings, name)

    def load_fragment(self, descriptor: FragmentDescriptor) -> bool:
        """Load one fragment; raises ``FragmentLoadError`` if required and failed."""
        return self.loader.load(descriptor)

    def load_fragments(
        self,
        descriptors: Iterable[FragmentDescriptor | Mapping[str, Any]] | None = None,
        *,
        stop_on_error: bool | None = None,
    ) -> BatchResult:
        """Load *descriptors* (default: everything discovered) as one batch."""
        if descriptors is None:
            descriptors = self.discover()
        if stop_on_error is None:
            stop_on_error = self.settings.loader.stop_on_error
        return self.batch.load_all(descriptors, stop_on_error=stop_on_error)

    # ------------------------------------------------------------------
    # Plugin wiring
    # ------------------------------------------------------------------

    def _implements(self, hook_name: str) -> bool:
        return self.plugins is not None and self.plugins.implements(hook_name)

    def _plugin_reporter(self) -> ErrorReporter | None:
        if not self._implements("report_fragment_error"):
            return None

        def report(error: LoadError, context: str, category: str) -> None:
            assert self.plugins is not None
            self.plugins.hook.report_fragment_error(
                error=error, context=context, category=category
            )

        return report

    def _hook_sandbox(self, name: str, path: Path, context: FragmentContext) -> bool | None:
        assert self.plugins is not None
        return self.plugins.hook.execute_fragment(name=name, path=path, context=context)

    def _hook_has_capability(self, name: str) -> bool | None:
        assert self.plugins is not None
        return self.plugins.hook.has_capability(name=name)

    def _after_fragment(self, outcome: LoadOutcome) -> None:
        self._dispatch_event(
            "post_fragment_load",
            {
                "fragment": outcome.fragment,
                "context": outcome.context,
                "ok": outcome.ok,
                "attempts": outcome.attempts,
            },
        )

    def _after_batch(self, result: BatchResult) -> None:
        self._dispatch_event(
            "post_batch_load",
            {
                "success_count": result.success_count,
                "failure_count": result.failure_count,
                "failed": list(result.failed),
                "skipped": list(result.skipped),
            },
        )

    def _dispatch_event(self, hook_name: str, payload: dict[str, Any]) -> None:
        """Call a lifecycle hook. No-op without plugins.

        INVARIANT: Plugin failures are warnings, never errors.
        """
        if self.plugins is None:
            return
        hook_fn = getattr(self.plugins.hook, hook_name, None)
        if hook_fn is None:
            return
        try:
            hook_fn(**payload)
        except Exception:
            logger.warning("Plugin hook %s failed", hook_name, exc_info=True)
            self.warnings.append(f"Plugin hook {hook_name} failed")
