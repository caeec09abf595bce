"""Dependency checks: are the named capabilities already present?

The check is advisory: it reports what is missing and never loads
anything on the caller's behalf.
"""

from __future__ import annotations

import importlib.util
import logging
import sys
from collections.abc import Callable, Iterable

from fragctl.domain.capabilities import Capability, CapabilityKind, CapabilityProvider
from fragctl.domain.types import CommandKind
from fragctl.infrastructure.namespace import Namespace
from fragctl.infrastructure.registry import CommandRegistry

logger = logging.getLogger(__name__)


class NamespaceCapabilities:
    """Callables and aliases defined in the shared namespace."""

    def __init__(self, namespace: Namespace) -> None:
        self._namespace = namespace

    def find(self, name: str) -> Capability | None:
        item = self._namespace.get(name)
        if item is None:
            return None
        if item.kind is CommandKind.ALIAS:
            return Capability(name, CapabilityKind.ALIAS, source=item.fragment)
        if item.kind is CommandKind.FUNCTION and callable(item.value):
            return Capability(name, CapabilityKind.CALLABLE, source=item.fragment)
        return None


class LoadedFragmentCapabilities:
    """Fragments already loaded into the namespace or recorded in the registry."""

    def __init__(self, namespace: Namespace, registry: CommandRegistry | None = None) -> None:
        self._namespace = namespace
        self._registry = registry

    def find(self, name: str) -> Capability | None:
        if self._namespace.is_loaded(name):
            return Capability(name, CapabilityKind.LOADED_FRAGMENT, source=name)
        if self._registry is not None and self._registry.commands_for(name):
            return Capability(name, CapabilityKind.LOADED_FRAGMENT, source=name)
        return None


class RegistryCapabilities:
    """Commands recorded in the registry (e.g. restored from an export)."""

    def __init__(self, registry: CommandRegistry) -> None:
        self._registry = registry

    def find(self, name: str) -> Capability | None:
        entry = self._registry.lookup_entry(name)
        # Variables are not callable and never satisfy a dependency.
        if entry is None or entry.kind == CommandKind.VARIABLE:
            return None
        kind = CapabilityKind.ALIAS if entry.kind == CommandKind.ALIAS else CapabilityKind.CALLABLE
        return Capability(name, kind, source=entry.fragment)


class ModuleCapabilities:
    """Importable Python modules, found without importing them.

    Dotted names only count once their parent package is imported, since
    locating a submodule would otherwise import the parent.
    """

    def find(self, name: str) -> Capability | None:
        if not all(part.isidentifier() for part in name.split(".")):
            return None
        if name in sys.modules:
            return Capability(name, CapabilityKind.MODULE)
        parent = name.rpartition(".")[0]
        if parent and parent not in sys.modules:
            return None
        try:
            spec = importlib.util.find_spec(name)
        except (ImportError, ValueError):
            return None
        if spec is None:
            return None
        return Capability(name, CapabilityKind.MODULE, source=spec.origin)


class HookCapabilities:
    """Presence check delegated to a host callback (e.g. a plugin hook)."""

    def __init__(self, check: Callable[[str], bool | None]) -> None:
        self._check = check

    def find(self, name: str) -> Capability | None:
        if self._check(name):
            return Capability(name, CapabilityKind.EXTERNAL)
        return None


class DependencyChecker:
    """Resolve dependency names against a chain of capability providers."""

    def __init__(self, providers: Iterable[CapabilityProvider] = ()) -> None:
        self._providers: list[CapabilityProvider] = list(providers)

    def add_provider(self, provider: CapabilityProvider) -> None:
        self._providers.append(provider)

    def find(self, name: str) -> Capability | None:
        """The first capability any provider reports for *name*."""
        if not isinstance(name, str) or not name.strip():
            return None
        for provider in self._providers:
            try:
                found = provider.find(name)
            except Exception:
                logger.debug(
                    "Capability provider %s failed for %s",
                    type(provider).__name__,
                    name,
                    exc_info=True,
                )
                continue
            if found is not None:
                return found
        return None

    def missing(self, names: Iterable[str]) -> list[str]:
        """Names that no provider can satisfy, in the order given."""
        return [name for name in names if self.find(name) is None]

    def check_all(self, names: Iterable[str]) -> bool:
        """True iff every name is present. No partial credit."""
        return not self.missing(names)


def default_checker(namespace: Namespace, registry: CommandRegistry) -> DependencyChecker:
    """Checker over the namespace, loaded fragments, the registry and importable modules."""
    return DependencyChecker(
        [
            NamespaceCapabilities(namespace),
            LoadedFragmentCapabilities(namespace, registry),
            RegistryCapabilities(registry),
            ModuleCapabilities(),
        ]
    )
