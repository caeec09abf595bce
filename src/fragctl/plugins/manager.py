"""PluginManager: pluggy wiring for fragctl hosts.

Plugins come from two places: installed distributions exposing the
``fragctl.plugins`` entry-point group, and single-file modules dropped
into the project's local plugin directory (``.fragctl/plugins/`` by
default). Either kind supplies the hooks in
:mod:`fragctl.plugins.hookspecs`.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from collections.abc import Iterator
from pathlib import Path
from types import ModuleType

import pluggy

from fragctl.plugins.hookspecs import FragctlHookSpec

PROJECT_NAME = "fragctl"
ENTRY_POINT_GROUP = "fragctl.plugins"
LOCAL_MODULE_PREFIX = "fragctl_local_plugin_"

# HookimplMarker("fragctl") tags implementations with this attribute.
_IMPL_ATTR = f"{PROJECT_NAME}_impl"

logger = logging.getLogger(__name__)


def _has_hookimpls(obj: object) -> bool:
    """Whether a class or instance defines at least one public hook implementation."""
    return any(
        getattr(getattr(obj, name, None), _IMPL_ATTR, None)
        for name in dir(obj)
        if not name.startswith("_")
    )


def _plugin_classes(module: ModuleType) -> Iterator[type]:
    """Classes defined (not imported) in *module* that implement hooks."""
    for _, cls in inspect.getmembers(module, inspect.isclass):
        if cls.__module__ == module.__name__ and _has_hookimpls(cls):
            yield cls


def _import_file(path: Path, module_name: str) -> ModuleType | None:
    """Import *path* as *module_name*; None (logged) if it fails."""
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        logger.warning("Cannot build an import spec for plugin %s", path)
        return None
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception:
        sys.modules.pop(module_name, None)
        logger.warning("Failed to import local plugin %s", path, exc_info=True)
        return None
    return module


class PluginManager:
    """Owns the pluggy manager and answers which hooks are implemented."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(FragctlHookSpec)
        self._loaded = False

    @property
    def is_loaded(self) -> bool:
        """Whether :meth:`discover_and_load` has run."""
        return self._loaded

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    def discover_and_load(self, *, local_dir: Path | None = None) -> list[str]:
        """Load entry-point plugins, then local ones; return all plugin names.

        A plugin that fails to import or instantiate is logged and skipped.
        Fragment loading never depends on every plugin being healthy.
        """
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._instantiate_class_plugins()
        if local_dir is not None and local_dir.is_dir():
            for path in sorted(local_dir.glob("*.py")):
                if not path.name.startswith("_"):
                    self._load_local(path)
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register an already-built plugin, e.g. a host's sandbox."""
        plugin_name = name or type(plugin).__name__
        self._pm.register(plugin, name=plugin_name)
        logger.debug("Registered plugin %s", plugin_name)

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    def implements(self, hook_name: str) -> bool:
        """Whether any registered plugin implements *hook_name*."""
        caller = getattr(self._pm.hook, hook_name, None)
        return caller is not None and bool(caller.get_hookimpls())

    def get_plugins(self) -> list[object]:
        return list(self._pm.get_plugins())

    def list_plugin_names(self) -> list[str]:
        return [self._pm.get_name(p) or type(p).__name__ for p in self._pm.get_plugins()]

    # ------------------------------------------------------------------
    # Loading helpers
    # ------------------------------------------------------------------

    def _load_local(self, path: Path) -> None:
        module_name = f"{LOCAL_MODULE_PREFIX}{path.stem}"
        module = _import_file(path, module_name)
        if module is None:
            return
        for cls in _plugin_classes(module):
            try:
                self.register_plugin(cls(), name=module_name)
            except Exception:
                logger.warning(
                    "Failed to register plugin %s from %s", cls.__name__, path, exc_info=True
                )

    def _instantiate_class_plugins(self) -> None:
        """Swap entry points that registered a bare class for an instance.

        Hooks called on a class object would run with ``self`` unbound.
        """
        for plugin in self._pm.get_plugins():
            if not (inspect.isclass(plugin) and _has_hookimpls(plugin)):
                continue
            name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)
            try:
                self._pm.register(plugin(), name=name)
            except Exception:
                logger.warning("Failed to instantiate entry-point plugin %s", name, exc_info=True)
