"""Tests for DependencyChecker and its capability providers."""

from __future__ import annotations

from fragctl.domain.capabilities import CapabilityKind
from fragctl.domain.types import CommandKind
from fragctl.infrastructure.namespace import Namespace
from fragctl.infrastructure.registry import CommandRegistry
from fragctl.services.dependencies import (
    DependencyChecker,
    HookCapabilities,
    LoadedFragmentCapabilities,
    ModuleCapabilities,
    NamespaceCapabilities,
    RegistryCapabilities,
    default_checker,
)


class ExplodingProvider:
    def find(self, name: str) -> None:
        raise RuntimeError("provider down")


def _checker(namespace: Namespace, registry: CommandRegistry) -> DependencyChecker:
    return DependencyChecker(
        [
            NamespaceCapabilities(namespace),
            LoadedFragmentCapabilities(namespace, registry),
            RegistryCapabilities(registry),
            ModuleCapabilities(),
        ]
    )


class TestProviders:
    def test_namespace_callable_and_alias(
        self, namespace: Namespace, registry: CommandRegistry
    ) -> None:
        namespace.define_function("greet", print, fragment="core")
        namespace.define_alias("hi", "greet")
        namespace.define_variable("EDITOR", "vim")
        checker = _checker(namespace, registry)
        assert checker.find("greet").kind is CapabilityKind.CALLABLE  # type: ignore[union-attr]
        assert checker.find("hi").kind is CapabilityKind.ALIAS  # type: ignore[union-attr]
        assert checker.find("EDITOR") is None

    def test_loaded_fragment(self, namespace: Namespace, registry: CommandRegistry) -> None:
        namespace.mark_loaded("00-core")
        registry.register("gs", "10-git", CommandKind.ALIAS, target="git_status")
        checker = _checker(namespace, registry)
        assert getattr(checker.find("00-core"), "kind", None) is CapabilityKind.LOADED_FRAGMENT
        assert getattr(checker.find("10-git"), "kind", None) is CapabilityKind.LOADED_FRAGMENT
        assert checker.find("gs").kind is CapabilityKind.ALIAS  # type: ignore[union-attr]

    def test_registry_variables_are_not_capabilities(self, registry: CommandRegistry) -> None:
        registry.register("EDITOR", "00-core", CommandKind.VARIABLE)
        registry.register("greet", "00-core", CommandKind.FUNCTION)
        provider = RegistryCapabilities(registry)
        assert provider.find("EDITOR") is None
        assert provider.find("greet").kind is CapabilityKind.CALLABLE  # type: ignore[union-attr]

    def test_default_checker(self, namespace: Namespace, registry: CommandRegistry) -> None:
        namespace.define_function("greet", print, fragment="00-core")
        checker = default_checker(namespace, registry)
        assert checker.check_all(["greet", "json"]) is True
        assert checker.missing(["greet", "nope_xyz"]) == ["nope_xyz"]

    def test_modules(self) -> None:
        provider = ModuleCapabilities()
        assert provider.find("json") is not None
        assert provider.find("os.path") is not None
        assert provider.find("definitely_not_a_module_xyz") is None
        assert provider.find("not a name") is None
        assert provider.find("unimported_parent_xyz.child") is None

    def test_hook(self) -> None:
        provider = HookCapabilities(lambda name: name == "docker" or None)
        assert provider.find("docker").kind is CapabilityKind.EXTERNAL  # type: ignore[union-attr]
        assert provider.find("podman") is None


class TestChecker:
    def test_check_all_no_partial_credit(
        self, namespace: Namespace, registry: CommandRegistry
    ) -> None:
        namespace.define_function("a", print)
        checker = _checker(namespace, registry)
        assert checker.check_all(["a"]) is True
        assert checker.check_all(["a", "missing_cmd_xyz"]) is False
        assert checker.missing(["missing_cmd_xyz", "a", "also_missing_xyz"]) == [
            "missing_cmd_xyz",
            "also_missing_xyz",
        ]

    def test_empty_list_passes(self) -> None:
        assert DependencyChecker().check_all([]) is True

    def test_blank_names_absent(self) -> None:
        checker = DependencyChecker([ModuleCapabilities()])
        assert checker.find("") is None
        assert checker.find("   ") is None

    def test_failing_provider_skipped(self, namespace: Namespace) -> None:
        namespace.define_function("a", print)
        checker = DependencyChecker([ExplodingProvider()])
        checker.add_provider(NamespaceCapabilities(namespace))
        assert checker.check_all(["a"]) is True
