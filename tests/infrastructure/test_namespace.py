"""Tests for the shared namespace and alias resolution."""

from __future__ import annotations

import pytest

from fragctl.infrastructure.namespace import MAX_ALIAS_DEPTH, Namespace


class TestDefinitions:
    def test_function_and_call(self, namespace: Namespace) -> None:
        namespace.define_function("add", lambda a, b: a + b, fragment="math")
        assert namespace.call("add", 1, 2) == 3
        assert namespace.get("add").fragment == "math"  # type: ignore[union-attr]

    def test_define_function_requires_callable(self, namespace: Namespace) -> None:
        with pytest.raises(TypeError):
            namespace.define_function("x", 42)

    def test_variable_not_callable(self, namespace: Namespace) -> None:
        namespace.define_variable("EDITOR", "vim")
        assert namespace.resolve("EDITOR") == "vim"
        with pytest.raises(TypeError):
            namespace.call("EDITOR")

    def test_remove_respects_owner(self, namespace: Namespace) -> None:
        namespace.define_variable("x", 1, fragment="a")
        assert namespace.remove("x", fragment="b") is False
        assert namespace.remove("x", fragment="a") is True
        assert "x" not in namespace


class TestAliases:
    def test_alias_follows_target(self, namespace: Namespace) -> None:
        namespace.define_function("git_status", lambda: "v1")
        namespace.define_alias("gs", "git_status")
        assert namespace.call("gs") == "v1"
        namespace.define_function("git_status", lambda: "v2")
        assert namespace.call("gs") == "v2"

    def test_alias_chain(self, namespace: Namespace) -> None:
        namespace.define_variable("base", 7)
        namespace.define_alias("a", "base")
        namespace.define_alias("b", "a")
        assert namespace.resolve("b") == 7

    def test_cycle_raises_key_error(self, namespace: Namespace) -> None:
        namespace.define_alias("a", "b")
        namespace.define_alias("b", "a")
        with pytest.raises(KeyError):
            namespace.resolve("a")

    def test_dangling_alias(self, namespace: Namespace) -> None:
        namespace.define_alias("a", "missing")
        with pytest.raises(KeyError):
            namespace.resolve("a")

    def test_too_deep(self, namespace: Namespace) -> None:
        namespace.define_variable("n0", 0)
        for i in range(1, MAX_ALIAS_DEPTH + 3):
            namespace.define_alias(f"n{i}", f"n{i - 1}")
        with pytest.raises(KeyError):
            namespace.resolve(f"n{MAX_ALIAS_DEPTH + 2}")


class TestLoadedFragments:
    def test_mark_and_clear(self, namespace: Namespace) -> None:
        namespace.mark_loaded("10-git")
        namespace.define_variable("x", 1)
        assert namespace.is_loaded("10-git")
        assert namespace.loaded_fragments() == ["10-git"]
        assert list(namespace) == ["x"]
        namespace.clear()
        assert len(namespace) == 0
        assert not namespace.is_loaded("10-git")
