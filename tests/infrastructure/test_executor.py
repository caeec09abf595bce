"""Tests for FragmentContext staging and the direct executor."""

from __future__ import annotations

from pathlib import Path

import pytest

from fragctl.domain.types import CommandKind, ExecutionError
from fragctl.infrastructure.executor import (
    DirectExecutor,
    ExecutionFailure,
    FragmentContext,
    check_syntax,
    classify_exception,
    module_name,
)
from fragctl.infrastructure.namespace import Namespace


def _context(path: Path, namespace: Namespace | None = None) -> FragmentContext:
    return FragmentContext(path.stem, path, namespace if namespace is not None else Namespace())


class TestFragmentContext:
    def test_function_forms(self, tmp_path: Path) -> None:
        ctx = _context(tmp_path / "f.py")

        @ctx.function
        def plain() -> str:
            return "plain"

        @ctx.function("renamed")
        def _hidden() -> str:
            return "renamed"

        ctx.function("direct", lambda: "direct")

        names = [d.name for d in ctx.definitions]
        assert names == ["plain", "renamed", "direct"]
        assert plain() == "plain"

    def test_redeclare_keeps_last(self, tmp_path: Path) -> None:
        ctx = _context(tmp_path / "f.py")
        ctx.variable("x", 1)
        ctx.variable("y", 2)
        ctx.variable("x", 3)
        assert [(d.name, d.value) for d in ctx.definitions] == [("y", 2), ("x", 3)]

    def test_blank_names_rejected(self, tmp_path: Path) -> None:
        ctx = _context(tmp_path / "f.py")
        with pytest.raises(ValueError):
            ctx.variable("  ", 1)
        with pytest.raises(ValueError):
            ctx.alias("gs", "")

    def test_call_prefers_staged(self, tmp_path: Path) -> None:
        ns = Namespace()
        ns.define_function("hello", lambda: "shared")
        ctx = _context(tmp_path / "f.py", ns)
        assert ctx.call("hello") == "shared"
        ctx.function("hello", lambda: "staged")
        ctx.alias("hi", "hello")
        assert ctx.call("hi") == "staged"

    def test_require_without_callback(self, tmp_path: Path) -> None:
        ns = Namespace()
        ns.mark_loaded("00-core")
        ctx = _context(tmp_path / "f.py", ns)
        assert ctx.require("00-core") is True
        assert ctx.require("10-git") is False


class TestDirectExecutor:
    def test_executes_with_fragment_global(self, tmp_path: Path) -> None:
        path = tmp_path / "10-git.py"
        path.write_text(
            "fragment.variable('module', __name__)\n"
            "fragment.alias('gs', 'git_status', dependencies=['git'])\n"
        )
        ctx = _context(path)
        DirectExecutor().execute(ctx)
        staged = {d.name: d for d in ctx.definitions}
        assert staged["module"].value == module_name("10-git")
        assert staged["gs"].kind is CommandKind.ALIAS
        assert staged["gs"].dependencies == ("git",)

    def test_missing_is_not_found(self, tmp_path: Path) -> None:
        with pytest.raises(ExecutionFailure) as exc_info:
            DirectExecutor().execute(_context(tmp_path / "gone.py"))
        assert exc_info.value.error is ExecutionError.NOT_FOUND

    def test_syntax_error(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.py"
        path.write_text("def broken(:\n")
        with pytest.raises(ExecutionFailure) as exc_info:
            DirectExecutor().execute(_context(path))
        assert exc_info.value.error is ExecutionError.SYNTAX

    def test_exit_becomes_failure(self, tmp_path: Path) -> None:
        path = tmp_path / "quits.py"
        path.write_text("raise SystemExit(3)\n")
        with pytest.raises(ExecutionFailure) as exc_info:
            DirectExecutor().execute(_context(path))
        assert exc_info.value.error is ExecutionError.TRANSIENT
        assert isinstance(exc_info.value.__cause__, SystemExit)

    def test_runtime_error_is_transient(self, tmp_path: Path) -> None:
        path = tmp_path / "boom.py"
        path.write_text("raise RuntimeError('flaky')\n")
        with pytest.raises(ExecutionFailure) as exc_info:
            DirectExecutor().execute(_context(path))
        assert exc_info.value.error is ExecutionError.TRANSIENT
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_non_utf8_is_syntax(self, tmp_path: Path) -> None:
        path = tmp_path / "latin.py"
        path.write_bytes(b"x = '\xff'\n")
        with pytest.raises(ExecutionFailure) as exc_info:
            check_syntax(path)
        assert exc_info.value.error is ExecutionError.SYNTAX


class TestClassify:
    def test_classification(self) -> None:
        assert classify_exception(FileNotFoundError()) is ExecutionError.NOT_FOUND
        assert classify_exception(SyntaxError()) is ExecutionError.SYNTAX
        assert classify_exception(ConnectionError()) is ExecutionError.TRANSIENT
        failure = ExecutionFailure(ExecutionError.SYNTAX, "x")
        assert classify_exception(failure) is ExecutionError.SYNTAX
