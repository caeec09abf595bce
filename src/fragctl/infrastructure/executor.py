"""Fragment execution: the registration handle and the direct executor.

A fragment is a Python source file. It runs with a ``fragment`` global
bound to a :class:`FragmentContext` and declares what it exposes through
that handle::

    @fragment.function
    def git_status(*args):
        ...

    fragment.alias("gs", "git_status")
    fragment.variable("EDITOR", "vim")

Definitions are only staged here. The loader commits them to the shared
namespace and the command registry once execution has succeeded.

Executors map low-level failures into :class:`ExecutionFailure` carrying a
typed :class:`~fragctl.domain.types.ExecutionError`, so retry decisions
never depend on exception message text.
"""

from __future__ import annotations

import builtins
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from fragctl.domain.types import CommandKind, ExecutionError
from fragctl.infrastructure.namespace import Namespace

MODULE_PREFIX = "fragctl_fragment_"


class ExecutionFailure(Exception):
    """Execution failed; ``error`` says whether a retry could help."""

    def __init__(self, error: ExecutionError, message: str) -> None:
        super().__init__(message)
        self.error = error


def classify_exception(exc: BaseException) -> ExecutionError:
    """Map an exception raised while running a fragment to a failure class."""
    if isinstance(exc, ExecutionFailure):
        return exc.error
    if isinstance(exc, FileNotFoundError):
        return ExecutionError.NOT_FOUND
    if isinstance(exc, SyntaxError):
        return ExecutionError.SYNTAX
    return ExecutionError.TRANSIENT


def check_syntax(path: Path) -> None:
    """Parse *path* without running it.

    Raises:
        ExecutionFailure: ``NOT_FOUND`` if unreadable, ``SYNTAX`` if it
            does not compile.
    """
    source = _read_source(path)
    _compile(source, path)


@dataclass(frozen=True)
class StagedDefinition:
    """A name a fragment declared during execution, not yet committed."""

    name: str
    kind: CommandKind
    value: Any = None
    target: str | None = None
    dependencies: tuple[str, ...] = ()


class FragmentContext:
    """Registration handle passed to a fragment as its ``fragment`` global.

    Parameters:
        name: Fragment name that will own the registered commands.
        path: Resolved fragment source file.
        namespace: Shared namespace (read access for the fragment).
        require: Callback loading another fragment by name, for
            re-entrant loads. ``None`` disables ``require``.
    """

    def __init__(
        self,
        name: str,
        path: Path,
        namespace: Namespace,
        *,
        require: Callable[[str], bool] | None = None,
    ) -> None:
        self.name = name
        self.path = path
        self.namespace = namespace
        self._require = require
        self._staged: dict[str, StagedDefinition] = {}

    @property
    def definitions(self) -> tuple[StagedDefinition, ...]:
        """Staged definitions in declaration order."""
        return tuple(self._staged.values())

    def function(
        self,
        name_or_func: str | Callable[..., Any] | None = None,
        func: Callable[..., Any] | None = None,
        *,
        dependencies: Iterable[str] = (),
    ) -> Any:
        """Expose a callable. Usable as ``@fragment.function``,
        ``@fragment.function("name")`` or ``fragment.function("name", func)``.
        """
        deps = tuple(dependencies)

        if callable(name_or_func):
            return self._stage_function(name_or_func.__name__, name_or_func, deps)

        explicit = name_or_func
        if func is not None:
            return self._stage_function(explicit or func.__name__, func, deps)

        def decorator(f: Callable[..., Any]) -> Callable[..., Any]:
            return self._stage_function(explicit or f.__name__, f, deps)

        return decorator

    def alias(self, name: str, target: str, *, dependencies: Iterable[str] = ()) -> None:
        """Expose *name* as another name for *target*."""
        _check_name(name)
        _check_name(target)
        self._stage(
            StagedDefinition(
                name, CommandKind.ALIAS, target=target, dependencies=tuple(dependencies)
            )
        )

    def variable(self, name: str, value: Any) -> None:
        """Expose a plain value."""
        _check_name(name)
        self._stage(StagedDefinition(name, CommandKind.VARIABLE, value=value))

    def require(self, fragment_name: str) -> bool:
        """Load another fragment now unless it is already loaded."""
        if self.namespace.is_loaded(fragment_name):
            return True
        if self._require is None:
            return False
        return self._require(fragment_name)

    def call(self, name: str, *args: Any, **kwargs: Any) -> Any:
        """Invoke *name*, preferring this fragment's own staged definitions."""
        staged = self._staged.get(name)
        if staged is not None and staged.kind is CommandKind.FUNCTION:
            return staged.value(*args, **kwargs)
        if staged is not None and staged.kind is CommandKind.ALIAS and staged.target:
            return self.call(staged.target, *args, **kwargs)
        return self.namespace.call(name, *args, **kwargs)

    def _stage_function(
        self, name: str, func: Callable[..., Any], deps: tuple[str, ...]
    ) -> Callable[..., Any]:
        _check_name(name)
        self._stage(StagedDefinition(name, CommandKind.FUNCTION, value=func, dependencies=deps))
        return func

    def _stage(self, definition: StagedDefinition) -> None:
        # Re-declaring a name inside one fragment keeps the last declaration.
        self._staged.pop(definition.name, None)
        self._staged[definition.name] = definition


class FragmentExecutor(Protocol):
    """Runs a fragment body, raising :class:`ExecutionFailure` on failure."""

    def execute(self, context: FragmentContext) -> None: ...


class DirectExecutor:
    """Run fragment source in-process, in a fresh module namespace."""

    def execute(self, context: FragmentContext) -> None:
        source = _read_source(context.path)
        code = _compile(source, context.path)
        module_globals: dict[str, Any] = {
            "__name__": module_name(context.name),
            "__file__": str(context.path),
            "__builtins__": builtins,
            "fragment": context,
        }
        try:
            exec(code, module_globals)  # noqa: S102
        except ExecutionFailure:
            raise
        except (Exception, SystemExit) as exc:
            msg = f"{type(exc).__name__}: {exc}"
            raise ExecutionFailure(classify_exception(exc), msg) from exc


def module_name(fragment_name: str) -> str:
    """Module ``__name__`` a fragment body runs under."""
    return MODULE_PREFIX + re.sub(r"\W", "_", fragment_name)


def _read_source(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        msg = f"Fragment source not found: {path}"
        raise ExecutionFailure(ExecutionError.NOT_FOUND, msg) from exc
    except IsADirectoryError as exc:
        msg = f"Fragment source is a directory: {path}"
        raise ExecutionFailure(ExecutionError.NOT_FOUND, msg) from exc
    except UnicodeDecodeError as exc:
        msg = f"Fragment source is not valid UTF-8: {path}"
        raise ExecutionFailure(ExecutionError.SYNTAX, msg) from exc
    except OSError as exc:
        msg = f"Cannot read fragment {path}: {exc}"
        raise ExecutionFailure(ExecutionError.TRANSIENT, msg) from exc


def _compile(source: str, path: Path) -> Any:
    try:
        return compile(source, str(path), "exec")
    except SyntaxError as exc:
        msg = f"Syntax error in {path} line {exc.lineno}: {exc.msg}"
        raise ExecutionFailure(ExecutionError.SYNTAX, msg) from exc
    except ValueError as exc:
        msg = f"Cannot compile {path}: {exc}"
        raise ExecutionFailure(ExecutionError.SYNTAX, msg) from exc


def _check_name(name: Any) -> None:
    if not isinstance(name, str) or not name.strip():
        msg = f"Command names must be non-empty strings, got {name!r}"
        raise ValueError(msg)
