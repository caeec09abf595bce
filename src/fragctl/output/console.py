"""Rich theme and off-screen consoles for human-readable output.

Renderers draw into a console backed by a string buffer and return the
text, so formatting stays a pure ``ServiceResult -> str`` function. Rich
drops color codes on its own when the buffer is not a terminal.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

from fragctl.domain.types import CommandKind, LoadState

_KIND_STYLES: dict[str, str] = {
    CommandKind.FUNCTION: "green",
    CommandKind.ALIAS: "cyan",
    CommandKind.VARIABLE: "yellow",
}

_STATE_STYLES: dict[str, str] = {
    LoadState.SUCCEEDED: "frag.ok",
    LoadState.INVALID: "frag.warning",
    LoadState.DEPENDENCIES_UNMET: "frag.warning",
    LoadState.SYNTAX_REJECTED: "frag.error",
    LoadState.PERMANENT_FAILURE: "frag.error",
}

FRAG_THEME = Theme(
    {
        "frag.ok": "bold green",
        "frag.error": "bold red",
        "frag.warning": "bold yellow",
        "frag.op": "bold cyan",
        "frag.key": "dim",
        "frag.name": "bold blue",
        "frag.path": "dim",
        "frag.fragment": "magenta",
        **{f"frag.kind.{kind}": style for kind, style in _KIND_STYLES.items()},
    }
)

DEFAULT_WIDTH = 120


def buffered_console(width: int = DEFAULT_WIDTH) -> Console:
    """A themed console that writes into memory."""
    return Console(file=StringIO(), theme=FRAG_THEME, highlight=False, width=width)


def rendered(console: Console) -> str:
    """Everything written to a :func:`buffered_console` so far."""
    buffer = console.file
    assert isinstance(buffer, StringIO)
    return buffer.getvalue()


def style_for_type(kind: str | None) -> str:
    """Theme style for a registry entry's command kind ("" if unknown)."""
    return f"frag.kind.{kind}" if kind in _KIND_STYLES else ""


def style_for_state(state: str | None) -> str:
    """Theme style for a final load state ("" if unstyled)."""
    return _STATE_STYLES.get(state or "", "")
