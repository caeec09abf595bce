"""Human-readable renderers, one per service operation.

:func:`render_result` picks a renderer by ``result.op``; operations without
one get a plain key/value listing. Every renderer draws into a buffered
console, so the output is a string.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from fragctl.output.console import buffered_console, rendered, style_for_state, style_for_type

if TYPE_CHECKING:
    from rich.console import Console

    from fragctl.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = buffered_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return rendered(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    items = result.data.get("items")
    if items and isinstance(items, list):
        return "\n".join(_extract_name(item) for item in items if _extract_name(item))
    commands = result.data.get("commands")
    if isinstance(commands, list):
        return "\n".join(str(c) for c in commands)

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _extract_name(item: Any) -> str:
    """Extract a display name from a dict item."""
    if isinstance(item, dict):
        for key in ("name", "context"):
            val = item.get(key)
            if val is not None:
                return str(val)
    return ""


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK status line."""
    label = Text("OK", style="frag.ok")
    op = Text(f"  {result.op}", style="frag.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="frag.key")
    if key == "name":
        v = Text(str(value), style="frag.name")
    elif key == "path":
        v = Text(str(value), style="frag.path")
    elif key == "fragment":
        v = Text(str(value), style="frag.fragment")
    elif isinstance(value, (dict, list)):
        v = Text(json.dumps(value, separators=(",", ":")))
    else:
        v = Text(str(value))
    console.print(k, v, end="")
    console.print()


def _mark(ok: bool) -> Text:
    return Text("ok", style="frag.ok") if ok else Text("failed", style="frag.error")


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="frag.error")
    op = Text(f"  {result.op}", style="frag.op")
    sep = Text(" — ")
    console.print(label, op, sep, Text(msg))

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Load renderers ────────────────────────────────────────────────────


def _render_load(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render a batch load as a per-fragment table."""
    _status_line(console, result)
    d = result.data
    _field(console, "loaded", d.get("success_count", 0))
    _field(console, "failed", d.get("failure_count", 0))
    _field(console, "commands", d.get("commands", 0))

    outcomes: dict[str, dict[str, Any]] = d.get("results", {})
    if outcomes:
        console.print()
        table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
        table.add_column("Fragment", style="frag.fragment", no_wrap=True)
        table.add_column("Result")
        table.add_column("State")
        if verbose:
            table.add_column("Attempts", justify="right")
        table.add_column("Error")
        for label, outcome in outcomes.items():
            error = outcome.get("error") or {}
            row: list[str | Text] = [label, _mark(bool(outcome.get("ok")))]
            state = str(outcome.get("state", ""))
            row.append(Text(state, style=style_for_state(state)))
            if verbose:
                row.append(str(outcome.get("attempts", 0)))
            row.append(Text(str(error.get("message", ""))))
            table.add_row(*row)
        console.print(table)

    for label in d.get("skipped", []):
        console.print(f"  [frag.warning]skipped[/frag.warning] {label}")


def _render_validate(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Fragment", style="frag.fragment", no_wrap=True)
    table.add_column("Valid")
    table.add_column("Path", style="frag.path")
    for item in result.data.get("items", []):
        table.add_row(
            str(item.get("context")),
            _mark(bool(item.get("valid"))),
            str(item.get("path")),
        )
    console.print(table)
    console.print(f"\n{result.data.get('count', 0)} fragments")


def _render_call(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    value = result.data.get("result")
    if value is None:
        return
    console.print(str(value), markup=False, emoji=False)


# ── Registry renderers ────────────────────────────────────────────────


def _render_command_table(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    items = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Command", style="frag.name", no_wrap=True)
    table.add_column("Type")
    table.add_column("Fragment", style="frag.fragment")
    table.add_column("Target")
    for item in items:
        kind = item.get("type")
        table.add_row(
            str(item.get("name", "")),
            Text(str(kind or ""), style=style_for_type(kind)),
            str(item.get("fragment") or ""),
            str(item.get("target") or ""),
        )
    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} commands")


def _render_show(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key in ("name", "fragment", "kind", "target", "dependencies", "registered_at"):
        value = result.data.get(key)
        if value not in (None, [], ""):
            _field(console, key, value)


def _render_commands_for(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    _status_line(console, result)
    _field(console, "fragment", result.data.get("fragment"))
    commands = result.data.get("commands", [])
    if not commands:
        console.print("  (no commands)")
    for name in commands:
        console.print(Text(f"    {name}", style="frag.name"))


def _render_stats(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    d = result.data
    _field(console, "commands", d.get("totalCommands", 0))
    _field(console, "fragments", d.get("fragmentCount", 0))
    for title, key in (("Type", "byType"), ("Fragment", "byFragment")):
        groups: dict[str, int] = d.get(key, {})
        if not groups:
            continue
        console.print()
        table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
        table.add_column(title)
        table.add_column("Commands", justify="right")
        for name, count in groups.items():
            table.add_row(name, str(count))
        console.print(table)


def _render_export(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    registry = result.data.get("registry")
    if registry is not None:
        # Export to stdout stays machine-readable even in human mode.
        console.print(json.dumps(registry, indent=2, sort_keys=True), markup=False, emoji=False)
        return
    _render_generic(result, console, verbose=verbose)


def _render_wrappers(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _field(console, "directory", result.data.get("directory"))
    for name in result.data.get("commands", []):
        console.print(Text(f"    {name}", style="frag.name"))
    skipped = result.data.get("skipped", [])
    if skipped and verbose:
        console.print(Text("  skipped ", style="frag.warning"), Text(", ".join(skipped)))
    console.print(f"\n{result.data.get('count', 0)} wrappers")


# ── Generic ───────────────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)


_Renderer = Callable[..., None]

_OP_RENDERERS: dict[str, _Renderer] = {
    # Load
    "load": _render_load,
    "validate": _render_validate,
    "call": _render_call,
    # Registry
    "list_commands": _render_command_table,
    "show_command": _render_show,
    "commands_for": _render_commands_for,
    "stats": _render_stats,
    "export_registry": _render_export,
    "import_registry": _render_generic,
    "write_wrappers": _render_wrappers,
    # Scaffold
    "new_fragment": _render_generic,
    # Cache
    "cache_status": _render_generic,
    "cache_build": _render_generic,
    "cache_clear": _render_generic,
}
