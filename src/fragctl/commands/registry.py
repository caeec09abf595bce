"""Command group: inspect, export, and import the command registry."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from fragctl.commands._base import FragGroup

if TYPE_CHECKING:
    from fragctl.commands._context import AppContext
    from fragctl.services.commands import CommandService

_REGISTRY_EXAMPLES = """\
  fragctl registry list
  fragctl registry list --fragment 10-git
  fragctl registry show gs
  fragctl registry which 10-git
  fragctl registry stats
  fragctl registry export --output registry.json
  fragctl registry wrappers --output bin
  fragctl registry list --from registry.json"""


@click.group(cls=FragGroup, examples=_REGISTRY_EXAMPLES)
def registry() -> None:
    """Query which commands each fragment contributed."""


_snapshot_option = click.option(
    "--from",
    "snapshot",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Inspect an exported registry instead of loading fragments.",
)


def _service(app: AppContext, snapshot: Path | None) -> CommandService:
    from fragctl.services.commands import CommandService

    svc = CommandService(app.runtime)
    failure = svc.populate(snapshot)
    if failure is not None:
        app.emit(failure)
    return svc


@registry.command(
    "list",
    examples="""\
  fragctl registry list
  fragctl registry list --fragment 10-git""",
)
@click.option("--fragment", default=None, help="Only commands from this fragment.")
@_snapshot_option
@click.pass_obj
def list_cmd(app: AppContext, fragment: str | None, snapshot: Path | None) -> None:
    """List registered commands."""
    app.emit(_service(app, snapshot).list_commands(fragment=fragment))


@registry.command(examples="  fragctl registry show gs")
@click.argument("name")
@_snapshot_option
@click.pass_obj
def show(app: AppContext, name: str, snapshot: Path | None) -> None:
    """Show the full registry entry for NAME."""
    app.emit(_service(app, snapshot).show(name))


@registry.command(examples="  fragctl registry which 10-git")
@click.argument("fragment")
@_snapshot_option
@click.pass_obj
def which(app: AppContext, fragment: str, snapshot: Path | None) -> None:
    """List the commands FRAGMENT contributed."""
    app.emit(_service(app, snapshot).commands_for(fragment))


@registry.command(examples="  fragctl --json registry stats")
@_snapshot_option
@click.pass_obj
def stats(app: AppContext, snapshot: Path | None) -> None:
    """Command totals by type and by fragment."""
    app.emit(_service(app, snapshot).stats())


@registry.command(
    examples="""\
  fragctl registry export
  fragctl registry export --output registry.json""",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the export to a file instead of stdout.",
)
@click.pass_obj
def export(app: AppContext, output: Path | None) -> None:
    """Load fragments and export the resulting registry as JSON."""
    app.emit(_service(app, None).export(output))


@registry.command(
    "import",
    examples="""\
  fragctl registry import registry.json
  fragctl registry import extra.json --merge""",
)
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--merge", is_flag=True, help="Keep existing entries instead of replacing them.")
@click.pass_obj
def import_cmd(app: AppContext, path: Path, merge: bool) -> None:
    """Load fragments, then import an exported registry on top."""
    app.emit(_service(app, None).import_file(path, merge=merge))


@registry.command(
    examples="""\
  fragctl registry wrappers
  fragctl registry wrappers --output ~/.local/bin
  fragctl registry wrappers --from registry.json""",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("bin"),
    show_default=True,
    help="Directory to write the wrapper scripts into.",
)
@_snapshot_option
@click.pass_obj
def wrappers(app: AppContext, output: Path, snapshot: Path | None) -> None:
    """Write a standalone shell script for every registered command."""
    app.emit(_service(app, snapshot).write_wrappers(output.expanduser()))
