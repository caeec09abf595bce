"""Command: check fragment locations without executing anything."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from fragctl.commands._base import FragCommand

if TYPE_CHECKING:
    from fragctl.commands._context import AppContext


@click.command(
    cls=FragCommand,
    examples="""\
  fragctl validate
  fragctl validate 10-git
  fragctl --json validate""",
)
@click.argument("names", nargs=-1)
@click.pass_obj
def validate(app: AppContext, names: tuple[str, ...]) -> None:
    """Validate fragment paths (existence, kind, extension)."""
    from fragctl.services.load import LoadService

    app.emit(LoadService(app.runtime).validate(list(names) or None))
