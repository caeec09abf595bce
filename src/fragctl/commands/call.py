"""Command: load fragments, then invoke one registered command."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from fragctl.commands._base import FragCommand

if TYPE_CHECKING:
    from fragctl.commands._context import AppContext


@click.command(
    cls=FragCommand,
    context_settings={"ignore_unknown_options": True},
    examples="""\
  fragctl call greet world
  fragctl call gs --short""",
)
@click.argument("name")
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_obj
def call(app: AppContext, name: str, args: tuple[str, ...]) -> None:
    """Invoke command NAME with ARGS after loading all fragments."""
    from fragctl.services.load import LoadService

    app.emit(LoadService(app.runtime).call(name, list(args)))
