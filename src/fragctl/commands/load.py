"""Command: load fragments into a session and report the batch result."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from fragctl.commands._base import FragCommand

if TYPE_CHECKING:
    from fragctl.commands._context import AppContext


@click.command(
    cls=FragCommand,
    examples="""\
  fragctl load
  fragctl load 10-git 20-docker
  fragctl load --stop-on-error
  fragctl load 00-core --required
  fragctl --debug load --retries 2""",
)
@click.argument("names", nargs=-1)
@click.option(
    "--stop-on-error/--keep-going",
    default=None,
    help="Stop at the first failure (default from [loader].stop_on_error).",
)
@click.option("--retries", type=click.IntRange(min=0), default=None, help="Retry budget override.")
@click.option("--required", is_flag=True, help="Fail the command if any fragment fails.")
@click.pass_obj
def load(
    app: AppContext,
    names: tuple[str, ...],
    stop_on_error: bool | None,
    retries: int | None,
    required: bool,
) -> None:
    """Load fragments (all discovered, or NAMES in the given order)."""
    from fragctl.services.load import LoadService

    app.emit(
        LoadService(app.runtime).load(
            list(names) or None,
            stop_on_error=stop_on_error,
            retries=retries,
            required=required,
        )
    )
