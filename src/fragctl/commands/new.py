"""Command: scaffold a new fragment file in the fragment directory."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from fragctl.commands._base import FragCommand

if TYPE_CHECKING:
    from fragctl.commands._context import AppContext


@click.command(
    cls=FragCommand,
    examples="""\
  fragctl new 30-docker
  fragctl new 40-k8s --description "Kubernetes shortcuts"
  fragctl new 30-docker --force""",
)
@click.argument("name")
@click.option("--description", "-d", default=None, help="Module docstring for the fragment.")
@click.option("--force", is_flag=True, help="Overwrite an existing fragment file.")
@click.pass_obj
def new(app: AppContext, name: str, description: str | None, force: bool) -> None:
    """Create fragment NAME from a skeleton."""
    from fragctl.services.scaffold import ScaffoldService

    svc = ScaffoldService(app.runtime)
    app.emit(svc.new_fragment(name, description=description, force=force))
