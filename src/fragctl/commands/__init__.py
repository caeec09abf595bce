"""Subcommand modules for fragctl.

Provides register_commands() which uses deferred imports to keep
``fragctl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups and standalone commands on the root CLI group."""
    # --- Groups ---
    from fragctl.commands.cache import cache
    from fragctl.commands.registry import registry

    cli.add_command(registry)
    cli.add_command(cache)

    # --- Standalone commands ---
    from fragctl.commands.call import call
    from fragctl.commands.load import load
    from fragctl.commands.new import new
    from fragctl.commands.validate import validate

    cli.add_command(load)
    cli.add_command(validate)
    cli.add_command(call)
    cli.add_command(new)
