"""AppContext: the object every subcommand receives via ``@click.pass_obj``.

It holds the resolved settings, builds the fragment runtime on first use
(so ``--help`` never touches plugins or the fragment directory) and turns
a :class:`ServiceResult` into output plus an exit status.
"""

from __future__ import annotations

from functools import cached_property
from typing import TYPE_CHECKING

import click

from fragctl.config.logging import configure_logging
from fragctl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from fragctl.config.settings import FragSettings
    from fragctl.plugins.manager import PluginManager
    from fragctl.services.result import ServiceResult
    from fragctl.services.runtime import FragmentRuntime

EXIT_FAILURE = 1


class AppContext:
    """Per-invocation state shared by all commands."""

    def __init__(self, settings: FragSettings) -> None:
        self.settings = settings
        self.output = OutputSettings(
            json_output=settings.json_output,
            quiet=settings.quiet,
            verbose=settings.verbose,
        )
        # --debug also lowers the log level so fragment.failed warnings show.
        configure_logging(
            verbose=settings.verbose or settings.debug,
            log_json=settings.log_json,
        )

    @cached_property
    def runtime(self) -> FragmentRuntime:
        """Loader stack with a registry private to this invocation."""
        from fragctl.infrastructure.registry import CommandRegistry
        from fragctl.services.runtime import FragmentRuntime

        return FragmentRuntime(
            self.settings,
            registry=CommandRegistry(),
            plugin_manager=self._plugins(),
        )

    def _plugins(self) -> PluginManager | None:
        if not self.settings.plugins.enabled:
            return None
        from fragctl.plugins.manager import PluginManager

        manager = PluginManager()
        manager.discover_and_load(local_dir=self.settings.plugin_dir)
        return manager

    def emit(self, result: ServiceResult) -> None:
        """Print *result*; exit with status 1 if it is a failure.

        Success goes to stdout with warnings on stderr (JSON output already
        carries them). Failures go to stderr only.
        """
        text = format_result(result, settings=self.output)
        if not result.ok:
            click.echo(text, err=True)
            raise click.exceptions.Exit(EXIT_FAILURE)
        click.echo(text)
        if self.output.json_output or self.output.quiet:
            return
        for warning in result.warnings:
            click.secho(f"WARNING: {warning}", fg="yellow", err=True)
