"""Root CLI group for fragctl with global flags and command registration."""

from __future__ import annotations

import click

from fragctl import __version__
from fragctl.commands import register_commands
from fragctl.commands._context import AppContext
from fragctl.config.settings import FragSettings
from fragctl.domain.errors import ConfigError


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="fragctl")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("--debug", is_flag=True, help="Warn about fragment failures (FRAGCTL_DEBUG).")
@click.option(
    "--syntax-check",
    is_flag=True,
    help="Parse fragments before executing them (FRAGCTL_SYNTAX_CHECK).",
)
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    debug: bool,
    syntax_check: bool,
    config_path: str | None,
) -> None:
    """Load composable fragments and query what they registered."""
    flags = {
        "json_output": json_output,
        "quiet": quiet,
        "verbose": verbose,
        "log_json": log_json,
        "debug": debug,
        "syntax_check": syntax_check,
    }
    # Unset flags must not shadow FRAGCTL_* environment toggles.
    try:
        settings = FragSettings.from_cli(
            config_path=config_path,
            **{name: True for name, value in flags.items() if value},
        )
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
