"""Parametrized help tests for all CLI commands."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from fragctl.cli import cli

# (CLI args, expected keywords in output)
HELP_COMMANDS: list[tuple[list[str], list[str]]] = [
    (
        ["--help"],
        ["load", "validate", "call", "new", "registry", "cache", "--debug", "--syntax-check"],
    ),
    (["new", "--help"], ["NAME", "--description", "--force"]),
    (["load", "--help"], ["NAMES", "--stop-on-error", "--retries", "--required", "--examples"]),
    (["validate", "--help"], ["NAMES"]),
    (["call", "--help"], ["NAME", "ARGS"]),
    (["registry", "--help"], ["list", "show", "which", "stats", "export", "import", "wrappers"]),
    (["registry", "wrappers", "--help"], ["--output", "--from"]),
    (["registry", "list", "--help"], ["--fragment", "--from"]),
    (["registry", "export", "--help"], ["--output"]),
    (["registry", "import", "--help"], ["PATH", "--merge"]),
    (["cache", "--help"], ["status", "build", "clear"]),
]


@pytest.mark.parametrize(("args", "expected"), HELP_COMMANDS)
def test_help(cli_runner: CliRunner, args: list[str], expected: list[str]) -> None:
    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0, result.output
    for keyword in expected:
        assert keyword in result.output


def test_version(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "fragctl" in result.output


def test_examples_flag(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["registry", "list", "--examples"])
    assert result.exit_code == 0
    assert "fragctl registry list --fragment 10-git" in result.output
