"""Tests for the root CLI group and its global flags."""

from __future__ import annotations

from pathlib import Path

from click.testing import CliRunner

from fragctl.cli import cli


def test_no_subcommand_prints_help(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, [])
    assert result.exit_code == 0
    assert "Load composable fragments" in result.output


def test_invalid_config_is_reported(cli_runner: CliRunner, tmp_path: Path) -> None:
    broken = tmp_path / "fragctl.toml"
    broken.write_text("[loader\nretries = 2\n")
    result = cli_runner.invoke(cli, ["-c", str(broken), "cache", "status"])
    assert result.exit_code == 1
    assert "Invalid TOML" in result.stderr
