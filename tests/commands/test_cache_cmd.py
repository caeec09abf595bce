"""Tests for the cache command group."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from fragctl.cli import cli


@pytest.mark.usefixtures("_isolated_project")
class TestCacheCommands:
    def test_status(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "cache", "status"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)["data"]
        assert data["enabled"] is True
        assert data["fragments_valid"] == 2

    def test_build_and_clear(self, cli_runner: CliRunner) -> None:
        built = json.loads(cli_runner.invoke(cli, ["--json", "cache", "build"]).stdout)
        assert built["data"]["warmed"] == 2
        cleared = cli_runner.invoke(cli, ["cache", "clear"])
        assert "entries:  0" in cleared.stdout

    def test_disabled_by_env(
        self, cli_runner: CliRunner, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("FRAGCTL_CACHE__ENABLED", "false")
        result = cli_runner.invoke(cli, ["--json", "cache", "status"])
        data = json.loads(result.stdout)["data"]
        assert data["enabled"] is False
        assert data["entries"] == 0
