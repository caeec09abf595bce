"""Tests for config file discovery and loading."""

from pathlib import Path

import pytest

from fragctl.config.discovery import find_config, load_config


class TestFindConfig:
    def test_finds_in_start_dir(self, tmp_path: Path) -> None:
        (tmp_path / "fragctl.toml").write_text("")
        assert find_config(tmp_path) == (tmp_path / "fragctl.toml").resolve()

    def test_walks_up(self, tmp_path: Path) -> None:
        (tmp_path / "fragctl.toml").write_text("")
        nested = tmp_path / "x" / "y"
        nested.mkdir(parents=True)
        assert find_config(nested) == (tmp_path / "fragctl.toml").resolve()

    def test_env_var_wins(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        other = tmp_path / "elsewhere.toml"
        other.write_text("")
        monkeypatch.setenv("FRAGCTL_CONFIG", str(other))
        assert find_config(tmp_path) == other

    def test_env_var_missing_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FRAGCTL_CONFIG", str(tmp_path / "nope.toml"))
        assert find_config(tmp_path) is None


class TestLoadConfig:
    def test_defaults_without_file(self, tmp_path: Path) -> None:
        config = load_config(cwd=tmp_path)
        assert config.fragments.root == "profile.d"

    def test_overrides(self, tmp_path: Path) -> None:
        path = tmp_path / "fragctl.toml"
        path.write_text('[fragments]\ndisabled = ["20-slow"]\n[plugins]\nenabled = false\n')
        config = load_config(path)
        assert config.fragments.disabled == ["20-slow"]
        assert config.plugins.enabled is False
