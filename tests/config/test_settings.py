"""Tests for FragSettings: unified settings with TOML source."""

from pathlib import Path

import pytest

from fragctl.config.settings import FragSettings
from fragctl.domain.errors import ConfigError


class TestFragSettingsDefaults:
    def test_all_defaults(self, tmp_path: Path) -> None:
        """With no TOML and no env vars, all fields use code defaults."""
        settings = FragSettings.from_cli(project_root=tmp_path)
        assert settings.project_root == tmp_path
        assert settings.debug is False
        assert settings.syntax_check_enabled is False
        assert settings.fragment_root == tmp_path / "profile.d"
        assert settings.plugin_dir == tmp_path / ".fragctl" / "plugins"
        assert settings.loader.retries == 0
        assert settings.loader.retry_delay == 0.0
        assert settings.cache.enabled is True

    def test_frozen(self, tmp_path: Path) -> None:
        settings = FragSettings.from_cli(project_root=tmp_path)
        with pytest.raises(Exception):
            settings.debug = True  # type: ignore[misc]


class TestTomlSource:
    def test_sparse_override(self, tmp_path: Path) -> None:
        (tmp_path / "fragctl.toml").write_text(
            '[fragments]\nroot = "conf.d"\n[loader]\nretries = 2\n'
        )
        settings = FragSettings.from_cli(project_root=tmp_path)
        assert settings.fragment_root == tmp_path / "conf.d"
        assert settings.loader.retries == 2
        assert settings.loader.extensions == [".py"]  # default preserved

    def test_walk_up_sets_project_root(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "fragctl.toml").write_text("[loader]\nsyntax_check = true\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)
        settings = FragSettings.from_cli()
        assert settings.project_root == tmp_path.resolve()
        assert settings.syntax_check_enabled is True

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "custom" / "my.toml"
        custom.parent.mkdir(parents=True)
        custom.write_text("[cache]\nenabled = false\n")
        settings = FragSettings.from_cli(config_path=str(custom), project_root=tmp_path)
        assert settings.cache.enabled is False
        assert settings.config_path == custom

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / "fragctl.toml").write_text("[loader\n")
        with pytest.raises(ConfigError):
            FragSettings.from_cli(project_root=tmp_path)


class TestEnvironment:
    def test_debug_toggle(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FRAGCTL_DEBUG", "1")
        monkeypatch.setenv("FRAGCTL_SYNTAX_CHECK", "true")
        settings = FragSettings.from_cli(project_root=tmp_path)
        assert settings.debug is True
        assert settings.syntax_check_enabled is True

    def test_env_beats_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "fragctl.toml").write_text("[loader]\nretries = 1\n")
        monkeypatch.setenv("FRAGCTL_LOADER__RETRIES", "4")
        settings = FragSettings.from_cli(project_root=tmp_path)
        assert settings.loader.retries == 4

    def test_cli_flags_beat_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FRAGCTL_QUIET", "0")
        settings = FragSettings.from_cli(project_root=tmp_path, quiet=True)
        assert settings.quiet is True
