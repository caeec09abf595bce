"""FragSettings: CLI flags, ``FRAGCTL_*`` env vars and ``fragctl.toml`` merged.

Precedence, strongest first: explicit keyword arguments (the CLI flags
that were actually given), environment variables, the TOML file, then the
defaults baked into :mod:`fragctl.config.models`. Nested sections are
reachable from the environment with ``__``, e.g.
``FRAGCTL_LOADER__RETRIES=2``.
"""

from __future__ import annotations

import tomllib
from contextvars import ContextVar
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    TomlConfigSettingsSource,
)

from fragctl.config.discovery import find_config
from fragctl.config.models import CacheConfig, FragmentsConfig, LoaderConfig, PluginsConfig
from fragctl.domain.errors import ConfigError

# Config file for the FragSettings currently being constructed.
_active_toml: ContextVar[Path | None] = ContextVar("fragctl_active_toml", default=None)


class FragSettings(BaseSettings):
    """Frozen settings for one fragctl invocation.

    Attributes:
        project_root: Base for relative paths: the directory holding
            ``fragctl.toml``, else the working directory.
        config_path: The config file in effect, or None.
        debug: Surface otherwise-silent fragment failures as warnings.
        syntax_check: Parse fragments before executing them (also
            enabled by ``[loader].syntax_check``).
    """

    model_config = {
        "frozen": True,
        "env_prefix": "FRAGCTL_",
        "env_nested_delimiter": "__",
    }

    project_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False
    debug: bool = False
    syntax_check: bool = False

    fragments: FragmentsConfig = Field(default_factory=FragmentsConfig)
    loader: LoaderConfig = Field(default_factory=LoaderConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)

    @property
    def fragment_root(self) -> Path:
        return self._under_project(self.fragments.root)

    @property
    def plugin_dir(self) -> Path:
        return self._under_project(self.plugins.local_dir)

    @property
    def syntax_check_enabled(self) -> bool:
        return self.syntax_check or self.loader.syntax_check

    def _under_project(self, value: str) -> Path:
        path = Path(value).expanduser()
        return path if path.is_absolute() else self.project_root / path

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        toml_path = _active_toml.get()
        if toml_path is None:
            return (init_settings, env_settings)
        try:
            toml_source = TomlConfigSettingsSource(settings_cls, toml_file=toml_path)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(toml_path, str(exc)) from exc
        return (init_settings, env_settings, toml_source)

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        project_root: Path | None = None,
        **cli_flags: Any,
    ) -> FragSettings:
        """Build settings the way the CLI does.

        *config_path* (``--config``) wins over discovery; a path that is not
        a file means no config. Without *project_root*, paths resolve
        against the config file's directory.

        Raises:
            ConfigError: The config file is not valid TOML.
        """
        if config_path:
            explicit = Path(config_path)
            toml_path = explicit if explicit.is_file() else None
        else:
            toml_path = find_config(project_root)

        if project_root is None:
            project_root = toml_path.parent if toml_path else Path.cwd()

        token = _active_toml.set(toml_path)
        try:
            return cls(project_root=project_root, config_path=toml_path, **cli_flags)
        finally:
            _active_toml.reset(token)
