"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, fragctl.toml only contains overrides.
A fresh project needs nothing but a ``profile.d/`` directory of fragments.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

# --- fragctl.toml sections ---


class FragmentOverride(BaseModel):
    """[fragments.overrides.<name>]: per-fragment load policy."""

    model_config = {"frozen": True}

    context: str | None = None
    required: bool | None = None
    dependencies: list[str] = Field(default_factory=list)
    retries: int | None = Field(default=None, ge=0)


class FragmentsConfig(BaseModel):
    """[fragments] section."""

    model_config = {"frozen": True}

    root: str = "profile.d"
    order: list[str] = Field(default_factory=list)
    disabled: list[str] = Field(default_factory=list)
    required: list[str] = Field(default_factory=list)
    overrides: dict[str, FragmentOverride] = Field(default_factory=dict)


class LoaderConfig(BaseModel):
    """[loader] section."""

    model_config = {"frozen": True}

    retries: int = Field(default=0, ge=0)
    retry_delay: float = Field(default=0.0, ge=0.0)
    syntax_check: bool = False
    stop_on_error: bool = False
    extensions: list[str] = Field(default_factory=lambda: [".py"])


class CacheConfig(BaseModel):
    """[cache] section."""

    model_config = {"frozen": True}

    enabled: bool = True


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    local_dir: str = ".fragctl/plugins"


class FragConfig(BaseModel):
    """Root config model mirroring the full fragctl.toml structure."""

    model_config = {"frozen": True}

    fragments: FragmentsConfig = Field(default_factory=FragmentsConfig)
    loader: LoaderConfig = Field(default_factory=LoaderConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)
