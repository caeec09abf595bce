"""Shared pytest fixtures and test helpers for fragctl tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from fragctl.config.settings import FragSettings
from fragctl.infrastructure.namespace import Namespace
from fragctl.infrastructure.registry import CommandRegistry, reset_default_registry
from fragctl.services.runtime import FragmentRuntime

CORE_SRC = """\
@fragment.function
def greet(who="world"):
    return f"hello {who}"

fragment.variable("EDITOR", "vim")
"""

GIT_SRC = """\
@fragment.function("git_status")
def _status(*args):
    return "clean"

fragment.alias("gs", "git_status")
"""


@pytest.fixture(autouse=True)
def _reset_registry() -> None:
    """Every test starts without a process-wide registry."""
    reset_default_registry()
    yield
    reset_default_registry()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in ("FRAGCTL_DEBUG", "FRAGCTL_SYNTAX_CHECK", "FRAGCTL_CONFIG"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def registry() -> CommandRegistry:
    return CommandRegistry()


@pytest.fixture
def namespace() -> Namespace:
    return Namespace()


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Temporary project with a ``profile.d/`` holding two fragments."""
    frag_dir = tmp_path / "profile.d"
    frag_dir.mkdir()
    write_fragment(frag_dir, "00-core", CORE_SRC)
    write_fragment(frag_dir, "10-git", GIT_SRC)
    return tmp_path


@pytest.fixture
def settings(project: Path) -> FragSettings:
    return FragSettings.from_cli(project_root=project)


@pytest.fixture
def runtime(settings: FragSettings, registry: CommandRegistry) -> FragmentRuntime:
    """Runtime over the temp project, without plugins."""
    return FragmentRuntime(settings, registry=registry)


@pytest.fixture
def _isolated_project(project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to the temp project so the CLI picks it up."""
    monkeypatch.chdir(project)


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def write_fragment(directory: Path, name: str, source: str) -> Path:
    """Write ``<name>.py`` into *directory* and return its path."""
    path = directory / f"{name}.py"
    path.write_text(source, encoding="utf-8")
    return path
