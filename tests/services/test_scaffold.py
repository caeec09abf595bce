"""Tests for ScaffoldService fragment creation."""

from __future__ import annotations

from pathlib import Path

import pytest

from fragctl.config.settings import FragSettings
from fragctl.infrastructure.registry import CommandRegistry
from fragctl.services.runtime import FragmentRuntime
from fragctl.services.scaffold import ScaffoldService, _identifier


class TestNewFragment:
    def test_writes_skeleton(self, runtime: FragmentRuntime, project: Path) -> None:
        svc = ScaffoldService(runtime)
        result = svc.new_fragment("30-docker.py", description="Docker helpers")
        assert result.ok
        assert result.data["name"] == "30-docker"
        path = project / "profile.d" / "30-docker.py"
        assert result.data["path"] == str(path)
        source = path.read_text()
        assert source.startswith('"""Docker helpers"""')
        assert "def docker(*args):" in source
        compile(source, str(path), "exec")

    def test_skeleton_loads(self, runtime: FragmentRuntime) -> None:
        assert ScaffoldService(runtime).new_fragment("30-docker").ok
        outcome = runtime.load_fragments().results["30-docker"]
        assert outcome.ok

    def test_existing_needs_force(self, runtime: FragmentRuntime, project: Path) -> None:
        svc = ScaffoldService(runtime)
        result = svc.new_fragment("10-git")
        assert not result.ok
        assert result.error.code == "ALREADY_EXISTS"  # type: ignore[union-attr]
        assert "git_status" in (project / "profile.d" / "10-git.py").read_text()

        assert svc.new_fragment("10-git", force=True).ok
        assert "git_status" not in (project / "profile.d" / "10-git.py").read_text()

    @pytest.mark.parametrize("name", ["", "../escape", "a/b", "-dash", ".hidden", "trailing."])
    def test_invalid_names(self, runtime: FragmentRuntime, name: str) -> None:
        result = ScaffoldService(runtime).new_fragment(name)
        assert not result.ok
        assert result.error.code == "INVALID_NAME"  # type: ignore[union-attr]

    def test_creates_missing_root(self, tmp_path: Path) -> None:
        settings = FragSettings.from_cli(project_root=tmp_path)
        runtime = FragmentRuntime(settings, registry=CommandRegistry())
        assert ScaffoldService(runtime).new_fragment("00-core").ok
        assert (tmp_path / "profile.d" / "00-core.py").is_file()


@pytest.mark.parametrize(
    ("stem", "expected"),
    [
        ("30-docker", "docker"),
        ("40-k8s-tools", "k8s_tools"),
        ("Misc", "misc"),
        ("99", "fragment"),
        ("20-3d", "fragment_3d"),
    ],
)
def test_identifier(stem: str, expected: str) -> None:
    assert _identifier(stem) == expected
