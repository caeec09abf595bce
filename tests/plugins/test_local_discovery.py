"""Tests for local directory plugin discovery in PluginManager."""

from __future__ import annotations

import sys
from pathlib import Path

from fragctl.plugins.manager import LOCAL_MODULE_PREFIX, PluginManager

_VALID_PLUGIN_SRC = """\
import pluggy

hookimpl = pluggy.HookimplMarker("fragctl")


class DockerCapability:
    \"\"\"Reports docker as present.\"\"\"

    @hookimpl
    def has_capability(self, name):
        return True if name == "docker" else None
"""

_SYNTAX_ERROR_SRC = """\
def broken(
"""

_NO_HOOKS_SRC = """\
class PlainClass:
    def hello(self):
        return "world"
"""


class TestLocalDiscovery:
    def test_discovers_local_plugin(self, tmp_path: Path) -> None:
        (tmp_path / "docker.py").write_text(_VALID_PLUGIN_SRC, encoding="utf-8")
        pm = PluginManager()
        pm.discover_and_load(local_dir=tmp_path)
        assert f"{LOCAL_MODULE_PREFIX}docker" in pm.list_plugin_names()
        assert pm.hook.has_capability(name="docker") is True
        assert pm.hook.has_capability(name="podman") is None

    def test_skips_private_and_plain_files(self, tmp_path: Path) -> None:
        (tmp_path / "_private.py").write_text(_VALID_PLUGIN_SRC, encoding="utf-8")
        (tmp_path / "plain.py").write_text(_NO_HOOKS_SRC, encoding="utf-8")
        pm = PluginManager()
        pm.discover_and_load(local_dir=tmp_path)
        names = pm.list_plugin_names()
        assert f"{LOCAL_MODULE_PREFIX}_private" not in names
        assert f"{LOCAL_MODULE_PREFIX}plain" not in names

    def test_broken_plugin_is_skipped(self, tmp_path: Path) -> None:
        (tmp_path / "broken.py").write_text(_SYNTAX_ERROR_SRC, encoding="utf-8")
        (tmp_path / "ok.py").write_text(_VALID_PLUGIN_SRC, encoding="utf-8")
        pm = PluginManager()
        pm.discover_and_load(local_dir=tmp_path)
        assert f"{LOCAL_MODULE_PREFIX}ok" in pm.list_plugin_names()
        assert f"{LOCAL_MODULE_PREFIX}broken" not in sys.modules

    def test_missing_dir(self, tmp_path: Path) -> None:
        pm = PluginManager()
        pm.discover_and_load(local_dir=tmp_path / "nope")
        assert pm.is_loaded is True
