"""CommandService: introspection of the command registry.

Each CLI invocation is a fresh process, so the registry is populated first:
either by loading the configured fragments (as a session start would) or
from a previously exported snapshot.
"""

from __future__ import annotations

import re
from pathlib import Path

from fragctl.domain.types import CommandKind
from fragctl.services.base import BaseService
from fragctl.services.result import ErrorCode, ServiceResult

_WRAPPER_NAME_RE = re.compile(r"^[A-Za-z0-9_][\w.-]*$")

WRAPPER_TEMPLATE = """\
#!/bin/sh
# Generated by fragctl from fragment {fragment}.
exec fragctl call {name} "$@"
"""


class CommandService(BaseService):
    """Registry queries, statistics, export and import."""

    def populate(self, snapshot: Path | None = None) -> ServiceResult | None:
        """Fill the registry; returns an error result if the snapshot is unusable."""
        if snapshot is None:
            self._runtime.load_fragments()
            return None
        if not self._runtime.registry.import_from(snapshot):
            return self._error(
                "import_registry",
                ErrorCode.INVALID_SNAPSHOT,
                f"Cannot import registry snapshot {snapshot}",
            )
        return None

    def list_commands(self, *, fragment: str | None = None) -> ServiceResult:
        registry = self._runtime.registry
        entries = registry.entries()
        if fragment is not None:
            entries = [e for e in entries if e.fragment == fragment]
        items = [
            {
                "name": e.name,
                "fragment": e.fragment,
                "type": e.kind,
                "target": e.target,
            }
            for e in entries
        ]
        return self._ok("list_commands", {"items": items, "count": len(items)})

    def show(self, name: str) -> ServiceResult:
        entry = self._runtime.registry.lookup_entry(name)
        if entry is None:
            return self._error(
                "show_command", ErrorCode.NOT_FOUND, f"No command named {name!r}"
            )
        data = entry.model_dump(by_alias=False)
        data["dependencies"] = list(entry.dependencies)
        return self._ok("show_command", data)

    def commands_for(self, fragment: str) -> ServiceResult:
        names = self._runtime.registry.commands_for(fragment)
        return self._ok(
            "commands_for",
            {"fragment": fragment, "commands": names, "count": len(names)},
        )

    def stats(self) -> ServiceResult:
        stats = self._runtime.registry.stats()
        return self._ok("stats", stats.model_dump(by_alias=True))

    def export(self, output: Path | None = None) -> ServiceResult:
        registry = self._runtime.registry
        if output is None:
            return self._ok(
                "export_registry",
                {"count": len(registry), "registry": registry.export()},
            )
        try:
            registry.export_to(output)
        except OSError as exc:
            return self._error("export_registry", ErrorCode.WRITE_FAILED, str(exc))
        return self._ok("export_registry", {"count": len(registry), "path": str(output)})

    def import_file(self, path: Path, *, merge: bool = False) -> ServiceResult:
        registry = self._runtime.registry
        if not registry.import_from(path, merge=merge):
            return self._error(
                "import_registry",
                ErrorCode.INVALID_SNAPSHOT,
                f"Nothing imported from {path}",
            )
        return self._ok(
            "import_registry",
            {"path": str(path), "merge": merge, "count": len(registry)},
        )

    def write_wrappers(self, directory: Path) -> ServiceResult:
        """Write one executable shell script per function or alias.

        Each script runs ``fragctl call <name>`` with its arguments, so
        fragment commands work from any shell. Variables get no wrapper, nor
        do names that are not safe file names.
        """
        written: list[str] = []
        skipped: list[str] = []
        try:
            directory.mkdir(parents=True, exist_ok=True)
            for entry in self._runtime.registry.entries():
                if entry.kind == CommandKind.VARIABLE or not _WRAPPER_NAME_RE.match(entry.name):
                    skipped.append(entry.name)
                    continue
                script = directory / entry.name
                script.write_text(
                    WRAPPER_TEMPLATE.format(fragment=entry.fragment, name=entry.name),
                    encoding="utf-8",
                )
                script.chmod(0o755)
                written.append(entry.name)
        except OSError as exc:
            return self._error("write_wrappers", ErrorCode.WRITE_FAILED, str(exc))
        return self._ok(
            "write_wrappers",
            {
                "directory": str(directory),
                "commands": written,
                "skipped": skipped,
                "count": len(written),
            },
        )
