"""Command registry: which fragment contributed which name.

INVARIANT: command names are unique; re-registering a name overwrites the
previous entry. That overwrite is what makes reloading a fragment
idempotent.

Serialized layout (``export`` / ``import_data``)::

    {
      "gs": {"fragment": "10-git", "type": "alias", "target": "git_status",
             "registeredAt": "2026-01-01T00:00:00+00:00"},
      ...
    }

An empty registry serializes to ``{}``. Malformed rows met while querying
or importing are skipped and logged (registry corruption), never raised.
"""

from __future__ import annotations

import json
import logging
import threading
from collections import Counter
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from fragctl.domain.types import CommandKind

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class CommandEntry(BaseModel):
    """One registry row. ``fragment`` and ``kind`` may be absent on imported rows."""

    model_config = {"frozen": True, "populate_by_name": True, "extra": "ignore"}

    name: str
    fragment: str | None = None
    kind: str | None = Field(default=None, alias="type")
    target: str | None = None
    dependencies: tuple[str, ...] = ()
    registered_at: str = Field(default_factory=_now_iso, alias="registeredAt")

    def to_record(self) -> dict[str, Any]:
        """Serialized row (without the name, which is the mapping key)."""
        record = self.model_dump(by_alias=True, exclude={"name"}, exclude_none=True)
        if not self.dependencies:
            record.pop("dependencies", None)
        else:
            record["dependencies"] = list(self.dependencies)
        return record


class RegistryStats(BaseModel):
    """Aggregate counts computed from current registry state."""

    model_config = {"frozen": True, "populate_by_name": True}

    total_commands: int = Field(alias="totalCommands")
    fragment_count: int = Field(alias="fragmentCount")
    by_type: dict[str, int] = Field(default_factory=dict, alias="byType")
    by_fragment: dict[str, int] = Field(default_factory=dict, alias="byFragment")


def _row_field(entry: Any, name: str) -> Any:
    """Read *name* from a well-formed entry, a raw mapping, or anything else."""
    if isinstance(entry, Mapping):
        return entry.get(name)
    return getattr(entry, name, None)


def _non_empty(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


class CommandRegistry:
    """Thread-safe mapping of command name to :class:`CommandEntry`.

    A process normally shares one instance (see :func:`default_registry`),
    but the loader receives it by injection so tests can swap in their own.
    """

    def __init__(self) -> None:
        self._entries: dict[str, Any] = {}
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def register(
        self,
        name: str | None,
        fragment: str | None,
        kind: CommandKind | str = CommandKind.FUNCTION,
        target: str | None = None,
        dependencies: Iterable[str] | None = None,
    ) -> bool:
        """Insert or overwrite *name*. Returns False for a blank name or fragment."""
        if not _non_empty(name) or not _non_empty(fragment):
            return False
        assert name is not None
        entry = CommandEntry(
            name=name,
            fragment=fragment,
            kind=str(kind) if kind else None,
            target=target,
            dependencies=tuple(dependencies or ()),
        )
        with self._lock:
            previous = self._entries.get(name)
            self._entries[name] = entry
        owner = _row_field(previous, "fragment")
        if owner is not None and owner != fragment:
            logger.debug("Command %s moved from fragment %s to %s", name, owner, fragment)
        return True

    def unregister(self, name: str) -> bool:
        with self._lock:
            return self._entries.pop(name, None) is not None

    def drop_fragment(self, fragment: str, *, keep: Iterable[str] = ()) -> list[str]:
        """Remove every entry owned by *fragment* except names in *keep*."""
        kept = set(keep)
        with self._lock:
            stale = [
                name
                for name, entry in self._entries.items()
                if name not in kept and _row_field(entry, "fragment") == fragment
            ]
            for name in stale:
                del self._entries[name]
        return sorted(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def lookup_entry(self, name: str) -> CommandEntry | None:
        with self._lock:
            entry = self._entries.get(name)
        if isinstance(entry, CommandEntry):
            return entry
        if entry is not None:
            logger.debug("Skipping malformed registry entry for %s", name)
        return None

    def lookup_fragment(self, name: str) -> str | None:
        entry = self.lookup_entry(name)
        return entry.fragment if entry else None

    def contains(self, name: str) -> bool:
        with self._lock:
            return name in self._entries

    __contains__ = contains

    def commands_for(self, fragment: str) -> list[str]:
        """Sorted names registered by *fragment*; empty when it has none."""
        with self._lock:
            items = list(self._entries.items())
        names: list[str] = []
        for name, entry in items:
            try:
                owner = _row_field(entry, "fragment")
            except Exception:
                logger.debug("Skipping unreadable registry entry %r", name, exc_info=True)
                continue
            if owner == fragment:
                names.append(name)
        return sorted(names)

    def fragments(self) -> list[str]:
        """Sorted names of fragments owning at least one command."""
        with self._lock:
            entries = list(self._entries.values())
        owners = {_non_empty(_row_field(e, "fragment")) for e in entries}
        return sorted(o for o in owners if o)

    def entries(self) -> list[CommandEntry]:
        """Well-formed entries, sorted by name."""
        with self._lock:
            items = sorted(self._entries.items())
        return [e for _, e in items if isinstance(e, CommandEntry)]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def stats(self) -> RegistryStats:
        """Totals and group-bys; rows with blank type/fragment are left out of the groups."""
        with self._lock:
            entries = list(self._entries.values())
        by_type: Counter[str] = Counter()
        by_fragment: Counter[str] = Counter()
        for entry in entries:
            kind = _non_empty(_row_field(entry, "kind") or _row_field(entry, "type"))
            if kind:
                by_type[kind] += 1
            fragment = _non_empty(_row_field(entry, "fragment"))
            if fragment:
                by_fragment[fragment] += 1
        return RegistryStats(
            total_commands=len(entries),
            fragment_count=len(by_fragment),
            by_type=dict(sorted(by_type.items())),
            by_fragment=dict(sorted(by_fragment.items())),
        )

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def export(self) -> dict[str, dict[str, Any]]:
        """Serialize to a plain mapping; ``{}`` when empty."""
        return {entry.name: entry.to_record() for entry in self.entries()}

    def export_json(self, *, indent: int | None = 2) -> str:
        return json.dumps(self.export(), indent=indent, sort_keys=True)

    def export_to(self, path: Path) -> Path:
        """Write the JSON export to *path*, creating parent directories."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.export_json() + "\n", encoding="utf-8")
        return path

    def import_data(self, data: Mapping[str, Any] | str | bytes, *, merge: bool = False) -> bool:
        """Load entries from an export.

        ``merge=False`` replaces the registry wholesale; ``merge=True`` keeps
        existing entries and overwrites same-named ones. Malformed input is a
        no-op returning False.
        """
        parsed = _parse_export(data)
        if parsed is None:
            return False

        imported: dict[str, CommandEntry] = {}
        for name, row in parsed.items():
            entry = _entry_from_row(name, row)
            if entry is not None:
                imported[entry.name] = entry

        if parsed and not imported:
            logger.warning("Registry import contained no usable entries; ignoring")
            return False

        with self._lock:
            if not merge:
                self._entries.clear()
            self._entries.update(imported)
        return True

    def import_from(self, path: Path, *, merge: bool = False) -> bool:
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError:
            logger.warning("Cannot read registry export %s", path, exc_info=True)
            return False
        return self.import_data(raw, merge=merge)


def _parse_export(data: Any) -> Mapping[str, Any] | None:
    if isinstance(data, (str, bytes, bytearray)):
        try:
            data = json.loads(data)
        except (ValueError, RecursionError):
            logger.warning("Registry import is not valid JSON; ignoring")
            return None
    if not isinstance(data, Mapping):
        logger.warning("Registry import must be a mapping, got %s", type(data).__name__)
        return None
    return data


def _entry_from_row(name: Any, row: Any) -> CommandEntry | None:
    if not _non_empty(name) or not isinstance(row, Mapping):
        logger.debug("Skipping malformed registry row %r", name)
        return None
    try:
        return CommandEntry.model_validate({**row, "name": name})
    except ValidationError:
        logger.debug("Skipping invalid registry row %r", name, exc_info=True)
        return None


# ---------------------------------------------------------------------------
# Process default
# ---------------------------------------------------------------------------

_default: CommandRegistry | None = None
_default_lock = threading.Lock()


def default_registry() -> CommandRegistry:
    """The process-wide registry, created on first use."""
    global _default
    with _default_lock:
        if _default is None:
            _default = CommandRegistry()
        return _default


def reset_default_registry() -> None:
    """Discard the process-wide registry (test teardown)."""
    global _default
    with _default_lock:
        _default = None


def is_registered(name: str) -> bool:
    """Whether *name* is in the process registry; False if it was never created."""
    registry = _default
    return registry is not None and registry.contains(name)
