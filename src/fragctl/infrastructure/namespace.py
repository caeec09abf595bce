"""The shared, process-wide namespace fragments contribute to.

Functions and variables are stored by value; aliases store the name of
their target and are resolved on lookup, so an alias keeps following its
target when the target's fragment is reloaded.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from fragctl.domain.types import CommandKind

MAX_ALIAS_DEPTH = 16


@dataclass(frozen=True)
class NamespaceItem:
    """One name in the shared namespace."""

    name: str
    kind: CommandKind
    value: Any = None
    target: str | None = None
    fragment: str | None = None


class Namespace:
    """Thread-safe mapping of names contributed by loaded fragments.

    Also records which fragments have been loaded into it, since a loaded
    fragment is itself a capability other fragments may depend on.
    """

    def __init__(self) -> None:
        self._items: dict[str, NamespaceItem] = {}
        self._loaded: set[str] = set()
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Definitions
    # ------------------------------------------------------------------

    def define(self, item: NamespaceItem) -> None:
        """Insert or replace *item* under its name."""
        with self._lock:
            self._items[item.name] = item

    def define_function(self, name: str, func: Any, *, fragment: str | None = None) -> None:
        if not callable(func):
            msg = f"{name!r} is not callable"
            raise TypeError(msg)
        self.define(NamespaceItem(name, CommandKind.FUNCTION, value=func, fragment=fragment))

    def define_alias(self, name: str, target: str, *, fragment: str | None = None) -> None:
        self.define(NamespaceItem(name, CommandKind.ALIAS, target=target, fragment=fragment))

    def define_variable(self, name: str, value: Any, *, fragment: str | None = None) -> None:
        self.define(NamespaceItem(name, CommandKind.VARIABLE, value=value, fragment=fragment))

    def remove(self, name: str, *, fragment: str | None = None) -> bool:
        """Remove *name*. With *fragment*, only if that fragment owns it."""
        with self._lock:
            item = self._items.get(name)
            if item is None:
                return False
            if fragment is not None and item.fragment != fragment:
                return False
            del self._items[name]
            return True

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, name: str) -> NamespaceItem | None:
        with self._lock:
            return self._items.get(name)

    def resolve(self, name: str) -> Any:
        """Return the value behind *name*, following alias chains.

        Raises:
            KeyError: If *name* (or an alias target) is undefined, or an
                alias chain loops or is too deep.
        """
        seen: list[str] = []
        current = name
        with self._lock:
            while len(seen) <= MAX_ALIAS_DEPTH:
                item = self._items.get(current)
                if item is None:
                    msg = f"{current!r} is not defined"
                    raise KeyError(msg)
                if item.kind is not CommandKind.ALIAS:
                    return item.value
                if item.target is None or item.target in seen or item.target == current:
                    break
                seen.append(current)
                current = item.target
        msg = f"Alias {name!r} does not resolve to a definition"
        raise KeyError(msg)

    def call(self, name: str, *args: Any, **kwargs: Any) -> Any:
        """Resolve *name* and invoke it."""
        target = self.resolve(name)
        if not callable(target):
            msg = f"{name!r} is not callable"
            raise TypeError(msg)
        return target(*args, **kwargs)

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._items)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    # ------------------------------------------------------------------
    # Loaded fragments
    # ------------------------------------------------------------------

    def mark_loaded(self, fragment: str) -> None:
        with self._lock:
            self._loaded.add(fragment)

    def is_loaded(self, fragment: str) -> bool:
        with self._lock:
            return fragment in self._loaded

    def loaded_fragments(self) -> list[str]:
        with self._lock:
            return sorted(self._loaded)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()
            self._loaded.clear()
