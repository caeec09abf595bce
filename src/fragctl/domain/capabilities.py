"""Capability presence model used by dependency checks.

A dependency name resolves to a :class:`Capability` when something in the
environment provides it: a callable or alias in the shared namespace, a
previously loaded fragment, or an importable module. Providers are small
objects implementing :class:`CapabilityProvider`; the dependency checker
never introspects the namespace itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol, runtime_checkable


class CapabilityKind(StrEnum):
    CALLABLE = "callable"
    ALIAS = "alias"
    LOADED_FRAGMENT = "loaded_fragment"
    MODULE = "module"
    EXTERNAL = "external"


@dataclass(frozen=True)
class Capability:
    """Something present in the environment under a dependency name."""

    name: str
    kind: CapabilityKind
    source: str | None = None


@runtime_checkable
class CapabilityProvider(Protocol):
    """Looks up a dependency name; returns None when it is not present."""

    def find(self, name: str) -> Capability | None: ...
