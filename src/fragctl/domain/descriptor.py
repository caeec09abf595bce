"""Fragment descriptors and load outcomes.

A :class:`FragmentDescriptor` identifies one loadable unit. It is allowed to
describe something invalid (empty segments, blank root); rejecting those is
the validator's job, not the model's, so the loader can report them as
``invalid_descriptor`` outcomes instead of construction errors.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import PurePath
from types import MappingProxyType
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field

from fragctl.domain.types import LoadErrorKind, LoadState


def _fspath(value: Any) -> Any:
    if isinstance(value, os.PathLike):
        return os.fspath(value)
    return value


def _fspath_all(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return tuple(_fspath(v) for v in value)
    return value


PathStr = Annotated[str, BeforeValidator(_fspath)]


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class FragmentDescriptor(BaseModel):
    """Identifies one loadable fragment.

    Two location shapes are supported: ``root`` plus ordered ``segments``
    beneath it, or a single pre-resolved ``path``. When both are given the
    root/segments form wins.

    Attributes:
        root: Fragment root directory.
        segments: Path segments joined beneath *root*.
        path: Single resolved path (alternative to root/segments).
        context: Human-readable label used in results and diagnostics.
        name: Fragment name recorded as the owner of registered commands.
            Defaults to the file stem.
        required: Escalate a final failure to the caller as an exception.
        dependencies: Capabilities that must already be present.
        retries: Extra execution attempts for transient failures.
        cache_paths: Route existence checks through the path cache.
    """

    model_config = {"frozen": True}

    root: PathStr | None = None
    segments: Annotated[tuple[str, ...] | None, BeforeValidator(_fspath_all)] = None
    path: PathStr | None = None
    context: str | None = None
    name: str | None = None
    required: bool = False
    dependencies: tuple[str, ...] = ()
    retries: int = Field(default=0, ge=0)
    cache_paths: bool = True

    @classmethod
    def at(cls, path: str | os.PathLike[str], **kwargs: Any) -> FragmentDescriptor:
        """Descriptor for a single pre-resolved path."""
        return cls(path=path, **kwargs)

    @classmethod
    def under(
        cls,
        root: str | os.PathLike[str],
        *segments: str,
        **kwargs: Any,
    ) -> FragmentDescriptor:
        """Descriptor for *segments* joined beneath *root*."""
        return cls(root=root, segments=segments, **kwargs)

    @property
    def has_location(self) -> bool:
        """Whether any location field was supplied at all."""
        return self.root is not None or self.segments is not None or self.path is not None

    @property
    def fragment_name(self) -> str | None:
        """Owner name for registry entries: explicit name, else the file stem."""
        if self.name and self.name.strip():
            return self.name.strip()
        leaf: str | None = None
        if self.segments:
            leaf = self.segments[-1]
        elif self.path:
            leaf = self.path
        if not leaf or not leaf.strip():
            return None
        stem = PurePath(leaf.strip()).stem
        return stem or None

    @property
    def label(self) -> str | None:
        """Context label, falling back to the fragment name."""
        if self.context and self.context.strip():
            return self.context
        return self.fragment_name


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LoadError:
    """Structured failure: kind, message, and the originating exception."""

    kind: LoadErrorKind
    message: str
    exception: BaseException | None = field(default=None, compare=False, repr=False)

    @property
    def retryable(self) -> bool:
        return self.kind.retryable

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"kind": str(self.kind), "message": self.message}
        if self.exception is not None:
            data["exception"] = type(self.exception).__name__
        return data


@dataclass(frozen=True)
class LoadOutcome:
    """Result of attempting to load one fragment (final attempt only)."""

    ok: bool
    context: str
    fragment: str | None = None
    state: LoadState = LoadState.NOT_STARTED
    error: LoadError | None = None
    attempts: int = 0
    timestamp: str = field(default_factory=_now_iso)

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "context": self.context,
            "fragment": self.fragment,
            "state": str(self.state),
            "attempts": self.attempts,
            "error": self.error.to_dict() if self.error else None,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class BatchResult:
    """Aggregate of one batch load.

    ``results`` holds an outcome for every *attempted* descriptor. Descriptors
    that were never attempted because ``stop_on_error`` tripped are absent
    from ``results`` and listed in ``skipped`` instead.
    """

    results: Mapping[str, LoadOutcome] = field(default_factory=dict)
    failed: tuple[str, ...] = ()
    skipped: tuple[str, ...] = ()
    success_count: int = 0
    failure_count: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "results", MappingProxyType(dict(self.results)))

    @property
    def ok(self) -> bool:
        return self.failure_count == 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "success_count": self.success_count,
            "failure_count": self.failure_count,
            "failed": list(self.failed),
            "skipped": list(self.skipped),
            "results": {label: outcome.to_dict() for label, outcome in self.results.items()},
        }
