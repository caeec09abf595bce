"""Memoized existence/type checks for fragment locations.

The cache is an optimization only. A backend that is missing or fails is
bypassed with a direct filesystem probe, so callers observe the same
answers either way and only latency differs.
"""

from __future__ import annotations

import logging
import os
import stat
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from fragctl.domain.types import PathKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PathInfo:
    """Resolved existence and kind of a filesystem location."""

    exists: bool
    kind: PathKind

    @property
    def is_file(self) -> bool:
        return self.kind is PathKind.FILE

    @property
    def is_directory(self) -> bool:
        return self.kind is PathKind.DIRECTORY


MISSING = PathInfo(exists=False, kind=PathKind.MISSING)


def probe(path: str | os.PathLike[str]) -> PathInfo:
    """Check *path* directly on the filesystem.

    Invalid paths (embedded NUL, names that are too long, wrong types)
    resolve to :data:`MISSING` rather than raising.
    """
    try:
        mode = os.stat(path).st_mode
    except (OSError, ValueError, TypeError):
        return MISSING
    if stat.S_ISDIR(mode):
        return PathInfo(exists=True, kind=PathKind.DIRECTORY)
    if stat.S_ISREG(mode):
        return PathInfo(exists=True, kind=PathKind.FILE)
    # Sockets, FIFOs, devices: present, but never a loadable fragment.
    return PathInfo(exists=True, kind=PathKind.MISSING)


class CacheBackend(Protocol):
    """Storage for memoized :class:`PathInfo` values."""

    def get(self, key: str) -> PathInfo | None: ...

    def set(self, key: str, value: PathInfo) -> None: ...

    def delete(self, key: str) -> None: ...

    def clear(self) -> None: ...

    def __len__(self) -> int: ...


class MemoryCacheBackend:
    """Process-local, lock-protected dictionary backend."""

    def __init__(self) -> None:
        self._data: dict[str, PathInfo] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> PathInfo | None:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: PathInfo) -> None:
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)


class PathCache:
    """Resolve fragment locations, memoizing per distinct normalized path.

    Parameters:
        backend: Cache storage. ``None`` means the caching service is
            unavailable and every lookup probes the filesystem.
        enabled: Cache mode. When False, lookups always probe directly.
    """

    def __init__(
        self,
        backend: CacheBackend | None = None,
        *,
        enabled: bool = True,
    ) -> None:
        self._backend = backend
        self._enabled = enabled
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    @property
    def enabled(self) -> bool:
        """Whether lookups are actually served from a backend."""
        return self._enabled and self._backend is not None

    def resolve(self, path: str | os.PathLike[str], *, use_cache: bool = True) -> PathInfo:
        """Return existence and kind for *path*."""
        key = _normalize(path)
        if key is None:
            return MISSING
        if not (use_cache and self.enabled):
            return probe(key)

        cached = self._backend_get(key)
        if cached is not None:
            with self._lock:
                self._hits += 1
            return cached

        info = probe(key)
        with self._lock:
            self._misses += 1
        self._backend_set(key, info)
        return info

    def warm(self, paths: Iterable[str | os.PathLike[str]]) -> int:
        """Resolve every path in *paths*, populating the cache. Returns the count."""
        count = 0
        for path in paths:
            self.invalidate(path)
            self.resolve(path)
            count += 1
        return count

    def invalidate(self, path: str | os.PathLike[str]) -> None:
        """Forget any memoized answer for *path*."""
        key = _normalize(path)
        if key is None or self._backend is None:
            return
        try:
            self._backend.delete(key)
        except Exception:
            logger.debug("Path cache backend delete failed for %s", key, exc_info=True)

    def clear(self) -> None:
        """Drop every memoized answer and reset hit/miss counters."""
        with self._lock:
            self._hits = 0
            self._misses = 0
        if self._backend is None:
            return
        try:
            self._backend.clear()
        except Exception:
            logger.debug("Path cache backend clear failed", exc_info=True)

    def stats(self) -> dict[str, int | bool]:
        entries = 0
        if self._backend is not None:
            try:
                entries = len(self._backend)
            except Exception:
                logger.debug("Path cache backend size unavailable", exc_info=True)
        with self._lock:
            return {
                "enabled": self.enabled,
                "entries": entries,
                "hits": self._hits,
                "misses": self._misses,
            }

    # ------------------------------------------------------------------
    # Backend access with direct-probe fallback
    # ------------------------------------------------------------------

    def _backend_get(self, key: str) -> PathInfo | None:
        assert self._backend is not None
        try:
            return self._backend.get(key)
        except Exception:
            logger.debug("Path cache backend unavailable, probing %s directly", key, exc_info=True)
            return None

    def _backend_set(self, key: str, info: PathInfo) -> None:
        assert self._backend is not None
        try:
            self._backend.set(key, info)
        except Exception:
            logger.debug("Path cache backend rejected %s", key, exc_info=True)


def _normalize(path: str | os.PathLike[str]) -> str | None:
    try:
        raw = os.fspath(path)
    except TypeError:
        return None
    if not isinstance(raw, str) or not raw.strip():
        return None
    return os.path.normpath(raw)
