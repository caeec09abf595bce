"""Fragment validation: is the location well-formed, and does it exist?

Validation never raises. Anything malformed or missing is simply invalid:
blank roots, empty or whitespace-only segments, absolute segments that
would escape the root, embedded NUL bytes, names too long for the
filesystem, wrong kind, or a file extension outside the accepted set.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from fragctl.domain.descriptor import FragmentDescriptor
from fragctl.domain.types import PathKind
from fragctl.infrastructure.path_cache import PathCache, PathInfo, probe

DEFAULT_EXTENSIONS: tuple[str, ...] = (".py",)

logger = logging.getLogger(__name__)


def _is_text(value: object) -> bool:
    return isinstance(value, str) and bool(value.strip())


class FragmentValidator:
    """Check descriptor shape and target existence.

    Parameters:
        path_cache: Used when the descriptor allows cached path checks.
            Without one, every check probes the filesystem.
        extensions: Accepted fragment file suffixes. Empty accepts any.
    """

    def __init__(
        self,
        path_cache: PathCache | None = None,
        *,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    ) -> None:
        self._cache = path_cache
        self._extensions = tuple(e.lower() for e in extensions)

    @property
    def extensions(self) -> tuple[str, ...]:
        return self._extensions

    def validate_shape(self, descriptor: FragmentDescriptor) -> bool:
        """Whether the descriptor's location fields are well-formed."""
        if descriptor.segments is not None:
            if not _is_text(descriptor.root):
                return False
            if not descriptor.segments:
                return False
            for segment in descriptor.segments:
                if not _is_text(segment) or "\x00" in segment:
                    return False
                if Path(segment).is_absolute():
                    return False
            return "\x00" not in (descriptor.root or "")
        if descriptor.path is not None:
            return _is_text(descriptor.path) and "\x00" not in descriptor.path
        return False

    def compose_path(self, descriptor: FragmentDescriptor) -> Path | None:
        """Join the location into a single path, or None if malformed."""
        if not self.validate_shape(descriptor):
            return None
        try:
            if descriptor.segments is not None:
                assert descriptor.root is not None
                return Path(descriptor.root).joinpath(*descriptor.segments)
            assert descriptor.path is not None
            return Path(descriptor.path)
        except (TypeError, ValueError):
            return None

    def resolve(
        self,
        descriptor: FragmentDescriptor,
        *,
        expect: PathKind = PathKind.FILE,
    ) -> Path | None:
        """The composed path if it exists with the expected kind, else None."""
        path = self.compose_path(descriptor)
        if path is None:
            return None
        info = self._probe(path, use_cache=descriptor.cache_paths)
        if not info.exists or info.kind is not expect:
            return None
        if expect is PathKind.FILE and not self._extension_ok(path):
            logger.debug("Rejecting %s: extension not in %s", path, self._extensions)
            return None
        return path

    def validate(
        self,
        descriptor: FragmentDescriptor,
        *,
        expect: PathKind = PathKind.FILE,
    ) -> bool:
        """True iff the descriptor is well-formed and its target exists."""
        return self.resolve(descriptor, expect=expect) is not None

    def _probe(self, path: Path, *, use_cache: bool) -> PathInfo:
        if self._cache is not None:
            return self._cache.resolve(path, use_cache=use_cache)
        return probe(path)

    def _extension_ok(self, path: Path) -> bool:
        if not self._extensions:
            return True
        return path.suffix.lower() in self._extensions
