"""ScaffoldService: create new fragment files from a skeleton."""

from __future__ import annotations

import re

from fragctl.services.base import BaseService
from fragctl.services.result import ErrorCode, ServiceResult

_NAME_RE = re.compile(r"^[A-Za-z0-9][\w.-]*$")

FRAGMENT_TEMPLATE = '''\
"""{description}"""

# Fragments load in file-name order; the numeric prefix places this one.
# Declare what it exposes through the ``fragment`` handle, for example:
#
#     @fragment.function
#     def {function}(*args):
#         return " ".join(args)
#
#     fragment.alias("{alias}", "{function}")
#     fragment.variable("{variable}", "value")
#
# Fragments this one needs go in fragctl.toml:
#
#     [fragments.overrides."{name}"]
#     dependencies = ["00-core"]
'''


class ScaffoldService(BaseService):
    """Fragment file creation."""

    def new_fragment(
        self,
        name: str,
        *,
        description: str | None = None,
        force: bool = False,
    ) -> ServiceResult:
        """Write ``<fragment root>/<name>.py`` from :data:`FRAGMENT_TEMPLATE`.

        *name* may carry the ``.py`` suffix. An existing file is only
        replaced with *force*.
        """
        stem = name.removesuffix(".py")
        if not _NAME_RE.match(stem) or stem.endswith("."):
            return self._error(
                "new_fragment",
                ErrorCode.INVALID_NAME,
                f"Invalid fragment name {name!r}: use letters, digits, '-', '_' or '.'",
            )

        root = self._runtime.settings.fragment_root
        path = root / f"{stem}.py"
        if path.exists() and not force:
            return self._error(
                "new_fragment",
                ErrorCode.ALREADY_EXISTS,
                f"Fragment {stem!r} already exists at {path}",
                detail={"path": str(path)},
            )

        function = _identifier(stem)
        source = FRAGMENT_TEMPLATE.format(
            name=stem,
            description=(description or f"{stem} profile fragment.").replace('"""', "'''"),
            function=function,
            alias=function[:2],
            variable=function.upper(),
        )
        try:
            root.mkdir(parents=True, exist_ok=True)
            path.write_text(source, encoding="utf-8")
        except OSError as exc:
            return self._error("new_fragment", ErrorCode.WRITE_FAILED, str(exc))

        self._runtime.path_cache.invalidate(path)
        return self._ok("new_fragment", {"name": stem, "path": str(path)})


def _identifier(stem: str) -> str:
    """``30-docker-tools`` -> ``docker_tools``."""
    words = re.sub(r"^\d+[-_.]*", "", stem)
    ident = re.sub(r"\W+", "_", words).strip("_").lower()
    if not ident or ident[0].isdigit():
        ident = f"fragment_{ident}".rstrip("_")
    return ident
