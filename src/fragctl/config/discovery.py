"""Locate and read ``fragctl.toml``.

The file is looked up from the working directory towards the filesystem
root, the way git finds ``.git``. ``FRAGCTL_CONFIG`` pins an explicit file
and disables the search.
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Iterator
from pathlib import Path

from fragctl.config.models import FragConfig

CONFIG_FILENAME = "fragctl.toml"
CONFIG_ENV_VAR = "FRAGCTL_CONFIG"


def _search_dirs(start: Path | None) -> Iterator[Path]:
    here = (start or Path.cwd()).resolve()
    yield here
    yield from here.parents


def find_config(start: Path | None = None) -> Path | None:
    """Path of the config file in effect, or None.

    An unset or empty ``FRAGCTL_CONFIG`` falls back to the walk-up search;
    a set one that names no file means "no config".
    """
    pinned = os.environ.get(CONFIG_ENV_VAR)
    if pinned:
        candidate = Path(pinned).expanduser()
        return candidate if candidate.is_file() else None
    return next(
        (d / CONFIG_FILENAME for d in _search_dirs(start) if (d / CONFIG_FILENAME).is_file()),
        None,
    )


def load_config(path: Path | None = None, cwd: Path | None = None) -> FragConfig:
    """Parse and validate the config file; defaults when there is none."""
    source = path if path is not None else find_config(cwd)
    if source is None:
        return FragConfig()
    with source.open("rb") as fh:
        return FragConfig.model_validate(tomllib.load(fh))
