"""Fragment discovery: turn the fragment directory and config into descriptors.

Fragments load in file-name order (``00-core.py`` before ``10-git.py``).
``[fragments].order`` pins names to the front; ``disabled`` removes them.
Names listed in ``order`` that have no file still produce a descriptor, so
the load reports them as not found instead of silently skipping them.
"""

from __future__ import annotations

from pathlib import Path

from fragctl.config.settings import FragSettings
from fragctl.domain.descriptor import FragmentDescriptor


def fragment_files(root: Path, extensions: list[str] | tuple[str, ...]) -> list[Path]:
    """Loadable files directly inside *root*, sorted by name.

    ``_``-prefixed files are private helpers and never loaded as fragments.
    """
    if not root.is_dir():
        return []
    suffixes = {e.lower() for e in extensions}
    return sorted(
        p
        for p in root.iterdir()
        if p.is_file()
        and not p.name.startswith("_")
        and (not suffixes or p.suffix.lower() in suffixes)
    )


def discover_fragments(settings: FragSettings) -> list[FragmentDescriptor]:
    """Descriptors for every enabled fragment, in load order."""
    root = settings.fragment_root
    cfg = settings.fragments
    extensions = settings.loader.extensions
    disabled = set(cfg.disabled)

    by_name: dict[str, str] = {p.stem: p.name for p in fragment_files(root, extensions)}

    ordered: list[str] = []
    for name in cfg.order:
        if name not in ordered:
            ordered.append(name)
    ordered.extend(name for name in by_name if name not in ordered)

    default_ext = extensions[0] if extensions else ""
    return [
        descriptor_for(settings, name, by_name.get(name, f"{name}{default_ext}"))
        for name in ordered
        if name not in disabled
    ]


def descriptor_for(
    settings: FragSettings,
    name: str,
    filename: str | None = None,
) -> FragmentDescriptor:
    """Build the descriptor for fragment *name* from config defaults and overrides."""
    cfg = settings.fragments
    override = cfg.overrides.get(name)
    extensions = settings.loader.extensions
    if filename is None:
        filename = f"{name}{extensions[0] if extensions else ''}"

    required = name in cfg.required
    retries = settings.loader.retries
    dependencies: tuple[str, ...] = ()
    context = name
    if override is not None:
        if override.required is not None:
            required = override.required
        if override.retries is not None:
            retries = override.retries
        dependencies = tuple(override.dependencies)
        context = override.context or name

    return FragmentDescriptor.under(
        settings.fragment_root,
        filename,
        name=name,
        context=context,
        required=required,
        dependencies=dependencies,
        retries=retries,
        cache_paths=settings.cache.enabled,
    )


def find_descriptor(settings: FragSettings, name: str) -> FragmentDescriptor | None:
    """Descriptor for an existing fragment file named *name*, or None."""
    if not name or not name.strip():
        return None
    for path in fragment_files(settings.fragment_root, settings.loader.extensions):
        if path.stem == name or path.name == name:
            return descriptor_for(settings, path.stem, path.name)
    return None
