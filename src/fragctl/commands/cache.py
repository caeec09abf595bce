"""Command group: fragment path cache maintenance."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from fragctl.commands._base import FragGroup

if TYPE_CHECKING:
    from fragctl.commands._context import AppContext


@click.group(
    cls=FragGroup,
    examples="""\
  fragctl cache status
  fragctl cache build
  fragctl cache clear""",
)
def cache() -> None:
    """Inspect, warm, and clear the fragment path cache."""


@cache.command()
@click.pass_obj
def status(app: AppContext) -> None:
    """Validate fragments through the cache and report hit/miss counts."""
    from fragctl.services.cache import CacheService

    app.emit(CacheService(app.runtime).status())


@cache.command()
@click.pass_obj
def build(app: AppContext) -> None:
    """Re-probe every fragment location and memoize it."""
    from fragctl.services.cache import CacheService

    app.emit(CacheService(app.runtime).build())


@cache.command()
@click.pass_obj
def clear(app: AppContext) -> None:
    """Forget every memoized path check."""
    from fragctl.services.cache import CacheService

    app.emit(CacheService(app.runtime).clear())
