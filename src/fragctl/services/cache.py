"""CacheService: inspect, warm, and clear the fragment path cache."""

from __future__ import annotations

from fragctl.services.base import BaseService
from fragctl.services.result import ServiceResult


class CacheService(BaseService):
    """Path cache maintenance."""

    def status(self) -> ServiceResult:
        """Validate every discovered fragment through the cache, then report."""
        validator = self._runtime.validator
        valid = sum(1 for d in self._runtime.discover() if validator.validate(d))
        data = dict(self._runtime.path_cache.stats())
        data["fragments_valid"] = valid
        return self._ok("cache_status", data)

    def build(self) -> ServiceResult:
        """Re-probe and memoize every discovered fragment location."""
        cache = self._runtime.path_cache
        validator = self._runtime.validator
        paths = [validator.compose_path(d) for d in self._runtime.discover()]
        warmed = cache.warm(p for p in paths if p is not None)
        data = dict(cache.stats())
        data["warmed"] = warmed
        return self._ok("cache_build", data)

    def clear(self) -> ServiceResult:
        cache = self._runtime.path_cache
        cache.clear()
        return self._ok("cache_clear", dict(cache.stats()))
