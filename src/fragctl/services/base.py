"""BaseService: abstract foundation for the CLI-facing services.

Every service receives a :class:`FragmentRuntime` at construction time and
returns :class:`ServiceResult` from its operations. Loader failures are
values, so services only turn them into results; they never raise to the
CLI.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fragctl.services.result import ErrorCode, ServiceError, ServiceResult

if TYPE_CHECKING:
    from fragctl.services.runtime import FragmentRuntime


class BaseService:
    """Abstract base for service-layer classes.

    Usage::

        class CacheService(BaseService):
            def status(self) -> ServiceResult:
                return self._ok("cache_status", self._runtime.path_cache.stats())
    """

    def __init__(self, runtime: FragmentRuntime) -> None:
        self._runtime = runtime

    def _ok(
        self,
        op: str,
        data: dict[str, Any] | None = None,
        *,
        warnings: list[str] | None = None,
    ) -> ServiceResult:
        return ServiceResult(
            ok=True,
            op=op,
            data=data or {},
            warnings=[*self._runtime.warnings, *(warnings or [])],
        )

    @staticmethod
    def _error(
        op: str,
        code: ErrorCode,
        message: str,
        detail: dict[str, Any] | None = None,
    ) -> ServiceResult:
        return ServiceResult(
            ok=False,
            op=op,
            error=ServiceError(code=code, message=message, detail=detail or {}),
        )
