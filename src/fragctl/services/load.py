"""LoadService: load, validate, and invoke fragments for the CLI."""

from __future__ import annotations

from typing import Any

from fragctl.domain.descriptor import FragmentDescriptor
from fragctl.services.base import BaseService
from fragctl.services.result import ErrorCode, ServiceResult


class LoadService(BaseService):
    """Fragment loading operations returning :class:`ServiceResult`."""

    def load(
        self,
        names: list[str] | None = None,
        *,
        stop_on_error: bool | None = None,
        retries: int | None = None,
        required: bool = False,
    ) -> ServiceResult:
        """Load the named fragments (default: all discovered) as one batch.

        With *required*, any failure makes the whole operation fail with
        ``REQUIRED_FRAGMENT_FAILED``, mirroring single-fragment escalation.
        """
        descriptors = self._select(names)
        if retries is not None:
            descriptors = [d.model_copy(update={"retries": retries}) for d in descriptors]

        result = self._runtime.load_fragments(descriptors, stop_on_error=stop_on_error)
        data = result.to_dict()
        data["commands"] = len(self._runtime.registry)

        required_failures = [
            label
            for label, outcome in result.results.items()
            if not outcome.ok
            and (required or _is_required(descriptors, label))
        ]
        if required_failures:
            return self._error(
                "load",
                ErrorCode.REQUIRED_FRAGMENT_FAILED,
                f"Required fragment(s) failed: {', '.join(required_failures)}",
                detail=data,
            )
        warnings = [
            f"{label}: {outcome.error.message}"
            for label, outcome in result.results.items()
            if outcome.error is not None
        ]
        return self._ok("load", data, warnings=warnings)

    def validate(self, names: list[str] | None = None) -> ServiceResult:
        """Check every selected fragment's location without executing it."""
        validator = self._runtime.validator
        items: list[dict[str, Any]] = []
        for descriptor in self._select(names):
            path = validator.compose_path(descriptor)
            items.append(
                {
                    "context": descriptor.label,
                    "path": str(path) if path else None,
                    "valid": validator.validate(descriptor),
                }
            )
        invalid = [item["context"] for item in items if not item["valid"]]
        return self._ok(
            "validate",
            {"items": items, "count": len(items), "invalid": invalid},
        )

    def call(self, name: str, args: list[str]) -> ServiceResult:
        """Load all fragments, then invoke the command *name* with *args*."""
        self._runtime.load_fragments()
        namespace = self._runtime.namespace
        if name not in namespace:
            return self._error(
                "call", ErrorCode.UNKNOWN_COMMAND, f"No command named {name!r}"
            )
        try:
            value = namespace.call(name, *args)
        except Exception as exc:
            return self._error(
                "call",
                ErrorCode.COMMAND_FAILED,
                f"{name} raised {type(exc).__name__}: {exc}",
            )
        return self._ok(
            "call",
            {
                "name": name,
                "fragment": self._runtime.registry.lookup_fragment(name),
                "result": value if isinstance(value, (str, int, float, bool)) else repr(value),
            },
        )

    def _select(self, names: list[str] | None) -> list[FragmentDescriptor]:
        discovered = self._runtime.discover()
        if not names:
            return discovered
        by_name = {d.fragment_name: d for d in discovered}
        selected: list[FragmentDescriptor] = []
        for name in names:
            descriptor = by_name.get(name) or self._runtime.descriptor_for(name)
            if descriptor is None:
                descriptor = FragmentDescriptor.under(
                    self._runtime.settings.fragment_root, name, context=name
                )
            selected.append(descriptor)
        return selected


def _is_required(descriptors: list[FragmentDescriptor], label: str) -> bool:
    return any(d.required and d.label == label for d in descriptors)
