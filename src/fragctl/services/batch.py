"""Batch loading: an ordered collection of fragments, one result summary.

Order is the caller's: descriptors are attempted exactly as given. A batch
never raises for an individual fragment, required or not; required-ness
escalation belongs to single-fragment loading.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from fragctl.domain.descriptor import BatchResult, FragmentDescriptor, LoadError, LoadOutcome
from fragctl.domain.types import LoadErrorKind, LoadState
from fragctl.services.loader import FragmentLoader

logger = logging.getLogger(__name__)


class BatchLoader:
    """Load descriptors in order and aggregate a :class:`BatchResult`."""

    def __init__(
        self,
        loader: FragmentLoader,
        *,
        on_complete: Callable[[BatchResult], None] | None = None,
    ) -> None:
        self._loader = loader
        self._on_complete = on_complete

    def load_all(
        self,
        descriptors: Iterable[FragmentDescriptor | Mapping[str, Any]],
        *,
        stop_on_error: bool = False,
    ) -> BatchResult:
        """Attempt every descriptor (or up to the first failure with *stop_on_error*).

        Descriptors skipped after a failure are absent from ``results`` and
        listed in ``skipped``.
        """
        pending = list(descriptors)
        results: dict[str, LoadOutcome] = {}
        failed: list[str] = []
        skipped: list[str] = []
        successes = 0

        for index, item in enumerate(pending):
            outcome = self._load_one(index, item)
            results[outcome.context] = outcome
            if outcome.ok:
                successes += 1
                continue
            failed.append(outcome.context)
            if stop_on_error:
                skipped = [_label_of(i, rest) for i, rest in enumerate(pending) if i > index]
                logger.debug(
                    "Stopping batch after %s failed; %d not attempted",
                    outcome.context,
                    len(skipped),
                )
                break

        result = BatchResult(
            results=results,
            failed=tuple(failed),
            skipped=tuple(skipped),
            success_count=successes,
            failure_count=len(failed),
        )
        if self._on_complete is not None:
            self._on_complete(result)
        return result

    def _load_one(self, index: int, item: FragmentDescriptor | Mapping[str, Any]) -> LoadOutcome:
        descriptor: FragmentDescriptor
        if isinstance(item, FragmentDescriptor):
            descriptor = item
        else:
            try:
                descriptor = FragmentDescriptor.model_validate(item)
            except ValidationError as exc:
                return _immediate_failure(_label_of(index, item), str(exc), exc)

        if not descriptor.has_location:
            return _immediate_failure(
                _label_of(index, descriptor),
                "Fragment descriptor has no path",
            )
        return self._loader.attempt(descriptor)


def _label_of(index: int, item: FragmentDescriptor | Mapping[str, Any]) -> str:
    if isinstance(item, FragmentDescriptor):
        label = item.label
    elif isinstance(item, Mapping):
        raw = item.get("context") or item.get("name")
        label = raw if isinstance(raw, str) and raw.strip() else None
    else:
        label = None
    return label or f"#{index}"


def _immediate_failure(
    label: str,
    message: str,
    exception: BaseException | None = None,
) -> LoadOutcome:
    return LoadOutcome(
        ok=False,
        context=label,
        state=LoadState.INVALID,
        error=LoadError(LoadErrorKind.INVALID_DESCRIPTOR, message, exception),
    )
