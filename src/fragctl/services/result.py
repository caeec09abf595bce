"""ServiceResult: what every CLI-facing operation hands back.

Failures the CLI can expect (a required fragment failing, an unknown
command, an unreadable snapshot) are results with an :class:`ErrorCode`,
not exceptions.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class ErrorCode(StrEnum):
    """Machine-readable failure codes carried in ``ServiceError.code``."""

    REQUIRED_FRAGMENT_FAILED = "REQUIRED_FRAGMENT_FAILED"
    UNKNOWN_COMMAND = "UNKNOWN_COMMAND"
    COMMAND_FAILED = "COMMAND_FAILED"
    NOT_FOUND = "NOT_FOUND"
    INVALID_SNAPSHOT = "INVALID_SNAPSHOT"
    WRITE_FAILED = "WRITE_FAILED"
    INVALID_NAME = "INVALID_NAME"
    ALREADY_EXISTS = "ALREADY_EXISTS"


class ServiceError(BaseModel):
    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one service operation.

    ``data`` is the operation payload; for ``load`` it is the serialized
    batch result. ``warnings`` collects fragment failures that did not fail
    the operation, plus plugin hook failures.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None

    @property
    def code(self) -> str | None:
        """The error code, or None on success."""
        return self.error.code if self.error else None
