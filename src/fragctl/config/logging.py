"""structlog setup shared by every fragctl entry point.

Both structlog loggers (``fragment.outcome``, ``fragment.failed``) and
plain stdlib loggers under ``fragctl.*`` end up in one stderr handler,
rendered either for a console or as JSON lines (``--log-json``).
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

import structlog

# Third-party loggers kept at WARNING even in verbose mode.
_QUIET_LOGGERS: tuple[str, ...] = ("pluggy",)

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]


def _renderer(log_json: bool, stream: TextIO) -> structlog.types.Processor:
    if log_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=stream.isatty())


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
    stream: TextIO | None = None,
) -> None:
    """Route structlog and stdlib logging to *stream* (default: stderr).

    Args:
        verbose: ``fragctl.*`` loggers emit DEBUG; otherwise WARNING and up.
        log_json: One JSON object per line instead of console formatting.
        stream: Output stream, mainly for tests.
    """
    target = stream if stream is not None else sys.stderr

    structlog.configure(
        processors=[
            *_SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(target)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_SHARED_PROCESSORS,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_json, target),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(logging.WARNING)

    logging.getLogger("fragctl").setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
