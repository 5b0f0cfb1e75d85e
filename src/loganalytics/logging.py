"""Diagnostic logging for the Log Analytics client.

Library modules only ever call `get_logger()`; nothing is configured on
import. Applications (and `main.py`) call `configure_logging()` once the
level and format are known. Events are routed through the standard library
so stdlib level filtering applies, and rendered as JSON lines ("json") or
console text ("text").
"""

from __future__ import annotations

import logging
import sys
from typing import IO, TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from structlog.typing import Processor

_handler: logging.Handler | None = None


def _renderer(format: str) -> Processor:
    if format.lower() == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=False)


def configure_logging(level: str = "INFO", format: str = "text", stream: IO[str] | None = None) -> None:
    """Route structlog events to `stream` (stderr by default) at `level`.

    Safe to call again: the handler installed by a previous call is replaced
    and the root level is reset, so the latest settings always win.
    """
    global _handler

    root = logging.getLogger()
    if _handler is not None:
        root.removeHandler(_handler)
    _handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    _handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(_handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
        _renderer(format),
    ]

    # Not cached, so module-level loggers pick up later reconfiguration.
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a lazily-bound structured logger; does not configure anything."""
    return structlog.get_logger(name)  # type: ignore[no-any-return]
