"""Structured logging with scope_id support.

Uses structlog for structured logging with JSON or console output. Records
from plain ``logging.getLogger`` loggers go through the same processor chain
via ``structlog.stdlib.ProcessorFormatter``, so they carry the same keys.
While a scope dispatches or is destroyed its id is bound in a context var
and merged into every log entry emitted underneath.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

import structlog

from scopebind.core.enums import LogFormat

_scope_id: ContextVar[str] = ContextVar("scope_id", default="")
_HANDLER_MARK = "_scopebind_handler"


def get_scope_id() -> str:
    """Get the id of the scope currently dispatching or being destroyed."""
    return _scope_id.get()


@contextmanager
def scope_context(scope_id: str) -> Iterator[None]:
    """Bind *scope_id* for the duration of the block."""
    token = _scope_id.set(scope_id)
    try:
        yield
    finally:
        _scope_id.reset(token)


def _add_scope_id(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Structlog processor: add scope_id when one is bound."""
    sid = get_scope_id()
    if sid:
        event_dict.setdefault("scope_id", sid)
    return event_dict


def setup_logging(
    level: str = "INFO",
    format: LogFormat | str = LogFormat.JSON,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        format: "json" for production, "console" for development.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    shared: list[Any] = [
        structlog.contextvars.merge_contextvars,
        _add_scope_id,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if LogFormat(format) == LogFormat.JSON:
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )
    setattr(handler, _HANDLER_MARK, True)

    # Repeated setup replaces our handler instead of stacking another.
    root = logging.getLogger()
    for existing in list(root.handlers):
        if getattr(existing, _HANDLER_MARK, False):
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(log_level)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger for a module."""
    return structlog.get_logger(name)
