"""Error reporters for lifecycle bookkeeping failures.

``LoggingErrorReporter`` is the production default. ``CollectingErrorReporter``
keeps every report in memory, for tests and diagnostics.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any

from scopebind.observability.logger import get_logger


class LoggingErrorReporter:
    """Writes reports to a structlog logger as structured error entries."""

    def __init__(self, logger: Any = None) -> None:
        self._log = logger if logger is not None else get_logger("scopebind.binding")

    def report(self, message: str, context: dict[str, Any]) -> None:
        error = context.get("error")
        self._log.error(
            message,
            event_name=context.get("event_name"),
            error_type=type(error).__name__ if error is not None else None,
            exc_info=error,
        )


@dataclass
class ReportedFailure:
    """Record of one report received by ``CollectingErrorReporter``."""

    message: str
    event_name: str | None
    error: BaseException | None
    timestamp: float = field(default_factory=time.monotonic)


class CollectingErrorReporter:
    """Keeps reports in memory."""

    def __init__(self) -> None:
        self._reports: list[ReportedFailure] = []

    def report(self, message: str, context: dict[str, Any]) -> None:
        self._reports.append(
            ReportedFailure(
                message=message,
                event_name=context.get("event_name"),
                error=context.get("error"),
            )
        )

    @property
    def reports(self) -> list[ReportedFailure]:
        """Read-only snapshot of the received reports."""
        return list(self._reports)

    def clear(self) -> list[ReportedFailure]:
        """Drain the report list and return all entries."""
        drained = self._reports[:]
        self._reports.clear()
        return drained

    def __len__(self) -> int:
        return len(self._reports)
