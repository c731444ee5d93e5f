"""Custom exception hierarchy for scopebind."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .events import HandlerFailure


class ScopeBindError(Exception):
    """Base exception for all scopebind errors."""


# --- Configuration ---
class ConfigError(ScopeBindError):
    """Invalid or missing configuration."""


# --- Registration ---
class InvalidEventNameError(ScopeBindError, ValueError):
    """Event names must be non-empty strings."""


# --- Lifecycle ---
class ScopeDestroyedError(ScopeBindError):
    """Operation requires a live scope but the scope is destroyed."""

    def __init__(self, scope_id: str, operation: str):
        self.scope_id = scope_id
        self.operation = operation
        super().__init__(f"Cannot {operation}: scope {scope_id} is destroyed")


class BindOnDestroyedSourceError(ScopeDestroyedError):
    """Binding against a destroyed source under ``SourcePolicy.RAISE``."""

    def __init__(self, scope_id: str, event_name: str):
        self.event_name = event_name
        super().__init__(scope_id, f"bind listener for {event_name!r}")


# --- Dispatch ---
class HandlerDispatchError(ScopeBindError):
    """One or more handlers failed during an emit or broadcast.

    Raised only under ``HandlerErrorPolicy.RAISE`` and only after the whole
    dispatch has completed.
    """

    def __init__(self, event_name: str, failures: list[HandlerFailure]):
        self.event_name = event_name
        self.failures = failures
        super().__init__(
            f"{len(failures)} handler(s) failed while dispatching {event_name!r}"
        )
