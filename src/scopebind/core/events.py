"""Dispatch records produced by ``emit`` and ``broadcast``.

These are Pydantic models so they can be logged or serialised as-is; the
raw exception is kept on ``HandlerFailure`` but excluded from dumps.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from .enums import Direction


def _short_id() -> str:
    return uuid.uuid4().hex[:8]


def _now() -> datetime:
    return datetime.now(timezone.utc)


class HandlerFailure(BaseModel):
    """A handler raised while an event was being dispatched."""

    model_config = {"arbitrary_types_allowed": True}

    scope_id: str
    event_name: str
    error_type: str
    message: str
    exception: BaseException = Field(exclude=True, repr=False)

    @classmethod
    def from_exception(
        cls, scope_id: str, event_name: str, exc: BaseException,
    ) -> HandlerFailure:
        return cls(
            scope_id=scope_id,
            event_name=event_name,
            error_type=type(exc).__name__,
            message=str(exc),
            exception=exc,
        )


class ScopeEvent(BaseModel):
    """Outcome of one emit or broadcast."""

    event_id: str = Field(default_factory=_short_id)
    timestamp: datetime = Field(default_factory=_now)
    name: str
    payload: Any = None
    direction: Direction
    target_id: str  # scope the dispatch started from
    stopped: bool = False
    handlers_invoked: int = 0
    scopes_visited: int = 0
    failures: list[HandlerFailure] = Field(default_factory=list)

    @property
    def failed(self) -> bool:
        return bool(self.failures)
