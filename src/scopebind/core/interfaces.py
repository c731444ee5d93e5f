"""Protocol interfaces for the collaborators scopebind consumes.

Tree construction, error reporting and root lookup live outside the core;
these protocols are the seams they plug into.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from scopebind.scope.node import ScopeNode


@runtime_checkable
class IErrorReporter(Protocol):
    """Receives lifecycle bookkeeping failures that must not propagate.

    ``context`` always carries ``error`` (the exception) and ``event_name``.
    """

    def report(self, message: str, context: dict[str, Any]) -> None: ...


@runtime_checkable
class IRootProvider(Protocol):
    """Supplies the process-wide root scope for default bindings."""

    def get_root(self) -> ScopeNode: ...
