"""Registration entries and the idempotent handle that removes them."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(eq=False, slots=True)
class ListenerEntry:
    """One registration. Compared by identity, so the same callable
    registered twice yields two independently removable entries."""

    callback: Callable[..., Any]


class ListenerHandle:
    """Unregister callable returned by ``ScopeNode.on`` and ``on_destroy``.

    The first call runs the removal; every later call is a no-op.
    """

    __slots__ = ("_remove",)

    def __init__(self, remove: Callable[[], None] | None) -> None:
        self._remove = remove

    @classmethod
    def noop(cls) -> ListenerHandle:
        """A handle that has nothing to remove."""
        return cls(None)

    @property
    def consumed(self) -> bool:
        return self._remove is None

    def __call__(self) -> None:
        remove, self._remove = self._remove, None
        if remove is not None:
            remove()

    def __repr__(self) -> str:
        state = "consumed" if self.consumed else "live"
        return f"<ListenerHandle {state}>"


def remove_entry(entries: list[ListenerEntry], entry: ListenerEntry) -> bool:
    """Remove *entry* from *entries* by identity. Returns False if absent."""
    for i, candidate in enumerate(entries):
        if candidate is entry:
            del entries[i]
            return True
    return False
