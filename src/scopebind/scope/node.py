"""Scope tree nodes.

A ``ScopeNode`` owns the destroy cascade of its children, a per-event
listener table and a typed list of destroy-callbacks. Destruction is
idempotent and drains every registration before the cascade reaches the
children, so nothing registered on a node can fire twice.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Iterator
from functools import partial
from typing import Any

from scopebind.core.errors import InvalidEventNameError, ScopeDestroyedError
from scopebind.core.events import ScopeEvent
from scopebind.observability.logger import scope_context
from scopebind.observability.metrics import SCOPES_DESTROYED
from scopebind.scope import router
from scopebind.scope.handles import ListenerEntry, ListenerHandle, remove_entry
from scopebind.scope.router import DispatchOptions

logger = logging.getLogger(__name__)

Handler = Callable[[Any], Any]


def validate_event_name(event_name: str) -> None:
    if not isinstance(event_name, str) or not event_name.strip():
        raise InvalidEventNameError(
            f"event_name must be a non-empty string, got {event_name!r}"
        )


class ScopeNode:
    """A node in the ownership tree.

    Parameters
    ----------
    parent
        Owning scope, or ``None`` for a root. The new node is appended to
        the parent's children. Attaching to a destroyed parent raises
        ``ScopeDestroyedError``.
    name
        Optional label used in logs and ``repr``.
    options
        Dispatch options. Defaults to the parent's (shared tree-wide), or a
        fresh ``DispatchOptions()`` for a root.
    """

    def __init__(
        self,
        parent: ScopeNode | None = None,
        *,
        name: str | None = None,
        options: DispatchOptions | None = None,
    ) -> None:
        if parent is not None and parent.destroyed:
            raise ScopeDestroyedError(parent.scope_id, "attach a child scope")

        self.scope_id: str = uuid.uuid4().hex[:8]
        self.name = name
        self.parent = parent
        if options is None:
            options = parent.options if parent is not None else DispatchOptions()
        self.options = options

        # dict as an ordered set
        self._children: dict[ScopeNode, None] = {}
        self._listeners: dict[str, list[ListenerEntry]] = {}
        self._destroy_callbacks: list[ListenerEntry] = []
        self._destroyed = False

        if parent is not None:
            parent._children[self] = None

    # -- Tree ---------------------------------------------------------------

    def new_child(self, name: str | None = None) -> ScopeNode:
        """Create a child scope sharing this tree's dispatch options."""
        return ScopeNode(self, name=name)

    @property
    def children(self) -> tuple[ScopeNode, ...]:
        return tuple(self._children)

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    @property
    def root(self) -> ScopeNode:
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    @property
    def depth(self) -> int:
        return sum(1 for _ in self.iter_ancestors())

    def iter_ancestors(self) -> Iterator[ScopeNode]:
        """Yield parent, grandparent, ... up to the root."""
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def iter_descendants(self) -> Iterator[ScopeNode]:
        """Yield descendants depth-first, in child-registration order."""
        for child in self.children:
            yield child
            yield from child.iter_descendants()

    # -- Listeners ----------------------------------------------------------

    def on(self, event_name: str, handler: Handler) -> ListenerHandle:
        """Register *handler* for *event_name*.

        Returns an idempotent handle that removes this registration. On a
        destroyed scope nothing is stored and an already-consumed handle is
        returned, since the event can never be dispatched here again.
        """
        validate_event_name(event_name)
        if not callable(handler):
            raise TypeError("handler must be callable")

        if self._destroyed:
            logger.debug(
                "Ignoring listener for %s on destroyed scope %s",
                event_name,
                self.scope_id,
            )
            return ListenerHandle.noop()

        entry = ListenerEntry(handler)
        self._listeners.setdefault(event_name, []).append(entry)
        return ListenerHandle(partial(self._remove_listener, event_name, entry))

    def _remove_listener(self, event_name: str, entry: ListenerEntry) -> None:
        entries = self._listeners.get(event_name)
        if entries is None:
            return
        remove_entry(entries, entry)
        if not entries:
            del self._listeners[event_name]

    def listeners_snapshot(self, event_name: str) -> list[Handler]:
        """Handlers for *event_name*, copied so dispatch can't be disturbed."""
        return [entry.callback for entry in self._listeners.get(event_name, ())]

    def listener_count(self, event_name: str | None = None) -> int:
        if event_name is not None:
            return len(self._listeners.get(event_name, ()))
        return sum(len(entries) for entries in self._listeners.values())

    # -- Dispatch -----------------------------------------------------------

    def emit(self, event_name: str, payload: Any = None) -> ScopeEvent:
        """Dispatch toward the root; a handler may stop it with
        ``Propagation.STOP``."""
        validate_event_name(event_name)
        return router.emit(self, event_name, payload)

    def broadcast(self, event_name: str, payload: Any = None) -> ScopeEvent:
        """Dispatch to this scope and every descendant."""
        validate_event_name(event_name)
        return router.broadcast(self, event_name, payload)

    # -- Lifecycle ----------------------------------------------------------

    def on_destroy(self, callback: Callable[[], Any]) -> ListenerHandle:
        """Register a zero-argument callback fired once when destroyed.

        Raises ``ScopeDestroyedError`` if the scope is already destroyed,
        because the callback could never run.
        """
        if self._destroyed:
            raise ScopeDestroyedError(self.scope_id, "register a destroy callback")
        if not callable(callback):
            raise TypeError("callback must be callable")

        entry = ListenerEntry(callback)
        self._destroy_callbacks.append(entry)
        return ListenerHandle(partial(remove_entry, self._destroy_callbacks, entry))

    @property
    def destroy_callback_count(self) -> int:
        return len(self._destroy_callbacks)

    def destroy(self) -> None:
        """Destroy this scope and, before returning, all of its descendants.

        Destroy-callbacks run in registration order; a failing callback is
        logged and the rest still run. Calling ``destroy`` again is a no-op.
        """
        if self._destroyed:
            return
        self._destroyed = True

        with scope_context(self.scope_id):
            callbacks = self._destroy_callbacks[:]
            self._destroy_callbacks.clear()
            for entry in callbacks:
                try:
                    entry.callback()
                except Exception:
                    logger.exception(
                        "Destroy callback failed on scope %s", self.scope_id,
                    )

            self._listeners.clear()

            for child in self.children:
                child.destroy()
            self._children.clear()

            if self.parent is not None:
                self.parent._children.pop(self, None)

        SCOPES_DESTROYED.inc()
        logger.debug("Scope %s destroyed", self.scope_id)

    def __repr__(self) -> str:
        label = f" {self.name!r}" if self.name else ""
        state = " destroyed" if self._destroyed else ""
        return f"<ScopeNode {self.scope_id}{label}{state}>"
