"""Directional event propagation over a scope tree.

Two directions with deliberately different semantics:

*  **emit** bubbles from the target toward the root. Any handler may return
   ``Propagation.STOP``; the remaining handlers on that scope still run, but
   the event does not move on to the next ancestor.
*  **broadcast** fans out from the target to every descendant, depth-first
   in child-registration order. There is no way to halt it.

The whole route is frozen before the first handler runs: the scopes to visit
and each one's listener list. Handlers that register or unregister listeners,
or create new scopes, only affect later dispatches. A scope destroyed partway
through a dispatch is skipped when the walk reaches it.

Handler failures are isolated per handler and collected on the returned
``ScopeEvent``; the target's ``DispatchOptions`` decide what happens to them.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, NamedTuple

from scopebind.core.enums import Direction, HandlerErrorPolicy, Propagation
from scopebind.core.errors import HandlerDispatchError
from scopebind.core.events import HandlerFailure, ScopeEvent
from scopebind.observability.logger import scope_context
from scopebind.observability.metrics import EVENTS_DISPATCHED, HANDLER_ERRORS

if TYPE_CHECKING:
    from scopebind.scope.node import ScopeNode

logger = logging.getLogger(__name__)


@dataclass
class DispatchOptions:
    """Dispatch behaviour shared by every scope of one tree.

    Parameters
    ----------
    error_policy
        ``LOG`` returns normally after failures; ``RAISE`` raises
        ``HandlerDispatchError`` once the dispatch completes.
    on_handler_error
        Optional callback fired for each failure, e.g. for alerting.
    """

    error_policy: HandlerErrorPolicy = HandlerErrorPolicy.LOG
    on_handler_error: Callable[[HandlerFailure], None] | None = None

    def __post_init__(self) -> None:
        self.error_policy = HandlerErrorPolicy(self.error_policy)


class _RouteStop(NamedTuple):
    scope: ScopeNode
    handlers: list[Callable[[Any], Any]]
    was_destroyed: bool


def emit(target: ScopeNode, name: str, payload: Any = None) -> ScopeEvent:
    """Dispatch *name* on *target*, then on each ancestor in turn."""
    event = ScopeEvent(
        name=name, payload=payload, direction=Direction.EMIT,
        target_id=target.scope_id,
    )

    route = _snapshot_route([target, *target.iter_ancestors()], name)
    for stop in _walk(route, event, target.options):
        if stop:
            event.stopped = True
            break

    _finish(target, event)
    return event


def broadcast(target: ScopeNode, name: str, payload: Any = None) -> ScopeEvent:
    """Dispatch *name* on *target* and on all of its descendants."""
    event = ScopeEvent(
        name=name, payload=payload, direction=Direction.BROADCAST,
        target_id=target.scope_id,
    )

    route = _snapshot_route([target, *target.iter_descendants()], name)
    for _ in _walk(route, event, target.options):
        pass

    _finish(target, event)
    return event


def _snapshot_route(scopes: list[ScopeNode], name: str) -> list[_RouteStop]:
    """Freeze the route and every handler list before any handler runs."""
    return [
        _RouteStop(scope, scope.listeners_snapshot(name), scope.destroyed)
        for scope in scopes
    ]


def _walk(
    route: list[_RouteStop], event: ScopeEvent, options: DispatchOptions,
) -> Iterator[bool]:
    """Dispatch along *route*, yielding whether each stop asked to halt."""
    for stop in route:
        # Destroyed by an earlier handler in this same dispatch.
        if stop.scope.destroyed and not stop.was_destroyed:
            continue
        yield _dispatch_on(stop.scope, stop.handlers, event, options)


def _dispatch_on(
    scope: ScopeNode,
    handlers: list[Callable[[Any], Any]],
    event: ScopeEvent,
    options: DispatchOptions,
) -> bool:
    """Run *handlers* of *scope* for *event*. Returns True if one asked to stop."""
    event.scopes_visited += 1
    if not handlers:
        return False

    stop = False
    with scope_context(scope.scope_id):
        for handler in handlers:
            event.handlers_invoked += 1
            try:
                result = handler(event.payload)
            except Exception as exc:
                _record_failure(scope, event, exc, options)
                continue
            if result is Propagation.STOP:
                if event.direction is Direction.EMIT:
                    stop = True
                else:
                    logger.debug(
                        "Ignoring stop request during broadcast of %s",
                        event.name,
                    )
    return stop


def _record_failure(
    scope: ScopeNode,
    event: ScopeEvent,
    exc: Exception,
    options: DispatchOptions,
) -> None:
    failure = HandlerFailure.from_exception(scope.scope_id, event.name, exc)
    event.failures.append(failure)
    HANDLER_ERRORS.labels(direction=event.direction.value).inc()
    logger.exception(
        "Handler error on event=%s scope=%s direction=%s",
        event.name,
        scope.scope_id,
        event.direction.value,
    )

    callback = options.on_handler_error
    if callback is not None:
        try:
            callback(failure)
        except Exception:
            logger.warning("on_handler_error callback failed", exc_info=True)


def _finish(target: ScopeNode, event: ScopeEvent) -> None:
    EVENTS_DISPATCHED.labels(direction=event.direction.value).inc()
    if event.failures and target.options.error_policy is HandlerErrorPolicy.RAISE:
        raise HandlerDispatchError(event.name, list(event.failures))
