"""Root-defaulting entry point for dependent listener bindings."""

from __future__ import annotations

from collections.abc import Callable
from typing import Union

from scopebind.binding.binder import SubscriptionBinder
from scopebind.binding.subscription import Subscription
from scopebind.core.enums import SourcePolicy
from scopebind.core.interfaces import IErrorReporter, IRootProvider
from scopebind.scope.node import Handler, ScopeNode

RootSource = Union[ScopeNode, IRootProvider, Callable[[], ScopeNode]]


def _root_resolver(root: RootSource) -> Callable[[], ScopeNode]:
    if isinstance(root, ScopeNode):
        return lambda: root
    if isinstance(root, IRootProvider):
        return root.get_root
    if callable(root):
        return root
    raise TypeError(
        "root must be a ScopeNode, an IRootProvider or a zero-argument callable"
    )


class ScopeToolbox:
    """Forwards to a ``SubscriptionBinder``, defaulting the source to the
    root scope supplied at construction."""

    def __init__(
        self,
        root: RootSource,
        reporter: IErrorReporter,
        *,
        source_policy: SourcePolicy = SourcePolicy.NOOP,
    ) -> None:
        self._get_root = _root_resolver(root)
        self._binder = SubscriptionBinder(reporter, source_policy=source_policy)

    @property
    def root(self) -> ScopeNode:
        return self._get_root()

    @property
    def binder(self) -> SubscriptionBinder:
        return self._binder

    def bind_dependent_listener(
        self,
        dependent: ScopeNode,
        event_name: str,
        handler: Handler,
        source: ScopeNode | None = None,
    ) -> Subscription:
        if source is None:
            source = self._get_root()
        return self._binder.bind_dependent_listener(
            dependent, event_name, handler, source,
        )
