"""Scope tree: nodes, listener handles and directional dispatch."""

from scopebind.scope.handles import ListenerHandle
from scopebind.scope.node import ScopeNode
from scopebind.scope.router import DispatchOptions

__all__ = ["DispatchOptions", "ListenerHandle", "ScopeNode"]
