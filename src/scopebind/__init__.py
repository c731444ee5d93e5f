"""scopebind: scope trees with leak-free dependent listener bindings."""

from scopebind.binding import (
    CollectingErrorReporter,
    LoggingErrorReporter,
    ScopeToolbox,
    Subscription,
    SubscriptionBinder,
)
from scopebind.core.enums import HandlerErrorPolicy, Propagation, SourcePolicy
from scopebind.core.events import HandlerFailure, ScopeEvent
from scopebind.scope import DispatchOptions, ListenerHandle, ScopeNode

__version__ = "0.1.0"

__all__ = [
    "CollectingErrorReporter",
    "DispatchOptions",
    "HandlerErrorPolicy",
    "HandlerFailure",
    "ListenerHandle",
    "LoggingErrorReporter",
    "Propagation",
    "ScopeEvent",
    "ScopeNode",
    "ScopeToolbox",
    "SourcePolicy",
    "Subscription",
    "SubscriptionBinder",
]
