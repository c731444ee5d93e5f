"""Subscription lifecycle binding."""

from scopebind.binding.binder import SubscriptionBinder
from scopebind.binding.facade import ScopeToolbox
from scopebind.binding.reporting import CollectingErrorReporter, LoggingErrorReporter
from scopebind.binding.subscription import Subscription

__all__ = [
    "CollectingErrorReporter",
    "LoggingErrorReporter",
    "ScopeToolbox",
    "Subscription",
    "SubscriptionBinder",
]
