"""Ties a listener on a long-lived scope to the lifetime of a short-lived one.

``bind_dependent_listener`` registers *handler* on *source* and arranges for
it to be removed exactly once, by whichever happens first:

*  the dependent scope is destroyed,
*  the source scope is destroyed,
*  the caller invokes the returned ``Subscription``.

Removal failures never escape; they go to the injected ``IErrorReporter``
with ``{"error": exc, "event_name": name}`` and cleanup carries on.
"""

from __future__ import annotations

import logging

from scopebind.binding.subscription import Subscription
from scopebind.core.enums import SourcePolicy
from scopebind.core.errors import BindOnDestroyedSourceError, ConfigError
from scopebind.core.interfaces import IErrorReporter
from scopebind.observability.metrics import SUBSCRIPTIONS_BOUND
from scopebind.scope.node import Handler, ScopeNode, validate_event_name

logger = logging.getLogger(__name__)


class SubscriptionBinder:
    """Binds listener cleanup to scope destruction.

    Parameters
    ----------
    reporter
        Receives unregister failures.
    root
        Source used when ``bind_dependent_listener`` is called without one.
    source_policy
        ``NOOP`` (default) hands back an inert subscription when the source
        is already destroyed; ``RAISE`` raises
        ``BindOnDestroyedSourceError`` instead.
    """

    def __init__(
        self,
        reporter: IErrorReporter,
        root: ScopeNode | None = None,
        *,
        source_policy: SourcePolicy = SourcePolicy.NOOP,
    ) -> None:
        self._reporter = reporter
        self._root = root
        self._source_policy = SourcePolicy(source_policy)

    @property
    def source_policy(self) -> SourcePolicy:
        return self._source_policy

    def bind_dependent_listener(
        self,
        dependent: ScopeNode,
        event_name: str,
        handler: Handler,
        source: ScopeNode | None = None,
    ) -> Subscription:
        """Listen for *event_name* on *source* until *dependent* is destroyed.

        Returns the subscription; calling it unregisters early and is safe
        to repeat.
        """
        validate_event_name(event_name)
        if source is None:
            source = self._root
        if source is None:
            raise ConfigError("No source scope given and the binder has no root")

        if source.destroyed:
            if self._source_policy is SourcePolicy.RAISE:
                raise BindOnDestroyedSourceError(source.scope_id, event_name)
            logger.debug(
                "Source scope %s already destroyed; %s not bound",
                source.scope_id,
                event_name,
            )
            return Subscription.noop(event_name)

        subscription = Subscription(
            event_name, source.on(event_name, handler), self._reporter,
        )
        SUBSCRIPTIONS_BOUND.inc()

        if dependent.destroyed:
            # No destroy event will ever come; release right away.
            subscription()
            return subscription

        subscription.add_release(dependent.on_destroy(subscription))
        if source is not dependent:
            subscription.add_release(source.on_destroy(subscription))
        return subscription
