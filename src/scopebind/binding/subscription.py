"""Guarded unregister for one bound listener."""

from __future__ import annotations

import logging
from collections.abc import Callable

from scopebind.core.interfaces import IErrorReporter
from scopebind.observability.metrics import SUBSCRIPTIONS_ACTIVE, UNREGISTER_FAILURES

logger = logging.getLogger(__name__)


class Subscription:
    """A listener held on a source scope on behalf of a dependent scope.

    Calling the subscription unregisters the listener. The first call marks
    it consumed *before* attempting removal, so a broken unregister is never
    retried; every later call is a no-op. A failing unregister is reported
    to the injected reporter and never raised.

    Release hooks (the destroy-callback handles the binder placed on the
    dependent and source scopes) run on consumption, whichever trigger got
    there first.
    """

    def __init__(
        self,
        event_name: str,
        unregister: Callable[[], None] | None,
        reporter: IErrorReporter | None = None,
    ) -> None:
        self.event_name = event_name
        self._unregister = unregister
        self._reporter = reporter
        self._releases: list[Callable[[], None]] = []
        if unregister is not None:
            SUBSCRIPTIONS_ACTIVE.inc()

    @classmethod
    def noop(cls, event_name: str) -> Subscription:
        """An already-consumed subscription; calling it does nothing."""
        return cls(event_name, None)

    @property
    def active(self) -> bool:
        return self._unregister is not None

    def add_release(self, release: Callable[[], None]) -> None:
        if self._unregister is None:
            release()
            return
        self._releases.append(release)

    def __call__(self) -> None:
        unregister, self._unregister = self._unregister, None
        if unregister is None:
            return
        SUBSCRIPTIONS_ACTIVE.dec()

        try:
            unregister()
        except Exception as exc:
            UNREGISTER_FAILURES.inc()
            self._report(exc)

        releases, self._releases = self._releases, []
        for release in releases:
            release()

    def _report(self, exc: Exception) -> None:
        context = {"error": exc, "event_name": self.event_name}
        if self._reporter is None:
            logger.error(
                "Failed to unregister listener for %s", self.event_name,
                exc_info=exc,
            )
            return
        try:
            self._reporter.report("Failed to unregister listener", context)
        except Exception:
            logger.warning("Error reporter failed", exc_info=True)

    def __repr__(self) -> str:
        state = "active" if self.active else "consumed"
        return f"<Subscription {self.event_name!r} {state}>"
