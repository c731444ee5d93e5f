"""Prometheus metrics for scope dispatch and subscription lifecycles."""

from __future__ import annotations

import logging

from prometheus_client import Counter, Gauge, start_http_server

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Dispatch metrics
# ---------------------------------------------------------------------------

EVENTS_DISPATCHED = Counter(
    "scopebind_events_dispatched_total",
    "Total emit/broadcast dispatches",
    ["direction"],
)

HANDLER_ERRORS = Counter(
    "scopebind_handler_errors_total",
    "Handlers that raised during a dispatch",
    ["direction"],
)

# ---------------------------------------------------------------------------
# Lifecycle metrics
# ---------------------------------------------------------------------------

SCOPES_DESTROYED = Counter(
    "scopebind_scopes_destroyed_total",
    "Scopes destroyed, cascades included",
)

SUBSCRIPTIONS_BOUND = Counter(
    "scopebind_subscriptions_bound_total",
    "Dependent listeners bound to a source scope",
)

SUBSCRIPTIONS_ACTIVE = Gauge(
    "scopebind_subscriptions_active",
    "Bound subscriptions not yet released",
)

UNREGISTER_FAILURES = Counter(
    "scopebind_unregister_failures_total",
    "Unregister calls that raised during cleanup",
)


def start_metrics_server(port: int) -> None:
    """Expose the default registry over HTTP on *port*."""
    start_http_server(port)
    logger.info("Metrics server listening on port %d", port)
