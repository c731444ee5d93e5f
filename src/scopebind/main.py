"""Application bootstrap.

Wires settings, logging, metrics, the root scope and the toolbox together.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from .binding.facade import ScopeToolbox
from .binding.reporting import LoggingErrorReporter
from .core.config import Settings, load_settings
from .observability.logger import setup_logging
from .observability.metrics import start_metrics_server
from .scope.node import ScopeNode
from .scope.router import DispatchOptions

logger = logging.getLogger(__name__)


def build_root(settings: Settings) -> ScopeNode:
    """Create the process-wide root scope from *settings*."""
    options = DispatchOptions(error_policy=settings.handler_error_policy)
    return ScopeNode(name=settings.root_name, options=options)


def build_toolbox(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
    *,
    settings: Settings | None = None,
) -> ScopeToolbox:
    """Load config, set up logging, build the root scope and its toolbox."""

    # 1. Load settings
    if settings is None:
        settings = load_settings(config_path=config_path, overrides=overrides)

    # 2. Set up logging
    obs = settings.observability
    setup_logging(level=obs.log_level, format=obs.log_format)

    # 3. Metrics exporter (optional)
    if obs.metrics_port is not None:
        start_metrics_server(obs.metrics_port)

    # 4. Root scope + toolbox
    root = build_root(settings)
    toolbox = ScopeToolbox(
        root,
        LoggingErrorReporter(),
        source_policy=settings.source_policy,
    )

    logger.info(
        "scopebind ready: root=%s source_policy=%s handler_error_policy=%s",
        root.scope_id,
        settings.source_policy.value,
        settings.handler_error_policy.value,
    )
    return toolbox
