"""Enumerations used across scopebind."""

from enum import Enum


class Direction(str, Enum):
    EMIT = "emit"  # toward the root
    BROADCAST = "broadcast"  # toward every descendant


class Propagation(str, Enum):
    """Return value a handler may use to steer an ``emit``."""

    CONTINUE = "continue"
    STOP = "stop"


class SourcePolicy(str, Enum):
    """What binding against an already-destroyed source does."""

    NOOP = "noop"
    RAISE = "raise"


class HandlerErrorPolicy(str, Enum):
    """Applied once a dispatch with failing handlers has finished."""

    LOG = "log"
    RAISE = "raise"


class LogFormat(str, Enum):
    JSON = "json"
    CONSOLE = "console"
