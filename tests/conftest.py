"""Shared fixtures for the scopebind test suite."""

from __future__ import annotations

from typing import Any

import pytest

from scopebind.binding.binder import SubscriptionBinder
from scopebind.binding.reporting import CollectingErrorReporter
from scopebind.scope.node import ScopeNode


class Recorder:
    """Callable handler that remembers every payload it was called with."""

    def __init__(self, result: Any = None) -> None:
        self.calls: list[Any] = []
        self._result = result

    def __call__(self, payload: Any) -> Any:
        self.calls.append(payload)
        return self._result

    @property
    def count(self) -> int:
        return len(self.calls)


class BrokenUnregisterScope(ScopeNode):
    """Scope whose ``on`` hands back an unregister that always raises."""

    def on(self, event_name, handler):
        super().on(event_name, handler)

        def _broken() -> None:
            raise RuntimeError(f"cannot unregister {event_name}")

        return _broken


# ---------------------------------------------------------------------------
# Trees
# ---------------------------------------------------------------------------

@pytest.fixture
def root() -> ScopeNode:
    return ScopeNode(name="root")


@pytest.fixture
def tree(root: ScopeNode) -> dict[str, ScopeNode]:
    """root -> (a -> (a1, a2), b)"""
    a = root.new_child("a")
    a1 = a.new_child("a1")
    a2 = a.new_child("a2")
    b = root.new_child("b")
    return {"root": root, "a": a, "a1": a1, "a2": a2, "b": b}


# ---------------------------------------------------------------------------
# Binding
# ---------------------------------------------------------------------------

@pytest.fixture
def reporter() -> CollectingErrorReporter:
    return CollectingErrorReporter()


@pytest.fixture
def binder(reporter: CollectingErrorReporter, root: ScopeNode) -> SubscriptionBinder:
    return SubscriptionBinder(reporter, root)


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def make_recorder():
    """Factory for extra ``Recorder`` handlers within one test."""
    return Recorder


@pytest.fixture
def broken_source(root: ScopeNode) -> BrokenUnregisterScope:
    """A child of ``root`` whose unregister functions raise."""
    return BrokenUnregisterScope(root, name="broken")
