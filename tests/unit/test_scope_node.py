"""Tests for ``scope/node.py``.

Covers:
- listener registration and idempotent removal,
- destroy idempotence, callback ordering and failure isolation,
- cascade to descendants and detachment from the parent,
- tree construction guards.
"""

from __future__ import annotations

import logging

import pytest

from scopebind.core.errors import InvalidEventNameError, ScopeDestroyedError
from scopebind.scope.handles import ListenerHandle
from scopebind.scope.node import ScopeNode


# ---------------------------------------------------------------------------
# Listener registration
# ---------------------------------------------------------------------------

class TestOn:
    def test_emit_invokes_handler_once(self, root: ScopeNode, recorder):
        root.on("ping", recorder)
        root.emit("ping", 1)
        assert recorder.calls == [1]

    def test_unregister_removes_handler(self, root: ScopeNode, recorder):
        unregister = root.on("ping", recorder)
        unregister()
        root.emit("ping", 1)
        assert recorder.calls == []
        assert root.listener_count("ping") == 0

    def test_unregister_is_idempotent(
        self, root: ScopeNode, recorder, make_recorder,
    ):
        other = make_recorder()
        unregister = root.on("ping", recorder)
        root.on("ping", other)

        unregister()
        unregister()
        unregister()

        root.emit("ping", "x")
        assert recorder.calls == []
        assert other.calls == ["x"]

    def test_same_handler_twice_removed_independently(
        self, root: ScopeNode, recorder,
    ):
        first = root.on("ping", recorder)
        root.on("ping", recorder)
        assert root.listener_count("ping") == 2

        first()
        root.emit("ping", 1)
        assert recorder.calls == [1]

    def test_handle_reports_consumed(self, root: ScopeNode, recorder):
        handle = root.on("ping", recorder)
        assert isinstance(handle, ListenerHandle)
        assert not handle.consumed
        handle()
        assert handle.consumed

    def test_listener_count_across_events(self, root: ScopeNode):
        root.on("a", lambda p: None)
        root.on("a", lambda p: None)
        root.on("b", lambda p: None)
        assert root.listener_count() == 3
        assert root.listener_count("a") == 2
        assert root.listener_count("missing") == 0

    @pytest.mark.parametrize("bad", ["", "   ", None, 42])
    def test_invalid_event_name_rejected(self, root: ScopeNode, bad):
        with pytest.raises(InvalidEventNameError):
            root.on(bad, lambda p: None)

    def test_invalid_event_name_is_value_error(self, root: ScopeNode):
        with pytest.raises(ValueError):
            root.emit("", None)

    def test_non_callable_handler_rejected(self, root: ScopeNode):
        with pytest.raises(TypeError):
            root.on("ping", "not callable")

    def test_on_destroyed_scope_is_noop(self, root: ScopeNode, recorder):
        root.destroy()
        handle = root.on("ping", recorder)

        assert handle.consumed
        handle()  # still callable
        assert root.listener_count() == 0
        root.emit("ping", 1)
        assert recorder.calls == []


# ---------------------------------------------------------------------------
# Destroy
# ---------------------------------------------------------------------------

class TestDestroy:
    def test_sets_destroyed(self, root: ScopeNode):
        assert not root.destroyed
        root.destroy()
        assert root.destroyed

    def test_double_destroy_fires_callbacks_once(self, root: ScopeNode):
        fired: list[str] = []
        root.on_destroy(lambda: fired.append("x"))

        root.destroy()
        root.destroy()

        assert fired == ["x"]

    def test_callbacks_run_in_registration_order(self, root: ScopeNode):
        fired: list[int] = []
        for i in range(5):
            root.on_destroy(lambda i=i: fired.append(i))
        root.destroy()
        assert fired == [0, 1, 2, 3, 4]

    def test_failing_callback_does_not_stop_others(self, root: ScopeNode, caplog):
        fired: list[str] = []

        def boom() -> None:
            raise RuntimeError("boom")

        root.on_destroy(lambda: fired.append("before"))
        root.on_destroy(boom)
        root.on_destroy(lambda: fired.append("after"))

        with caplog.at_level(logging.ERROR, logger="scopebind.scope.node"):
            root.destroy()

        assert fired == ["before", "after"]
        assert any("Destroy callback failed" in r.message for r in caplog.records)

    def test_registrations_drained(self, root: ScopeNode):
        root.on("ping", lambda p: None)
        root.on_destroy(lambda: None)
        root.destroy()
        assert root.listener_count() == 0
        assert root.destroy_callback_count == 0

    def test_listeners_not_invoked_after_destroy(
        self, root: ScopeNode, recorder,
    ):
        root.on("ping", recorder)
        root.destroy()
        root.emit("ping", 1)
        root.broadcast("ping", 2)
        assert recorder.calls == []

    def test_removed_destroy_callback_does_not_fire(self, root: ScopeNode):
        fired: list[str] = []
        handle = root.on_destroy(lambda: fired.append("x"))
        handle()
        assert root.destroy_callback_count == 0
        root.destroy()
        assert fired == []

    def test_on_destroy_after_destroy_raises(self, root: ScopeNode):
        root.destroy()
        with pytest.raises(ScopeDestroyedError):
            root.on_destroy(lambda: None)

    def test_callback_registering_on_self_during_destroy(self, root: ScopeNode):
        errors: list[Exception] = []

        def register_more() -> None:
            try:
                root.on_destroy(lambda: None)
            except ScopeDestroyedError as exc:
                errors.append(exc)

        root.on_destroy(register_more)
        root.destroy()
        assert len(errors) == 1
        assert root.destroy_callback_count == 0


# ---------------------------------------------------------------------------
# Cascade
# ---------------------------------------------------------------------------

class TestCascade:
    def test_children_destroyed_before_return(self, tree):
        fired: list[str] = []
        tree["a1"].on_destroy(lambda: fired.append("a1"))
        tree["a2"].on_destroy(lambda: fired.append("a2"))

        tree["a"].destroy()

        assert fired == ["a1", "a2"]
        assert tree["a1"].destroyed
        assert tree["a2"].destroyed
        assert not tree["b"].destroyed
        assert not tree["root"].destroyed

    def test_parent_callbacks_fire_before_children(self, tree):
        fired: list[str] = []
        tree["a"].on_destroy(lambda: fired.append("a"))
        tree["a1"].on_destroy(lambda: fired.append("a1"))
        tree["root"].on_destroy(lambda: fired.append("root"))

        tree["root"].destroy()

        assert fired == ["root", "a", "a1"]

    def test_destroyed_child_detached_from_parent(self, tree):
        tree["a1"].destroy()
        assert tree["a"].children == (tree["a2"],)

    def test_children_cleared(self, tree):
        tree["root"].destroy()
        assert tree["root"].children == ()
        assert tree["a"].children == ()

    def test_all_descendants_destroyed(self, tree):
        tree["root"].destroy()
        assert all(node.destroyed for node in tree.values())

    def test_child_destroying_sibling_during_cascade(self, tree):
        fired: list[str] = []
        tree["a1"].on_destroy(tree["a2"].destroy)
        tree["a2"].on_destroy(lambda: fired.append("a2"))

        tree["a"].destroy()

        assert fired == ["a2"]
        assert tree["a2"].destroyed


# ---------------------------------------------------------------------------
# Tree construction
# ---------------------------------------------------------------------------

class TestTree:
    def test_new_child_links_parent(self, root: ScopeNode):
        child = root.new_child("c")
        assert child.parent is root
        assert root.children == (child,)
        assert child.name == "c"

    def test_children_keep_registration_order(self, root: ScopeNode):
        kids = [root.new_child(str(i)) for i in range(4)]
        assert root.children == tuple(kids)

    def test_child_of_destroyed_parent_rejected(self, root: ScopeNode):
        root.destroy()
        with pytest.raises(ScopeDestroyedError):
            ScopeNode(root)

    def test_child_shares_dispatch_options(self, root: ScopeNode):
        child = root.new_child()
        assert child.options is root.options

    def test_root_and_depth(self, tree):
        assert tree["a1"].root is tree["root"]
        assert tree["a1"].depth == 2
        assert tree["root"].depth == 0

    def test_iter_ancestors(self, tree):
        assert list(tree["a1"].iter_ancestors()) == [tree["a"], tree["root"]]

    def test_iter_descendants_preorder(self, tree):
        names = [n.name for n in tree["root"].iter_descendants()]
        assert names == ["a", "a1", "a2", "b"]

    def test_repr_mentions_name_and_state(self, root: ScopeNode):
        assert "'root'" in repr(root)
        root.destroy()
        assert "destroyed" in repr(root)
