"""Tests for termframe.store -- reactive state, actions and history."""

from __future__ import annotations

import logging
from typing import Any

import pytest

from termframe.store import ActionContext, DispatchResult, Store


class Recorder:
    """Collects subscriber notifications."""

    def __init__(self) -> None:
        self.calls: list[tuple[Any, Any, str]] = []

    def __call__(self, old: Any, new: Any, path: str) -> None:
        self.calls.append((old, new, path))


def _counter_store(**kwargs: Any) -> Store:
    store = Store({"counter": 0}, **kwargs)

    def incr(ctx: ActionContext, payload: Any) -> None:
        ctx.update_state({"counter": ctx.get_state("counter") + (payload or 1)})

    store.register_action("INCR", incr)
    return store


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


class TestGetState:
    def test_whole_state_is_a_copy(self) -> None:
        store = Store({"a": {"b": 1}})
        snapshot = store.get_state()
        snapshot["a"]["b"] = 99
        assert store.get_state("a.b") == 1

    def test_path_read_is_a_copy(self) -> None:
        store = Store({"items": [1]})
        seen: list[list[int]] = []
        store.subscribe("items", lambda old, new, path: seen.append(new))
        store.get_state("items").append(2)
        assert store.get_state("items") == [1]

        def add(ctx, payload):
            items = ctx.get_state("items")
            items.append(payload)
            ctx.update_state({"items": items})

        store.register_action("ADD", add)
        assert store.dispatch("ADD", 3)
        assert seen == [[1], [1, 3]]

    def test_dotted_path(self) -> None:
        store = Store({"timer": {"elapsed": 5}})
        assert store.get_state("timer.elapsed") == 5

    def test_missing_path_returns_none(self) -> None:
        store = Store({"timer": {"elapsed": 5}})
        assert store.get_state("timer.missing") is None
        assert store.get_state("nope.deeper") is None
        assert store.get_state("timer.elapsed.deeper") is None

    def test_initial_state_is_copied(self) -> None:
        initial = {"a": [1]}
        store = Store(initial)
        initial["a"].append(2)
        assert store.get_state("a") == [1]


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


class TestDispatch:
    def test_unknown_action_fails_without_mutation(self) -> None:
        store = _counter_store()
        result = store.dispatch("NOPE")
        assert result == DispatchResult(False, "Unknown action: NOPE")
        assert not result
        assert store.get_state() == {"counter": 0}
        assert store.history == ()

    def test_successful_dispatch_updates_state(self) -> None:
        store = _counter_store()
        result = store.dispatch("INCR")
        assert result.success
        assert result.error is None
        assert store.get_state("counter") == 1

    def test_payload_is_passed(self) -> None:
        store = _counter_store()
        store.dispatch("INCR", 5)
        assert store.get_state("counter") == 5

    def test_handler_exception_becomes_failed_result(self, caplog: pytest.LogCaptureFixture) -> None:
        store = Store()

        def boom(ctx: ActionContext, payload: Any) -> None:
            raise RuntimeError("kaput")

        store.register_action("BOOM", boom)
        with caplog.at_level(logging.ERROR, logger="termframe.store"):
            result = store.dispatch("BOOM")
        assert result == DispatchResult(False, "kaput")
        assert store.history == ()
        assert "BOOM" in caplog.text

    def test_reregistering_overwrites(self) -> None:
        store = _counter_store()
        store.register_action("INCR", lambda ctx, p: ctx.update_state({"counter": -1}))
        store.dispatch("INCR")
        assert store.get_state("counter") == -1
        assert store.has_action("INCR")
        assert not store.has_action("DECR")

    def test_nested_dispatch_runs_immediately(self) -> None:
        store = _counter_store()
        seen: list[int] = []

        def double(ctx: ActionContext, payload: Any) -> None:
            ctx.dispatch("INCR")
            seen.append(ctx.get_state("counter"))
            ctx.dispatch("INCR")

        store.register_action("DOUBLE", double)
        store.dispatch("DOUBLE")
        assert seen == [1]
        assert store.get_state("counter") == 2
        assert [entry.action for entry in store.history] == ["INCR", "INCR", "DOUBLE"]


# ---------------------------------------------------------------------------
# Subscriptions
# ---------------------------------------------------------------------------


class TestSubscriptions:
    def test_subscribe_calls_once_with_current_value(self) -> None:
        store = _counter_store()
        recorder = Recorder()
        store.subscribe("counter", recorder)
        assert recorder.calls == [(None, 0, "counter")]

    def test_reactive_update(self) -> None:
        store = _counter_store()
        recorder = Recorder()
        store.subscribe("counter", recorder)
        store.dispatch("INCR")
        assert recorder.calls[-1] == (0, 1, "counter")
        assert len(recorder.calls) == 2

    def test_equal_value_does_not_notify(self) -> None:
        store = Store({"x": 1})
        store.register_action("SET", lambda ctx, p: ctx.update_state({"x": p}))
        recorder = Recorder()
        store.subscribe("x", recorder)
        store.dispatch("SET", 1)
        assert len(recorder.calls) == 1

    def test_new_path_creates_intermediate_dicts(self) -> None:
        store = Store()
        store.register_action("SET", lambda ctx, p: ctx.update_state({"a.b.c": p}))
        recorder = Recorder()
        store.subscribe("a.b.c", recorder)
        store.dispatch("SET", 3)
        assert store.get_state() == {"a": {"b": {"c": 3}}}
        assert recorder.calls == [(None, None, "a.b.c"), (None, 3, "a.b.c")]

    def test_only_exact_path_is_notified(self) -> None:
        store = Store({"a": {"b": 1}})
        store.register_action("SET", lambda ctx, p: ctx.update_state({"a.b": p}))
        parent = Recorder()
        store.subscribe("a", parent)
        store.dispatch("SET", 2)
        assert len(parent.calls) == 1

    def test_subscribers_called_in_registration_order(self) -> None:
        store = _counter_store()
        order: list[str] = []
        store.subscribe("counter", lambda o, n, p: order.append("first"))
        store.subscribe("counter", lambda o, n, p: order.append("second"))
        order.clear()
        store.dispatch("INCR")
        assert order == ["first", "second"]

    def test_raising_subscriber_is_skipped(self) -> None:
        store = _counter_store()
        recorder = Recorder()

        def bad(old: Any, new: Any, path: str) -> None:
            if old is not None:
                raise ValueError("bad subscriber")

        store.subscribe("counter", bad)
        store.subscribe("counter", recorder)
        assert store.dispatch("INCR").success
        assert recorder.calls[-1] == (0, 1, "counter")

    def test_unsubscribe_is_idempotent(self) -> None:
        store = _counter_store()
        recorder = Recorder()
        sub_id = store.subscribe("counter", recorder)
        store.unsubscribe(sub_id)
        store.unsubscribe(sub_id)
        store.dispatch("INCR")
        assert len(recorder.calls) == 1
        assert store.subscriber_count("counter") == 0


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------


class TestHistory:
    def test_entries_hold_snapshots(self) -> None:
        store = _counter_store()
        store.dispatch("INCR")
        entry = store.history[0]
        assert entry.action == "INCR"
        assert entry.previous == {"counter": 0}
        assert entry.next == {"counter": 1}

    def test_history_bounded_to_last_hundred(self) -> None:
        store = _counter_store()
        for _ in range(150):
            store.dispatch("INCR")
        history = store.history
        assert len(history) == 100
        assert history[0].previous == {"counter": 50}
        assert history[-1].next == {"counter": 150}

    def test_custom_limit_and_clear(self) -> None:
        store = _counter_store(history_limit=3)
        for _ in range(5):
            store.dispatch("INCR")
        assert len(store.history) == 3
        store.clear_history()
        assert store.history == ()
