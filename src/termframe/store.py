"""Reactive key-path state store with named actions and bounded history.

State is a nested ``dict`` addressed by dot-separated key paths
(``"timer.elapsed"``).  It is mutated only from inside action handlers via
``ActionContext.update_state``; every change synchronously notifies the
subscribers of that exact path with ``(old, new, path)``.

Handler and subscriber exceptions never escape: a failing handler turns
into ``DispatchResult(success=False, error=...)`` and a failing subscriber
is logged and skipped.
"""

from __future__ import annotations

import copy
import itertools
import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from termframe.errors import DispatchError

logger = logging.getLogger(__name__)

Subscriber = Callable[[Any, Any, str], None]
ActionHandler = Callable[["ActionContext", Any], None]

_MISSING = object()


@dataclass(frozen=True)
class DispatchResult:
    success: bool
    error: str | None = None

    def __bool__(self) -> bool:
        return self.success


@dataclass(frozen=True)
class HistoryEntry:
    action: str
    previous: dict[str, Any]
    next: dict[str, Any]


class ActionContext:
    """What an action handler may touch: reads, updates, nested dispatch."""

    def __init__(self, store: Store, action: str) -> None:
        self._store = store
        self.action = action

    def get_state(self, path: str | None = None) -> Any:
        return self._store.get_state(path)

    def update_state(self, partial: Mapping[str, Any]) -> None:
        self._store._update_state(partial)

    def dispatch(self, name: str, payload: Any = None) -> DispatchResult:
        return self._store.dispatch(name, payload)


def _split(path: str) -> list[str]:
    return [segment for segment in path.split(".") if segment]


class Store:
    """Single reactive state container for the application."""

    def __init__(
        self,
        initial_state: Mapping[str, Any] | None = None,
        history_limit: int = 100,
    ) -> None:
        self._state: dict[str, Any] = copy.deepcopy(dict(initial_state or {}))
        self._subscribers: dict[str, dict[int, Subscriber]] = {}
        self._subscription_paths: dict[int, str] = {}
        self._actions: dict[str, ActionHandler] = {}
        self._history: deque[HistoryEntry] = deque(maxlen=history_limit)
        self._ids = itertools.count(1)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_state(self, path: str | None = None) -> Any:
        """Return a copy of the whole state or of the value at *path*.

        Missing segments yield ``None``; this never raises.
        """
        if not path:
            return copy.deepcopy(self._state)
        value = self._resolve(path)
        return None if value is _MISSING else copy.deepcopy(value)

    def _resolve(self, path: str) -> Any:
        node: Any = self._state
        for segment in _split(path):
            if not isinstance(node, Mapping) or segment not in node:
                return _MISSING
            node = node[segment]
        return node

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, path: str, handler: Subscriber) -> int:
        """Register *handler* for *path* and call it once with the current value."""
        subscription_id = next(self._ids)
        self._subscribers.setdefault(path, {})[subscription_id] = handler
        self._subscription_paths[subscription_id] = path
        self._notify_one(handler, None, self.get_state(path), path)
        return subscription_id

    def unsubscribe(self, subscription_id: int) -> None:
        path = self._subscription_paths.pop(subscription_id, None)
        if path is None:
            return
        handlers = self._subscribers.get(path)
        if handlers is not None:
            handlers.pop(subscription_id, None)
            if not handlers:
                del self._subscribers[path]

    def subscriber_count(self, path: str) -> int:
        return len(self._subscribers.get(path, {}))

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def register_action(self, name: str, handler: ActionHandler) -> None:
        self._actions[name] = handler

    def has_action(self, name: str) -> bool:
        return name in self._actions

    def dispatch(self, name: str, payload: Any = None) -> DispatchResult:
        """Run the handler registered for *name*.

        Nested dispatch from inside a handler runs immediately.
        """
        handler = self._actions.get(name)
        if handler is None:
            logger.warning("Dispatch of unknown action %r", name)
            return DispatchResult(False, f"Unknown action: {name}")

        previous = copy.deepcopy(self._state)
        try:
            handler(ActionContext(self, name), payload)
        except Exception as exc:
            error = DispatchError(name, exc)
            logger.exception("%s", error)
            return DispatchResult(False, str(exc))

        self._history.append(HistoryEntry(name, previous, copy.deepcopy(self._state)))
        return DispatchResult(True)

    @property
    def history(self) -> tuple[HistoryEntry, ...]:
        """Recorded dispatches, oldest first."""
        return tuple(self._history)

    def clear_history(self) -> None:
        self._history.clear()

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------

    def _update_state(self, partial: Mapping[str, Any]) -> None:
        for path, new in partial.items():
            current = self._resolve(path)
            if current is not _MISSING and current == new:
                continue
            old = None if current is _MISSING else current
            self._assign(path, copy.deepcopy(new))
            self._notify(path, old, new)

    def _assign(self, path: str, value: Any) -> None:
        segments = _split(path)
        if not segments:
            raise KeyError("Empty state path")
        node = self._state
        for segment in segments[:-1]:
            child = node.get(segment)
            if not isinstance(child, dict):
                child = {}
                node[segment] = child
            node = child
        node[segments[-1]] = value

    def _notify(self, path: str, old: Any, new: Any) -> None:
        handlers = self._subscribers.get(path)
        if not handlers:
            return
        for handler in list(handlers.values()):
            self._notify_one(handler, old, new, path)

    @staticmethod
    def _notify_one(handler: Subscriber, old: Any, new: Any, path: str) -> None:
        try:
            handler(old, new, path)
        except Exception:
            logger.exception("Subscriber for %r failed", path)
