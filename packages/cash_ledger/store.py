"""Path-addressed JSON document store interface and an in-memory implementation.

The engine only needs four operations from its storage backend:

- ``get(path)``: the JSON document at ``path`` or ``None``;
- ``put(path, value)``: replace the document (``None`` deletes it);
- ``subscribe(path, on_change)``: call ``on_change`` once with the current
  value and again after every write to ``path``; returns an unsubscribe
  callable;
- ``list_paths(prefix)``: every stored path starting with ``prefix``.

Absence of a document is "empty", never an error. Writes are whole-document
replacements; the last writer wins.
"""

from __future__ import annotations

import copy
import threading
from collections import defaultdict
from collections.abc import Callable
from typing import Any, Protocol

from .logging_setup import get_logger

type ChangeCallback = Callable[[Any | None], None]
type Unsubscribe = Callable[[], None]

_logger = get_logger("cash_ledger.store")


class DocumentStore(Protocol):
    def get(self, path: str) -> Any | None: ...

    def put(self, path: str, value: Any | None) -> None: ...

    def subscribe(self, path: str, on_change: ChangeCallback) -> Unsubscribe: ...

    def list_paths(self, prefix: str) -> list[str]: ...


class SubscriberRegistry:
    """In-process fan-out of change notifications, keyed by path."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subs: defaultdict[str, list[ChangeCallback]] = defaultdict(list)

    def add(self, path: str, on_change: ChangeCallback) -> Unsubscribe:
        with self._lock:
            self._subs[path].append(on_change)

        def _unsubscribe() -> None:
            with self._lock:
                callbacks = self._subs.get(path, [])
                if on_change in callbacks:
                    callbacks.remove(on_change)

        return _unsubscribe

    def notify(self, path: str, value: Any | None) -> None:
        with self._lock:
            callbacks = list(self._subs.get(path, ()))
        for cb in callbacks:
            cb(copy.deepcopy(value))


class MemoryDocumentStore:
    """Thread-safe dict-backed store. Values are deep-copied in and out."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._lock = threading.Lock()
        self._docs: dict[str, Any] = copy.deepcopy(initial or {})
        self._subscribers = SubscriberRegistry()

    def get(self, path: str) -> Any | None:
        with self._lock:
            return copy.deepcopy(self._docs.get(path))

    def put(self, path: str, value: Any | None) -> None:
        with self._lock:
            if value is None:
                self._docs.pop(path, None)
            else:
                self._docs[path] = copy.deepcopy(value)
        _logger.debug("store:put path=%s deleted=%s", path, value is None)
        self._subscribers.notify(path, value)

    def subscribe(self, path: str, on_change: ChangeCallback) -> Unsubscribe:
        unsubscribe = self._subscribers.add(path, on_change)
        on_change(self.get(path))
        return unsubscribe

    def list_paths(self, prefix: str) -> list[str]:
        with self._lock:
            return sorted(p for p in self._docs if p.startswith(prefix))


__all__ = [
    "ChangeCallback",
    "DocumentStore",
    "MemoryDocumentStore",
    "SubscriberRegistry",
    "Unsubscribe",
]
