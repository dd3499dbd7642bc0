from __future__ import annotations

from threading import RLock
from typing import Callable, Generic, Iterable, TypeVar

T = TypeVar("T")
Subscriber = Callable[[T], None]


class Signal(Generic[T]):
    """
    Observer primitive for change notifications.
    Subscribers run synchronously, in connection order, on the emitting thread.
    """

    def __init__(self) -> None:
        # dict keeps insertion order and makes connect idempotent
        self._subscribers: dict[Subscriber, None] = {}
        self._lock = RLock()

    def connect(self, callback: Subscriber) -> None:
        with self._lock:
            self._subscribers.setdefault(callback, None)

    def disconnect(self, callback: Subscriber) -> None:
        with self._lock:
            self._subscribers.pop(callback, None)

    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def emit(self, payload: T) -> None:
        with self._lock:
            snapshot = tuple(self._subscribers)
        dead: list[Subscriber] = []
        for callback in snapshot:
            try:
                callback(payload)
            except ReferenceError:
                # the subscriber reached a collected weakref.proxy
                dead.append(callback)
        self._prune(dead)

    def _prune(self, callbacks: Iterable[Subscriber]) -> None:
        with self._lock:
            for callback in callbacks:
                self._subscribers.pop(callback, None)
