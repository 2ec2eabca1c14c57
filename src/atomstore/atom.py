"""Atoms — named, typed, observable value cells.

An Atom owns one value and an ordered set of listeners. set() validates the
new value, skips strictly-equal values, then calls every listener in
subscription order before returning. A failing listener is reported to the
owning store and never stops the rest of the cascade.

Listeners are keyed by an opaque token rather than by the callback itself, so
subscribing the same callback twice gives two independent registrations.
"""

from __future__ import annotations

import itertools
from typing import TYPE_CHECKING, Callable, Generic, Hashable, TypeVar

from atomstore import _cascade
from atomstore.errors import (
    CyclicUpdateError,
    DisposedError,
    InvalidValueError,
    ListenerError,
    TypeMismatchError,
)
from atomstore.validation import Classifier, strictly_equal

if TYPE_CHECKING:
    from atomstore.store import Store

T = TypeVar("T")

Listener = Callable[[T], None]
Unsubscribe = Callable[[], None]


class Atom(Generic[T]):
    """A single reactive value cell registered in a Store."""

    __slots__ = (
        "_store",
        "_key",
        "_value",
        "_classifier",
        "_baseline",
        "_listeners",
        "_tokens",
        "_disposed",
    )

    def __init__(
        self, store: Store, key: str, value: T, classifier: Classifier
    ) -> None:
        if value is None:
            raise InvalidValueError(key)
        self._store = store
        self._key = key
        self._value = value
        self._classifier = classifier
        self._baseline = classifier(value)
        self._listeners: dict[int, Listener[T]] = {}
        self._tokens = itertools.count(1)
        self._disposed = False

    @property
    def key(self) -> str:
        return self._key

    @property
    def baseline_type(self) -> Hashable:
        """Type tag fixed from the initial value."""
        return self._baseline

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def get(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        """Write a new value and notify listeners.

        From a thread other than the store's scheduler thread, the write is
        handed to the scheduler instead (see Store.set_scheduler). Validation
        still happens here, so a bad value raises on the calling thread.
        """
        if self._disposed:
            raise DisposedError(self._key)
        self._validate(value)
        if self._store._marshal(lambda v=value: self._set_direct(v)):
            return
        self._set_direct(value)

    def subscribe(self, listener: Listener[T]) -> Unsubscribe:
        """Register listener. Returns a handle that removes this registration."""
        if self._disposed:
            raise DisposedError(self._key)
        token = next(self._tokens)
        self._listeners[token] = listener

        def _unsubscribe() -> None:
            self._listeners.pop(token, None)

        return _unsubscribe

    def _validate(self, value: object) -> None:
        if value is None:
            raise InvalidValueError(self._key)
        actual = self._classifier(value)
        if actual != self._baseline:
            raise TypeMismatchError(self._key, self._baseline, actual)

    def _set_direct(self, value: T) -> None:
        if self._disposed:
            raise DisposedError(self._key)
        self._validate(value)
        if strictly_equal(self._value, value):
            return
        if _cascade.is_notifying(self):
            raise CyclicUpdateError(self._key)
        self._value = value
        with _cascade.notifying(self):
            self._notify(value)

    def _notify(self, value: T) -> None:
        """Call listeners registered when notification began, in order."""
        for token, listener in list(self._listeners.items()):
            if token not in self._listeners:
                continue  # unsubscribed by an earlier listener
            try:
                listener(value)
            except Exception as exc:
                error = ListenerError(self._key, listener)
                error.__cause__ = exc
                self._store._report(error)

    def _detach(self) -> None:
        """Drop every listener and refuse further writes."""
        self._listeners.clear()
        self._disposed = True

    def __repr__(self) -> str:
        return f"Atom({self._key!r}, {self._value!r})"
