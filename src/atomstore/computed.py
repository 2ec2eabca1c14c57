"""Computed atoms — derived state kept eagerly in sync with its sources.

A ComputedAtom is an Atom whose value is compute(*dependency values). It
subscribes to every dependency and, on any change, recomputes from all
current values and writes the result through the normal set() path, so the
strict-equality no-op and listener isolation apply unchanged.

Unlike a lazily cached computed value, recomputation happens inside the
dependency's notification: by the time the triggering set() returns, the
computed value is current.

A recompute that fails is reported to the store as a ComputeError. The
computed atom keeps its last value and the triggering set() is unaffected.
"""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING, Callable, Sequence, TypeVar

from atomstore.atom import Atom, Unsubscribe
from atomstore.errors import ComputeError
from atomstore.validation import Classifier

if TYPE_CHECKING:
    from atomstore.store import Store

T = TypeVar("T")


class ComputedState(enum.Enum):
    """Lifecycle of a computed atom.

    UNINITIALIZED only lasts while the constructor subscribes to the
    dependencies; a constructed ComputedAtom is always LIVE or DISPOSED.
    """

    UNINITIALIZED = "uninitialized"
    LIVE = "live"
    DISPOSED = "disposed"


class ComputedAtom(Atom[T]):
    """An atom derived from other atoms by a pure function."""

    __slots__ = ("_dependencies", "_compute", "_unsubscribers", "_state", "_last_error")

    def __init__(
        self,
        store: Store,
        key: str,
        value: T,
        dependencies: Sequence[Atom],
        compute: Callable[..., T],
        classifier: Classifier,
    ) -> None:
        super().__init__(store, key, value, classifier)
        self._state = ComputedState.UNINITIALIZED
        self._dependencies = tuple(dependencies)
        self._compute = compute
        self._last_error: Exception | None = None
        self._unsubscribers: list[Unsubscribe] = [
            dep.subscribe(self._recompute) for dep in self._dependencies
        ]
        self._state = ComputedState.LIVE

    @property
    def dependencies(self) -> tuple[Atom, ...]:
        return self._dependencies

    @property
    def state(self) -> ComputedState:
        return self._state

    @property
    def last_error(self) -> Exception | None:
        """The most recent recompute failure, cleared by the next success."""
        return self._last_error

    def depends_on(self, atom: Atom) -> bool:
        return any(dep is atom for dep in self._dependencies)

    def _recompute(self, _changed: object = None) -> None:
        if self._state is not ComputedState.LIVE:
            return
        try:
            self._set_direct(self._compute(*(dep.get() for dep in self._dependencies)))
        except Exception as exc:
            self._last_error = exc
            error = ComputeError(self._key)
            error.__cause__ = exc
            self._store._report(error)
        else:
            self._last_error = None

    def dispose(self) -> None:
        """Stop recomputing and remove this atom from its store. Idempotent."""
        if self._state is ComputedState.DISPOSED:
            return
        self._store._discard(self)

    def _detach(self) -> None:
        self._state = ComputedState.DISPOSED
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        super()._detach()

    def __repr__(self) -> str:
        fn = getattr(self._compute, "__name__", "compute")
        return f"ComputedAtom({self._key!r}, {fn}, {self._state.value}, value={self._value!r})"
