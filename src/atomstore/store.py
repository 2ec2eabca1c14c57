"""Store — keyed registry of atoms and computed atoms.

A Store is constructed explicitly and passed to whatever needs it; there is
no process-wide instance. It creates atoms, resolves them by key, and removes
them. Removing an atom also disposes every computed atom in the store that
depends on it, directly or transitively.

Listener and recompute failures raised anywhere in a cascade are routed to
the store's error handler. The default handler logs them.

Thread confinement: call set_scheduler() once from the owning thread. After
that, any Atom.set() from a background thread is handed to the scheduler.
Owner-thread writes stay synchronous.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Iterator, Sequence, TypeVar

from atomstore.atom import Atom
from atomstore.computed import ComputedAtom
from atomstore.errors import (
    AtomNotFoundError,
    AtomStoreError,
    DisposedError,
    DuplicateKeyError,
    ForeignAtomError,
)
from atomstore.validation import Classifier, shallow_type

logger = logging.getLogger("atomstore.store")

T = TypeVar("T")

ErrorHandler = Callable[[AtomStoreError], None]


def log_error(error: AtomStoreError) -> None:
    """Default error handler: log with the original traceback."""
    logger.error("%s", error, exc_info=error.__cause__)


class Store:
    """Keyed registry of atoms."""

    def __init__(
        self,
        *,
        classifier: Classifier = shallow_type,
        on_error: ErrorHandler | None = None,
        warn_on_missing: bool = True,
    ) -> None:
        self._atoms: dict[str, Atom] = {}
        self._classifier = classifier
        self._on_error = on_error or log_error
        self._warn_on_missing = warn_on_missing
        self._scheduler: Callable[[Callable[[], None]], object] | None = None
        self._scheduler_thread: threading.Thread | None = None

    # --- Creation ---

    def create_atom(
        self, key: str, initial_value: T, *, classifier: Classifier | None = None
    ) -> Atom[T]:
        """Create and register a leaf atom.

        Raises DuplicateKeyError if key is taken and InvalidValueError if
        initial_value is None. Nothing is registered on failure.
        """
        self._check_key(key)
        atom = Atom(self, key, initial_value, classifier or self._classifier)
        self._atoms[key] = atom
        logger.debug("Created atom %r", key)
        return atom

    def create_computed_atom(
        self,
        key: str,
        dependencies: Sequence[Atom | str],
        compute: Callable[..., T],
        *,
        classifier: Classifier | None = None,
    ) -> ComputedAtom[T]:
        """Create and register an atom derived from dependencies.

        The initial value is compute(*values) with values in the order the
        dependencies are listed. If compute raises, the exception propagates
        and nothing is registered.
        """
        self._check_key(key)
        sources = [self._resolve(dep) for dep in dependencies]
        initial = compute(*(source.get() for source in sources))
        atom = ComputedAtom(
            self, key, initial, sources, compute, classifier or self._classifier
        )
        self._atoms[key] = atom
        logger.debug(
            "Created computed atom %r from %s", key, [s.key for s in sources]
        )
        return atom

    def computed(self, key: str, *dependencies: Atom | str):
        """Decorator form of create_computed_atom.

        Usage:
            price = store.create_atom("price", 100)
            quantity = store.create_atom("quantity", 2)

            @store.computed("total", price, quantity)
            def total(p, q):
                return p * q

            total.get()  # 200
        """

        def decorator(fn: Callable[..., T]) -> ComputedAtom[T]:
            return self.create_computed_atom(key, dependencies, fn)

        return decorator

    # --- Lookup ---

    def get_atom(self, key: str) -> Atom | None:
        """Return the atom under key, or None. A miss is not an error."""
        atom = self._atoms.get(key)
        if atom is None and self._warn_on_missing:
            logger.warning("Atom %r not found", key)
        return atom

    def __contains__(self, key: object) -> bool:
        return key in self._atoms

    def __len__(self) -> int:
        return len(self._atoms)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._atoms))

    # --- Removal ---

    def remove_atom(self, key: str) -> bool:
        """Remove the atom under key. Returns False if there was none.

        Listeners are detached, and computed atoms depending on the removed
        atom are disposed along with it.
        """
        atom = self._atoms.get(key)
        if atom is None:
            return False
        self._discard(atom)
        return True

    def _discard(self, atom: Atom) -> None:
        if self._atoms.get(atom.key) is atom:
            del self._atoms[atom.key]
        atom._detach()
        dependents = [
            other
            for other in self._atoms.values()
            if isinstance(other, ComputedAtom) and other.depends_on(atom)
        ]
        for dependent in dependents:
            logger.debug("Disposing %r: dependency %r removed", dependent.key, atom.key)
            dependent.dispose()
        logger.debug("Removed atom %r", atom.key)

    # --- Thread confinement ---

    def set_scheduler(self, scheduler: Callable[[Callable[[], None]], object]) -> None:
        """Marshal writes from other threads through scheduler.

        Call once from the owning thread:
            store.set_scheduler(app.call_from_thread)
        """
        self._scheduler = scheduler
        self._scheduler_thread = threading.current_thread()

    def _marshal(self, fn: Callable[[], None]) -> bool:
        """Hand fn to the scheduler if called off the owning thread."""
        if self._scheduler is None or threading.current_thread() is self._scheduler_thread:
            return False
        self._scheduler(fn)
        return True

    # --- Internals ---

    def _check_key(self, key: str) -> None:
        if key in self._atoms:
            raise DuplicateKeyError(key)

    def _resolve(self, dependency: Atom | str) -> Atom:
        if isinstance(dependency, str):
            atom = self._atoms.get(dependency)
            if atom is None:
                raise AtomNotFoundError(dependency)
            return atom
        if not isinstance(dependency, Atom):
            raise TypeError(
                f"Dependencies must be atoms or keys, got {type(dependency).__name__}"
            )
        if dependency._store is not self:
            raise ForeignAtomError(dependency.key)
        if dependency.disposed:
            raise DisposedError(dependency.key)
        return dependency

    def _report(self, error: AtomStoreError) -> None:
        self._on_error(error)

    def __repr__(self) -> str:
        return f"Store({sorted(self._atoms)!r})"
