"""atomstore: a minimal reactive state container of named atoms."""

from importlib.metadata import version as _version

__version__ = _version("atomstore")

from atomstore._cascade import cascade_depth
from atomstore.atom import Atom
from atomstore.computed import ComputedAtom, ComputedState
from atomstore.errors import (
    AtomNotFoundError,
    AtomStoreError,
    ComputeError,
    CyclicUpdateError,
    DisposedError,
    DuplicateKeyError,
    ForeignAtomError,
    InvalidValueError,
    ListenerError,
    TypeMismatchError,
)
from atomstore.store import Store
from atomstore.validation import exact_type, shallow_type, strictly_equal
# persist and textual NOT auto-imported — opt-in only

__all__ = [
    "Atom",
    "ComputedAtom",
    "ComputedState",
    "Store",
    "cascade_depth",
    "shallow_type",
    "exact_type",
    "strictly_equal",
    "AtomStoreError",
    "AtomNotFoundError",
    "ComputeError",
    "CyclicUpdateError",
    "DisposedError",
    "DuplicateKeyError",
    "ForeignAtomError",
    "InvalidValueError",
    "ListenerError",
    "TypeMismatchError",
]
