"""Cascade tracking — which atoms are notifying right now.

A set() runs its whole notification cascade before returning, so the atoms
currently mid-notification form a stack along the call path. It is kept in a
contextvar, the same way a derivation-tracking engine records the currently
evaluating derivation. An atom found on that stack when set() is called again
is a cyclic update.
"""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from typing import TYPE_CHECKING, Iterator

if TYPE_CHECKING:
    from atomstore.atom import Atom

_notifying: contextvars.ContextVar[tuple[Atom, ...]] = contextvars.ContextVar(
    "atomstore_notifying", default=()
)


def is_notifying(atom: Atom) -> bool:
    return any(a is atom for a in _notifying.get())


@contextmanager
def notifying(atom: Atom) -> Iterator[None]:
    """Mark atom as mid-notification for the duration of the block."""
    token = _notifying.set(_notifying.get() + (atom,))
    try:
        yield
    finally:
        _notifying.reset(token)


def cascade_depth() -> int:
    """Number of nested notifications on the current path. Useful for testing."""
    return len(_notifying.get())
