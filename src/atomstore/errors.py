"""atomstore exception hierarchy.

Validation errors are raised to the caller of create_*/set. ListenerError and
ComputeError are never raised by set(); they are handed to the store's error
handler while the cascade carries on.
"""

from __future__ import annotations


class AtomStoreError(Exception):
    """Base exception for all atomstore errors."""


class DuplicateKeyError(AtomStoreError):
    """Raised when creating an atom under a key that is already registered."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Atom with key {key!r} already exists")
        self.key = key


class AtomNotFoundError(AtomStoreError, KeyError):
    """Raised when a dependency is named by a key the store doesn't hold."""

    def __init__(self, key: str) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"Atom with key {self.key!r} not found"


class ForeignAtomError(AtomStoreError, ValueError):
    """Raised when a computed atom would depend on an atom from another store."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Atom {key!r} belongs to a different store")
        self.key = key


class InvalidValueError(AtomStoreError, ValueError):
    """Raised when an atom would hold the absent value (None)."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Atom {key!r}: value cannot be None")
        self.key = key


class TypeMismatchError(AtomStoreError, TypeError):
    """Raised when a value's type tag differs from the atom's baseline type."""

    def __init__(self, key: str, expected: object, actual: object) -> None:
        super().__init__(f"Atom {key!r}: expected {expected}, got {actual}")
        self.key = key
        self.expected = expected
        self.actual = actual


class DisposedError(AtomStoreError):
    """Raised when a removed or disposed atom is mutated or subscribed to."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Atom {key!r} has been disposed")
        self.key = key


class CyclicUpdateError(AtomStoreError):
    """Raised when an atom is set again while it is still notifying listeners."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Atom {key!r} was set while notifying its listeners")
        self.key = key


class ListenerError(AtomStoreError):
    """A subscriber callback failed during notification.

    The original exception is available as __cause__.
    """

    def __init__(self, key: str, listener: object) -> None:
        name = getattr(listener, "__qualname__", None) or repr(listener)
        super().__init__(f"Listener {name} of atom {key!r} failed")
        self.key = key
        self.listener = listener


class ComputeError(AtomStoreError):
    """A computed atom failed to recompute after a dependency changed.

    The original exception is available as __cause__.
    """

    def __init__(self, key: str) -> None:
        super().__init__(f"Computed atom {key!r} failed to recompute")
        self.key = key
