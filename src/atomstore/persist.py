"""Persist an atom's value to a JSON file on every change. Opt-in.

Usage:
    storage = JsonFile("tasks.json")
    tasks = store.create_atom("tasks", storage.load(default=[]))
    persist(tasks, storage)
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from atomstore.atom import Atom, Unsubscribe

logger = logging.getLogger("atomstore.persist")


class JsonFile:
    """A JSON document on disk holding one atom's value."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)

    def load(self, default: object = None) -> object:
        """Decoded file contents, or default if missing or unreadable."""
        try:
            with self.path.open(encoding="utf-8") as fh:
                return json.load(fh)
        except FileNotFoundError:
            return default
        except (OSError, ValueError):
            logger.warning("Could not read %s, using default", self.path, exc_info=True)
            return default

    def save(self, value: object) -> None:
        """Write value as JSON, replacing the file atomically."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(value, fh, ensure_ascii=False)
            os.replace(tmp, self.path)
        except BaseException:
            os.unlink(tmp)
            raise

    def __repr__(self) -> str:
        return f"JsonFile({str(self.path)!r})"


def persist(atom: Atom, storage: JsonFile) -> Unsubscribe:
    """Save atom's value to storage whenever it changes.

    Returns the unsubscribe handle. A failed save is reported through the
    store's error handler like any other listener failure.
    """
    return atom.subscribe(storage.save)
