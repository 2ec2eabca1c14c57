"""Textual integration for atomstore. Opt-in — requires textual.

Guard + NoMatches + thread-marshal are enforced here, not at callsites.
Textual coupling stays in this module; the core never imports it.
"""

import threading
from contextlib import contextmanager

from textual.css.query import NoMatches

# Pause state keyed by id(app) so multiple apps work in tests.
_paused_apps: set[int] = set()


@contextmanager
def pause(app):
    """Suspend bound effects during widget replacement."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and id(app) not in _paused_apps


def bind(app, atom, effect_fn, *, fire_immediately=False):
    """Subscribe effect_fn to atom, safely bridged to Textual widgets.

    Skips while the app is paused or not running, swallows NoMatches from
    widget queries, and marshals calls from other threads via
    call_from_thread. Returns the unsubscribe handle.
    """
    _main = threading.get_ident()

    def _guarded(value):
        if not is_safe(app):
            return
        if threading.get_ident() != _main:
            app.call_from_thread(_safe, value)
        else:
            _safe(value)

    def _safe(value):
        try:
            effect_fn(value)
        except NoMatches:
            pass

    unsubscribe = atom.subscribe(_guarded)
    if fire_immediately:
        _guarded(atom.get())
    return unsubscribe
