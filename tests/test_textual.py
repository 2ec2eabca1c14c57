"""Tests for atomstore.textual — Textual integration layer."""

import threading

import pytest
from textual.css.query import NoMatches

from atomstore import ListenerError, Store
from atomstore import textual as stx


class _MockApp:
    """Minimal mock matching the Textual App interface stx needs."""

    def __init__(self, *, is_running=True):
        self.is_running = is_running
        self._call_from_thread_log = []

    def call_from_thread(self, fn, *args):
        self._call_from_thread_log.append((fn, args))
        fn(*args)


@pytest.fixture
def errors():
    return []


@pytest.fixture
def store(errors):
    return Store(on_error=errors.append)


class TestBind:
    def test_skips_when_not_running(self, store):
        app = _MockApp(is_running=False)
        a = store.create_atom("count", 1)
        effects = []
        stx.bind(app, a, effects.append)
        a.set(2)
        assert effects == []

    def test_skips_during_pause(self, store):
        app = _MockApp()
        a = store.create_atom("count", 1)
        effects = []
        stx.bind(app, a, effects.append)
        with stx.pause(app):
            a.set(2)
        assert effects == []

    def test_fires_when_safe(self, store):
        app = _MockApp()
        a = store.create_atom("count", 1)
        effects = []
        stx.bind(app, a, effects.append)
        a.set(2)
        assert effects == [2]

    def test_fire_immediately(self, store):
        app = _MockApp()
        a = store.create_atom("count", 1)
        effects = []
        stx.bind(app, a, effects.append, fire_immediately=True)
        assert effects == [1]

    def test_catches_nomatch(self, store, errors):
        """NoMatches from widget queries are silently swallowed."""
        app = _MockApp()
        a = store.create_atom("count", 1)

        def _raise_nomatch(v):
            raise NoMatches("StatusFooter")

        unsubscribe = stx.bind(app, a, _raise_nomatch)
        a.set(2)
        unsubscribe()
        assert errors == []

    def test_reports_real_errors(self, store, errors):
        """Non-NoMatches exceptions go to the store's error handler."""
        app = _MockApp()
        a = store.create_atom("count", 1)

        def _raise_value_error(v):
            raise ValueError("boom")

        stx.bind(app, a, _raise_value_error)
        a.set(2)
        assert len(errors) == 1
        assert isinstance(errors[0], ListenerError)
        assert isinstance(errors[0].__cause__, ValueError)

    def test_unsubscribe_stops_effect(self, store):
        app = _MockApp()
        a = store.create_atom("count", 1)
        effects = []
        unsubscribe = stx.bind(app, a, effects.append)
        a.set(2)
        unsubscribe()
        a.set(3)
        assert effects == [2]

    def test_thread_marshal(self, store):
        """Triggers from a background thread use call_from_thread."""
        app = _MockApp()
        a = store.create_atom("count", 1)
        effects = []
        stx.bind(app, a, effects.append)

        t = threading.Thread(target=lambda: a.set(2))
        t.start()
        t.join()

        assert effects == [2]
        assert len(app._call_from_thread_log) == 1

    def test_bound_to_computed(self, store):
        app = _MockApp()
        tasks = store.create_atom("tasks", [{"id": 1, "done": False}])
        active = store.create_computed_atom(
            "active", [tasks], lambda ts: [t for t in ts if not t["done"]]
        )
        rendered = []
        stx.bind(app, active, lambda ts: rendered.append(len(ts)))
        tasks.set([{"id": 1, "done": True}])
        assert rendered == [0]


class TestPause:
    def test_pause_restores_on_exception(self):
        app = _MockApp()
        assert stx.is_safe(app)

        with pytest.raises(RuntimeError):
            with stx.pause(app):
                assert not stx.is_safe(app)
                raise RuntimeError("oops")

        assert stx.is_safe(app)

    def test_pause_does_not_mutate_app(self):
        app = _MockApp()
        attrs_before = set(vars(app))
        with stx.pause(app):
            attrs_during = set(vars(app))
        assert attrs_before == attrs_during
        assert attrs_before == set(vars(app))

    def test_multiple_apps_independent(self):
        app_a = _MockApp()
        app_b = _MockApp()
        with stx.pause(app_a):
            assert not stx.is_safe(app_a)
            assert stx.is_safe(app_b)
