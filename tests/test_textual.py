"""Tests for refx.textual — Textual integration layer."""

import threading

import pytest

pytest.importorskip("textual")

from textual.css.query import NoMatches  # noqa: E402

from refx import ref  # noqa: E402
from refx import textual as rtx  # noqa: E402


class _MockApp:
    """Minimal mock matching the Textual App interface rtx needs."""

    def __init__(self, *, is_running=True):
        self.is_running = is_running
        self._call_from_thread_log = []

    def call_from_thread(self, fn, *args):
        self._call_from_thread_log.append((fn, args))
        fn(*args)


class TestWatch:
    def test_skips_when_not_running(self):
        app = _MockApp(is_running=False)
        o = ref(1)
        effects = []
        rtx.watch(app, o, lambda new, old: effects.append(new))
        o.value = 2
        assert effects == []

    def test_skips_during_pause(self):
        app = _MockApp()
        o = ref(1)
        effects = []
        rtx.watch(app, o, lambda new, old: effects.append(new))
        with rtx.pause(app):
            o.value = 2
        assert effects == []

    def test_fires_when_safe(self):
        app = _MockApp()
        o = ref(1)
        effects = []
        rtx.watch(app, o, lambda new, old: effects.append((new, old)))
        o.value = 2
        assert effects == [(2, 1)]

    def test_catches_nomatch(self):
        """NoMatches from widget queries is swallowed."""
        app = _MockApp()
        o = ref(1)

        def _raise_nomatch(new, old):
            raise NoMatches("StatusFooter")

        # Should not raise
        handle = rtx.watch(app, o, _raise_nomatch)
        o.value = 2
        handle.dispose()

    def test_propagates_real_errors(self):
        """Non-NoMatches exceptions propagate normally."""
        app = _MockApp()
        o = ref(1)

        def _raise_value_error(new, old):
            raise ValueError("boom")

        rtx.watch(app, o, _raise_value_error)
        with pytest.raises(ValueError, match="boom"):
            o.value = 2

    def test_dispose_stops_watch(self):
        app = _MockApp()
        o = ref(1)
        effects = []
        handle = rtx.watch(app, o, lambda new, old: effects.append(new))
        o.value = 2
        assert effects == [2]
        handle.dispose()
        o.value = 3
        assert effects == [2]

    def test_thread_marshal(self):
        """Triggers from a background thread use call_from_thread."""
        app = _MockApp()
        o = ref(1)
        effects = []
        rtx.watch(app, o, lambda new, old: effects.append(new))

        def _bg():
            o.value = 2

        t = threading.Thread(target=_bg)
        t.start()
        t.join()

        assert effects == [2]
        assert len(app._call_from_thread_log) >= 1


class TestWatchEffect:
    def test_skips_during_pause(self):
        app = _MockApp()
        o = ref(1)
        log = []

        rtx.watch_effect(app, lambda: log.append(o.value))
        # runs immediately on setup
        assert log == [1]

        with rtx.pause(app):
            o.value = 2
        # Skipped during pause
        assert log == [1]

    def test_keeps_subscriptions_across_pause(self):
        app = _MockApp()
        o = ref(1)
        log = []
        rtx.watch_effect(app, lambda: log.append(o.value))
        with rtx.pause(app):
            o.value = 2
        o.value = 3
        assert log == [1, 3]

    def test_catches_nomatch(self):
        """NoMatches from widget queries is swallowed; tracking survives."""
        app = _MockApp()
        o = ref(1)
        call_count = [0]

        def _fn():
            call_count[0] += 1
            o.value  # track dependency
            if call_count[0] > 1:
                raise NoMatches("Widget")

        rtx.watch_effect(app, _fn)
        assert call_count[0] == 1

        o.value = 2
        assert call_count[0] == 2
        o.value = 3
        assert call_count[0] == 3

    def test_fires_when_safe(self):
        app = _MockApp()
        o = ref(1)
        log = []
        rtx.watch_effect(app, lambda: log.append(o.value))
        o.value = 2
        assert log == [1, 2]

    def test_thread_marshal(self):
        app = _MockApp()
        o = ref(1)
        log = []
        rtx.watch_effect(app, lambda: log.append(o.value))

        t = threading.Thread(target=lambda: setattr(o, "value", 2))
        t.start()
        t.join()

        assert log == [1, 2]
        assert len(app._call_from_thread_log) == 1


class TestPause:
    def test_pause_restores_on_exception(self):
        app = _MockApp()
        assert rtx.is_safe(app)

        with pytest.raises(RuntimeError):
            with rtx.pause(app):
                assert not rtx.is_safe(app)
                raise RuntimeError("oops")

        # Restored despite exception
        assert rtx.is_safe(app)

    def test_pause_does_not_mutate_app(self):
        """Pause state lives in the module, not on the app."""
        app = _MockApp()
        attrs_before = set(vars(app))
        with rtx.pause(app):
            attrs_during = set(vars(app))
        attrs_after = set(vars(app))
        assert attrs_before == attrs_during, (
            f"pause() added attributes to app: {attrs_during - attrs_before}"
        )
        assert attrs_before == attrs_after

    def test_multiple_apps_independent(self):
        """Pausing one app does not affect another."""
        app_a = _MockApp()
        app_b = _MockApp()
        with rtx.pause(app_a):
            assert not rtx.is_safe(app_a)
            assert rtx.is_safe(app_b)
