"""Textual integration for refx. Opt-in — requires textual.

Guards, NoMatches handling and thread marshaling live here so callsites
don't repeat them. Textual coupling stays in this module; the core engine
does not import it.
"""

import logging
import threading
from contextlib import contextmanager

from textual.css.query import NoMatches

from refx.effect import Effect
from refx.watch import WatchHandle, watch as _watch

logger = logging.getLogger("refx.textual")

# Module-owned pause state, keyed by id(app) so multiple apps work in tests.
_paused_apps: set[int] = set()


@contextmanager
def pause(app):
    """Suspend guarded watchers during widget replacement."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and id(app) not in _paused_apps


def watch(app, source, callback, *, immediate=False, runtime=None) -> WatchHandle:
    """watch() whose callback safely touches Textual widgets.

    The source is still tracked on every change; only the callback is
    skipped while the app is paused or not running. NoMatches from widget
    queries is swallowed and cross-thread calls go through call_from_thread.
    """
    _main = threading.get_ident()

    def _guarded(new, old):
        if not is_safe(app):
            return
        if threading.get_ident() != _main:
            app.call_from_thread(_safe, new, old)
        else:
            _safe(new, old)

    def _safe(new, old):
        try:
            callback(new, old)
        except NoMatches:
            logger.debug("Watcher skipped: widget not mounted", exc_info=True)

    return _watch(source, _guarded, immediate=immediate, runtime=runtime)


def watch_effect(app, fn, *, runtime=None) -> WatchHandle:
    """watch_effect() whose body safely touches Textual widgets.

    Changes arriving while the app is unsafe are dropped without losing the
    effect's subscriptions, so it still reacts once the app is safe again.
    Re-runs triggered from another thread run on the app thread.
    """
    _main = threading.get_ident()

    def _safe():
        try:
            fn()
        except NoMatches:
            logger.debug("Effect skipped: widget not mounted", exc_info=True)

    def _on_trigger(runner: Effect):
        if not is_safe(app):
            return
        if threading.get_ident() != _main:
            app.call_from_thread(runner.run)
        else:
            runner.run()

    runner = Effect(_safe, runtime=runtime, on_trigger=_on_trigger)
    runner.run()
    return WatchHandle(runner)
