"""watch() and watch_effect() — callbacks driven by reactive state.

watch(source, callback) re-evaluates source whenever what it read changes,
and calls callback(new, old) only when the result actually differs.
watch_effect(fn) is effect(fn): it re-runs on every dependency change,
whether or not any value it computes differs.

Both return a WatchHandle for cleanup via .dispose().
"""

from __future__ import annotations

from typing import Callable, TypeVar

from refx.computed import Computed
from refx.effect import Effect, effect
from refx.observable import _equal, to_raw
from refx.ref import Ref
from refx.runtime import Runtime, get_runtime

T = TypeVar("T")


class WatchHandle:
    """Disposable handle for a watcher's underlying effect."""

    __slots__ = ("_effect",)

    def __init__(self, runner: Effect) -> None:
        self._effect = runner

    @property
    def effect(self) -> Effect:
        return self._effect

    @property
    def disposed(self) -> bool:
        return self._effect.disposed

    def dispose(self) -> None:
        """Stop watching."""
        self._effect.dispose()


def _differs(new, old) -> bool:
    new, old = to_raw(new), to_raw(old)
    return new is not old and not _equal(new, old)


def _as_getter(source) -> Callable[[], object]:
    if isinstance(source, (Ref, Computed)):
        return lambda: source.value
    if callable(source):
        return source
    # A plain value is read once and never changes.
    return lambda: source


def watch(
    source: T | Callable[[], T],
    callback: Callable[[T, T | None], None],
    *,
    immediate: bool = False,
    runtime: Runtime | None = None,
) -> WatchHandle:
    """Call callback(new, old) whenever source's value changes.

    The initial evaluation does not fire the callback unless immediate=True,
    in which case it is called once with (initial, None).

    Comparison is strict: identity or ==, so a NaN result replaced by
    another NaN object counts as a change.

    Usage:
        state = reactive({"x": 1})
        changes = []
        watch(lambda: state.x, lambda new, old: changes.append((old, new)))
        # changes == []
        state.x = 2
        # changes == [(1, 2)]
    """
    runtime = runtime or get_runtime()
    getter = _as_getter(source)

    with runtime.untracked():
        old = getter()

    def job() -> None:
        nonlocal old
        new = getter()
        if _differs(new, old):
            callback(new, old)
            old = new

    if immediate:
        callback(old, None)

    runner = Effect(job, runtime=runtime)
    runner.run()
    return WatchHandle(runner)


def watch_effect(fn: Callable[[], object], *, runtime: Runtime | None = None) -> WatchHandle:
    """Run fn now and again on every change of anything it read."""
    return WatchHandle(effect(fn, runtime=runtime))
