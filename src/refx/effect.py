"""Effects — computations that re-run when what they read changes.

An Effect runs its function with itself on top of the effect stack, so every
tracked read inside (directly or through nested calls) subscribes it. Before
each run all previous subscriptions are dropped, so the dependency set is
exactly what the latest run read.

Re-runs are synchronous and nest on the stack. There is no batching and
no recursion guard: an effect that writes something it reads keeps
re-triggering itself until the write becomes a no-op or Python raises
RecursionError.
"""

from __future__ import annotations

from typing import Callable, TypeVar

from refx.runtime import Runtime, get_runtime

T = TypeVar("T")


class Effect:
    """A re-runnable unit of work that tracks its own dependencies.

    on_trigger, when given, is called with the effect instead of re-running
    it when a dependency changes. Computed uses this to mark itself dirty.
    """

    __slots__ = ("_fn", "_runtime", "_on_trigger", "_disposed", "_runs", "__weakref__")

    def __init__(
        self,
        fn: Callable[[], T],
        *,
        runtime: Runtime | None = None,
        on_trigger: Callable[["Effect"], None] | None = None,
    ) -> None:
        self._fn = fn
        self._runtime = runtime or get_runtime()
        self._on_trigger = on_trigger
        self._disposed = False
        self._runs = 0

    @property
    def runtime(self) -> Runtime:
        return self._runtime

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def deferred(self) -> bool:
        """Whether notifications go to on_trigger instead of re-running."""
        return self._on_trigger is not None

    @property
    def runs(self) -> int:
        """Number of tracked runs so far."""
        return self._runs

    @property
    def dependencies(self) -> list:
        """(target, key) pairs read during the latest run."""
        return self._runtime.registry.subscriptions(self)

    def run(self) -> T:
        """Re-subscribe from scratch and run fn. Returns fn's result."""
        runtime = self._runtime
        if self._disposed:
            with runtime.untracked():
                return self._fn()

        runtime.registry.remove_handle(self)
        self._runs += 1
        runtime.stack.push(self)
        try:
            return self._fn()
        finally:
            runtime.stack.pop()

    def notify(self) -> None:
        """Called by the runtime when a dependency changed."""
        if self._disposed:
            return
        if self._on_trigger is not None:
            self._on_trigger(self)
        else:
            self.run()

    def dispose(self) -> None:
        """Stop reacting. Drops all subscriptions."""
        self._disposed = True
        self._runtime.registry.remove_handle(self)

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else "active"
        name = getattr(self._fn, "__name__", type(self._fn).__name__)
        return f"Effect({name}, {state})"


def effect(fn: Callable[[], object], *, runtime: Runtime | None = None) -> Effect:
    """Run fn immediately, then re-run whenever anything it read changes.

    Returns the Effect (call .dispose() to stop).

    Usage:
        state = reactive({"count": 0})
        log = []

        effect(lambda: log.append(state.count))
        # log == [0] — ran immediately

        state.count = 1
        # log == [0, 1] — re-ran because count changed
    """
    e = Effect(fn, runtime=runtime)
    e.run()
    return e
