"""Runtime — the registry, effect stack and proxy cache shared by one graph.

Every reactive, ref, computed and effect belongs to exactly one Runtime. The
factories take an optional ``runtime=`` keyword; without it they use the
current runtime, selected through a contextvar that defaults to a
process-wide instance. Separate runtimes never see each other's writes.

Thread confinement: a Runtime is not locked. Call set_scheduler() once from
the owning thread; after that, writes issued from any other thread are handed
to the scheduler instead of running in place:

    refx.set_scheduler(app.call_from_thread)
"""

from __future__ import annotations

import contextvars
import logging
import threading
import weakref
from contextlib import contextmanager
from typing import Callable, Hashable, Iterator

from refx._registry import DependencyRegistry
from refx._tracking import EffectStack

logger = logging.getLogger("refx.runtime")


class Runtime:
    """One reactive graph: dependency registry plus execution context."""

    __slots__ = ("registry", "stack", "proxies", "_scheduler", "_scheduler_thread")

    def __init__(self) -> None:
        self.registry = DependencyRegistry()
        self.stack = EffectStack()
        # (id(target), shallow) -> proxy; a live proxy keeps its target alive
        self.proxies: weakref.WeakValueDictionary = weakref.WeakValueDictionary()
        self._scheduler: Callable[[Callable[[], None]], object] | None = None
        self._scheduler_thread: threading.Thread | None = None

    def track(self, target: object, key: Hashable) -> None:
        """Record (target, key) against the running computation, if any."""
        handle = self.stack.current()
        if handle is not None:
            self.registry.record(target, key, handle)

    def trigger(self, target: object, key: Hashable) -> None:
        """Notify every computation depending on (target, key).

        Iterates a snapshot of the bucket: dependents that subscribe or
        unsubscribe while running do not affect who is notified by this write.

        Deferred handles (computeds) are notified first, so every derived
        cache is dirty before any plain effect reads it. A plain effect that
        already re-ran because of one of those invalidations is not run again.
        """
        dependents = self.registry.lookup(target, key)
        if not dependents:
            return
        logger.debug("Triggering %d dependents of %s[%r]", len(dependents), type(target).__name__, key)
        runs_before = {handle: handle.runs for handle in dependents if not handle.deferred}
        for handle in dependents:
            if handle.deferred:
                handle.notify()
        for handle, runs in runs_before.items():
            if handle.runs == runs:
                handle.notify()

    def untracked(self):
        """Context manager: reads inside the block register no dependency."""
        return self.stack.untracked()

    def set_scheduler(self, scheduler: Callable[[Callable[[], None]], object]) -> None:
        """Confine writes to the calling thread.

        Writes from other threads are passed to scheduler(fn) as zero-argument
        callables. Writes on the owning thread stay synchronous.
        """
        self._scheduler = scheduler
        self._scheduler_thread = threading.current_thread()

    def dispatch(self, fn: Callable[..., None], *args) -> None:
        """Run a write now, or marshal it to the owning thread."""
        if self._scheduler is not None and threading.current_thread() is not self._scheduler_thread:
            logger.debug("Marshaling write from %s", threading.current_thread().name)
            self._scheduler(lambda: fn(*args))
        else:
            fn(*args)

    def __repr__(self) -> str:
        return f"Runtime({self.registry!r}, {self.stack!r})"


_default_runtime = Runtime()

_current_runtime: contextvars.ContextVar[Runtime] = contextvars.ContextVar(
    "current_runtime", default=_default_runtime
)


def get_runtime() -> Runtime:
    """The runtime new reactive values and effects attach to."""
    return _current_runtime.get()


@contextmanager
def use_runtime(runtime: Runtime) -> Iterator[Runtime]:
    """Make runtime the current one for the block.

    Usage:
        rt = Runtime()
        with use_runtime(rt):
            state = reactive({"count": 0})   # belongs to rt
    """
    token = _current_runtime.set(runtime)
    try:
        yield runtime
    finally:
        _current_runtime.reset(token)


def untracked(runtime: Runtime | None = None):
    """Context manager suspending dependency tracking in the block."""
    return (runtime or get_runtime()).untracked()


def set_scheduler(scheduler: Callable[[Callable[[], None]], object], runtime: Runtime | None = None) -> None:
    """Set the cross-thread write scheduler for runtime (default: current)."""
    (runtime or get_runtime()).set_scheduler(scheduler)
