"""Computed values — cached derived state with automatic dependency tracking.

A Computed evaluates its getter through an internal Effect, so the getter's
reads subscribe that effect. When any of them changes, the effect does not
re-run: it marks the cache dirty and notifies whoever read the computed.
The getter runs again only on the next read.

Readers of .value subscribe to the computed itself, so a change any number
of computeds deep still reaches the top-level effect.
"""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

from refx.effect import Effect
from refx.errors import ReadonlyError
from refx.runtime import Runtime, get_runtime

T = TypeVar("T")

_UNSET = object()


class Computed(Generic[T]):
    """A lazily evaluated, memoized derived value."""

    __slots__ = ("_getter", "_runtime", "_effect", "_value", "_dirty", "__weakref__")

    def __init__(self, getter: Callable[[], T], *, runtime: Runtime | None = None) -> None:
        self._getter = getter
        self._runtime = runtime or get_runtime()
        self._effect = Effect(getter, runtime=self._runtime, on_trigger=self._invalidate)
        self._value = _UNSET
        self._dirty = True

    @property
    def value(self) -> T:
        """Read the computed value. Re-evaluates if dirty."""
        self._runtime.track(self, "value")
        if self._dirty:
            self._value = self._effect.run()
            self._dirty = False
        return self._value

    @value.setter
    def value(self, value: T) -> None:
        raise ReadonlyError(f"Computed {self._name} is read-only")

    @property
    def dirty(self) -> bool:
        return self._dirty

    def peek(self) -> T:
        """Read the value without subscribing the running computation."""
        with self._runtime.untracked():
            return self.value

    def _invalidate(self, _effect: Effect) -> None:
        if not self._dirty:
            self._dirty = True
            self._runtime.trigger(self, "value")

    def dispose(self) -> None:
        """Disconnect from all dependencies and drop the cache."""
        self._effect.dispose()
        self._dirty = True
        self._value = _UNSET

    @property
    def _name(self) -> str:
        return getattr(self._getter, "__name__", type(self._getter).__name__)

    def __repr__(self) -> str:
        state = "dirty" if self._dirty else f"cached={self._value!r}"
        return f"Computed({self._name}, {state})"


def computed(getter: Callable[[], T], *, runtime: Runtime | None = None) -> Computed[T]:
    """Decorator/factory to create a Computed from a getter.

    Usage:
        state = reactive({"count": 1})

        @computed
        def doubled():
            return state.count * 2

        doubled.value  # 2
        state.count = 5
        doubled.value  # 10
    """
    return Computed(getter, runtime=runtime)
