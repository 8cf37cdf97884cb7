"""Refs — a single observable slot for values that have no keys of their own.

A Ref tracks reads of .value on itself under the key "value". Object payloads
are returned wrapped by reactive(), so nested writes are tracked as well.
Writes use the same no-op-on-unchanged rule as reactive objects.
"""

from __future__ import annotations

from typing import Generic, TypeVar

from refx.observable import _wrap, has_changed, to_raw
from refx.runtime import Runtime, get_runtime

T = TypeVar("T")


class Ref(Generic[T]):
    """A boxed value with tracked reads and triggering writes."""

    __slots__ = ("_value", "_runtime", "__weakref__")

    def __init__(self, value: T, *, runtime: Runtime | None = None) -> None:
        self._value = to_raw(value)
        self._runtime = runtime or get_runtime()

    @property
    def value(self) -> T:
        self._runtime.track(self, "value")
        return _wrap(self._value, self._runtime, shallow=False)

    @value.setter
    def value(self, value: T) -> None:
        self._runtime.dispatch(self._set_direct, value)

    def _set_direct(self, value: T) -> None:
        value = to_raw(value)
        if not has_changed(value, self._value):
            return
        self._value = value
        self._runtime.trigger(self, "value")

    def peek(self) -> T:
        """Read the value without tracking."""
        return _wrap(self._value, self._runtime, shallow=False)

    def __repr__(self) -> str:
        return f"Ref({self._value!r})"


def ref(value: T, *, runtime: Runtime | None = None) -> Ref[T]:
    """Create a Ref.

    Usage:
        count = ref(0)
        effect(lambda: print(count.value))   # prints 0
        count.value = 1                      # prints 1
    """
    return Ref(value, runtime=runtime)


def is_ref(value: object) -> bool:
    return isinstance(value, Ref)


def unref(value: object) -> object:
    """value.value for a Ref, value itself otherwise."""
    return value.value if isinstance(value, Ref) else value
