"""Observable objects — plain data that tracks its readers.

reactive(target) wraps a mutable mapping or a plain attribute object. Reading
a key through the wrapper inside an effect subscribes that effect to
(target, key); writing a different value re-runs every subscriber before the
write returns.

Wrapping is deep and lazy: object-typed values are wrapped when they are
read, not up front. shallow_reactive() returns nested values raw. Sequences,
callables, classes and modules are never wrapped.
"""

from __future__ import annotations

import math
from collections.abc import MutableMapping
from types import ModuleType
from typing import Hashable, Iterator

from refx.errors import PropertyNotFound
from refx.runtime import Runtime, get_runtime

_MISSING = object()


def has_changed(new: object, old: object) -> bool:
    """Whether a write of new over old is a real change.

    Identity, ==, and NaN over NaN all count as unchanged. Reactive wrappers
    compare by their raw targets.
    """
    new, old = to_raw(new), to_raw(old)
    if new is old:
        return False
    if isinstance(new, float) and isinstance(old, float) and math.isnan(new) and math.isnan(old):
        return False
    return not _equal(new, old)


def _equal(new: object, old: object) -> bool:
    # Array-likes return element-wise results whose truth value is ambiguous.
    try:
        return bool(new == old)
    except (TypeError, ValueError):
        return False


def _is_object(value: object) -> bool:
    if isinstance(value, MutableMapping):
        return True
    if isinstance(value, (type, ModuleType)) or callable(value):
        return False
    return hasattr(value, "__dict__")


class ReactiveObject:
    """Wrapper over a mapping or attribute object with tracked get/set.

    Item access and attribute access are both routed through get()/set():

        state = reactive({"count": 0})
        state["count"] == state.count == state.get("count")
    """

    __slots__ = ("_target", "_runtime", "_shallow", "_is_mapping", "__weakref__")

    def __init__(self, target: object, *, runtime: Runtime | None = None, shallow: bool = False) -> None:
        object.__setattr__(self, "_target", target)
        object.__setattr__(self, "_runtime", runtime or get_runtime())
        object.__setattr__(self, "_shallow", shallow)
        object.__setattr__(self, "_is_mapping", isinstance(target, MutableMapping))

    # --- Raw access to the underlying container ---

    def _has(self, key: Hashable) -> bool:
        if self._is_mapping:
            return key in self._target
        return isinstance(key, str) and hasattr(self._target, key)

    def _read(self, key: Hashable) -> object:
        if self._is_mapping:
            return self._target[key]
        return getattr(self._target, key)

    def _write(self, key: Hashable, value: object) -> None:
        if self._is_mapping:
            self._target[key] = value
        else:
            setattr(self._target, key, value)

    # --- Tracked capability interface ---

    def get(self, key: Hashable) -> object:
        """Read key, subscribing the running computation to it."""
        if not self._has(key):
            raise PropertyNotFound(key, self._target)
        self._runtime.track(self._target, key)
        value = self._read(key)
        if self._shallow:
            return value
        return _wrap(value, self._runtime, shallow=False)

    def set(self, key: Hashable, value: object) -> None:
        """Write key. Unchanged values are a no-op; changes trigger dependents."""
        self._runtime.dispatch(self._set_direct, key, value)

    def _set_direct(self, key: Hashable, value: object) -> None:
        value = to_raw(value)
        if self._has(key) and not has_changed(value, self._read(key)):
            return
        self._write(key, value)
        self._runtime.trigger(self._target, key)

    __getitem__ = get
    __setitem__ = set

    def __getattr__(self, name: str) -> object:
        # Only reached for names not found on the wrapper itself.
        if name.startswith("__"):
            raise AttributeError(name)
        return self.get(name)

    def __setattr__(self, name: str, value: object) -> None:
        self.set(name, value)

    # --- Untracked structure queries (keys are fixed after wrapping) ---

    def keys(self) -> list:
        if self._is_mapping:
            return list(self._target)
        return list(vars(self._target))

    def __iter__(self) -> Iterator:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self.keys())

    def __contains__(self, key: Hashable) -> bool:
        return self._has(key)

    # --- Tracked bulk reads ---

    def values(self) -> list:
        return [self.get(key) for key in self.keys()]

    def items(self) -> list[tuple]:
        return [(key, self.get(key)) for key in self.keys()]

    def __repr__(self) -> str:
        kind = "shallow_reactive" if self._shallow else "reactive"
        return f"{kind}({self._target!r})"


def _wrap(target: object, runtime: Runtime, *, shallow: bool) -> object:
    if isinstance(target, ReactiveObject) or not _is_object(target):
        return target
    key = (id(target), shallow)
    proxy = runtime.proxies.get(key)
    if proxy is None or proxy._target is not target:
        proxy = ReactiveObject(target, runtime=runtime, shallow=shallow)
        runtime.proxies[key] = proxy
    return proxy


def reactive(target: object, *, runtime: Runtime | None = None) -> object:
    """Wrap target so reads are tracked and writes trigger dependents.

    Non-object values are returned unchanged; use ref() for those.

    Usage:
        state = reactive({"count": 0})
        log = []
        effect(lambda: log.append(state.count))
        state.count = 1
        state.count = 1   # unchanged: no re-run
        # log == [0, 1]
    """
    return _wrap(target, runtime or get_runtime(), shallow=False)


def shallow_reactive(target: object, *, runtime: Runtime | None = None) -> object:
    """Like reactive(), but nested values are returned unwrapped."""
    return _wrap(target, runtime or get_runtime(), shallow=True)


def is_reactive(value: object) -> bool:
    return isinstance(value, ReactiveObject)


def to_raw(value: object) -> object:
    """The plain object behind a reactive wrapper (other values unchanged)."""
    if isinstance(value, ReactiveObject):
        return value._target
    return value
