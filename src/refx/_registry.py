"""Dependency registry — which computations depend on which locations.

A location is a (target, key) pair. Targets are keyed by identity, and the
registry pins each target while any bucket for it exists so that its id()
cannot be reused under a live bucket. Buckets are pruned as soon as they
empty, so a target nothing depends on is not retained.
"""

from __future__ import annotations

from typing import Hashable


class DependencyRegistry:
    """target -> key -> ordered set of handles, plus the reverse index."""

    __slots__ = ("_buckets", "_targets", "_subscriptions")

    def __init__(self) -> None:
        # id(target) -> key -> {handle: None}; dicts keep insertion order
        self._buckets: dict[int, dict[Hashable, dict]] = {}
        self._targets: dict[int, object] = {}
        # handle -> {(id(target), key)}
        self._subscriptions: dict[object, set[tuple[int, Hashable]]] = {}

    def record(self, target: object, key: Hashable, handle: object) -> None:
        """Subscribe handle to (target, key). Recording twice is a no-op."""
        tid = id(target)
        keys = self._buckets.get(tid)
        if keys is None:
            keys = self._buckets[tid] = {}
            self._targets[tid] = target
        keys.setdefault(key, {})[handle] = None
        self._subscriptions.setdefault(handle, set()).add((tid, key))

    def lookup(self, target: object, key: Hashable) -> tuple:
        """Snapshot of the handles depending on (target, key)."""
        keys = self._buckets.get(id(target))
        if not keys:
            return ()
        return tuple(keys.get(key, ()))

    def remove_handle(self, handle: object) -> None:
        """Drop every subscription held by handle."""
        for tid, key in self._subscriptions.pop(handle, ()):
            keys = self._buckets[tid]
            bucket = keys[key]
            bucket.pop(handle, None)
            if not bucket:
                del keys[key]
            if not keys:
                del self._buckets[tid]
                del self._targets[tid]

    def subscriptions(self, handle: object) -> list[tuple[object, Hashable]]:
        """The (target, key) pairs handle currently depends on."""
        return [
            (self._targets[tid], key)
            for tid, key in self._subscriptions.get(handle, ())
        ]

    def forget(self, target: object) -> None:
        """Drop every bucket of target, unsubscribing all its dependents."""
        tid = id(target)
        keys = self._buckets.pop(tid, None)
        if keys is None:
            return
        del self._targets[tid]
        for key, bucket in keys.items():
            for handle in bucket:
                subs = self._subscriptions[handle]
                subs.discard((tid, key))
                if not subs:
                    del self._subscriptions[handle]

    def __contains__(self, target: object) -> bool:
        return self._targets.get(id(target)) is target

    def __len__(self) -> int:
        return len(self._buckets)

    def __repr__(self) -> str:
        return f"DependencyRegistry(targets={len(self._buckets)}, handles={len(self._subscriptions)})"
