"""Execution context — which computation is currently running.

Reads performed while a handle is on top of the stack are attributed to it.
A None frame marks an untracked section: reads inside it record nothing.

The frames live in a contextvar, so each thread (and each asyncio task)
sees only the computations it is running itself.
"""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from typing import Iterator


class EffectStack:
    """Stack of active computation handles. Depth equals nesting depth."""

    __slots__ = ("_frames",)

    def __init__(self) -> None:
        self._frames: contextvars.ContextVar[tuple] = contextvars.ContextVar(
            "effect_stack", default=()
        )

    def push(self, handle) -> None:
        self._frames.set(self._frames.get() + (handle,))

    def pop(self):
        frames = self._frames.get()
        self._frames.set(frames[:-1])
        return frames[-1]

    def current(self):
        """The running handle, or None outside any computation."""
        frames = self._frames.get()
        return frames[-1] if frames else None

    @property
    def depth(self) -> int:
        return len(self._frames.get())

    @contextmanager
    def active(self, handle) -> Iterator[None]:
        """Run the block with handle as the current computation."""
        self.push(handle)
        try:
            yield
        finally:
            self.pop()

    def untracked(self):
        """Run the block with tracking suspended."""
        return self.active(None)

    def __repr__(self) -> str:
        return f"EffectStack(depth={self.depth})"
