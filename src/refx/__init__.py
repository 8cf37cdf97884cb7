"""refx: fine-grained reactive dependency tracking for Python."""

from importlib.metadata import version as _version

__version__ = _version("refx")

from refx.errors import ReactivityError, PropertyNotFound, ReadonlyError
from refx.runtime import Runtime, get_runtime, use_runtime, untracked, set_scheduler
from refx.effect import Effect, effect
from refx.observable import (
    ReactiveObject,
    reactive,
    shallow_reactive,
    is_reactive,
    to_raw,
    has_changed,
)
from refx.ref import Ref, ref, is_ref, unref
from refx.computed import Computed, computed
from refx.watch import watch, watch_effect, WatchHandle
# textual NOT auto-imported — opt-in only

__all__ = [
    "ReactivityError",
    "PropertyNotFound",
    "ReadonlyError",
    "Runtime",
    "get_runtime",
    "use_runtime",
    "untracked",
    "set_scheduler",
    "Effect",
    "effect",
    "ReactiveObject",
    "reactive",
    "shallow_reactive",
    "is_reactive",
    "to_raw",
    "has_changed",
    "Ref",
    "ref",
    "is_ref",
    "unref",
    "Computed",
    "computed",
    "watch",
    "watch_effect",
    "WatchHandle",
]
