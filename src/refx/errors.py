"""refx error hierarchy.

All refx-specific errors inherit from ReactivityError for easy catching.
"""


class ReactivityError(Exception):
    """Base error for all refx operations."""


class PropertyNotFound(ReactivityError, KeyError, AttributeError):
    """Read of a key the wrapped target does not have.

    Subclasses both KeyError and AttributeError so item access and
    attribute access (including hasattr/getattr with a default) behave
    the way they do on the unwrapped target.
    """

    def __init__(self, key, target=None) -> None:
        self.key = key
        self.target = target
        owner = type(target).__name__ if target is not None else "target"
        super().__init__(f"Property {key!r} does not exist on {owner}")

    def __str__(self) -> str:
        return self.args[0]


class ReadonlyError(ReactivityError, AttributeError):
    """Write to a read-only reactive value (e.g. a Computed)."""
