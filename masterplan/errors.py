"""Error taxonomy shared across the explorer core."""
from __future__ import annotations


class NotFoundError(LookupError):
    """A project, layer or sibling path does not resolve.

    Recovered at the page boundary and rendered as a plain 404.
    """


class LoadError(RuntimeError):
    """A diagram document or media asset could not be fetched or parsed."""


class BindingWarning(UserWarning):
    """An entity descriptor has no matching region in the diagram document."""


class HierarchyError(ValueError):
    """The flat layer set violates the parent/depth invariants."""
