"""Exceptions raised by the navigation tree."""


class TreeStructureError(ValueError):
    """Raised when a tree is malformed or a path cannot be resolved in it."""
