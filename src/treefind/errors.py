"""
Error types for treefind.

Only PathResolutionError reaches the user as a failure. SubtreeAccessError is
recovered inside the walker and reported through logging and the error callback.
"""

from typing import Optional


class TreefindError(Exception):
    """Base class for treefind errors."""
    pass


class PathResolutionError(TreefindError):
    """Raised when the search path cannot be canonicalized to a directory."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot resolve search path '{path}': {reason}")


class SubtreeAccessError(TreefindError):
    """
    A directory could not be listed or iterated.

    Attributes:
        path: Directory whose traversal was abandoned
        cause: The underlying OSError, if any
    """

    def __init__(self, path: str, cause: Optional[OSError] = None):
        self.path = path
        self.cause = cause
        if cause is None:
            detail = "access failed"
        else:
            detail = cause.strerror or str(cause)
        super().__init__(f"Skipping subtree {path}: {detail}")
