"""Exception hierarchy for the navigation core.

None of these escape to the navigation layer as fatal errors: each is caught
where it is raised and converted into an empty listing or a "needs access"
placeholder.
"""

from __future__ import annotations

from pathlib import Path


class SeekerError(Exception):
    """Base exception for all seeker navigation-core errors."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class AccessDenied(SeekerError):
    """No live grant covers the requested path. Recoverable by prompting."""


class EnumerationFailed(SeekerError):
    """Reading a directory failed. Recoverable by retry or re-grant."""


class StaleGrant(SeekerError):
    """A persisted access token no longer resolves. Treated as absent."""


class ValidationPruned(SeekerError):
    """Informational: a group lost items that no longer exist on disk."""

    def __init__(self, message: str, path: Path | None = None, removed: tuple[Path, ...] = ()) -> None:
        super().__init__(message, path)
        self.removed = removed


__all__ = [
    "SeekerError",
    "AccessDenied",
    "EnumerationFailed",
    "StaleGrant",
    "ValidationPruned",
]
