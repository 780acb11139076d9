"""Path normalization shared by grants, groups and history."""

from __future__ import annotations

import os
from pathlib import Path


def normalize_path(path: Path | str) -> Path:
    """Return an absolute, lexically normalized path.

    Symlinks are not followed. Grants and groups are keyed by the path the
    user navigated to, not by its target.
    """
    expanded = os.path.expanduser(os.fspath(path))
    return Path(os.path.normpath(os.path.abspath(expanded)))


def ancestors_inclusive(path: Path) -> list[Path]:
    """Return ``path`` followed by its parents, ending at the filesystem root."""
    return [path, *path.parents]


def display_name(path: Path) -> str:
    """Return the last path component, or the path itself for the root."""
    return path.name or str(path)


__all__ = ["normalize_path", "ancestors_inclusive", "display_name"]
