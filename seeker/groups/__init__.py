"""User-defined virtual groups and their persistent store."""

from __future__ import annotations

from .model import Group, unique_paths, utc_now
from .store import GROUPS_FILENAME, GroupChange, GroupObserver, GroupStore

__all__ = [
    "Group",
    "unique_paths",
    "utc_now",
    "GROUPS_FILENAME",
    "GroupChange",
    "GroupObserver",
    "GroupStore",
]
