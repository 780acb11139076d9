"""Directory listings with user-defined groups overlaid on real entries.

This package contains non-UI listing primitives:
- the filesystem collaborator (existence checks, one-level reads)
- tagged row variants for filesystem entries and groups
- the engine that merges, sorts and filters one directory's rows
"""

from __future__ import annotations

from .engine import LOST_GROUPS_LABEL, Listing, ListingEngine
from .fs import PACKAGE_SUFFIXES, DirectoryChild, FileSystem, LocalFileSystem, is_package, safe_mtime_ns
from .items import (
    DirectoryItem,
    FileSystemEntry,
    GroupEntry,
    filter_items,
    item_rank,
    item_sort_key,
    merge_items,
)

__all__ = [
    "LOST_GROUPS_LABEL",
    "Listing",
    "ListingEngine",
    "PACKAGE_SUFFIXES",
    "DirectoryChild",
    "FileSystem",
    "LocalFileSystem",
    "is_package",
    "safe_mtime_ns",
    "DirectoryItem",
    "FileSystemEntry",
    "GroupEntry",
    "filter_items",
    "item_rank",
    "item_sort_key",
    "merge_items",
]
