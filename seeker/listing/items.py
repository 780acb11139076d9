"""Directory-listing row datatypes plus merge, sort and filter helpers."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from ..groups import Group
from .fs import DirectoryChild

RANK_GROUP = 0
RANK_DIRECTORY = 1
RANK_FILE = 2


@dataclass(frozen=True)
class FileSystemEntry:
    """A real file or directory with metadata cached at scan time."""

    path: Path
    is_dir: bool
    mtime_ns: int | None = None
    file_size: int | None = None

    @classmethod
    def from_child(cls, child: DirectoryChild) -> FileSystemEntry:
        return cls(path=child.path, is_dir=child.is_dir, mtime_ns=child.mtime_ns, file_size=child.file_size)

    @property
    def name(self) -> str:
        return self.path.name or str(self.path)

    @property
    def is_container(self) -> bool:
        return self.is_dir

    @property
    def modified_at(self) -> datetime | None:
        if self.mtime_ns is None:
            return None
        return datetime.fromtimestamp(self.mtime_ns / 1_000_000_000, tz=timezone.utc)

    @property
    def size(self) -> int | None:
        return None if self.is_dir else self.file_size


@dataclass(frozen=True)
class GroupEntry:
    """A validated group shown as a container row."""

    group: Group

    @property
    def name(self) -> str:
        return self.group.name

    @property
    def is_container(self) -> bool:
        return True

    @property
    def modified_at(self) -> datetime | None:
        return self.group.modified_at

    @property
    def size(self) -> int | None:
        return None


DirectoryItem = FileSystemEntry | GroupEntry


def item_rank(item: DirectoryItem) -> int:
    if isinstance(item, GroupEntry):
        return RANK_GROUP
    return RANK_DIRECTORY if item.is_dir else RANK_FILE


def item_sort_key(item: DirectoryItem) -> tuple[int, str, str]:
    """Groups, then directories, then files; case-insensitive by name."""
    return (item_rank(item), item.name.lower(), item.name)


def merge_items(entries: Iterable[FileSystemEntry], groups: Iterable[Group]) -> list[DirectoryItem]:
    """Combine filesystem rows with group rows in display order."""
    merged: list[DirectoryItem] = [GroupEntry(group) for group in groups]
    merged.extend(entries)
    merged.sort(key=item_sort_key)
    return merged


def filter_items(items: Iterable[DirectoryItem], query: str) -> list[DirectoryItem]:
    """Return items whose name contains ``query`` case-insensitively."""
    needle = query.strip().lower()
    if not needle:
        return list(items)
    return [item for item in items if needle in item.name.lower()]


__all__ = [
    "FileSystemEntry",
    "GroupEntry",
    "DirectoryItem",
    "item_rank",
    "item_sort_key",
    "merge_items",
    "filter_items",
]
