"""Filesystem collaborator: existence checks and one-level directory reads."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from ..errors import EnumerationFailed

PACKAGE_SUFFIXES = frozenset(
    {
        ".app",
        ".bundle",
        ".framework",
        ".kext",
        ".photoslibrary",
        ".pkg",
        ".plugin",
        ".prefpane",
        ".xcodeproj",
        ".xcworkspace",
    }
)


@dataclass(frozen=True)
class DirectoryChild:
    """One visible directory child plus cached metadata."""

    name: str
    path: Path
    is_dir: bool
    file_size: int | None
    mtime_ns: int | None


class FileSystem(Protocol):
    def exists(self, path: Path) -> bool: ...

    def read_directory(self, directory: Path, show_hidden: bool = False) -> list[DirectoryChild]: ...

    def describe(self, path: Path) -> DirectoryChild | None: ...


def is_package(path: Path) -> bool:
    """Return whether ``path`` names a bundle directory listed as a single file."""
    return path.suffix.lower() in PACKAGE_SUFFIXES


def safe_mtime_ns(path: Path) -> int | None:
    """Return ``st_mtime_ns`` for ``path`` or ``None`` on stat failure."""
    try:
        return int(path.stat().st_mtime_ns)
    except OSError:
        return None


class LocalFileSystem:
    """``FileSystem`` backed by ``os.scandir``."""

    def exists(self, path: Path) -> bool:
        return os.path.lexists(path)

    def describe(self, path: Path) -> DirectoryChild | None:
        """Stat one path into a ``DirectoryChild``; ``None`` if it is gone."""
        try:
            stat = path.stat()
        except OSError:
            return None
        is_dir = path.is_dir() and not is_package(path)
        return DirectoryChild(
            name=path.name or str(path),
            path=path,
            is_dir=is_dir,
            file_size=None if is_dir else int(stat.st_size),
            mtime_ns=int(stat.st_mtime_ns),
        )

    def read_directory(self, directory: Path, show_hidden: bool = False) -> list[DirectoryChild]:
        """List immediate children of ``directory`` in scan order.

        Hidden names are skipped unless ``show_hidden``; package bundles are
        reported as files. Raises ``EnumerationFailed`` when the directory
        cannot be scanned.
        """
        children: list[DirectoryChild] = []
        try:
            with os.scandir(directory) as entries:
                for child in entries:
                    name = child.name
                    if not show_hidden and name.startswith("."):
                        continue
                    child_path = Path(child.path)

                    try:
                        is_dir = child.is_dir()
                    except OSError:
                        is_dir = False
                    if is_dir and is_package(child_path):
                        is_dir = False

                    file_size: int | None = None
                    mtime_ns: int | None = None
                    try:
                        stat = child.stat()
                        mtime_ns = int(stat.st_mtime_ns)
                        if not is_dir:
                            file_size = int(stat.st_size)
                    except OSError:
                        pass

                    children.append(
                        DirectoryChild(
                            name=name,
                            path=child_path,
                            is_dir=is_dir,
                            file_size=file_size,
                            mtime_ns=mtime_ns,
                        )
                    )
        except OSError as exc:
            raise EnumerationFailed(f"cannot read {directory}: {exc}", directory) from exc
        return children


__all__ = [
    "PACKAGE_SUFFIXES",
    "DirectoryChild",
    "FileSystem",
    "LocalFileSystem",
    "is_package",
    "safe_mtime_ns",
]
