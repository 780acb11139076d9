"""Sidebar model: favourite folders followed by every group, by name."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from .groups import Group, GroupChange, GroupStore
from .paths import normalize_path


@dataclass(frozen=True)
class SidebarHeader:
    title: str


@dataclass(frozen=True)
class SidebarFolder:
    name: str
    path: Path


@dataclass(frozen=True)
class SidebarGroup:
    group: Group


SidebarItem = SidebarHeader | SidebarFolder | SidebarGroup


def build_sidebar_items(
    home: Path,
    folders: Iterable[tuple[str, str]],
    groups: Iterable[Group],
) -> list[SidebarItem]:
    """Build rows: a FOLDERS section, then a GROUPS section when non-empty."""
    home = normalize_path(home)
    items: list[SidebarItem] = [SidebarHeader("FOLDERS")]
    for label, folder in folders:
        items.append(SidebarFolder(name=label, path=normalize_path(home / folder)))

    ordered = sorted(groups, key=lambda group: group.name.lower())
    if ordered:
        items.append(SidebarHeader("GROUPS"))
        items.extend(SidebarGroup(group) for group in ordered)
    return items


class Sidebar:
    """Keeps sidebar rows in sync with the group store."""

    def __init__(self, store: GroupStore, home: Path, folders: Iterable[tuple[str, str]]) -> None:
        self._store = store
        self._home = home
        self._folders = list(folders)
        self.items: list[SidebarItem] = []
        self.refresh()
        self._unsubscribe = store.subscribe(self._on_change)

    def _on_change(self, _change: GroupChange) -> None:
        self.refresh()

    def refresh(self) -> None:
        self.items = build_sidebar_items(self._home, self._folders, self._store.all_groups())

    def close(self) -> None:
        self._unsubscribe()


__all__ = [
    "SidebarHeader",
    "SidebarFolder",
    "SidebarGroup",
    "SidebarItem",
    "Sidebar",
    "build_sidebar_items",
]
