"""Control-thread navigation session.

Owns the current location and drives history, access checks, directory
listings and group views. A directory without a grant is not an error: the
session records it as ``pending_grant`` so the host can offer a "needs
access" affordance and later call ``grant_pending``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from .access import PathScopeResolver
from .groups import Group, GroupStore
from .listing import FileSystemEntry, Listing, ListingEngine
from .navigation import AtDirectory, AtGroup, NavigationEntry, NavigationHistory
from .paths import normalize_path
from .search import SearchFacade

logger = logging.getLogger(__name__)

MIN_GROUP_SELECTION = 2


class BrowserSession:
    """Single owner of navigation state for one browser window."""

    def __init__(
        self,
        resolver: PathScopeResolver,
        groups: GroupStore,
        listing: ListingEngine,
        start: Path | str,
        history: NavigationHistory | None = None,
        search: SearchFacade | None = None,
    ) -> None:
        self._resolver = resolver
        self._groups = groups
        self._listing = listing
        self._search = search
        self.history = history if history is not None else NavigationHistory()
        self.location: NavigationEntry = AtDirectory.of(start)
        self.pending_grant: Path | None = None
        self.group_items: list[FileSystemEntry] = []

    @property
    def current_directory(self) -> Path:
        if isinstance(self.location, AtGroup):
            return self.location.parent_directory
        return self.location.path

    @property
    def viewing_group(self) -> Group | None:
        return self.location.group if isinstance(self.location, AtGroup) else None

    @property
    def listing(self) -> Listing | None:
        return self._listing.current

    def _leave_for(self, target: NavigationEntry) -> None:
        if self._search is not None:
            self._search.clear()
        if target != self.location:
            self.history.push(self.location)
        self.location = target

    def open_directory(self, path: Path | str) -> Listing:
        """Show ``path`` and record the previous location in history.

        Any running search is cleared. A listing that needs access leaves
        ``pending_grant`` set.
        """
        target = AtDirectory.of(path)
        self._leave_for(target)
        self.group_items = []
        listing = self._listing.load(target.path)
        self.pending_grant = target.path if listing.needs_access else None
        return listing

    def navigate(self, path: Path | str) -> Listing | None:
        """Open ``path`` if a grant covers it; otherwise show the placeholder.

        Never prompts. Returns ``None`` (and sets ``pending_grant``) when the
        path still needs an explicit grant.
        """
        target = normalize_path(path)
        if self._resolver.ensure_access(target) is None:
            logger.info("navigation to %s needs access", target)
            self.pending_grant = target
            return None
        return self.open_directory(target)

    def grant_pending(self) -> Listing | None:
        """Prompt for the pending path and open it on success."""
        if self.pending_grant is None:
            return None
        pending = self.pending_grant
        if self._resolver.request_access(pending) is None:
            return None
        self.pending_grant = None
        if isinstance(self.location, AtDirectory) and self.location.path == pending:
            return self.refresh()
        return self.open_directory(pending)

    def open_group(self, group: Group) -> list[FileSystemEntry]:
        """Show a group's validated contents in the context of this directory."""
        validated = self._groups.validate(group)
        self._leave_for(AtGroup(validated, self.current_directory))
        self.group_items = self._listing.group_contents(validated)
        return self.group_items

    def exit_group(self) -> Listing | None:
        """Return from a group view to its parent directory without new history."""
        if not isinstance(self.location, AtGroup):
            return None
        with self.history.traversal():
            return self.open_directory(self.location.parent_directory)

    def _show(self, entry: NavigationEntry) -> None:
        with self.history.traversal():
            if isinstance(entry, AtGroup):
                group = self._groups.get(entry.group.id)
                if group is None:
                    logger.info("group %r was deleted; showing %s", entry.group.name, entry.parent_directory)
                    self.open_directory(entry.parent_directory)
                    return
                self.location = AtDirectory(entry.parent_directory)
                self.open_group(group)
            else:
                self.open_directory(entry.path)

    def go_back(self) -> NavigationEntry | None:
        """Step back; ``None`` means there is no history (caller beeps)."""
        target = self.history.go_back(self.location)
        if target is None:
            return None
        self._show(target)
        return target

    def go_forward(self) -> NavigationEntry | None:
        target = self.history.go_forward(self.location)
        if target is None:
            return None
        self._show(target)
        return target

    def jump_to(self, index: int) -> NavigationEntry | None:
        """Jump to a back-stack entry chosen from the recent-history menu."""
        target = self.history.jump_to(index, self.location)
        if target is None:
            return None
        self._show(target)
        return target

    def go_up(self) -> Listing | None:
        """Navigate to the parent of the current directory, if any."""
        parent = self.current_directory.parent
        if parent == self.current_directory:
            return None
        return self.navigate(parent)

    def refresh(self) -> Listing | list[FileSystemEntry]:
        """Reload the current location without touching history."""
        with self.history.traversal():
            if isinstance(self.location, AtGroup):
                group = self._groups.get(self.location.group.id)
                if group is None:
                    return self.open_directory(self.location.parent_directory)
                return self.open_group(group)
            return self.open_directory(self.location.path)

    def create_group_from_selection(self, name: str, paths: Iterable[Path | str]) -> Group | None:
        """Create a group in the current directory from a multi-item selection.

        Needs at least two items and a non-blank name.
        """
        selection = [normalize_path(path) for path in paths]
        name = name.strip()
        if len(selection) < MIN_GROUP_SELECTION or not name:
            return None
        group = self._groups.create(name, selection, self.current_directory)
        if isinstance(self.location, AtGroup):
            self.exit_group()
        else:
            self.refresh()
        return group

    def delete_group(self, group: Group) -> None:
        """Delete ``group``; files are never touched."""
        self._groups.delete(group)
        viewing = self.viewing_group
        if viewing is not None and viewing.id == group.id:
            self.exit_group()
        else:
            self.refresh()

    def breadcrumbs(self) -> list[tuple[str, Path]]:
        """Return ``(label, path)`` pairs from the filesystem root down."""
        current = self.current_directory
        crumbs: list[tuple[str, Path]] = []
        for path in reversed([current, *current.parents]):
            crumbs.append((path.name or str(path), path))
        return crumbs


__all__ = ["MIN_GROUP_SELECTION", "BrowserSession"]
