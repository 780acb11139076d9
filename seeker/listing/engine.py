"""Directory listing: resolve access, enumerate, overlay groups, sort, filter.

Enumeration and the group prune check are safe to run on a worker thread.
Saving pruned groups, the merge/sort step and the cached listing are only
touched on the control thread (``load`` and ``apply_pending``).
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path

from ..access import PathScopeResolver, ResolvedPath
from ..errors import AccessDenied, EnumerationFailed, ValidationPruned
from ..groups import Group, GroupStore
from ..paths import normalize_path
from ..worker import LatestRequestWorker, WorkerJob
from .fs import FileSystem
from .items import (
    DirectoryItem,
    FileSystemEntry,
    GroupEntry,
    filter_items,
    item_sort_key,
    merge_items,
)

logger = logging.getLogger(__name__)

LOST_GROUPS_LABEL = "Lost Groups"


@dataclass(frozen=True)
class Listing:
    """Merged contents of one directory plus how the read went."""

    directory: Path
    items: tuple[DirectoryItem, ...] = ()
    resolved: ResolvedPath | None = None
    error: AccessDenied | EnumerationFailed | None = None
    pruned: tuple[ValidationPruned, ...] = ()

    @property
    def needs_access(self) -> bool:
        return isinstance(self.error, AccessDenied)


@dataclass(frozen=True)
class _Gathered:
    directory: Path
    resolved: ResolvedPath | None
    entries: tuple[FileSystemEntry, ...] = ()
    groups: tuple[Group, ...] = ()
    error: AccessDenied | EnumerationFailed | None = None
    pruned: tuple[ValidationPruned, ...] = ()
    stale_ids: frozenset[uuid.UUID] = frozenset()


class ListingEngine:
    """Produces merged directory listings and owns the displayed-items cache."""

    def __init__(
        self,
        resolver: PathScopeResolver,
        groups: GroupStore,
        filesystem: FileSystem,
        show_hidden: bool = False,
    ) -> None:
        self._resolver = resolver
        self._groups = groups
        self._filesystem = filesystem
        self.show_hidden = show_hidden
        self._current: Listing | None = None
        self._query = ""
        self._worker = LatestRequestWorker(self._run_job, name="seeker-listing")

    @property
    def current(self) -> Listing | None:
        return self._current

    @property
    def query(self) -> str:
        return self._query

    def _gather(self, directory: Path) -> _Gathered:
        resolved = self._resolver.ensure_access(directory)
        if resolved is None:
            return _Gathered(
                directory=directory,
                resolved=None,
                error=AccessDenied(f"no access grant covers {directory}", directory),
            )

        try:
            children = self._filesystem.read_directory(resolved.path, show_hidden=self.show_hidden)
        except EnumerationFailed as exc:
            logger.warning("%s", exc)
            return _Gathered(directory=directory, resolved=resolved, error=exc)

        # Pruning is only computed here; _apply saves it on the control thread.
        groups: list[Group] = []
        notices: list[ValidationPruned] = []
        stale_ids: set[uuid.UUID] = set()
        for group in self._groups.groups_in_directory(directory):
            validated, notice = self._groups.prune(group)
            groups.append(validated)
            if notice is not None:
                notices.append(notice)
                stale_ids.add(group.id)

        return _Gathered(
            directory=directory,
            resolved=resolved,
            entries=tuple(FileSystemEntry.from_child(child) for child in children),
            groups=tuple(groups),
            pruned=tuple(notices),
            stale_ids=frozenset(stale_ids),
        )

    def _apply(self, gathered: _Gathered) -> Listing:
        groups = [
            self._groups.check(group)[0] if group.id in gathered.stale_ids else group
            for group in gathered.groups
        ]
        listing = Listing(
            directory=gathered.directory,
            items=tuple(merge_items(gathered.entries, groups)),
            resolved=gathered.resolved,
            error=gathered.error,
            pruned=gathered.pruned,
        )
        self._current = listing
        return listing

    def load(self, directory: Path | str) -> Listing:
        """Synchronously list ``directory`` and make it the current listing.

        Any in-flight background listing is invalidated first.
        """
        self._worker.cancel()
        return self._apply(self._gather(normalize_path(directory)))

    def list(self, directory: Path | str) -> list[DirectoryItem]:
        """Return merged items for ``directory``; empty when unreadable."""
        return list(self.load(directory).items)

    def _run_job(self, job: WorkerJob) -> None:
        gathered = self._gather(job.request)
        if not job.cancelled:
            job.emit(gathered)

    def schedule(self, directory: Path | str) -> int:
        """Start a background listing; returns its generation."""
        return self._worker.schedule(normalize_path(directory))

    def cancel(self) -> None:
        self._worker.cancel()

    def apply_pending(self) -> Listing | None:
        """Apply the newest finished background listing, if still current."""
        applied: Listing | None = None
        for result in self._worker.drain_current():
            applied = self._apply(result.payload)
        return applied

    def set_query(self, query: str) -> None:
        self._query = query.strip()

    def visible_items(self) -> list[DirectoryItem]:
        """Current listing narrowed by the active query; the cache is untouched."""
        if self._current is None:
            return []
        return filter_items(self._current.items, self._query)

    def filter(self, query: str) -> list[DirectoryItem]:
        if self._current is None:
            return []
        return filter_items(self._current.items, query)

    def group_contents(self, group: Group) -> list[FileSystemEntry]:
        """List a validated group's items, directories first, by name."""
        validated = self._groups.validate(group)
        entries: list[FileSystemEntry] = []
        for item in validated.items:
            child = self._filesystem.describe(item)
            if child is None:
                logger.debug("group %r item vanished: %s", validated.name, item)
                continue
            entries.append(FileSystemEntry.from_child(child))
        entries.sort(key=item_sort_key)
        return entries

    def entries_for(self, paths: list[Path]) -> list[FileSystemEntry]:
        """Describe ``paths`` in the given order, skipping ones that vanished."""
        entries: list[FileSystemEntry] = []
        for path in paths:
            child = self._filesystem.describe(path)
            if child is not None:
                entries.append(FileSystemEntry.from_child(child))
        return entries

    def lost_groups(self) -> list[GroupEntry]:
        """Rows for groups whose parent directory is gone, sorted by name."""
        orphans = sorted(self._groups.orphaned_groups(), key=lambda group: group.name.lower())
        return [GroupEntry(group) for group in orphans]


__all__ = ["LOST_GROUPS_LABEL", "Listing", "ListingEngine"]
